#!/usr/bin/env python3
"""
Load a small demo catalog into the Game Catalog SQLite database.

Applies pending migrations first, then inserts a few platforms, one
owner and a handful of games.  Running it twice adds the games twice;
point it at a fresh file for a clean demo.

Usage:
    python seed_catalog.py --db ./game_catalog.db
"""

import argparse
import os
import sys

from game_catalog_api.app.core.config import settings
from game_catalog_api.app.core.db import get_cursor, init_db

PLATFORMS = ["Board game", "Steam", "Nintendo Switch"]

GAMES = [
    # name, description, platform, released, playtime, min, max, location
    ("Settlers of Catan", "Trade, build and settle the island of Catan.", "Board game", "1995-01-01 00:00:00", 90, 3, 4, "Hubben"),
    ("Catan Jr", "Pirate-themed Catan for younger players.", "Board game", "2007-01-01 00:00:00", 30, 2, 4, "Basement"),
    ("Portal 2", "Cooperative puzzle platformer.", "Steam", "2011-04-19 00:00:00", 480, 1, 2, "Hubben"),
    ("Mario Kart 8 Deluxe", "Kart racing for the whole division.", "Nintendo Switch", "2017-04-28 00:00:00", 20, 1, 8, "Hubben"),
]


def main():
    ap = argparse.ArgumentParser(description="Seed the game catalog with demo data (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./game_catalog.db)")
    ap.add_argument("--owner-cid", default="demo-owner", help="External identity of the demo owner")
    ap.add_argument("--owner-name", default="Demo Owner", help="Display name of the demo owner")
    args = ap.parse_args()

    settings.database_url = os.path.abspath(args.db)
    init_db()

    with get_cursor() as cur:
        for platform in PLATFORMS:
            cur.execute("INSERT OR IGNORE INTO platforms (name) VALUES (?)", (platform,))
        cur.execute(
            "INSERT OR IGNORE INTO owners (cid, name) VALUES (?, ?)",
            (args.owner_cid, args.owner_name),
        )
        owner_id = cur.execute("SELECT id FROM owners WHERE cid = ?", (args.owner_cid,)).fetchone()["id"]
        for game in GAMES:
            cur.execute(
                """
                INSERT INTO games (name, description, platform_name, date_released,
                                   playtime_minutes, player_min, player_max, location, owner_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (*game, owner_id),
            )
    print(f"[+] Seeded {len(GAMES)} games into {settings.database_url}")


if __name__ == "__main__":
    sys.exit(main())
