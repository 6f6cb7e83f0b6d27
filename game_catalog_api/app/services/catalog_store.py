"""
Read and write access to the SQLite game catalog.

Every method opens its own connection, runs its statement(s) in a
worker thread and closes the connection again, so callers may fan out
any number of lookups with ``asyncio.gather`` without sharing a
connection between threads.  ``sqlite3.Error`` is logged with full
details and re-raised as ``StoreError``; no operation is retried.

Rows are returned as plain dictionaries keyed by column name.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, TypeVar

from ..core.db import get_connection, get_cursor, to_db_timestamp
from ..core.errors import NotFoundError, StoreError
from .filter_compiler import GamePredicate

logger = logging.getLogger(__name__)

R = TypeVar("R")

# Stays well below SQLITE_MAX_VARIABLE_NUMBER on every SQLite build.
IN_CLAUSE_CHUNK_SIZE = 500

GAME_COLUMNS = (
    "g.id, g.name, g.description, g.platform_name, g.date_released, "
    "g.playtime_minutes, g.player_min, g.player_max, g.location, g.owner_id"
)


def build_where_clause(predicate: GamePredicate) -> Tuple[str, List[Any]]:
    """Render a predicate as a ``WHERE`` clause and its parameters.

    Returns an empty clause for the unconstrained predicate.
    """
    clauses: List[str] = []
    params: List[Any] = []
    if predicate.name_contains is not None:
        clauses.append("instr(casefold(g.name), ?) > 0")
        params.append(predicate.name_contains)
    released = predicate.released
    if released is not None:
        if released.lower is not None and released.upper is not None:
            clauses.append("g.date_released BETWEEN ? AND ?")
            params.extend([to_db_timestamp(released.lower, round_up=True), to_db_timestamp(released.upper)])
        elif released.lower is not None:
            clauses.append("g.date_released >= ?")
            params.append(to_db_timestamp(released.lower, round_up=True))
        else:
            clauses.append("g.date_released <= ?")
            params.append(to_db_timestamp(released.upper))
    if predicate.player_count is not None:
        clauses.append("g.player_min <= ? AND g.player_max >= ?")
        params.extend([predicate.player_count, predicate.player_count])
    if predicate.platform_name is not None:
        clauses.append("p.name = ?")
        params.append(predicate.platform_name)
    playtime = predicate.playtime
    if playtime is not None:
        if playtime.lower is not None:
            clauses.append("g.playtime_minutes >= ?")
            params.append(playtime.lower)
        if playtime.upper is not None:
            clauses.append("g.playtime_minutes <= ?")
            params.append(playtime.upper)
    if predicate.location_contains is not None:
        clauses.append("instr(casefold(g.location), ?) > 0")
        params.append(predicate.location_contains)
    if predicate.owner_id is not None:
        clauses.append("g.owner_id = ?")
        params.append(predicate.owner_id)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def _chunks(values: List[int], size: int) -> Iterable[List[int]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


async def run_store_call(operation: str, func: Callable[..., R], *args: Any) -> R:
    """Run a blocking store call in a worker thread, wrapping SQLite failures."""
    try:
        return await asyncio.to_thread(func, *args)
    except sqlite3.Error as exc:
        logger.error("Catalog store failure during %s: %s", operation, exc)
        raise StoreError(f"Catalog store failure during {operation}") from exc


class CatalogStore:
    """Durable catalog records: games, platforms, owners, borrows, ratings and play marks."""

    # -----------------------------------------------------------------
    # Blocking implementations
    # -----------------------------------------------------------------

    @staticmethod
    def _query_games(predicate: GamePredicate) -> List[Dict[str, Any]]:
        where, params = build_where_clause(predicate)
        query = (
            f"SELECT {GAME_COLUMNS} "
            "FROM games g JOIN platforms p ON p.name = g.platform_name"
            f"{where} ORDER BY g.id"
        )
        conn = get_connection()
        try:
            rows = conn.execute(query, tuple(params)).fetchall()
            return [dict(row) for row in rows]
        finally:
            conn.close()

    @staticmethod
    def _fetch_all(query: str, params: Tuple[Any, ...]) -> List[Dict[str, Any]]:
        conn = get_connection()
        try:
            return [dict(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    @staticmethod
    def _fetch_one(query: str, params: Tuple[Any, ...]) -> Optional[Dict[str, Any]]:
        conn = get_connection()
        try:
            row = conn.execute(query, params).fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    @staticmethod
    def _play_marks_for(account_id: int, game_ids: List[int]) -> Set[int]:
        marked: Set[int] = set()
        conn = get_connection()
        try:
            for chunk in _chunks(game_ids, IN_CLAUSE_CHUNK_SIZE):
                placeholders = ", ".join("?" for _ in chunk)
                rows = conn.execute(
                    f"SELECT game_id FROM play_marks WHERE account_id = ? AND game_id IN ({placeholders})",
                    (account_id, *chunk),
                ).fetchall()
                marked.update(row["game_id"] for row in rows)
            return marked
        finally:
            conn.close()

    @staticmethod
    def _execute(query: str, params: Tuple[Any, ...]) -> int:
        with get_cursor() as cursor:
            cursor.execute(query, params)
            return cursor.rowcount

    # -----------------------------------------------------------------
    # Read interface
    # -----------------------------------------------------------------

    @classmethod
    async def query_games(cls, predicate: GamePredicate) -> List[Dict[str, Any]]:
        """Return every game matching ``predicate``, ordered by id.

        An empty release or playtime interval short-circuits to an
        empty list without touching the database.
        """
        if predicate.matches_nothing:
            logger.debug("Predicate %s has an empty interval; skipping query", predicate)
            return []
        return await run_store_call("query_games", cls._query_games, predicate)

    @classmethod
    async def borrows_for(cls, game_id: int) -> List[Dict[str, Any]]:
        rows = await run_store_call(
            "borrows_for",
            cls._fetch_all,
            "SELECT id, game_id, account_id, borrow_start, borrow_end, returned "
            "FROM borrows WHERE game_id = ? ORDER BY id",
            (game_id,),
        )
        for row in rows:
            row["returned"] = bool(row["returned"])
        return rows

    @classmethod
    async def ratings_for(cls, game_id: int) -> List[Dict[str, Any]]:
        return await run_store_call(
            "ratings_for",
            cls._fetch_all,
            "SELECT game_id, account_id, rating FROM ratings WHERE game_id = ?",
            (game_id,),
        )

    @classmethod
    async def user_rating(cls, game_id: int, account_id: int) -> Optional[Dict[str, Any]]:
        return await run_store_call(
            "user_rating",
            cls._fetch_one,
            "SELECT game_id, account_id, rating FROM ratings WHERE game_id = ? AND account_id = ?",
            (game_id, account_id),
        )

    @classmethod
    async def play_marks_for(cls, account_id: int, game_ids: Iterable[int]) -> Set[int]:
        """Return the subset of ``game_ids`` the account has marked as played."""
        ids = sorted(set(game_ids))
        if not ids:
            return set()
        return await run_store_call("play_marks_for", cls._play_marks_for, account_id, ids)

    @classmethod
    async def owner_name(cls, owner_id: int) -> str:
        """Return the display name of an owner.

        Raises ``NotFoundError`` if the owner is unknown or has no
        display name recorded.
        """
        row = await run_store_call(
            "owner_name",
            cls._fetch_one,
            "SELECT name FROM owners WHERE id = ?",
            (owner_id,),
        )
        if row is None or not row["name"]:
            raise NotFoundError(f"Owner {owner_id} has no display name")
        return row["name"]

    @classmethod
    async def owners_with_games(cls) -> List[Dict[str, Any]]:
        """Return ``{id, name}`` for every owner that owns at least one game."""
        return await run_store_call(
            "owners_with_games",
            cls._fetch_all,
            "SELECT o.id, o.name FROM owners o "
            "WHERE EXISTS (SELECT 1 FROM games g WHERE g.owner_id = o.id) ORDER BY o.id",
            (),
        )

    @classmethod
    async def game_exists(cls, game_id: int) -> bool:
        row = await run_store_call(
            "game_exists",
            cls._fetch_one,
            "SELECT id FROM games WHERE id = ?",
            (game_id,),
        )
        return row is not None

    # -----------------------------------------------------------------
    # Play marks
    # -----------------------------------------------------------------

    @classmethod
    async def add_play_mark(cls, game_id: int, account_id: int) -> bool:
        """Record that the account has played the game.  Returns ``False`` if already marked."""
        inserted = await run_store_call(
            "add_play_mark",
            cls._execute,
            "INSERT OR IGNORE INTO play_marks (game_id, account_id) VALUES (?, ?)",
            (game_id, account_id),
        )
        return inserted > 0

    @classmethod
    async def remove_play_mark(cls, game_id: int, account_id: int) -> bool:
        """Remove the account's mark for the game.  Returns ``False`` if none existed."""
        deleted = await run_store_call(
            "remove_play_mark",
            cls._execute,
            "DELETE FROM play_marks WHERE game_id = ? AND account_id = ?",
            (game_id, account_id),
        )
        return deleted > 0
