"""Aggregate rating for catalog games."""

from typing import Optional

from .catalog_store import CatalogStore


class RatingAggregator:

    @classmethod
    async def average(cls, game_id: int) -> Optional[float]:
        """Mean of every score recorded for the game, or ``None`` when unrated."""
        ratings = await CatalogStore.ratings_for(game_id)
        if not ratings:
            return None
        return sum(row["rating"] for row in ratings) / len(ratings)
