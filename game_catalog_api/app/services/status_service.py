"""
Derive point-in-time status for catalog games.

Borrow status is computed from the full borrow history of a game: the
game is currently borrowed while any borrow is still open.  More than
one open borrow is tolerated (multi-copy inventory or an inconsistent
history); only existence matters here.

Per-user state needs an account.  Anonymous requests never see a
played flag or a personal rating.
"""

from typing import Iterable, Optional, Set

from .catalog_store import CatalogStore


class StatusResolver:
    """Read-only resolver for borrow, played and personal rating state."""

    @classmethod
    async def is_borrowed(cls, game_id: int) -> bool:
        borrows = await CatalogStore.borrows_for(game_id)
        return any(not borrow["returned"] for borrow in borrows)

    @classmethod
    async def user_rating(cls, game_id: int, account_id: Optional[int]) -> Optional[int]:
        if account_id is None:
            return None
        rating = await CatalogStore.user_rating(game_id, account_id)
        return rating["rating"] if rating else None

    @classmethod
    async def played_game_ids(cls, account_id: Optional[int], game_ids: Iterable[int]) -> Set[int]:
        """Return which of ``game_ids`` the account has played.

        One batched lookup covers the whole result set; callers
        distribute the answer to individual rows.
        """
        if account_id is None:
            return set()
        return await CatalogStore.play_marks_for(account_id, game_ids)
