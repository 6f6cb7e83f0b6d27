"""
Business logic for listing, searching and filtering games.

All three read paths share one enrichment pipeline: matching games are
fetched from the catalog store and each one is decorated with derived
state (borrow status, average and personal rating, played flag and the
owner's display name) before being returned as ``GameRead``.

Lookups are fanned out with ``asyncio.gather``.  Owner names are
resolved once per distinct owner and the played flags with a single
batched query per request; the remaining per-game lookups run
concurrently.  If any step fails the whole request fails: callers
always get a complete, uniform result set or an error.

The service also handles the played/not played marks, the only writes
reachable from the game routes.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from ..core.errors import EnrichmentError, NotFoundError
from ..schemas.game import GameFilter, GameRead
from ..schemas.owner import OwnerRead
from .account_service import AccountService
from .catalog_store import CatalogStore
from .filter_compiler import ALL_GAMES, GamePredicate, compile_filter
from .rating_service import RatingAggregator
from .status_service import StatusResolver

logger = logging.getLogger(__name__)


class GameService:
    """Service for reading enriched games and recording play marks."""

    # -----------------------------------------------------------------
    # Read paths
    # -----------------------------------------------------------------

    @classmethod
    async def list_games(cls, cid: Optional[str] = None) -> List[GameRead]:
        """Return every game in the catalog."""
        return await cls._query(ALL_GAMES, cid)

    @classmethod
    async def search_games(cls, term: Optional[str], cid: Optional[str] = None) -> List[GameRead]:
        """Return games whose name contains ``term`` (case-insensitive).

        An empty or missing term matches every game.
        """
        return await cls._query(GamePredicate.name_search(term), cid)

    @classmethod
    async def filter_games(
        cls,
        flt: Union[GameFilter, Mapping[str, Any], None],
        cid: Optional[str] = None,
    ) -> List[GameRead]:
        """Return games matching every constraint present in ``flt``."""
        return await cls._query(compile_filter(flt), cid)

    @classmethod
    async def _query(cls, predicate: GamePredicate, cid: Optional[str]) -> List[GameRead]:
        games = await CatalogStore.query_games(predicate)
        results = await cls.enrich(games, cid)
        logger.info(
            "Returned %d games (%s, %s)",
            len(results),
            "all" if predicate.is_unconstrained else "filtered",
            "authenticated" if cid else "anonymous",
        )
        return results

    # -----------------------------------------------------------------
    # Enrichment pipeline
    # -----------------------------------------------------------------

    @classmethod
    async def enrich(cls, games: List[Dict[str, Any]], cid: Optional[str]) -> List[GameRead]:
        """Attach derived state to raw game rows.

        ``cid`` is the requesting identity, or ``None`` for anonymous
        requests, which never carry a played flag or personal rating.
        """
        if not games:
            return []
        account_id = await AccountService.resolve_account(cid)
        owner_names, played = await asyncio.gather(
            cls._owner_names(games),
            StatusResolver.played_game_ids(account_id, [game["id"] for game in games]),
        )
        return list(
            await asyncio.gather(
                *(cls._enrich_one(game, account_id, owner_names, played) for game in games)
            )
        )

    @classmethod
    async def _owner_names(cls, games: List[Dict[str, Any]]) -> Dict[int, str]:
        # First game per owner, reported if that owner cannot be resolved.
        first_game: Dict[int, int] = {}
        for game in games:
            first_game.setdefault(game["owner_id"], game["id"])

        async def resolve(owner_id: int) -> str:
            try:
                return await CatalogStore.owner_name(owner_id)
            except NotFoundError as exc:
                raise EnrichmentError(str(exc), game_id=first_game[owner_id]) from exc

        owner_ids = list(first_game)
        names = await asyncio.gather(*(resolve(owner_id) for owner_id in owner_ids))
        return dict(zip(owner_ids, names))

    @classmethod
    async def _enrich_one(
        cls,
        game: Dict[str, Any],
        account_id: Optional[int],
        owner_names: Dict[int, str],
        played: Set[int],
    ) -> GameRead:
        game_id = game["id"]
        is_borrowed, rating_avg, rating_user = await asyncio.gather(
            StatusResolver.is_borrowed(game_id),
            RatingAggregator.average(game_id),
            StatusResolver.user_rating(game_id, account_id),
        )
        try:
            release_date = datetime.fromisoformat(str(game["date_released"])).date()
        except ValueError as exc:
            raise EnrichmentError(f"unreadable release date {game['date_released']!r}", game_id=game_id) from exc
        return GameRead(
            id=game_id,
            name=game["name"],
            description=game["description"],
            platform_name=game["platform_name"],
            release_date=release_date,
            playtime_minutes=game["playtime_minutes"],
            player_min=game["player_min"],
            player_max=game["player_max"],
            location=game["location"],
            owner=owner_names[game["owner_id"]],
            is_borrowed=is_borrowed,
            rating_avg=rating_avg,
            rating_user=rating_user,
            is_played=game_id in played,
        )

    # -----------------------------------------------------------------
    # Owners
    # -----------------------------------------------------------------

    @classmethod
    async def list_owners(cls) -> List[OwnerRead]:
        """Return every owner that currently owns at least one game."""
        owners = await CatalogStore.owners_with_games()
        results = []
        for owner in owners:
            if not owner["name"]:
                raise EnrichmentError(f"Owner {owner['id']} has no display name")
            results.append(OwnerRead(id=owner["id"], name=owner["name"]))
        return results

    # -----------------------------------------------------------------
    # Play marks
    # -----------------------------------------------------------------

    @classmethod
    async def mark_played(cls, game_id: int, cid: str) -> None:
        """Record that the user identified by ``cid`` has played the game.

        Marking twice is harmless.  Raises ``NotFoundError`` if the game
        does not exist.
        """
        if not await CatalogStore.game_exists(game_id):
            raise NotFoundError(f"Game {game_id} not found")
        account_id = await AccountService.ensure_account(cid)
        if await CatalogStore.add_play_mark(game_id, account_id):
            logger.info("Account %s marked game %s as played", account_id, game_id)

    @classmethod
    async def mark_not_played(cls, game_id: int, cid: str) -> None:
        """Remove the user's played mark for the game, if any."""
        if not await CatalogStore.game_exists(game_id):
            raise NotFoundError(f"Game {game_id} not found")
        account_id = await AccountService.resolve_account(cid)
        if account_id is None:
            return
        if await CatalogStore.remove_play_mark(game_id, account_id):
            logger.info("Account %s marked game %s as not played", account_id, game_id)
