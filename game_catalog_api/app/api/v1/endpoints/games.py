"""
Game endpoints for API v1.

These routes list, search and filter the catalog and let signed-in
users mark games as played.  Read routes are public; when a valid
session token is presented the results also carry the caller's own
rating and played flag.

Store and enrichment failures are logged by the service layer and
reported to clients as a generic 500 without internal details.
"""

import logging
from typing import Any, Dict, List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from game_catalog_api.app.core.config import settings
from game_catalog_api.app.core.errors import (
    EnrichmentError,
    FilterValidationError,
    NotFoundError,
    StoreError,
)
from game_catalog_api.app.core.security import get_current_user, get_optional_user
from game_catalog_api.app.schemas.game import GameFilter, GameRead, MessageResponse, PlayMarkRequest
from game_catalog_api.app.schemas.owner import OwnerRead
from game_catalog_api.app.services.game_service import GameService

logger = logging.getLogger(__name__)

router = APIRouter()


def _cid(current_user: Optional[Dict[str, Any]]) -> Optional[str]:
    return current_user.get("sub") if current_user else None


def _internal_error(exc: Exception) -> NoReturn:
    if isinstance(exc, EnrichmentError):
        logger.error("Enrichment failed: %s", exc)
        detail = "Could not assemble game list"
    else:
        detail = "Catalog store unavailable"
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail) from exc


@router.get("/", response_model=List[GameRead], summary="List all games")
async def list_games(
    current_user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> List[GameRead]:
    """Return every game in the catalog with borrow status and ratings."""
    try:
        return await GameService.list_games(_cid(current_user))
    except (StoreError, EnrichmentError) as e:
        _internal_error(e)


@router.get("/search", response_model=List[GameRead], summary="Search games by name")
async def search_games(
    term: Optional[str] = Query(None, max_length=settings.search_term_max_length),
    current_user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> List[GameRead]:
    """Return games whose name contains ``term``, ignoring case.

    A missing or empty term returns every game.
    """
    try:
        return await GameService.search_games(term, _cid(current_user))
    except (StoreError, EnrichmentError) as e:
        _internal_error(e)


@router.post("/filter", response_model=List[GameRead], summary="Filter games")
async def filter_games(
    flt: GameFilter,
    current_user: Optional[Dict[str, Any]] = Depends(get_optional_user),
) -> List[GameRead]:
    """Return games matching every field present in the body.

    - **name**, **location**: case-insensitive substrings.
    - **platform**: exact platform name.
    - **releaseAfter**, **releaseBefore**: inclusive ISO-8601 date bounds.
    - **playtimeMin**, **playtimeMax**: inclusive bounds in minutes.
    - **playerCount**: must lie within the game's player range.
    - **owner**: owner id.
    """
    try:
        return await GameService.filter_games(flt, _cid(current_user))
    except FilterValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=[{"loc": ["body", e.field], "msg": e.message}],
        ) from e
    except (StoreError, EnrichmentError) as e:
        _internal_error(e)


@router.post("/markPlayed", response_model=MessageResponse, summary="Mark a game as played")
async def mark_played(
    data: PlayMarkRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> MessageResponse:
    try:
        await GameService.mark_played(data.game_id, current_user["sub"])
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except StoreError as e:
        _internal_error(e)
    return MessageResponse(message="Game marked as played")


@router.post("/markNotPlayed", response_model=MessageResponse, summary="Mark a game as not played")
async def mark_not_played(
    data: PlayMarkRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> MessageResponse:
    try:
        await GameService.mark_not_played(data.game_id, current_user["sub"])
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except StoreError as e:
        _internal_error(e)
    return MessageResponse(message="Game marked as not played")


@router.get("/owners", response_model=List[OwnerRead], summary="List game owners")
async def list_owners() -> List[OwnerRead]:
    """Return every owner that currently has at least one game in the catalog."""
    try:
        return await GameService.list_owners()
    except (StoreError, EnrichmentError) as e:
        _internal_error(e)
