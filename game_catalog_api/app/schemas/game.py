"""
Pydantic models for game data.

``GameFilter`` is the request body of the filter endpoint; every field
is optional and absent fields impose no constraint.  ``GameRead`` is
the enriched record returned by every listing route.  Both use
camelCase aliases because the field names on the wire are fixed by
existing clients.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class GameFilter(BaseModel):
    """Sparse filter over the catalog."""

    name: Optional[str] = Field(None, min_length=1, max_length=500, description="Case-insensitive substring of the game name")
    platform: Optional[str] = Field(None, min_length=1, description="Exact platform name")
    release_before: Optional[datetime] = Field(None, alias="releaseBefore", examples=["2023-04-13T00:00:00Z"])
    release_after: Optional[datetime] = Field(None, alias="releaseAfter", examples=["2020-01-01T00:00:00Z"])
    playtime_min: Optional[int] = Field(None, ge=1, strict=True, alias="playtimeMin")
    playtime_max: Optional[int] = Field(None, ge=1, strict=True, alias="playtimeMax")
    player_count: Optional[int] = Field(None, ge=1, le=2000, strict=True, alias="playerCount")
    owner: Optional[int] = Field(None, ge=1, strict=True, description="Owner id")
    location: Optional[str] = Field(None, min_length=1, max_length=500, description="Case-insensitive substring of the location")

    model_config = {
        "populate_by_name": True,
        "extra": "forbid",
        "frozen": True,
    }


class GameRead(BaseModel):
    """Schema for reading an enriched game from the API."""

    id: int
    name: str
    description: str
    platform_name: str = Field(..., alias="platformName")
    release_date: date = Field(..., alias="releaseDate")
    playtime_minutes: int = Field(..., alias="playtimeMinutes")
    player_min: int = Field(..., alias="playerMin")
    player_max: int = Field(..., alias="playerMax")
    location: str
    owner: str
    is_borrowed: bool = Field(..., alias="isBorrowed")
    rating_avg: Optional[float] = Field(None, alias="ratingAvg")
    rating_user: Optional[int] = Field(None, alias="ratingUser")
    is_played: bool = Field(False, alias="isPlayed")

    model_config = {
        "populate_by_name": True,
    }


class PlayMarkRequest(BaseModel):
    """Body of the mark played / not played endpoints."""

    game_id: int = Field(..., ge=1, alias="gameId")

    model_config = {
        "populate_by_name": True,
    }


class MessageResponse(BaseModel):
    message: str
