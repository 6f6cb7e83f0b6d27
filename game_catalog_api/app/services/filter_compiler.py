"""
Compile a sparse ``GameFilter`` into an immutable predicate set.

The predicate is built in a single pass and handed to the catalog
store, which renders it as one parameterised ``WHERE`` clause.  Every
present constraint is AND-combined; absent fields impose nothing, so
an empty filter compiles to ``ALL_GAMES``.

Release-date bounds are always kept as one two-sided inclusive
interval.  A lower bound past the upper bound is a legal, empty
interval: the predicate then matches no game at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Mapping, Optional, TypeVar, Union

from pydantic import ValidationError

from ..core.errors import FilterValidationError
from ..schemas.game import GameFilter

logger = logging.getLogger(__name__)

T = TypeVar("T", int, datetime)


@dataclass(frozen=True)
class Interval(Generic[T]):
    """Inclusive interval; either end may be open (``None``)."""

    lower: Optional[T] = None
    upper: Optional[T] = None

    @property
    def is_empty(self) -> bool:
        return self.lower is not None and self.upper is not None and self.lower > self.upper


@dataclass(frozen=True)
class GamePredicate:
    """AND-combined constraints on catalog games.

    ``None`` means "no constraint" for every field.  String fields are
    stored casefolded so the store can compare them against casefolded
    columns.
    """

    name_contains: Optional[str] = None
    platform_name: Optional[str] = None
    released: Optional[Interval[datetime]] = None
    playtime: Optional[Interval[int]] = None
    player_count: Optional[int] = None
    owner_id: Optional[int] = None
    location_contains: Optional[str] = None

    @property
    def is_unconstrained(self) -> bool:
        return self == ALL_GAMES

    @property
    def matches_nothing(self) -> bool:
        return any(
            interval is not None and interval.is_empty
            for interval in (self.released, self.playtime)
        )

    @classmethod
    def name_search(cls, term: Optional[str]) -> "GamePredicate":
        """Predicate used by free-text search: name substring only."""
        if not term:
            return ALL_GAMES
        return cls(name_contains=term.casefold())


ALL_GAMES = GamePredicate()


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _interval(lower: Optional[T], upper: Optional[T]) -> Optional[Interval[T]]:
    if lower is None and upper is None:
        return None
    return Interval(lower=lower, upper=upper)


def compile_filter(raw: Union[GameFilter, Mapping[str, Any], None]) -> GamePredicate:
    """Translate a filter request into a ``GamePredicate``.

    ``raw`` may be an already validated ``GameFilter`` or a plain
    mapping using the wire field names.  A mapping that fails
    validation raises ``FilterValidationError`` naming the first
    offending field.
    """
    if raw is None:
        return ALL_GAMES
    if isinstance(raw, GameFilter):
        flt = raw
    else:
        try:
            flt = GameFilter.model_validate(raw)
        except ValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or "filter"
            raise FilterValidationError(field, error["msg"]) from exc

    predicate = GamePredicate(
        name_contains=flt.name.casefold() if flt.name else None,
        platform_name=flt.platform,
        released=_interval(_naive_utc(flt.release_after), _naive_utc(flt.release_before)),
        playtime=_interval(flt.playtime_min, flt.playtime_max),
        player_count=flt.player_count,
        owner_id=flt.owner,
        location_contains=flt.location.casefold() if flt.location else None,
    )
    logger.debug("Compiled filter %s into %s", flt.model_dump(exclude_none=True), predicate)
    return predicate
