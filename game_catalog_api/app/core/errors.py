"""
Exception types raised by the catalog core.

Endpoints translate these into HTTP responses; services raise them and
never catch them.  ``StoreError`` and ``EnrichmentError`` messages are
meant for logs only and are replaced with a generic message before
they reach a client.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""


class FilterValidationError(CatalogError, ValueError):
    """A filter field is malformed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(CatalogError, LookupError):
    """A referenced record does not exist."""


class StoreError(CatalogError):
    """The underlying SQLite store failed."""


class EnrichmentError(CatalogError):
    """An enrichment step failed; the whole result set is discarded."""

    def __init__(self, message: str, game_id: Optional[int] = None) -> None:
        super().__init__(message if game_id is None else f"Game {game_id}: {message}")
        self.game_id = game_id
