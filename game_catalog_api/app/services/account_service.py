"""
Business logic for catalog accounts.

An account is the internal identity of a user authenticated by the
external identity provider, keyed by that provider's ``cid``.  Read
paths only ever resolve accounts; an account row is created lazily the
first time a user performs a write such as marking a game as played.
"""

import logging
from typing import Optional

from ..core.db import get_connection, get_cursor
from .catalog_store import run_store_call

logger = logging.getLogger(__name__)


class AccountService:
    """Service mapping external identities to internal account ids."""

    @staticmethod
    def _find(cid: str) -> Optional[int]:
        conn = get_connection()
        try:
            row = conn.execute("SELECT id FROM accounts WHERE cid = ?", (cid,)).fetchone()
            return row["id"] if row else None
        finally:
            conn.close()

    @staticmethod
    def _create(cid: str) -> int:
        with get_cursor() as cursor:
            cursor.execute("INSERT OR IGNORE INTO accounts (cid) VALUES (?)", (cid,))
            row = cursor.execute("SELECT id FROM accounts WHERE cid = ?", (cid,)).fetchone()
            return row["id"]

    @classmethod
    async def resolve_account(cls, cid: Optional[str]) -> Optional[int]:
        """Return the account id for ``cid``, or ``None`` if unknown or anonymous."""
        if not cid:
            return None
        return await run_store_call("resolve_account", cls._find, cid)

    @classmethod
    async def ensure_account(cls, cid: str) -> int:
        """Return the account id for ``cid``, creating the account if needed."""
        account_id = await cls.resolve_account(cid)
        if account_id is not None:
            return account_id
        account_id = await run_store_call("ensure_account", cls._create, cid)
        logger.info("Created account %s for identity %s", account_id, cid)
        return account_id
