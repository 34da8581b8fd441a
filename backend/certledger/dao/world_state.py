"""
World State Data Access Object (DAO).

WHAT: Data access layer for the key/value world state table.

WHY: The SQL-backed state store needs three access paths:
- Point read and write by key
- Ordered range scan over ``[start, end)`` for composite-key prefixes
- Streaming scan of plain (non-composite) keys for selector queries

HOW: Keys and values are raw bytes. Range scans use ``session.stream`` so
rows are pulled lazily and the caller owns closing the streamed result.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncResult, AsyncSession

from certledger.dao.base import BaseDAO
from certledger.models.world_state import WorldState


# Composite keys start with 0x00, so every plain key sorts at or above this
PLAIN_KEY_FLOOR = b"\x01"


class WorldStateDAO(BaseDAO[WorldState]):
    """
    Data Access Object for world state entries.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(WorldState, session)

    async def get_value(self, key: bytes) -> Optional[bytes]:
        """
        Read the value stored under a key.

        Args:
            key: UTF-8 encoded key

        Returns:
            The stored bytes, or None when the key is absent
        """
        entry = await self.get_by_pk(key)
        if entry is None:
            return None
        return entry.value

    async def put_value(self, key: bytes, value: bytes) -> WorldState:
        """
        Insert or overwrite the value stored under a key.

        Args:
            key: UTF-8 encoded key
            value: Non-empty value bytes

        Returns:
            The persisted WorldState row
        """
        entry = await self.get_by_pk(key)
        if entry is None:
            return await self.create(key=key, value=value)

        entry.value = value
        await self.session.flush()
        return entry

    async def stream_range(self, start: bytes, end: bytes) -> AsyncResult:
        """
        Stream ``(key, value)`` rows with ``start <= key < end`` in key order.

        Args:
            start: Inclusive lower bound
            end: Exclusive upper bound

        Returns:
            A streamed result; the caller must close it
        """
        stmt = (
            select(WorldState.key, WorldState.value)
            .where(WorldState.key >= start, WorldState.key < end)
            .order_by(WorldState.key)
        )
        return await self.session.stream(stmt)

    async def stream_plain(self) -> AsyncResult:
        """
        Stream every plain-key ``(key, value)`` row in key order.

        Composite index entries are excluded.

        Returns:
            A streamed result; the caller must close it
        """
        stmt = (
            select(WorldState.key, WorldState.value)
            .where(WorldState.key >= PLAIN_KEY_FLOOR)
            .order_by(WorldState.key)
        )
        return await self.session.stream(stmt)
