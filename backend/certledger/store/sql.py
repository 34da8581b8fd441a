"""
SQL-backed state store.

WHAT: ``StateStore`` implementation over the ``world_state`` table.

WHY: Gives the API a durable world state using the same async SQLAlchemy
session as every other request-scoped dependency.

HOW: Keys are UTF-8 encoded before they reach the DAO. Driver errors are
wrapped in ``StoreError``/``QueryError`` so SQL details stay inside the
store. Query iterators wrap a streamed result and close it when exhausted,
on error, or when the consumer calls ``close()``.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncResult, AsyncSession

from certledger.dao.world_state import WorldStateDAO
from certledger.store import composite_key
from certledger.store.base import StateEntry, StateIterator, StateStore
from certledger.store.errors import QueryError, StoreError
from certledger.store.selector import decode_document, matches, parse_query


logger = logging.getLogger(__name__)


class SQLStateIterator(StateIterator):
    """
    Iterator over a streamed ``(key, value)`` result.

    When ``selector`` is given, rows whose value does not match are skipped.
    """

    def __init__(self, result: AsyncResult, selector: Optional[Dict[str, Any]] = None):
        self._result = result
        self._selector = selector
        self._closed = False

    async def __anext__(self) -> StateEntry:
        if self._closed:
            raise StopAsyncIteration

        while True:
            try:
                row = await self._result.fetchone()
            except SQLAlchemyError as e:
                logger.error(f"World state scan failed: {type(e).__name__}")
                await self.close()
                raise QueryError("failed to read query results") from e

            if row is None:
                await self.close()
                raise StopAsyncIteration

            key, value = row
            if self._selector is not None and not matches(self._selector, decode_document(value)):
                continue
            return StateEntry(key=key.decode("utf-8"), value=bytes(value))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._result.close()


class SQLStateStore(StateStore):
    """
    ``StateStore`` persisting to the ``world_state`` table.

    Writes are flushed, not committed; the request-scoped session commits
    when the invocation completes.
    """

    def __init__(self, session: AsyncSession):
        self.dao = WorldStateDAO(session)

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await self.dao.get_value(key.encode("utf-8"))
        except (SQLAlchemyError, UnicodeEncodeError) as e:
            logger.error(f"World state read failed: {type(e).__name__}")
            raise StoreError(f"failed to get state for {key}") from e

    async def put(self, key: str, value: bytes) -> None:
        self.check_put(key, value)
        try:
            await self.dao.put_value(key.encode("utf-8"), bytes(value))
        except (SQLAlchemyError, UnicodeEncodeError) as e:
            logger.error(f"World state write failed: {type(e).__name__}")
            raise StoreError(f"failed to put state for {key}") from e

    async def query(self, query_string: str) -> StateIterator:
        selector = parse_query(query_string)
        try:
            result = await self.dao.stream_plain()
        except SQLAlchemyError as e:
            logger.error(f"World state query failed: {type(e).__name__}")
            raise QueryError("failed to execute query") from e
        return SQLStateIterator(result, selector)

    async def get_by_partial_composite_key(
        self, object_type: str, attributes: Sequence[str]
    ) -> StateIterator:
        start, end = composite_key.partial_key_range(object_type, attributes)
        try:
            result = await self.dao.stream_range(start.encode("utf-8"), end.encode("utf-8"))
        except SQLAlchemyError as e:
            logger.error(f"World state range scan failed: {type(e).__name__}")
            raise QueryError("failed to execute range scan") from e
        return SQLStateIterator(result)
