"""
State store abstraction.

WHAT: The contract between the record service and the ledger's key/value
world state and rich query facility.

WHY: The world state is an external collaborator. Injecting it as an
object (instead of reaching for a global) lets the service run against an
in-memory store in tests and a SQL-backed store in the API.

HOW: ``StateStore`` declares the primitives the service consumes. Composite
key handling is concrete here since every store shares one encoding.
Queries return a ``StateIterator`` that the caller must close.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Sequence, Tuple

from certledger.store import composite_key
from certledger.store.errors import StoreError


@dataclass(frozen=True)
class StateEntry:
    """A single key/value pair yielded by a query."""

    key: str
    value: bytes


class StateIterator(ABC):
    """
    Finite, closable async iterator of ``StateEntry`` items.

    ``close()`` must be safe to call more than once.
    """

    def __aiter__(self) -> AsyncIterator[StateEntry]:
        return self

    @abstractmethod
    async def __anext__(self) -> StateEntry:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class StateStore(ABC):
    """
    Abstract base class for ledger world state implementations.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """
        Read the value stored under a plain key.

        Returns:
            The stored bytes, or None when the key is absent

        Raises:
            StoreError: If the read fails
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: bytes) -> None:
        """
        Write a value under a key.

        Raises:
            StoreError: If the write fails or the value is empty
        """
        pass

    @abstractmethod
    async def query(self, query_string: str) -> StateIterator:
        """
        Run a selector query over plain-key JSON documents.

        Raises:
            QueryError: If the query is malformed or the facility fails
        """
        pass

    @abstractmethod
    async def get_by_partial_composite_key(
        self, object_type: str, attributes: Sequence[str]
    ) -> StateIterator:
        """
        Scan every composite key beginning with ``object_type`` and the
        given leading attributes, in key order.

        Raises:
            CompositeKeyError: If the partial key cannot be encoded
            QueryError: If the scan fails
        """
        pass

    def make_composite_key(self, object_type: str, attributes: Sequence[str]) -> str:
        return composite_key.make_composite_key(object_type, attributes)

    def split_composite_key(self, key: str) -> Tuple[str, List[str]]:
        return composite_key.split_composite_key(key)

    @staticmethod
    def check_put(key: str, value: bytes) -> None:
        """
        Reject writes that the ledger would refuse.

        Raises:
            StoreError: On an empty key, an empty value, or a plain key in the
                composite-key namespace
        """
        if not key:
            raise StoreError("key must not be an empty string")
        if not value:
            raise StoreError(f"value for key {key!r} must not be empty")
        if composite_key.is_composite_key(key):
            # Composite keys are only legal when they split cleanly
            try:
                composite_key.split_composite_key(key)
            except ValueError as e:
                raise StoreError(str(e)) from e
