"""
In-memory state store.

WHAT: Dictionary-backed ``StateStore`` for tests and local experiments.

HOW: Values are copied on write and read so callers can never mutate stored
bytes. Query results are snapshotted when the query starts, matching the
ledger's behavior of reading a consistent view per invocation.
"""

import logging
from typing import Dict, List, Optional, Sequence

from certledger.store import composite_key
from certledger.store.base import StateEntry, StateIterator, StateStore
from certledger.store.selector import decode_document, matches, parse_query


logger = logging.getLogger(__name__)


class ListStateIterator(StateIterator):
    """
    Iterator over a precomputed list of entries.

    ``closed`` lets tests assert the consumer released it.
    """

    def __init__(self, entries: List[StateEntry]):
        self._entries = entries
        self._position = 0
        self.closed = False

    async def __anext__(self) -> StateEntry:
        if self.closed or self._position >= len(self._entries):
            raise StopAsyncIteration
        entry = self._entries[self._position]
        self._position += 1
        return entry

    async def close(self) -> None:
        self.closed = True


class InMemoryStateStore(StateStore):
    """
    ``StateStore`` holding the world state in a dict.

    Example:
        store = InMemoryStateStore()
        service = RecordService(store)
        await service.create(["as23df", "ME", "4674", "hussein"])
    """

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._state: Dict[str, bytes] = dict(initial or {})
        self.iterators: List[ListStateIterator] = []

    @property
    def state(self) -> Dict[str, bytes]:
        """Snapshot of the current world state."""
        return dict(self._state)

    async def get(self, key: str) -> Optional[bytes]:
        value = self._state.get(key)
        return bytes(value) if value is not None else None

    async def put(self, key: str, value: bytes) -> None:
        self.check_put(key, value)
        self._state[key] = bytes(value)

    async def query(self, query_string: str) -> StateIterator:
        selector = parse_query(query_string)
        entries = []
        for key in sorted(self._state):
            if composite_key.is_composite_key(key):
                continue
            value = self._state[key]
            if matches(selector, decode_document(value)):
                entries.append(StateEntry(key=key, value=bytes(value)))

        logger.debug(f"Selector query matched {len(entries)} entries")
        return self._track(ListStateIterator(entries))

    async def get_by_partial_composite_key(
        self, object_type: str, attributes: Sequence[str]
    ) -> StateIterator:
        start, end = composite_key.partial_key_range(object_type, attributes)
        start_bytes, end_bytes = start.encode("utf-8"), end.encode("utf-8")
        entries = [
            StateEntry(key=key, value=bytes(self._state[key]))
            for key in sorted(self._state, key=lambda k: k.encode("utf-8"))
            if start_bytes <= key.encode("utf-8") < end_bytes
        ]
        return self._track(ListStateIterator(entries))

    def _track(self, iterator: ListStateIterator) -> ListStateIterator:
        self.iterators.append(iterator)
        return iterator
