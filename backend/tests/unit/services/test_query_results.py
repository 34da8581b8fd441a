"""
Query Result Builder Tests.

WHAT: Unit tests for build_query_response.

WHY: The payload is assembled by splicing stored bytes, so these tests
check the separators, the raw embedding of records, and that the iterator
is released on every exit path.
"""

import json

import pytest

from certledger.services.query_results import build_query_response
from certledger.store.base import StateEntry, StateIterator
from certledger.store.errors import QueryError
from certledger.store.memory import ListStateIterator


class FailingIterator(StateIterator):
    """Yields the given entries, then raises QueryError."""

    def __init__(self, entries):
        self._inner = ListStateIterator(entries)
        self.closed = False

    async def __anext__(self) -> StateEntry:
        try:
            return await self._inner.__anext__()
        except StopAsyncIteration:
            raise QueryError("cursor lost")

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
class TestBuildQueryResponse:
    """Tests for the JSON array assembly."""

    async def test_empty_stream(self):
        iterator = ListStateIterator([])

        assert await build_query_response(iterator) == b"[]"
        assert iterator.closed

    async def test_single_entry(self):
        iterator = ListStateIterator([StateEntry("k1", b'{"a":1}')])

        assert await build_query_response(iterator) == b'[{"Key":"k1","Record":{"a":1}}]'

    async def test_commas_only_between_entries(self):
        entries = [StateEntry(f"k{i}", b'{"n":%d}' % i) for i in range(3)]

        payload = await build_query_response(ListStateIterator(entries))

        assert payload == (
            b'[{"Key":"k0","Record":{"n":0}},'
            b'{"Key":"k1","Record":{"n":1}},'
            b'{"Key":"k2","Record":{"n":2}}]'
        )
        assert [item["Record"]["n"] for item in json.loads(payload)] == [0, 1, 2]

    async def test_record_bytes_are_not_reencoded(self):
        """
        Whitespace and key order of the stored value survive untouched.
        """
        raw = b'{ "z": 1,  "a": [1, 2] }'

        payload = await build_query_response(ListStateIterator([StateEntry("k", raw)]))

        assert raw in payload

    async def test_corrupt_record_propagates(self):
        """
        A stored value that is not JSON is embedded as-is, producing an
        invalid document rather than being repaired.
        """
        payload = await build_query_response(ListStateIterator([StateEntry("k", b"{broken")]))

        assert payload == b'[{"Key":"k","Record":{broken}]'
        with pytest.raises(json.JSONDecodeError):
            json.loads(payload)

    async def test_key_is_json_escaped(self):
        payload = await build_query_response(
            ListStateIterator([StateEntry('we"ird\\key', b"1")])
        )

        assert json.loads(payload) == [{"Key": 'we"ird\\key', "Record": 1}]

    async def test_iterator_closed_on_error(self):
        iterator = FailingIterator([StateEntry("k1", b"1")])

        with pytest.raises(QueryError):
            await build_query_response(iterator)

        assert iterator.closed
