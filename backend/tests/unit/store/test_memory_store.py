"""
In-memory state store tests.
"""

import pytest

from certledger.store.errors import QueryError, StoreError
from certledger.store.memory import InMemoryStateStore


@pytest.mark.asyncio
class TestInMemoryStateStore:
    """Tests for InMemoryStateStore."""

    async def test_get_absent_key(self, memory_store):
        assert await memory_store.get("missing") is None

    async def test_put_then_get(self, memory_store):
        await memory_store.put("k", b"v")

        assert await memory_store.get("k") == b"v"

    async def test_rejects_empty_value(self, memory_store):
        with pytest.raises(StoreError):
            await memory_store.put("k", b"")

    async def test_rejects_empty_key(self, memory_store):
        with pytest.raises(StoreError):
            await memory_store.put("", b"v")

    async def test_rejects_malformed_composite_namespace_key(self, memory_store):
        with pytest.raises(StoreError):
            await memory_store.put("\x00dangling", b"v")

    async def test_stored_bytes_are_copied(self, memory_store):
        value = bytearray(b"abc")
        await memory_store.put("k", value)
        value[0] = ord("z")

        assert await memory_store.get("k") == b"abc"

    async def test_query_skips_index_entries_and_non_json(self):
        store = InMemoryStateStore(
            {
                "a": b'{"owner":"bob"}',
                "b": b"not json",
                "\x00idx\x00bob\x00a\x00": b"\x00",
            }
        )

        iterator = await store.query('{"selector":{"owner":"bob"}}')
        keys = [entry.key async for entry in iterator]

        assert keys == ["a"]

    async def test_query_rejects_bad_selector(self, memory_store):
        with pytest.raises(QueryError):
            await memory_store.query("{}")

    async def test_partial_composite_scan(self, memory_store):
        for degree, cert in [("me", "b"), ("me", "a"), ("mec", "c"), ("cs", "d")]:
            await memory_store.put(
                memory_store.make_composite_key("degree~name", [degree, cert]), b"\x00"
            )
        await memory_store.put("me", b'{"x":1}')

        iterator = await memory_store.get_by_partial_composite_key("degree~name", ["me"])
        entries = [entry async for entry in iterator]

        assert [memory_store.split_composite_key(e.key)[1] for e in entries] == [
            ["me", "a"],
            ["me", "b"],
        ]

    async def test_closed_iterator_stops(self):
        store = InMemoryStateStore({"a": b'{"n":1}', "b": b'{"n":2}'})
        iterator = await store.query('{"selector":{}}')

        await iterator.__anext__()
        await iterator.close()

        with pytest.raises(StopAsyncIteration):
            await iterator.__anext__()
