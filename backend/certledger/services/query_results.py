"""
Query result assembly.

WHAT: Turns a stream of ``(key, value)`` entries into one JSON array:

    [{"Key":"k1","Record":<v1>},{"Key":"k2","Record":<v2>}]

WHY: Stored values are already JSON documents. They are spliced into the
response byte-for-byte instead of being decoded and re-encoded, so the
caller sees exactly the field names and ordering that were persisted. A
corrupt stored value therefore yields a corrupt response; nothing here
repairs or validates it.

HOW: Elements are appended to a bytearray with a comma before every element
but the first. The iterator is closed on every exit path.
"""

import json
import logging

from certledger.store.base import StateIterator


logger = logging.getLogger(__name__)


async def build_query_response(iterator: StateIterator) -> bytes:
    """
    Consume a query iterator and return the JSON array payload.

    Args:
        iterator: Entries from the query facility; closed before returning

    Returns:
        The payload bytes; ``b"[]"`` for an empty stream

    Raises:
        Whatever the iterator raises while being consumed (after closing it)
    """
    buffer = bytearray(b"[")
    count = 0
    try:
        async for entry in iterator:
            if count:
                buffer += b","
            buffer += b'{"Key":'
            buffer += json.dumps(entry.key).encode("utf-8")
            buffer += b',"Record":'
            buffer += entry.value
            buffer += b"}"
            count += 1
    finally:
        await iterator.close()
    buffer += b"]"

    logger.debug(f"Assembled query response with {count} entries")
    return bytes(buffer)
