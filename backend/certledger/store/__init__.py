"""
State store package.

The record service talks to the world state only through ``StateStore``.
"""

from certledger.store.errors import StoreError, QueryError, CompositeKeyError
from certledger.store.base import StateEntry, StateIterator, StateStore
from certledger.store.memory import InMemoryStateStore, ListStateIterator
from certledger.store.sql import SQLStateStore, SQLStateIterator

__all__ = [
    "StoreError",
    "QueryError",
    "CompositeKeyError",
    "StateEntry",
    "StateIterator",
    "StateStore",
    "InMemoryStateStore",
    "ListStateIterator",
    "SQLStateStore",
    "SQLStateIterator",
]
