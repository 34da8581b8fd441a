"""
State store exceptions.

These are raised by store implementations and translated into application
exceptions by the record service, so store details never reach callers.
"""


class StoreError(Exception):
    """Raised when a state store read or write fails."""


class QueryError(StoreError):
    """Raised when the rich query facility rejects or fails a query."""


class CompositeKeyError(ValueError):
    """Raised when a value cannot be encoded into a composite key."""
