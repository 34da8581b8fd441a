"""
World State Model.

WHAT: SQLAlchemy model for the ledger's key/value world state.

WHY: The record service only needs point reads, point writes, key-prefix
range scans and a scan of plain keys for selector queries. A single table
with a binary primary key covers all of them:
- Keys are stored as UTF-8 bytes so composite keys (which embed U+0000
  delimiters) compare with memcmp ordering and survive every driver
- Values are opaque bytes, returned exactly as written

HOW: One row per key. Composite index entries share the table with plain
records and are told apart by their leading 0x00 byte.
"""

from sqlalchemy import Column, LargeBinary

from certledger.models.base import Base, TimestampMixin


class WorldState(Base, TimestampMixin):
    """
    A single key/value entry of the world state.
    """

    __tablename__ = "world_state"

    key = Column(LargeBinary, primary_key=True)
    value = Column(LargeBinary, nullable=False)

    def __repr__(self) -> str:
        return f"<WorldState(key={self.key!r}, size={len(self.value or b'')})>"
