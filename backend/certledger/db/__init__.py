"""Database package"""

from certledger.db.session import AsyncSessionLocal, engine, get_db
from certledger.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db"]
