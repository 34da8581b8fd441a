"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic.
"""

from certledger.dao.base import BaseDAO
from certledger.dao.world_state import WorldStateDAO

__all__ = ["BaseDAO", "WorldStateDAO"]
