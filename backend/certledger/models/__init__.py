"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation.
"""

from certledger.models.base import Base, TimestampMixin
from certledger.models.world_state import WorldState

__all__ = ["Base", "TimestampMixin", "WorldState"]
