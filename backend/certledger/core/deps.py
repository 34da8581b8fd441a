"""
FastAPI dependencies for the state store and record service.

Routes never build stores themselves; tests swap the store by overriding
``get_state_store``.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from certledger.db.session import get_db
from certledger.services.record_service import RecordService
from certledger.store.base import StateStore
from certledger.store.sql import SQLStateStore


async def get_state_store(db: AsyncSession = Depends(get_db)) -> StateStore:
    """
    World state bound to the request's database session.

    Args:
        db: Database session

    Returns:
        SQLStateStore for this request
    """
    return SQLStateStore(db)


async def get_record_service(store: StateStore = Depends(get_state_store)) -> RecordService:
    """
    Record service for this request.

    Usage:
        @router.get("/certificates/{cert_id}")
        async def read(cert_id: str, service: RecordService = Depends(get_record_service)):
            return await service.read_by_id([cert_id])
    """
    return RecordService(store)
