"""
Ledger invocation endpoint.

WHAT: Single entry point taking a verb and positional string arguments,
the way ledger clients call the record service.

HOW: The body is validated into an ``Invocation``; an unknown verb is a
400 validation error before the service runs. Success payloads are
returned as raw bytes, never re-serialized.
"""

from fastapi import APIRouter, Depends, Response, status

from certledger.core.deps import get_record_service
from certledger.schemas.certificate import Invocation, Operation
from certledger.services.record_service import RecordService


router = APIRouter(tags=["ledger"])


@router.post("/invoke")
async def invoke(
    invocation: Invocation,
    service: RecordService = Depends(get_record_service),
) -> Response:
    """
    Run one invocation.

    Returns:
        201 with an empty body for ``create``; 200 with the JSON payload
        for every other verb
    """
    payload = await service.invoke(invocation)
    if invocation.function is Operation.CREATE:
        return Response(status_code=status.HTTP_201_CREATED)
    return Response(content=payload, media_type="application/json")
