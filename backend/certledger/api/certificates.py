"""
Certificate API endpoints.

WHAT: Resource-style routes over the record service.

HOW: Each route maps onto one service operation with the same positional
arguments ``/api/invoke`` would pass, so both surfaces share validation
and error reporting.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from certledger.core.deps import get_record_service
from certledger.schemas.certificate import CertificateCreate
from certledger.services.record_service import RecordService


router = APIRouter(prefix="/certificates", tags=["certificates"])


def _json(payload: bytes) -> Response:
    return Response(content=payload, media_type="application/json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_certificate(
    data: CertificateCreate,
    service: RecordService = Depends(get_record_service),
) -> Response:
    """
    Create a certificate and its degree index entry.

    ``iD`` is sent as a string and parsed by the service.
    """
    await service.create(data.to_args())
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("")
async def query_certificates_by_owner(
    owner: str = Query(..., description="Owner to match, case-insensitive"),
    service: RecordService = Depends(get_record_service),
) -> Response:
    """JSON array of ``{"Key", "Record"}`` for the owner's certificates."""
    return _json(await service.query_by_owner([owner]))


@router.get("/by-degree/{degree}")
async def query_certificates_by_degree(
    degree: str,
    service: RecordService = Depends(get_record_service),
) -> Response:
    """JSON array of ``{"Key", "Record"}`` for every certificate with the degree."""
    return _json(await service.query_by_degree([degree]))


@router.get("/{cert_id}")
async def read_certificate(
    cert_id: str,
    service: RecordService = Depends(get_record_service),
) -> Response:
    """The certificate exactly as stored."""
    return _json(await service.read_by_id([cert_id]))
