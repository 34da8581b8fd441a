"""
Pydantic schemas for certificate records and ledger invocations.

WHAT: The persisted record encoding, the closed set of invocation verbs,
and request bodies for the HTTP API.

WHY: The record's JSON field names (``docType``, ``cert``, ``degree``,
``iD``, ``owner``) and their order are the on-wire contract for data already
in the ledger. Python attribute names are snake_case; aliases carry the wire
names.
"""

from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


# Discriminator shared by every certificate record in the world state
RECORD_DOC_TYPE = "student"

# Secondary index on (degree, certificate ID)
DEGREE_INDEX_NAME = "degree~name"

# Index entries carry no payload; an empty value would read as a deletion
INDEX_SENTINEL_VALUE = b"\x00"


class CertificateRecord(BaseModel):
    """
    A certificate entry as persisted under its certificate ID.

    ``degree`` and ``owner`` are already lowercase when a record is built by
    the record service.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    record_type: Literal["student"] = Field(default=RECORD_DOC_TYPE, alias="docType")
    certificate_id: str = Field(..., min_length=1, alias="cert")
    degree: str = Field(..., alias="degree")
    numeric_id: int = Field(..., alias="iD")
    owner: str = Field(..., alias="owner")

    def to_json_bytes(self) -> bytes:
        """Compact JSON in wire field order."""
        return self.model_dump_json(by_alias=True).encode("utf-8")


class Operation(str, Enum):
    """
    Invocation verbs understood by the record service.

    An invocation naming any other verb fails validation before it reaches
    the service.
    """

    CREATE = "create"
    READ_BY_ID = "readByID"
    QUERY_BY_OWNER = "queryByOwner"
    QUERY_BY_DEGREE = "queryByDegree"
    QUERY_RECORDS = "queryRecords"


class Invocation(BaseModel):
    """
    A verb plus positional string arguments.

    Argument counts are checked by the service so that each verb reports its
    own ``InvalidArgumentCountError``.
    """

    function: Operation
    args: List[str] = Field(default_factory=list)


class CertificateCreate(BaseModel):
    """Request body for creating a certificate through the REST routes."""

    model_config = ConfigDict(populate_by_name=True)

    cert: str = Field(..., description="Certificate ID (primary key)")
    degree: str = Field(..., description="Degree, stored lowercase")
    numeric_id: str = Field(..., alias="iD", description="Base-10 integer as a string")
    owner: str = Field(..., description="Owner, stored lowercase")

    def to_args(self) -> List[str]:
        return [self.cert, self.degree, self.numeric_id, self.owner]
