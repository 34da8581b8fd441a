"""
Certificate record service.

WHAT: Creates certificate records, reads them back by ID, and answers owner,
degree and ad-hoc selector queries against the ledger world state.

WHY: This is the only place the record rules live:
- Argument count and content validation, in a fixed order
- Case normalization of ``degree`` and ``owner``
- Uniqueness of the certificate ID
- Maintenance of the ``degree~name`` secondary index

HOW: Every operation takes positional string arguments, as the ledger
delivers them. Failures raise ``AppException`` subclasses; nothing is
written until validation and the uniqueness check have passed. Within
``create`` the uniqueness read, the record write and the index write are
awaited strictly in that order.

The record write and the index write are two independent store calls. If
the index write fails, the record stays persisted without an index entry
and the caller gets ``StoreUnavailableError``. No compensating delete is
attempted.
"""

import json
import logging
import re
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from certledger.core.exceptions import (
    DuplicateRecordError,
    InvalidArgumentCountError,
    InvalidArgumentError,
    InvalidNumericArgumentError,
    QueryFailedError,
    RecordNotFoundError,
    StoreUnavailableError,
)
from certledger.middleware.request_context import get_request_id
from certledger.schemas.certificate import (
    DEGREE_INDEX_NAME,
    INDEX_SENTINEL_VALUE,
    RECORD_DOC_TYPE,
    CertificateRecord,
    Invocation,
    Operation,
)
from certledger.services.query_results import build_query_response
from certledger.store import composite_key
from certledger.store.base import StateEntry, StateIterator, StateStore
from certledger.store.errors import CompositeKeyError, StoreError


logger = logging.getLogger(__name__)

ORDINALS = {1: "1st", 2: "2nd", 3: "3rd", 4: "4th"}

# Signed 64-bit, the integer domain of existing ledger data
NUMERIC_ID_MIN = -(2**63)
NUMERIC_ID_MAX = 2**63 - 1
_NUMERIC_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_numeric_id(text: str) -> int:
    """
    Parse a base-10 integer the way the ledger does.

    An optional sign followed by ASCII digits only; no whitespace,
    underscores, or exponent.

    Raises:
        InvalidNumericArgumentError: If the text is not such an integer or
            does not fit a signed 64-bit value
    """
    if not _NUMERIC_PATTERN.fullmatch(text):
        raise InvalidNumericArgumentError("3rd argument must be a numeric string", position=3)
    value = int(text)
    if not NUMERIC_ID_MIN <= value <= NUMERIC_ID_MAX:
        raise InvalidNumericArgumentError(
            "3rd argument is out of range for a numeric ID", position=3
        )
    return value


class IndexedRecordIterator(StateIterator):
    """
    Resolves ``degree~name`` index entries to the records they point at.

    Yields ``StateEntry(certificate_id, record_bytes)``. Index entries whose
    record is missing are skipped and logged. Closing this iterator closes
    the underlying index scan.
    """

    def __init__(self, index_entries: StateIterator, store: StateStore):
        self._index_entries = index_entries
        self._store = store

    async def __anext__(self) -> StateEntry:
        while True:
            index_entry = await self._index_entries.__anext__()
            _, attributes = self._store.split_composite_key(index_entry.key)
            certificate_id = attributes[-1]

            value = await self._store.get(certificate_id)
            if value:
                return StateEntry(key=certificate_id, value=value)

            logger.warning(
                f"[{get_request_id()}] Index entry without record: "
                f"degree={attributes[0]!r} cert={certificate_id!r}"
            )

    async def close(self) -> None:
        await self._index_entries.close()


class RecordService:
    """
    Service for certificate records.

    The state store is injected so the same rules run against the
    in-memory store in tests and the SQL store behind the API.

    Example:
        service = RecordService(InMemoryStateStore())
        await service.create(["as23df", "ME", "4674", "Hussein"])
        record = await service.read_by_id(["as23df"])
    """

    def __init__(self, store: StateStore):
        self.store = store
        self._handlers: Dict[Operation, Callable[[Sequence[str]], Awaitable[Optional[bytes]]]] = {
            Operation.CREATE: self.create,
            Operation.READ_BY_ID: self.read_by_id,
            Operation.QUERY_BY_OWNER: self.query_by_owner,
            Operation.QUERY_BY_DEGREE: self.query_by_degree,
            Operation.QUERY_RECORDS: self.query_records,
        }

    async def invoke(self, invocation: Invocation) -> bytes:
        """
        Run one invocation and return its payload.

        Args:
            invocation: Verb and positional arguments

        Returns:
            The payload bytes (empty for ``create``)
        """
        logger.info(f"[{get_request_id()}] invoke is running {invocation.function.value}")
        payload = await self._handlers[invocation.function](invocation.args)
        return payload if payload is not None else b""

    async def create(self, args: Sequence[str]) -> None:
        """
        Create and index a certificate record.

        Args:
            args: ``[certificate_id, degree, numeric_id, owner]``,
                e.g. ``["as23df", "ME", "4674", "hussein"]``

        Raises:
            InvalidArgumentCountError: Not exactly four arguments
            InvalidArgumentError: An empty argument, or an ID/degree that
                cannot be encoded into the index key
            InvalidNumericArgumentError: Third argument is not an integer
            DuplicateRecordError: The certificate ID is already stored
            StoreUnavailableError: A store read or write failed
        """
        if len(args) != 4:
            raise InvalidArgumentCountError(
                "Incorrect number of arguments. Expecting 4", expected=4, received=len(args)
            )

        for position, value in enumerate(args, start=1):
            if len(value) <= 0:
                raise InvalidArgumentError(
                    f"{ORDINALS[position]} argument must be a non-empty string", position=position
                )

        certificate_id = args[0]
        degree = args[1].lower()
        numeric_id = parse_numeric_id(args[2])
        owner = args[3].lower()

        try:
            index_key = self.store.make_composite_key(DEGREE_INDEX_NAME, [degree, certificate_id])
        except CompositeKeyError as e:
            raise InvalidArgumentError(
                f"Certificate cannot be indexed: {e}", certificate_id=certificate_id
            ) from e

        existing = await self._get_state(certificate_id)
        if existing is not None:
            logger.info(f"[{get_request_id()}] This certificate already exists: {certificate_id}")
            raise DuplicateRecordError(
                f"This certificate already exists: {certificate_id}", certificate_id=certificate_id
            )

        record = CertificateRecord(
            record_type=RECORD_DOC_TYPE,
            certificate_id=certificate_id,
            degree=degree,
            numeric_id=numeric_id,
            owner=owner,
        )

        try:
            await self.store.put(certificate_id, record.to_json_bytes())
        except StoreError as e:
            raise StoreUnavailableError(
                f"Failed to save certificate: {certificate_id}", certificate_id=certificate_id
            ) from e

        try:
            await self.store.put(index_key, INDEX_SENTINEL_VALUE)
        except StoreError as e:
            logger.error(
                f"[{get_request_id()}] Certificate {certificate_id} saved without its "
                f"{DEGREE_INDEX_NAME} index entry: {e}"
            )
            raise StoreUnavailableError(
                f"Failed to index certificate: {certificate_id}",
                certificate_id=certificate_id,
                index=DEGREE_INDEX_NAME,
            ) from e

        logger.info(f"[{get_request_id()}] Certificate saved and indexed: {certificate_id}")

    async def read_by_id(self, args: Sequence[str]) -> bytes:
        """
        Return the stored bytes of a certificate, unchanged.

        Args:
            args: ``[certificate_id]``

        Raises:
            InvalidArgumentCountError: Not exactly one argument
            StoreUnavailableError: The store read failed
            RecordNotFoundError: No record under that ID
        """
        if len(args) != 1:
            raise InvalidArgumentCountError(
                "Incorrect number of arguments. Expecting certificate ID to query",
                expected=1,
                received=len(args),
            )

        certificate_id = args[0]
        # Index entries share the key space but are never records
        if composite_key.is_composite_key(certificate_id):
            raise RecordNotFoundError(
                f"Certificate does not exist: {certificate_id}", certificate_id=certificate_id
            )

        value = await self._get_state(certificate_id)
        if not value:
            raise RecordNotFoundError(
                f"Certificate does not exist: {certificate_id}", certificate_id=certificate_id
            )
        return value

    async def query_by_owner(self, args: Sequence[str]) -> bytes:
        """
        All certificates of an owner, matched case-insensitively.

        Args:
            args: ``[owner, ...]``; only the first argument is used
        """
        if len(args) < 1:
            raise InvalidArgumentCountError(
                "Incorrect number of arguments. Expecting 1", expected=1, received=len(args)
            )

        owner = args[0].lower()
        query_string = json.dumps(
            {"selector": {"docType": RECORD_DOC_TYPE, "owner": owner}}, separators=(",", ":")
        )
        return await self._run_query(query_string)

    async def query_by_degree(self, args: Sequence[str]) -> bytes:
        """
        All certificates with a degree, via a prefix scan of the degree index.

        Args:
            args: ``[degree, ...]``; only the first argument is used
        """
        if len(args) < 1:
            raise InvalidArgumentCountError(
                "Incorrect number of arguments. Expecting 1", expected=1, received=len(args)
            )

        degree = args[0].lower()
        try:
            index_entries = await self.store.get_by_partial_composite_key(
                DEGREE_INDEX_NAME, [degree]
            )
        except CompositeKeyError as e:
            raise InvalidArgumentError(str(e), position=1) from e
        except StoreError as e:
            raise QueryFailedError(str(e), index=DEGREE_INDEX_NAME) from e

        try:
            return await build_query_response(IndexedRecordIterator(index_entries, self.store))
        except StoreError as e:
            raise QueryFailedError(str(e), index=DEGREE_INDEX_NAME) from e

    async def query_records(self, args: Sequence[str]) -> bytes:
        """
        Run an ad-hoc selector query, e.g. ``{"selector":{"degree":"me"}}``.

        Args:
            args: ``[query_string]``
        """
        if len(args) != 1:
            raise InvalidArgumentCountError(
                "Incorrect number of arguments. Expecting 1", expected=1, received=len(args)
            )
        return await self._run_query(args[0])

    async def _get_state(self, key: str) -> Optional[bytes]:
        try:
            return await self.store.get(key)
        except StoreError as e:
            raise StoreUnavailableError(
                f"Failed to get state for {key}", certificate_id=key
            ) from e

    async def _run_query(self, query_string: str) -> bytes:
        logger.debug(f"[{get_request_id()}] Running query: {query_string}")
        try:
            iterator = await self.store.query(query_string)
            return await build_query_response(iterator)
        except StoreError as e:
            raise QueryFailedError(str(e), query=query_string) from e


def operations() -> List[str]:
    """Verbs accepted by ``RecordService.invoke``."""
    return [op.value for op in Operation]
