"""
Certificate schema tests.

WHAT: Tests for the persisted record encoding and the invocation model.
"""

import pytest
from pydantic import ValidationError

from certledger.schemas.certificate import (
    CertificateCreate,
    CertificateRecord,
    Invocation,
    Operation,
)


class TestCertificateRecord:
    """Tests for CertificateRecord."""

    def test_wire_encoding(self):
        record = CertificateRecord(certificate_id="as23df", degree="me", numeric_id=4674, owner="hussein")

        assert record.to_json_bytes() == (
            b'{"docType":"student","cert":"as23df","degree":"me","iD":4674,"owner":"hussein"}'
        )

    def test_decodes_wire_encoding(self):
        record = CertificateRecord.model_validate_json(
            b'{"docType":"student","cert":"x","degree":"cs","iD":-1,"owner":"bob"}'
        )

        assert record.certificate_id == "x"
        assert record.numeric_id == -1

    def test_rejects_other_doc_types(self):
        with pytest.raises(ValidationError):
            CertificateRecord.model_validate_json(
                b'{"docType":"teacher","cert":"x","degree":"cs","iD":1,"owner":"bob"}'
            )


class TestInvocation:
    """Tests for Invocation."""

    def test_parses_known_verbs(self):
        invocation = Invocation.model_validate({"function": "queryByOwner", "args": ["bob"]})

        assert invocation.function is Operation.QUERY_BY_OWNER
        assert invocation.args == ["bob"]

    def test_unknown_verb_is_rejected(self):
        with pytest.raises(ValidationError):
            Invocation.model_validate({"function": "deleteCert", "args": ["x"]})

    def test_args_default_to_empty(self):
        assert Invocation(function=Operation.READ_BY_ID).args == []


class TestCertificateCreate:
    """Tests for the REST create body."""

    def test_to_args_keeps_positional_order(self):
        body = CertificateCreate.model_validate(
            {"cert": "as23df", "degree": "ME", "iD": "4674", "owner": "Hussein"}
        )

        assert body.to_args() == ["as23df", "ME", "4674", "Hussein"]
