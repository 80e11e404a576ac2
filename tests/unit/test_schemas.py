"""
Schema Tests
=============

Certificate lifecycle, request checks and the public verification shape.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from blockcred.errors import InvalidStatusTransitionError
from blockcred.schemas import (
    Certificate,
    CertificateMetadata,
    CertificateStatus,
    CertType,
    IssueCertificateRequest,
    VerificationResult,
    can_transition,
)

ISSUED_AT = datetime(2024, 6, 1, 10, 30, tzinfo=timezone.utc)


def _certificate(**overrides) -> Certificate:
    fields = dict(
        cert_id="0x" + "ab" * 32,
        student_id="2021CS001",
        issuer_id="coe-1",
        cert_type=CertType.MARKSHEET,
        file_hash="cd" * 32,
        content_cid="bafkreiexample",
        content_url="https://gateway.pinata.cloud/ipfs/bafkreiexample",
        tx_hash="0x" + "ef" * 32,
        block_number=7,
        issued_at=ISSUED_AT,
        metadata=CertificateMetadata(student_name="Asha Raman", grade="O"),
    )
    fields.update(overrides)
    return Certificate(**fields)


class TestStatusLifecycle:

    @pytest.mark.parametrize("current,target,allowed", [
        (CertificateStatus.ISSUED, CertificateStatus.VERIFIED, True),
        (CertificateStatus.ISSUED, CertificateStatus.REVOKED, True),
        (CertificateStatus.VERIFIED, CertificateStatus.VERIFIED, True),
        (CertificateStatus.VERIFIED, CertificateStatus.REVOKED, True),
        (CertificateStatus.VERIFIED, CertificateStatus.ISSUED, False),
        (CertificateStatus.REVOKED, CertificateStatus.VERIFIED, False),
        (CertificateStatus.REVOKED, CertificateStatus.ISSUED, False),
        (CertificateStatus.REVOKED, CertificateStatus.REVOKED, False),
    ])
    def test_transition_table(self, current, target, allowed):
        assert can_transition(current, target) is allowed

    def test_mark_verified_stamps_time(self):
        cert = _certificate()
        at = datetime(2024, 7, 1, tzinfo=timezone.utc)
        cert.mark_verified(at)
        assert cert.status == CertificateStatus.VERIFIED
        assert cert.verified_at == at
        assert cert.updated_at == at

    def test_revoke_records_reason(self):
        cert = _certificate().revoke("issued in error", ISSUED_AT)
        assert cert.is_revoked
        assert cert.revoke_reason == "issued in error"
        assert cert.revoked_at == ISSUED_AT

    def test_revoked_is_terminal(self):
        cert = _certificate().revoke("fraud")
        with pytest.raises(InvalidStatusTransitionError):
            cert.mark_verified()
        with pytest.raises(InvalidStatusTransitionError):
            cert.revoke("again")

    def test_block_number_non_negative(self):
        with pytest.raises(ValueError):
            _certificate(block_number=-1)


class TestIssueRequest:

    def test_complete_request_has_no_problems(self):
        req = IssueCertificateRequest(
            student_id="S1", cert_type=CertType.NOC, file_data=b"x", file_name="noc.pdf",
        )
        assert req.problems() == []

    def test_all_problems_reported(self):
        req = IssueCertificateRequest(student_id=" ", cert_type=CertType.NOC)
        problems = req.problems()
        assert len(problems) == 3

    def test_file_data_hidden_from_repr(self):
        req = IssueCertificateRequest(
            student_id="S1", cert_type=CertType.NOC, file_data=b"secret-bytes", file_name="a.pdf",
        )
        assert "secret-bytes" not in repr(req)

    def test_cgpa_bounds(self):
        with pytest.raises(ValueError):
            CertificateMetadata(cgpa=11.0)


class TestVerificationResult:

    def test_public_shape_with_record(self):
        result = VerificationResult(
            is_valid=True, cert_id="0x1", reason="valid", record=_certificate(cert_id="0x1"),
        )
        public = result.to_public()
        assert set(public) == {
            "is_valid", "cert_id", "student_id", "issuer_id", "cert_type", "status",
            "issued_at", "content_url", "tx_hash", "block_number", "metadata",
        }
        assert public["cert_type"] == "marksheet"
        assert public["status"] == "issued"
        assert public["metadata"]["student_name"] == "Asha Raman"

    def test_error_message_only_when_set(self):
        result = VerificationResult(
            is_valid=False, cert_id="0x2", reason="not found", error_message="Certificate not found",
        )
        assert result.to_public() == {
            "is_valid": False,
            "cert_id": "0x2",
            "error_message": "Certificate not found",
        }

    def test_certificate_json_round_trip(self):
        cert = _certificate()
        restored = Certificate.model_validate_json(cert.model_dump_json())
        assert restored == cert
