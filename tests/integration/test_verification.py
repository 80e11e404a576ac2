"""
Verification Tests
===================

Reconciliation of stored records with the ledger. Verification must
never raise.
"""

from __future__ import annotations

import pytest

from blockcred.errors import PersistenceError, UpstreamError
from blockcred.ledger.mock import MockLedgerClient
from blockcred.revocation import RevocationHandler
from blockcred.schemas import CertificateStatus
from blockcred.schemas.verification import REASON_LEDGER_MISMATCH, REASON_NOT_FOUND, REASON_REVOKED
from blockcred.store.memory import MemoryStore
from blockcred.verification import VerificationEngine

from conftest import FIXED_TIME

pytestmark = pytest.mark.integration


class ExplodingLedger(MockLedgerClient):
    def __init__(self):
        super().__init__()
        self.verify_calls = 0

    def verify(self, cert_id):
        self.verify_calls += 1
        raise UpstreamError("eth_call timed out")


class ForgetfulLedger(MockLedgerClient):
    def verify(self, cert_id):
        return False


class RevokedMidwayLedger(MockLedgerClient):
    """Confirms the certificate after it has been revoked in the store."""

    def __init__(self, store):
        super().__init__()
        self.store = store

    def verify(self, cert_id):
        RevocationHandler(self.store, self, clock=lambda: FIXED_TIME).revoke(cert_id, "fraud")
        return True


class BrokenStore(MemoryStore):
    def find_certificate(self, cert_id):
        raise PersistenceError("connection reset")


@pytest.fixture
def issued(orchestrator, make_request):
    return orchestrator.issue(make_request(), "coe-1")


def engine(store, ledger, **kwargs):
    return VerificationEngine(store, ledger, clock=lambda: FIXED_TIME, **kwargs)


class TestVerify:

    def test_valid_certificate(self, store, ledger, issued):
        result = engine(store, ledger).verify(issued.cert_id)
        assert result.is_valid
        assert result.reason == "valid"
        assert result.record.cert_id == issued.cert_id
        assert "error_message" not in result.to_public()

    def test_success_stamps_verified_at(self, store, ledger, issued):
        engine(store, ledger).verify(issued.cert_id)
        stored = store.get_certificate(issued.cert_id)
        assert stored.status == CertificateStatus.VERIFIED
        assert stored.verified_at == FIXED_TIME

    def test_repeat_verification_stays_valid(self, store, ledger, issued):
        verifier = engine(store, ledger)
        verifier.verify(issued.cert_id)
        assert verifier.verify(issued.cert_id).is_valid

    def test_stamping_can_be_disabled(self, store, ledger, issued):
        engine(store, ledger, stamp_verified=False).verify(issued.cert_id)
        stored = store.get_certificate(issued.cert_id)
        assert stored.status == CertificateStatus.ISSUED
        assert stored.verified_at is None

    def test_not_found(self, store, ledger):
        result = engine(store, ledger).verify("0x" + "00" * 32)
        assert not result.is_valid
        assert result.reason == REASON_NOT_FOUND
        assert result.record is None
        assert result.to_public()["error_message"] == "Certificate not found"

    def test_revoked_is_invalid_whatever_the_ledger_says(self, store, issued):
        store.update_certificate(issued.cert_id, lambda c: c.revoke("fraud"))
        ledger = ExplodingLedger()
        result = engine(store, ledger).verify(issued.cert_id)
        assert not result.is_valid
        assert result.reason == REASON_REVOKED
        assert "fraud" in result.error_message
        assert ledger.verify_calls == 0

    def test_ledger_error(self, store, issued):
        result = engine(store, ExplodingLedger()).verify(issued.cert_id)
        assert not result.is_valid
        assert result.reason.startswith("ledger error")
        assert "eth_call timed out" in result.reason
        assert result.record is not None
        assert store.get_certificate(issued.cert_id).status == CertificateStatus.ISSUED

    def test_ledger_does_not_know_certificate(self, store, issued):
        result = engine(store, ForgetfulLedger()).verify(issued.cert_id)
        assert not result.is_valid
        assert result.reason == REASON_LEDGER_MISMATCH

    def test_store_failure_does_not_raise(self, ledger):
        result = engine(BrokenStore(), ledger).verify("0x01")
        assert not result.is_valid
        assert "connection reset" in result.error_message

    def test_public_document(self, store, ledger, issued):
        public = engine(store, ledger).verify(issued.cert_id).to_public()
        assert public["is_valid"] is True
        assert public["status"] == "verified"
        assert public["tx_hash"] == issued.tx_hash
        assert public["content_url"] == issued.content_url

    def test_revocation_during_verification(self, store, issued):
        result = engine(store, RevokedMidwayLedger(store)).verify(issued.cert_id)
        assert not result.is_valid
        assert result.reason == REASON_REVOKED
        assert result.record.is_revoked
        stored = store.get_certificate(issued.cert_id)
        assert stored.status == CertificateStatus.REVOKED
        assert stored.verified_at is None

    def test_revocation_during_verification_without_stamping(self, store, issued):
        verifier = engine(store, RevokedMidwayLedger(store), stamp_verified=False)
        result = verifier.verify(issued.cert_id)
        assert not result.is_valid
        assert result.reason == REASON_REVOKED
