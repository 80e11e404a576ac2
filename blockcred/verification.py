"""
Verification Engine
====================

Reconciles the stored record of a certificate with the ledger and its
lifecycle status. Never raises; every outcome is a VerificationResult.

Decision order:
    missing record        → invalid, "not found"
    status revoked        → invalid, "revoked" (the ledger is not consulted)
    ledger error          → invalid, reason carries the upstream error
    ledger says unknown   → invalid, "not confirmed on ledger"
    otherwise             → valid

A valid result optionally stamps ``verified_at`` (issued → verified).
The stored status is read again after the ledger call; a revocation
that committed in between makes the result invalid. Other stamping
failures are logged and do not change the result.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from blockcred.errors import BlockCredError, InvalidStatusTransitionError
from blockcred.ledger.base import LedgerClient
from blockcred.schemas.certificate import Certificate
from blockcred.schemas.verification import (
    REASON_LEDGER_MISMATCH,
    REASON_NOT_FOUND,
    REASON_REVOKED,
    REASON_VALID,
    VerificationResult,
)
from blockcred.store.base import Store
from blockcred.utils import short_hash, utc_now

logger = logging.getLogger("blockcred.verification")


class VerificationEngine:
    """
    Args:
        store: Record store.
        ledger: Ledger client.
        stamp_verified: Record successful verifications on the certificate.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        store: Store,
        ledger: LedgerClient,
        stamp_verified: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.ledger = ledger
        self.stamp_verified = stamp_verified
        self.clock = clock

    def _refresh(self, cert: Certificate) -> Certificate:
        try:
            current = self.store.find_certificate(cert.cert_id)
        except BlockCredError as e:
            logger.warning(f"Could not re-read {short_hash(cert.cert_id)}: {e}")
            return cert
        return current or cert

    def _stamp(self, cert: Certificate) -> Certificate:
        at = self.clock()
        try:
            return self.store.update_certificate(cert.cert_id, lambda c: c.mark_verified(at))
        except InvalidStatusTransitionError:
            # revoked since it was read
            return self._refresh(cert)
        except BlockCredError as e:
            logger.warning(f"Could not record verification of {short_hash(cert.cert_id)}: {e}")
            return cert

    @staticmethod
    def _revoked(cert: Certificate) -> VerificationResult:
        return VerificationResult(
            is_valid=False,
            cert_id=cert.cert_id,
            reason=REASON_REVOKED,
            error_message=f"Certificate has been revoked: {cert.revoke_reason or 'no reason given'}",
            record=cert,
        )

    def verify(self, cert_id: str) -> VerificationResult:
        try:
            cert = self.store.find_certificate(cert_id)
        except BlockCredError as e:
            logger.error(f"Record lookup for {short_hash(cert_id)} failed: {e}")
            return VerificationResult(
                is_valid=False, cert_id=cert_id, reason="store error", error_message=str(e)
            )

        if cert is None:
            return VerificationResult(
                is_valid=False,
                cert_id=cert_id,
                reason=REASON_NOT_FOUND,
                error_message="Certificate not found",
            )

        if cert.is_revoked:
            return self._revoked(cert)

        try:
            ledger_ok = self.ledger.verify(cert_id)
        except Exception as e:
            logger.warning(f"Ledger verification of {short_hash(cert_id)} failed: {e}")
            return VerificationResult(
                is_valid=False,
                cert_id=cert_id,
                reason=f"ledger error: {e}",
                error_message=f"Blockchain verification failed: {e}",
                record=cert,
            )

        if not ledger_ok:
            return VerificationResult(
                is_valid=False,
                cert_id=cert_id,
                reason=REASON_LEDGER_MISMATCH,
                error_message="Certificate not found on blockchain",
                record=cert,
            )

        cert = self._stamp(cert) if self.stamp_verified else self._refresh(cert)
        if cert.is_revoked:
            logger.info(f"{short_hash(cert_id)} was revoked during verification")
            return self._revoked(cert)

        logger.info(f"Verified {short_hash(cert_id)}")
        return VerificationResult(is_valid=True, cert_id=cert_id, reason=REASON_VALID, record=cert)
