"""
Issuance Orchestrator
======================

The issuance saga. Coordinates the record store, the content store,
the wallet directory and the ledger to turn an IssueCertificateRequest
into a persisted Certificate.

Steps:
    1. Load the student                        (NotFoundError)
    2. Load the issuer, check the gate         (NotFoundError, PermissionDeniedError)
    3. File hash, metadata map, metadata hash  (MetadataSerializationError)
    4. CertID; reject if already stored        (CertIDCollisionError)
    5. Upload the artifact                     (UpstreamError)
    6. Resolve student and issuer wallets      (never fatal)
    7. Anchor on the ledger; one retry with a
       minimal record                          (UpstreamError)
    8. Persist the certificate                 (PersistenceError)

Steps 1-4 have no external side effects. A failure in step 7 or 8
leaves the content pin (and in step 8 the ledger transaction) orphaned;
there is no compensation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from blockcred.content.base import ContentStore
from blockcred.errors import (
    BlockCredError,
    CertIDCollisionError,
    PermissionDeniedError,
    UpstreamError,
    ValidationError,
)
from blockcred.hashing import file_digest, metadata_digest
from blockcred.ledger.base import LedgerClient
from blockcred.permissions import PermissionGate
from blockcred.schemas.certificate import Certificate, IssueCertificateRequest
from blockcred.schemas.ledger import ContractTransaction, OnChainRecord
from blockcred.schemas.users import User
from blockcred.store.base import Store
from blockcred.utils import short_hash, to_rfc3339, utc_now
from blockcred.wallets import ROLE_ISSUER, ROLE_STUDENT, WalletDirectory

logger = logging.getLogger("blockcred.issuance")


class IssuanceOrchestrator:
    """
    Runs the issuance saga.

    Args:
        store: Record store (users and certificates).
        content_store: Artifact pinning service.
        ledger: Ledger client.
        wallets: Wallet directory (shares the ledger client).
        permission_gate: Answers "may this issuer issue this type?".
        clock: Returns the current UTC time; injectable for tests.
        institution: Stamped on metadata when the request leaves it empty.
    """

    def __init__(
        self,
        store: Store,
        content_store: ContentStore,
        ledger: LedgerClient,
        wallets: WalletDirectory,
        permission_gate: PermissionGate,
        clock: Callable[[], datetime] = utc_now,
        institution: str = "",
    ):
        self.store = store
        self.content_store = content_store
        self.ledger = ledger
        self.wallets = wallets
        self.permission_gate = permission_gate
        self.clock = clock
        self.institution = institution

    def _authorize(self, request: IssueCertificateRequest, issuer_id: str) -> tuple[User, User]:
        student = self.store.get_user_by_student_id(request.student_id)
        issuer = self.store.get_user(issuer_id)
        if not self.permission_gate.can_issue(issuer, request.cert_type):
            raise PermissionDeniedError(
                f"{issuer.role.value} {issuer_id} may not issue {request.cert_type.value} certificates"
            )
        return student, issuer

    @staticmethod
    def _metadata_map(
        request: IssueCertificateRequest,
        student: User,
        issuer: User,
        issued_at: datetime,
    ) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "student_id": request.student_id,
            "student_name": student.name,
            "issuer_id": issuer.id,
            "issuer_name": issuer.name,
            "cert_type": request.cert_type.value,
            "issued_at": to_rfc3339(issued_at),
        }
        metadata.update(request.metadata.additional_data)
        return metadata

    def _anchor(self, record: OnChainRecord, content_cid: str) -> ContractTransaction:
        try:
            return self.ledger.issue_full(record, content_cid)
        except BlockCredError as e:
            logger.warning(
                f"Full ledger issuance failed for {short_hash(record.cert_id)}: {e}; "
                f"retrying with minimal record"
            )
        try:
            return self.ledger.issue_simple(record.cert_id, content_cid, record.cert_type)
        except BlockCredError as e:
            raise UpstreamError(
                f"ledger issuance failed for {record.cert_id} (content {content_cid} orphaned): {e}"
            ) from e

    def issue(self, request: IssueCertificateRequest, issuer_id: str) -> Certificate:
        """
        Issue a certificate and return the persisted record.

        Raises:
            ValidationError: unusable request, bad metadata or CertID collision.
            NotFoundError: unknown student or issuer.
            PermissionDeniedError: the issuer may not issue this type.
            UpstreamError: content store or ledger failure.
            PersistenceError: the final commit failed.
        """
        problems = request.problems()
        if problems:
            raise ValidationError("; ".join(problems))

        student, issuer = self._authorize(request, issuer_id)

        issued_at = self.clock()
        file_hash = file_digest(request.file_data)
        metadata_map = self._metadata_map(request, student, issuer, issued_at)
        metadata_hash = metadata_digest(metadata_map)

        cert_id = self.ledger.compute_cert_id(file_hash, request.student_id, issued_at)
        if self.store.find_certificate(cert_id) is not None:
            raise CertIDCollisionError(cert_id)

        logger.info(
            f"Issuing {request.cert_type.value} {short_hash(cert_id)} "
            f"for {request.student_id} by {issuer_id}"
        )

        content_cid = self.content_store.upload(request.file_data, request.file_name, metadata_map)

        student_wallet = self.wallets.resolve(request.student_id, ROLE_STUDENT)
        issuer_wallet = self.wallets.resolve(issuer_id, ROLE_ISSUER)

        record = OnChainRecord(
            cert_id=cert_id,
            student_id=request.student_id,
            credential_hash=file_hash,
            metadata_hash=metadata_hash,
            issuer_address=issuer_wallet,
            student_wallet=student_wallet,
            cert_type=request.cert_type,
            timestamp=int(issued_at.timestamp()),
        )
        tx = self._anchor(record, content_cid)
        if tx.synthesized:
            logger.info(f"{short_hash(cert_id)} anchored with a synthesized transaction")
        elif not tx.confirmed:
            logger.warning(f"{short_hash(cert_id)} submitted as {tx.tx_hash} but not yet mined")

        metadata = request.metadata.model_copy(deep=True)
        metadata.student_name = metadata.student_name or student.name
        metadata.student_email = metadata.student_email or student.email
        metadata.issuer_name = metadata.issuer_name or issuer.name
        metadata.issuer_role = metadata.issuer_role or issuer.role
        metadata.institution = metadata.institution or issuer.institution or self.institution
        metadata.additional_data.update({
            "metadata_hash": metadata_hash,
            "student_wallet": student_wallet,
            "issuer_wallet": issuer_wallet,
        })

        certificate = Certificate(
            cert_id=cert_id,
            student_id=request.student_id,
            issuer_id=issuer_id,
            cert_type=request.cert_type,
            file_hash=file_hash,
            content_cid=content_cid,
            content_url=self.content_store.file_url(content_cid),
            tx_hash=tx.tx_hash,
            block_number=tx.block_number,
            issued_at=issued_at,
            metadata=metadata,
            created_at=issued_at,
            updated_at=issued_at,
        )

        try:
            stored = self.store.create_certificate(certificate)
        except BlockCredError as e:
            logger.error(
                f"Commit of {short_hash(cert_id)} failed; content {content_cid} "
                f"and transaction {tx.tx_hash} are orphaned: {e}"
            )
            raise

        logger.info(f"Issued {short_hash(cert_id)} (tx {tx.tx_hash[:18]}..., block {tx.block_number})")
        return stored
