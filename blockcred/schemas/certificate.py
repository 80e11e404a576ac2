"""
Certificate Schema
===================

The off-chain credential record. A Certificate is created once by the
issuance saga, is never deleted, and afterwards only changes along the
status lifecycle:

    issued ──► verified ──► revoked
       └──────────────────────┘

Revoked is terminal. Verification may refresh ``verified_at`` on an
already verified certificate; nothing moves a certificate back to
issued or out of revoked.

Data Flow:
    IssueCertificateRequest → IssuanceOrchestrator → Certificate → Store
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from blockcred.errors import InvalidStatusTransitionError
from blockcred.schemas.users import UserRole
from blockcred.utils import utc_now


class CertType(str, Enum):
    """Kinds of academic credential the institution issues."""
    MARKSHEET = "marksheet"
    DEGREE = "degree"
    BONAFIDE = "bonafide"
    NOC = "noc"
    PARTICIPATION = "participation"


class CertificateStatus(str, Enum):
    """
    Lifecycle state of an issued certificate.

    - ISSUED:   persisted after a successful issuance saga
    - VERIFIED: at least one successful verification has been recorded
    - REVOKED:  withdrawn by the institution; terminal
    """
    ISSUED = "issued"
    VERIFIED = "verified"
    REVOKED = "revoked"


_ALLOWED_TRANSITIONS: dict[CertificateStatus, frozenset[CertificateStatus]] = {
    CertificateStatus.ISSUED: frozenset({CertificateStatus.VERIFIED, CertificateStatus.REVOKED}),
    CertificateStatus.VERIFIED: frozenset({CertificateStatus.VERIFIED, CertificateStatus.REVOKED}),
    CertificateStatus.REVOKED: frozenset(),
}


def can_transition(current: CertificateStatus, target: CertificateStatus) -> bool:
    """Whether the lifecycle allows moving from ``current`` to ``target``."""
    return target in _ALLOWED_TRANSITIONS[current]


class CertificateMetadata(BaseModel):
    """
    Descriptive data attached to a certificate.

    Only ``additional_data`` is free-form; the issuance saga also records
    the metadata hash and both wallet addresses there.
    """
    student_name: str = Field(default="", description="Student display name")
    student_email: str = Field(default="", description="Student contact email")
    issuer_name: str = Field(default="", description="Issuer display name")
    issuer_role: Optional[UserRole] = Field(default=None, description="Role of the issuing user")
    institution: str = Field(default="", description="Issuing institution")
    department: str = Field(default="")
    course: str = Field(default="")
    semester: str = Field(default="")
    academic_year: str = Field(default="")
    grade: str = Field(default="")
    cgpa: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    valid_from: Optional[datetime] = Field(default=None)
    valid_until: Optional[datetime] = Field(default=None)
    description: str = Field(default="")
    additional_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form key/value data supplied by the issuer"
    )


class IssueCertificateRequest(BaseModel):
    """
    Input to the issuance saga.

    The request is deliberately permissive at construction time;
    ``problems()`` lists everything that makes it unusable so the
    orchestrator can reject it before any side effect.
    """
    student_id: str = Field(description="Institution student identifier")
    cert_type: CertType = Field(description="Kind of certificate to issue")
    file_data: bytes = Field(default=b"", repr=False, description="Raw certificate artifact")
    file_name: str = Field(default="", description="Artifact file name")
    metadata: CertificateMetadata = Field(default_factory=CertificateMetadata)

    def problems(self) -> list[str]:
        """Return human-readable reasons the request cannot be issued."""
        errors = []
        if not self.student_id.strip():
            errors.append("student_id is required")
        if not self.file_data:
            errors.append("file data is empty")
        if not self.file_name.strip():
            errors.append("file name is required")
        return errors


class Certificate(BaseModel):
    """
    Persisted credential record (the off-chain index entry).

    ``cert_id`` is deterministic: sha256(file_hash + student_id +
    RFC3339(issued_at)). ``file_hash`` equals the digest of the bytes
    pinned under ``content_cid``.
    """
    cert_id: str = Field(description="Deterministic certificate identifier (0x-hex)")
    student_id: str = Field(description="Student the certificate was issued to")
    issuer_id: str = Field(description="User id of the issuer")
    cert_type: CertType
    file_hash: str = Field(description="Hex SHA-256 of the artifact")
    content_cid: str = Field(description="Content identifier of the pinned artifact")
    content_url: str = Field(description="Public gateway URL of the artifact")
    tx_hash: str = Field(description="Ledger transaction hash (real or synthesized)")
    block_number: int = Field(default=0, ge=0, description="0 while unconfirmed")
    status: CertificateStatus = Field(default=CertificateStatus.ISSUED)
    issued_at: datetime
    verified_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    revoke_reason: Optional[str] = None
    metadata: CertificateMetadata = Field(default_factory=CertificateMetadata)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_revoked(self) -> bool:
        return self.status == CertificateStatus.REVOKED

    def _move_to(self, target: CertificateStatus) -> None:
        if not can_transition(self.status, target):
            raise InvalidStatusTransitionError(
                f"certificate {self.cert_id} cannot move from "
                f"{self.status.value} to {target.value}"
            )
        self.status = target

    def mark_verified(self, at: Optional[datetime] = None) -> "Certificate":
        """Record a successful verification. Returns self."""
        at = at or utc_now()
        self._move_to(CertificateStatus.VERIFIED)
        self.verified_at = at
        self.updated_at = at
        return self

    def revoke(self, reason: str, at: Optional[datetime] = None) -> "Certificate":
        """Move to the terminal revoked state. Returns self."""
        at = at or utc_now()
        self._move_to(CertificateStatus.REVOKED)
        self.revoked_at = at
        self.revoke_reason = reason
        self.updated_at = at
        return self
