"""
Verification Result Schema
===========================

Output of the VerificationEngine. Verification never raises: every
outcome, including "not found" and ledger outages, is a result with
``is_valid=False`` and a reason.

Public shape (``to_public()``):
    {
      "is_valid": true,
      "cert_id": "0x…",
      "student_id": "…", "issuer_id": "…", "cert_type": "degree",
      "status": "verified", "issued_at": "…",
      "content_url": "…", "tx_hash": "0x…", "block_number": 42,
      "metadata": {…},
      "error_message": null
    }
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from blockcred.schemas.certificate import Certificate

REASON_VALID = "valid"
REASON_NOT_FOUND = "not found"
REASON_REVOKED = "revoked"
REASON_LEDGER_MISMATCH = "not confirmed on ledger"


class VerificationResult(BaseModel):
    """Reconciliation of the stored record with the ledger and its status."""
    is_valid: bool
    cert_id: str
    reason: str = Field(description="Short machine-friendly reason")
    error_message: Optional[str] = Field(
        default=None,
        description="Human-readable explanation when invalid"
    )
    record: Optional[Certificate] = Field(
        default=None,
        description="Stored certificate, when one exists"
    )

    def to_public(self) -> dict[str, Any]:
        """Render the externally published verification document."""
        out: dict[str, Any] = {"is_valid": self.is_valid, "cert_id": self.cert_id}
        if self.record is not None:
            rec = self.record.model_dump(mode="json")
            out.update({
                "student_id": rec["student_id"],
                "issuer_id": rec["issuer_id"],
                "cert_type": rec["cert_type"],
                "status": rec["status"],
                "issued_at": rec["issued_at"],
                "content_url": rec["content_url"],
                "tx_hash": rec["tx_hash"],
                "block_number": rec["block_number"],
                "metadata": rec["metadata"],
            })
        if self.error_message:
            out["error_message"] = self.error_message
        return out
