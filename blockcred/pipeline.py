"""
BlockCred Credential Pipeline
==============================

Composition root. Wires the record store, content store, ledger client,
wallet directory and permission gate into the three workflows:

    issue   → IssuanceOrchestrator
    verify  → VerificationEngine
    revoke  → RevocationHandler

The ledger variant and the content backend are chosen once, here, from
configuration. The store is always injected; when none is given an
empty in-memory store is used.

Usage:
    from blockcred.pipeline import CredentialPipeline

    pipeline = CredentialPipeline.from_config("configs/besu.yaml", store=my_store)
    cert = pipeline.issue(request, issuer_id="coe-1")
    result = pipeline.verify(cert.cert_id)
    print(result.to_public())
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from blockcred.config import BlockCredConfig, get_config
from blockcred.content import ContentStore, create_content_store
from blockcred.issuance import IssuanceOrchestrator
from blockcred.ledger import LedgerClient, create_ledger_client
from blockcred.permissions import PermissionGate, RolePermissionGate
from blockcred.revocation import RevocationHandler
from blockcred.schemas.certificate import Certificate, IssueCertificateRequest
from blockcred.schemas.verification import VerificationResult
from blockcred.store import MemoryStore, Store
from blockcred.utils import utc_now
from blockcred.verification import VerificationEngine
from blockcred.wallets import WalletDirectory

logger = logging.getLogger("blockcred.pipeline")


class CredentialPipeline:
    """
    Issue, verify, revoke and query certificates.

    Args:
        config: BlockCred configuration.
        store: Record store; defaults to an empty MemoryStore.
        content_store: Overrides the configured content backend.
        ledger: Overrides the configured ledger variant.
        permission_gate: Overrides the default role table.
        clock: Current UTC time source shared by all workflows.
    """

    def __init__(
        self,
        config: Optional[BlockCredConfig] = None,
        store: Optional[Store] = None,
        content_store: Optional[ContentStore] = None,
        ledger: Optional[LedgerClient] = None,
        permission_gate: Optional[PermissionGate] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config or get_config()
        self.store = store if store is not None else MemoryStore()
        self.content_store = content_store or create_content_store(self.config.content)
        self.ledger = ledger or create_ledger_client(self.config.ledger)
        self.permission_gate = permission_gate or RolePermissionGate()

        self.wallets = WalletDirectory(self.ledger, register=self.config.issuance.register_wallets)
        self.issuer = IssuanceOrchestrator(
            store=self.store,
            content_store=self.content_store,
            ledger=self.ledger,
            wallets=self.wallets,
            permission_gate=self.permission_gate,
            clock=clock,
            institution=self.config.institution,
        )
        self.verifier = VerificationEngine(
            store=self.store,
            ledger=self.ledger,
            stamp_verified=self.config.issuance.stamp_verified_at,
            clock=clock,
        )
        self.revoker = RevocationHandler(store=self.store, ledger=self.ledger, clock=clock)

        logger.info(
            f"Pipeline ready: ledger={self.ledger!r}, "
            f"content={self.content_store.__class__.__name__}, "
            f"config={self.config.config_hash()}"
        )

    @classmethod
    def from_config(
        cls, config_path: Optional[str] = None, store: Optional[Store] = None
    ) -> "CredentialPipeline":
        """Create pipeline from config file or environment."""
        return cls(get_config(config_path), store=store)

    # ── Workflows ──────────────────────────────────────────────────

    def issue(self, request: IssueCertificateRequest, issuer_id: str) -> Certificate:
        return self.issuer.issue(request, issuer_id)

    def verify(self, cert_id: str) -> VerificationResult:
        return self.verifier.verify(cert_id)

    def revoke(self, cert_id: str, reason: str) -> Certificate:
        return self.revoker.revoke(cert_id, reason)

    # ── Queries ────────────────────────────────────────────────────

    def get_certificate(self, cert_id: str) -> Certificate:
        return self.store.get_certificate(cert_id)

    def list_certificates(self) -> list[Certificate]:
        return self.store.list_certificates()

    def list_student_certificates(self, student_id: str) -> list[Certificate]:
        return self.store.list_certificates_by_student(student_id)

    def list_issued_by(self, issuer_id: str) -> list[Certificate]:
        return self.store.list_certificates_by_issuer(issuer_id)

    def close(self) -> None:
        self.ledger.close()
        self.content_store.close()
        self.store.close()

    def __enter__(self) -> "CredentialPipeline":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
