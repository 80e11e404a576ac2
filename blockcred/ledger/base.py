"""
Ledger Client Interface
========================

Abstract base class for every ledger backend. The issuance saga, the
wallet directory, verification and revocation all talk to a
``LedgerClient`` and never to a concrete variant.

Variants:
    - PoALedgerClient:         live contract on a PoA (Besu-style) network
    - GenericRpcLedgerClient:  simulated writes, chain height from a node
    - MockLedgerClient:        fully in-process registry

The interface ensures:
- Every variant implements every capability (no "not supported")
- Writes return a ContractTransaction
- A wallet miss is ``None``; errors are raised, never returned
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from blockcred import hashing
from blockcred.schemas.certificate import CertType
from blockcred.schemas.ledger import ContractTransaction, OnChainRecord

logger = logging.getLogger("blockcred.ledger.base")


class LedgerClient(ABC):
    """
    Abstract base class for ledger clients.

    Subclasses must implement the seven capabilities below plus
    ``block_number``. ``compute_cert_id``, ``certificate_info`` and
    ``close`` have shared implementations.
    """

    name: str = "ledger"

    @abstractmethod
    def issue_simple(
        self, cert_id: str, content_cid: str, cert_type: CertType
    ) -> ContractTransaction:
        """
        Anchor a certificate with a minimal record (no hashes, no wallets).

        Used as the single retry when ``issue_full`` fails.
        """
        ...

    @abstractmethod
    def issue_full(self, record: OnChainRecord, content_cid: str) -> ContractTransaction:
        """
        Anchor the full integrity proof of a certificate.

        Raises:
            UpstreamError: the ledger rejected or could not take the write.
        """
        ...

    @abstractmethod
    def verify(self, cert_id: str) -> bool:
        """True when the ledger recognises ``cert_id`` as valid."""
        ...

    @abstractmethod
    def fetch_record(self, cert_id: str) -> OnChainRecord:
        """Read back the anchored record for ``cert_id``."""
        ...

    @abstractmethod
    def register_wallet(self, identity_id: str, address: str) -> None:
        ...

    @abstractmethod
    def fetch_wallet(self, identity_id: str) -> Optional[str]:
        """Registered wallet for ``identity_id``, or None when unmapped."""
        ...

    @abstractmethod
    def revoke(self, cert_id: str) -> None:
        ...

    @abstractmethod
    def block_number(self) -> int:
        """Current chain height."""
        ...

    def compute_cert_id(self, file_hash: str, student_id: str, issued_at: datetime) -> str:
        return hashing.compute_cert_id(file_hash, student_id, issued_at)

    def certificate_info(self, cert_id: str) -> dict[str, Any]:
        """Flat view of the on-chain record, as shown by status endpoints."""
        record = self.fetch_record(cert_id)
        return {
            "cert_id": record.cert_id,
            "credential_hash": record.credential_hash,
            "metadata_hash": record.metadata_hash,
            "issuer_address": record.issuer_address,
            "student_wallet": record.student_wallet,
            "cert_type": record.cert_type.value,
            "timestamp": record.timestamp,
            "is_valid": not record.revoked,
            "ledger": self.name,
        }

    def close(self) -> None:
        """Release client resources. Default: nothing to do."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
