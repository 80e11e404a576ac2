"""
In-process ledger.

A thread-safe registry standing in for the contract: issued records,
wallet mappings and revocations live in dicts, and every write mines a
new block. Used for development, tests and the CLI.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from blockcred.errors import NotFoundError
from blockcred.ledger.base import LedgerClient
from blockcred.schemas.certificate import CertType
from blockcred.schemas.ledger import ContractTransaction, OnChainRecord
from blockcred.utils import sha256_hex, utc_now

logger = logging.getLogger("blockcred.ledger.mock")


class MockLedgerClient(LedgerClient):
    """
    Args:
        start_block: Height of the chain before the first write.
        gas_used: Gas reported for every write.
    """

    name = "mock"

    def __init__(self, start_block: int = 0, gas_used: int = 200_000):
        self._lock = threading.RLock()
        self._height = start_block
        self._gas_used = gas_used
        self._records: dict[str, OnChainRecord] = {}
        self._wallets: dict[str, str] = {}
        self._revoked: set[str] = set()
        self._tx_count = 0

    def _next_block(self) -> int:
        with self._lock:
            self._height += 1
            return self._height

    def _transaction(self, cert_id: str) -> ContractTransaction:
        with self._lock:
            self._tx_count += 1
            nonce = self._tx_count
        return ContractTransaction(
            tx_hash="0x" + sha256_hex(f"{cert_id}:{nonce}"),
            block_number=self._next_block(),
            gas_used=self._gas_used,
        )

    def issue_simple(
        self, cert_id: str, content_cid: str, cert_type: CertType
    ) -> ContractTransaction:
        record = OnChainRecord(
            cert_id=cert_id,
            cert_type=cert_type,
            timestamp=int(utc_now().timestamp()),
        )
        return self.issue_full(record, content_cid)

    def issue_full(self, record: OnChainRecord, content_cid: str) -> ContractTransaction:
        stored = record.model_copy(update={"content_cid": content_cid})
        with self._lock:
            self._records[record.cert_id] = stored
        tx = self._transaction(record.cert_id)
        logger.info(f"[{self.name}] anchored {record.cert_id[:12]}... in block {tx.block_number}")
        return tx

    def verify(self, cert_id: str) -> bool:
        with self._lock:
            return cert_id in self._records and cert_id not in self._revoked

    def fetch_record(self, cert_id: str) -> OnChainRecord:
        with self._lock:
            record = self._records.get(cert_id)
            revoked = cert_id in self._revoked
        if record is None:
            raise NotFoundError(f"certificate {cert_id} not on ledger")
        return record.model_copy(update={"revoked": revoked})

    def register_wallet(self, identity_id: str, address: str) -> None:
        with self._lock:
            self._wallets[identity_id] = address
        logger.debug(f"[{self.name}] wallet {identity_id} -> {address}")

    def fetch_wallet(self, identity_id: str) -> Optional[str]:
        with self._lock:
            return self._wallets.get(identity_id)

    def revoke(self, cert_id: str) -> None:
        with self._lock:
            self._revoked.add(cert_id)
        self._next_block()
        logger.info(f"[{self.name}] revoked {cert_id[:12]}...")

    def block_number(self) -> int:
        with self._lock:
            return self._height

    @property
    def transaction_count(self) -> int:
        with self._lock:
            return self._tx_count
