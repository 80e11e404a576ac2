"""
PoA Ledger Client
==================

Anchors certificates in the registry contract on a proof-of-authority
network (Hyperledger Besu, Clique dev chains). The node holds the sender
account unlocked, so transactions go through ``eth_sendTransaction``.

Write path (issue_full):
    1. ABI-encode issueCertificate(...)
    2. nonce   ← eth_getTransactionCount(sender, "latest")
    3. price   ← eth_gasPrice
    4. tx hash ← eth_sendTransaction({from, to, data, gas, gasPrice, nonce, value})
    5. poll eth_getTransactionReceipt every block period, bounded attempts
       (exhausted ⇒ block 0, confirmed=False)

No contract address, or any failure in steps 1-5, produces a synthesized
transaction: ``tx_hash = 0x + sha256(cert_id + wall-clock ns)`` at the
current chain height. Only a failure to read the chain height escapes as
UpstreamError.

Wallet registration and revocation are submitted without waiting for a
receipt. Reads go through ``eth_call``.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

import httpx

from blockcred.errors import BlockCredError, NotFoundError, UpstreamError
from blockcred.ledger import abi
from blockcred.ledger.base import LedgerClient
from blockcred.ledger.rpc import JsonRpcTransport, hex_to_int, int_to_hex
from blockcred.retry import poll_until
from blockcred.schemas.certificate import CertType
from blockcred.schemas.ledger import (
    DEFAULT_GAS_PRICE_WEI,
    ZERO_ADDRESS,
    ContractTransaction,
    OnChainRecord,
    TransactionReceipt,
)
from blockcred.utils import sha256_hex, utc_now

logger = logging.getLogger("blockcred.ledger.poa")

DEFAULT_SENDER = "0x53b8be11aada878bbf830e426d5d3071c34facef"


class PoALedgerClient(LedgerClient):
    """
    Ledger client for a deployed registry contract.

    Args:
        rpc_url: Node endpoint.
        contract_address: Registry contract; empty runs in simulated mode.
        sender: Unlocked account used as ``from``.
        block_period: Seconds between receipt polls.
        receipt_attempts: Maximum receipt polls.
        gas_limit: ``gas`` sent with every transaction.
        timeout: RPC timeout in seconds.
        transport: Optional httpx transport for tests.
        sleep: Sleep function used by the receipt poll.
        cancel: Event that aborts an in-flight receipt poll.
    """

    name = "poa"

    def __init__(
        self,
        rpc_url: str,
        contract_address: str = "",
        sender: str = DEFAULT_SENDER,
        block_period: float = 5.0,
        receipt_attempts: int = 12,
        gas_limit: int = 200_000,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], Any] = time.sleep,
        cancel: Optional[threading.Event] = None,
    ):
        self.rpc = JsonRpcTransport(rpc_url, timeout=timeout, transport=transport)
        self.contract_address = contract_address
        self.sender = sender
        self.block_period = block_period
        self.receipt_attempts = receipt_attempts
        self.gas_limit = gas_limit
        self._sleep = sleep
        self.cancel = cancel or threading.Event()

        mode = f"contract {contract_address}" if contract_address else "simulated (no contract)"
        logger.info(f"PoA ledger client on {rpc_url}: {mode}")

    @classmethod
    def from_config(cls, config, **kwargs) -> "PoALedgerClient":
        """Build from a LedgerConfig."""
        return cls(
            rpc_url=config.rpc_url,
            contract_address=config.contract_address,
            sender=config.default_sender,
            block_period=config.block_period_seconds,
            receipt_attempts=config.receipt_max_attempts,
            gas_limit=config.gas_limit,
            timeout=config.request_timeout,
            **kwargs,
        )

    @property
    def has_contract(self) -> bool:
        return bool(self.contract_address)

    # ── RPC helpers ────────────────────────────────────────────

    def nonce(self) -> int:
        return hex_to_int(self.rpc.call("eth_getTransactionCount", [self.sender, "latest"]))

    def gas_price(self) -> int:
        return hex_to_int(self.rpc.call("eth_gasPrice"))

    def block_number(self) -> int:
        return hex_to_int(self.rpc.call("eth_blockNumber"))

    def _eth_call(self, data: str) -> Any:
        return self.rpc.call("eth_call", [{"to": self.contract_address, "data": data}, "latest"])

    def _send(self, data: str) -> tuple[str, int]:
        """Submit a contract transaction; returns (tx hash, gas price)."""
        nonce = self.nonce()
        price = self.gas_price()
        tx = {
            "from": self.sender,
            "to": self.contract_address,
            "data": data,
            "gas": int_to_hex(self.gas_limit),
            "gasPrice": int_to_hex(price),
            "nonce": int_to_hex(nonce),
            "value": "0x0",
        }
        tx_hash = self.rpc.call("eth_sendTransaction", [tx])
        if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
            raise UpstreamError(f"eth_sendTransaction returned {tx_hash!r}")
        return tx_hash, price

    def receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        """Mined receipt for ``tx_hash``, or None while pending."""
        result = self.rpc.call("eth_getTransactionReceipt", [tx_hash])
        if not result:
            return None
        return TransactionReceipt(
            tx_hash=tx_hash,
            block_number=hex_to_int(result.get("blockNumber", "0x0")),
            status=result.get("status", "0x1"),
        )

    # ── Writes ─────────────────────────────────────────────────

    def _synthesize(self, cert_id: str) -> ContractTransaction:
        tx_hash = "0x" + sha256_hex(f"{cert_id}{time.time_ns()}")
        height = self.block_number()
        logger.info(f"Synthesized transaction {tx_hash[:18]}... at block {height}")
        return ContractTransaction(
            tx_hash=tx_hash,
            block_number=height,
            gas_used=self.gas_limit,
            gas_price=DEFAULT_GAS_PRICE_WEI,
            synthesized=True,
        )

    def _issue_live(self, record: OnChainRecord, content_cid: str) -> ContractTransaction:
        data = abi.issue_certificate_call(record, content_cid)
        tx_hash, price = self._send(data)
        logger.info(f"Submitted issueCertificate for {record.cert_id[:12]}...: {tx_hash}")

        outcome = poll_until(
            lambda: self.receipt(tx_hash),
            interval=self.block_period,
            attempts=self.receipt_attempts,
            sleep=self._sleep,
            cancel=self.cancel,
            label=f"receipt {tx_hash[:10]}",
        )
        if outcome.value is None:
            logger.warning(
                f"No receipt for {tx_hash} after {outcome.attempts} attempts; "
                f"returning unconfirmed transaction"
            )
            return ContractTransaction(
                tx_hash=tx_hash,
                block_number=0,
                gas_used=self.gas_limit,
                gas_price=str(price),
                confirmed=False,
            )

        receipt = outcome.value
        if not receipt.succeeded:
            raise UpstreamError(f"transaction {tx_hash} reverted")
        return ContractTransaction(
            tx_hash=tx_hash,
            block_number=receipt.block_number,
            gas_used=self.gas_limit,
            gas_price=str(price),
        )

    def issue_full(self, record: OnChainRecord, content_cid: str) -> ContractTransaction:
        if not self.has_contract:
            return self._synthesize(record.cert_id)
        try:
            return self._issue_live(record, content_cid)
        except BlockCredError as e:
            logger.warning(f"Live issuance failed for {record.cert_id[:12]}...: {e}")
            return self._synthesize(record.cert_id)

    def issue_simple(
        self, cert_id: str, content_cid: str, cert_type: CertType
    ) -> ContractTransaction:
        record = OnChainRecord(
            cert_id=cert_id,
            cert_type=cert_type,
            timestamp=int(utc_now().timestamp()),
        )
        return self.issue_full(record, content_cid)

    def register_wallet(self, identity_id: str, address: str) -> None:
        if not self.has_contract:
            logger.info(f"Wallet mapping {identity_id} -> {address} (simulated)")
            return
        data = abi.encode_call(abi.REGISTER_STUDENT_WALLET, [identity_id, abi.checksum(address)])
        tx_hash, _ = self._send(data)
        logger.info(f"Submitted registerStudentWallet for {identity_id}: {tx_hash}")

    def revoke(self, cert_id: str) -> None:
        if not self.has_contract:
            logger.info(f"Revocation of {cert_id[:12]}... (simulated)")
            return
        data = abi.encode_call(abi.REVOKE_CERTIFICATE, [cert_id])
        tx_hash, _ = self._send(data)
        logger.info(f"Submitted revokeCertificate for {cert_id[:12]}...: {tx_hash}")

    # ── Reads ──────────────────────────────────────────────────

    def verify(self, cert_id: str) -> bool:
        if not self.has_contract:
            return True
        return abi.decode_bool(self._eth_call(abi.encode_call(abi.VERIFY_CERTIFICATE, [cert_id])))

    def fetch_record(self, cert_id: str) -> OnChainRecord:
        if not self.has_contract:
            raise NotFoundError(f"no contract configured; cannot read {cert_id}")
        result = self._eth_call(abi.encode_call(abi.GET_CERTIFICATE, [cert_id]))
        return abi.decode_certificate(result)

    def fetch_wallet(self, identity_id: str) -> Optional[str]:
        if not self.has_contract:
            return None
        result = self._eth_call(abi.encode_call(abi.GET_STUDENT_WALLET, [identity_id]))
        if result in (None, "0x", "0x0"):
            return None
        address = abi.decode_address(result)
        if address.lower() == ZERO_ADDRESS:
            return None
        return address

    def close(self) -> None:
        self.cancel.set()
        self.rpc.close()
