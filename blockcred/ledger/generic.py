"""
Generic JSON-RPC ledger.

Talks to any Ethereum-compatible node for chain height only; writes are
simulated and kept in the in-process registry it inherits. Useful against
a dev node with no contract deployed.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from blockcred.errors import UpstreamError
from blockcred.ledger.mock import MockLedgerClient
from blockcred.ledger.rpc import JsonRpcTransport, hex_to_int
from blockcred.schemas.ledger import ContractTransaction
from blockcred.utils import sha256_hex

logger = logging.getLogger("blockcred.ledger.generic")

MIN_CERT_ID_LENGTH = 10


class GenericRpcLedgerClient(MockLedgerClient):
    """
    Args:
        rpc_url: Node endpoint.
        gas_used: Gas reported for every simulated write.
        timeout: RPC timeout in seconds.
        transport: Optional httpx transport for tests.
    """

    name = "generic"

    def __init__(
        self,
        rpc_url: str,
        gas_used: int = 200_000,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(gas_used=gas_used)
        self.rpc = JsonRpcTransport(rpc_url, timeout=timeout, transport=transport)

    @classmethod
    def from_config(cls, config) -> "GenericRpcLedgerClient":
        return cls(
            rpc_url=config.rpc_url,
            gas_used=config.gas_limit,
            timeout=config.request_timeout,
        )

    def block_number(self) -> int:
        try:
            return hex_to_int(self.rpc.call("eth_blockNumber"))
        except UpstreamError as e:
            logger.warning(f"Node unreachable, using time-derived height: {e}")
            return int(time.time()) % 1_000_000

    def _transaction(self, cert_id: str) -> ContractTransaction:
        with self._lock:
            self._tx_count += 1
        return ContractTransaction(
            tx_hash="0x" + sha256_hex(f"{cert_id}{time.time_ns()}"),
            block_number=self.block_number(),
            gas_used=self._gas_used,
            synthesized=True,
        )

    def verify(self, cert_id: str) -> bool:
        if len(cert_id) < MIN_CERT_ID_LENGTH:
            return False
        with self._lock:
            return cert_id not in self._revoked

    def revoke(self, cert_id: str) -> None:
        with self._lock:
            self._revoked.add(cert_id)
        logger.info(f"[{self.name}] revoked {cert_id[:12]}... (simulated)")

    def close(self) -> None:
        self.rpc.close()
