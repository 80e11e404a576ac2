"""
Ledger Schemas
===============

Payloads exchanged with the ledger: the record anchored per issuance,
the result of a ledger write, receipts, wallet mappings and the
JSON-RPC 2.0 envelope.

An OnChainRecord is built fresh for each issuance and is not stored
off-chain; only its two hashes survive in Certificate.metadata.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from blockcred.schemas.certificate import CertType

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_GAS_PRICE_WEI = "20000000000"  # 20 gwei


class OnChainRecord(BaseModel):
    """
    Integrity proof anchored on the ledger for one certificate.

    - credential_hash: SHA-256 of the artifact (tamper detection)
    - metadata_hash:   SHA-256 of the canonical metadata (prevents edits)
    - issuer_address:  trust of authority
    - timestamp:       unix seconds, immutable proof of time
    - student_wallet:  persistent academic identity
    """
    cert_id: str
    student_id: str = ""
    credential_hash: str = ""
    metadata_hash: str = ""
    issuer_address: str = ""
    student_wallet: str = ZERO_ADDRESS
    cert_type: CertType
    timestamp: int = Field(ge=0, description="Unix seconds")
    content_cid: str = ""
    revoked: bool = False


class ContractTransaction(BaseModel):
    """
    Result of a ledger write.

    ``synthesized`` marks transactions made up by a fallback path when the
    contract is missing or the node rejected the write. ``confirmed`` is
    False when receipt polling gave up; ``block_number`` is then 0.
    """
    tx_hash: str
    block_number: int = Field(default=0, ge=0)
    gas_used: int = 200_000
    gas_price: str = DEFAULT_GAS_PRICE_WEI
    synthesized: bool = False
    confirmed: bool = True


class TransactionReceipt(BaseModel):
    tx_hash: str
    block_number: int
    status: str = "0x1"

    @property
    def succeeded(self) -> bool:
        return self.status == "0x1"


class WalletMapping(BaseModel):
    """Identity → ledger address, either derived locally or read from the ledger."""
    identity_id: str
    role: str
    address: str
    registered: bool = False


# ── JSON-RPC 2.0 envelope ──────────────────────────────────────────

class JsonRpcRequest(BaseModel):
    jsonrpc: str = "2.0"
    method: str
    params: list[Any] = Field(default_factory=list)
    id: int = 1


class JsonRpcErrorObject(BaseModel):
    code: int = 0
    message: str = ""
    data: Optional[Any] = None


class JsonRpcResponse(BaseModel):
    jsonrpc: str = "2.0"
    result: Optional[Any] = None
    error: Optional[JsonRpcErrorObject] = None
    id: Optional[int] = None
