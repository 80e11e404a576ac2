"""
BlockCred Data Schemas
=======================

Pydantic v2 models for the records that move through the pipeline:

1. Certificate         : off-chain credential record (+ metadata, request)
2. User                : students and issuers
3. OnChainRecord / ContractTransaction: ledger payloads
4. VerificationResult  : reconciliation outcome
"""

from blockcred.schemas.users import User, UserRole
from blockcred.schemas.certificate import (
    Certificate,
    CertificateMetadata,
    CertificateStatus,
    CertType,
    IssueCertificateRequest,
    can_transition,
)
from blockcred.schemas.ledger import (
    ContractTransaction,
    JsonRpcRequest,
    JsonRpcResponse,
    OnChainRecord,
    TransactionReceipt,
    WalletMapping,
)
from blockcred.schemas.verification import VerificationResult

__all__ = [
    # Users
    "User",
    "UserRole",
    # Certificate
    "Certificate",
    "CertificateMetadata",
    "CertificateStatus",
    "CertType",
    "IssueCertificateRequest",
    "can_transition",
    # Ledger
    "ContractTransaction",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "OnChainRecord",
    "TransactionReceipt",
    "WalletMapping",
    # Verification
    "VerificationResult",
]
