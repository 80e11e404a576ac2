"""
BlockCred: Ledger-Anchored Academic Credentials
=================================================

BlockCred issues tamper-evident academic certificates: the artifact is
hashed and pinned to a content-addressed store, an integrity proof is
anchored on a permissioned ledger, and a mutable off-chain record is
kept for querying and revocation.

Architecture Overview:
    Request → Authorize → Hash → Pin → Wallets → Anchor → Persist
    CertID  → Load record → Status check → Ledger check → Result

Modules:
    - hashing:      File / metadata digests and deterministic CertIDs
    - wallets:      Identity → ledger address directory
    - content:      Content store clients (Pinata, local)
    - ledger:       Ledger clients (PoA contract, generic JSON-RPC, mock)
    - issuance:     Issuance saga
    - verification: Record / ledger reconciliation
    - revocation:   Store-first revocation with a ledger mirror
    - store:        Record store interface and in-memory store
    - pipeline:     Composition root
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
