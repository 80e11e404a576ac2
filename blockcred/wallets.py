"""
Wallet Directory
=================

Maps institution identities (students, issuers) to ledger addresses.

Resolution order:
    1. the mapping registered on the ledger, if any
    2. a deterministic derivation: "0x" + sha256(role + "_wallet_" + id)[:20 bytes]

A derived address is then registered on the ledger, best effort.
Resolution never fails: any ledger error is logged and the derived
address is used.
"""

from __future__ import annotations

import logging

from blockcred.ledger.base import LedgerClient
from blockcred.schemas.ledger import WalletMapping
from blockcred.utils import sha256_hex

logger = logging.getLogger("blockcred.wallets")

ROLE_STUDENT = "student"
ROLE_ISSUER = "issuer"


class WalletDirectory:
    """
    Args:
        ledger: Ledger client used for lookup and registration.
        register: Whether derived addresses are registered on the ledger.
    """

    def __init__(self, ledger: LedgerClient, register: bool = True):
        self.ledger = ledger
        self.register = register

    @staticmethod
    def derive(identity_id: str, role: str) -> str:
        """Deterministic address for ``identity_id`` in ``role``. Pure."""
        return "0x" + sha256_hex(f"{role}_wallet_{identity_id}")[:40]

    def resolve_mapping(self, identity_id: str, role: str) -> WalletMapping:
        try:
            existing = self.ledger.fetch_wallet(identity_id)
        except Exception as e:
            logger.warning(f"Wallet lookup for {role} {identity_id} failed: {e}")
            existing = None

        if existing:
            return WalletMapping(identity_id=identity_id, role=role, address=existing, registered=True)

        address = self.derive(identity_id, role)
        registered = False
        if self.register:
            try:
                self.ledger.register_wallet(identity_id, address)
                registered = True
            except Exception as e:
                logger.warning(f"Wallet registration for {role} {identity_id} failed: {e}")

        return WalletMapping(identity_id=identity_id, role=role, address=address, registered=registered)

    def resolve(self, identity_id: str, role: str) -> str:
        """Ledger address for ``identity_id``; never raises on ledger errors."""
        return self.resolve_mapping(identity_id, role).address
