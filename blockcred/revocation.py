"""
Revocation handler: the store is authoritative, the ledger is a mirror.

The status flip is one atomic store update. The ledger call that
follows is best effort; any failure there is logged and the revocation
stands.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from blockcred.ledger.base import LedgerClient
from blockcred.schemas.certificate import Certificate
from blockcred.store.base import Store
from blockcred.utils import short_hash, utc_now

logger = logging.getLogger("blockcred.revocation")


class RevocationHandler:
    def __init__(
        self,
        store: Store,
        ledger: LedgerClient,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.ledger = ledger
        self.clock = clock

    def revoke(self, cert_id: str, reason: str) -> Certificate:
        """
        Revoke a certificate and return the updated record.

        Raises:
            NotFoundError: no such certificate.
            InvalidStatusTransitionError: already revoked.
            PersistenceError: the store write failed.
        """
        at = self.clock()
        updated = self.store.update_certificate(cert_id, lambda c: c.revoke(reason, at))
        logger.info(f"Revoked {short_hash(cert_id)}: {reason}")

        try:
            self.ledger.revoke(cert_id)
        except Exception as e:
            logger.warning(f"Ledger revocation of {short_hash(cert_id)} failed (store is revoked): {e}")

        return updated
