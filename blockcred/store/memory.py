"""
In-Memory Record Store
=======================

Thread-safe Store used for development, tests and the CLI. All records
live behind one re-entrant lock; every read returns a deep copy and
every write replaces a record in a single step, so a concurrent reader
sees either the old record or the new one and nothing in between.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from blockcred.errors import CertIDCollisionError, NotFoundError, PersistenceError
from blockcred.schemas.certificate import Certificate
from blockcred.schemas.users import User
from blockcred.store.base import CertificateMutator, Store

logger = logging.getLogger("blockcred.store.memory")


class MemoryStore(Store):
    """
    Mutex-guarded store of users and certificates.

    Args:
        users: Optional users to seed the store with.
    """

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._lock = threading.RLock()
        self._users: dict[str, User] = {}
        self._certificates: dict[str, Certificate] = {}  # insertion order = commit order
        for user in users or []:
            self.create_user(user)

    # ── Users ──────────────────────────────────────────────────────

    def create_user(self, user: User) -> User:
        with self._lock:
            if user.id in self._users:
                raise PersistenceError(f"user {user.id} already exists")
            if user.student_id and self._find_student(user.student_id) is not None:
                raise PersistenceError(f"student id {user.student_id} already registered")
            self._users[user.id] = user.model_copy(deep=True)
            return user.model_copy(deep=True)

    def find_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy(deep=True) if user else None

    def find_user_by_student_id(self, student_id: str) -> Optional[User]:
        with self._lock:
            user = self._find_student(student_id)
            return user.model_copy(deep=True) if user else None

    def list_users(self) -> list[User]:
        with self._lock:
            return [u.model_copy(deep=True) for u in self._users.values()]

    def _find_student(self, student_id: str) -> Optional[User]:
        for user in self._users.values():
            if user.student_id == student_id:
                return user
        return None

    # ── Certificates ───────────────────────────────────────────────

    def create_certificate(self, cert: Certificate) -> Certificate:
        with self._lock:
            if cert.cert_id in self._certificates:
                raise CertIDCollisionError(cert.cert_id)
            stored = cert.model_copy(deep=True)
            self._certificates[cert.cert_id] = stored
            logger.debug(f"Committed certificate {cert.cert_id}")
            return stored.model_copy(deep=True)

    def find_certificate(self, cert_id: str) -> Optional[Certificate]:
        with self._lock:
            cert = self._certificates.get(cert_id)
            return cert.model_copy(deep=True) if cert else None

    def list_certificates(self) -> list[Certificate]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._certificates.values()]

    def count_certificates(self) -> int:
        with self._lock:
            return len(self._certificates)

    def update_certificate(self, cert_id: str, mutate: CertificateMutator) -> Certificate:
        with self._lock:
            current = self._certificates.get(cert_id)
            if current is None:
                raise NotFoundError(f"certificate {cert_id} not found")
            working = current.model_copy(deep=True)
            replacement = mutate(working)
            updated = replacement if replacement is not None else working
            if updated.cert_id != cert_id:
                raise PersistenceError("cert_id of a stored certificate cannot change")
            self._certificates[cert_id] = updated.model_copy(deep=True)
            return updated.model_copy(deep=True)
