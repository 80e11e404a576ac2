"""
Record Store Interface
=======================

The pipeline talks to persistence only through this interface. A
concrete store must:

- serialize concurrent reads and writes per record,
- never expose a partially written Certificate,
- make ``create_certificate`` and ``update_certificate`` all-or-nothing.

Readers always receive copies; mutating a returned model never changes
the stored record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

from blockcred.errors import NotFoundError
from blockcred.schemas.certificate import Certificate
from blockcred.schemas.users import User

CertificateMutator = Callable[[Certificate], Optional[Certificate]]


class Store(ABC):
    """CRUD interface over users and certificates."""

    # ── Users ──────────────────────────────────────────────────────

    @abstractmethod
    def create_user(self, user: User) -> User:
        """Insert a user. Raises PersistenceError if the id is taken."""
        ...

    @abstractmethod
    def find_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_user_by_student_id(self, student_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def list_users(self) -> list[User]:
        ...

    def get_user(self, user_id: str) -> User:
        user = self.find_user(user_id)
        if user is None:
            raise NotFoundError(f"user {user_id} not found")
        return user

    def get_user_by_student_id(self, student_id: str) -> User:
        user = self.find_user_by_student_id(student_id)
        if user is None:
            raise NotFoundError(f"student {student_id} not found")
        return user

    # ── Certificates ───────────────────────────────────────────────

    @abstractmethod
    def create_certificate(self, cert: Certificate) -> Certificate:
        """
        Commit a new certificate atomically.

        Raises:
            CertIDCollisionError: a record with the same cert_id exists.
            PersistenceError: the write failed.
        """
        ...

    @abstractmethod
    def find_certificate(self, cert_id: str) -> Optional[Certificate]:
        ...

    @abstractmethod
    def list_certificates(self) -> list[Certificate]:
        """All certificates in commit order."""
        ...

    @abstractmethod
    def update_certificate(self, cert_id: str, mutate: CertificateMutator) -> Certificate:
        """
        Atomically read-modify-write one certificate.

        ``mutate`` receives a private copy and may change it in place or
        return a replacement. If it raises, nothing is written and the
        exception propagates.

        Raises:
            NotFoundError: no such certificate.
            PersistenceError: the write failed.
        """
        ...

    def get_certificate(self, cert_id: str) -> Certificate:
        cert = self.find_certificate(cert_id)
        if cert is None:
            raise NotFoundError(f"certificate {cert_id} not found")
        return cert

    def list_certificates_by_student(self, student_id: str) -> list[Certificate]:
        return [c for c in self.list_certificates() if c.student_id == student_id]

    def list_certificates_by_issuer(self, issuer_id: str) -> list[Certificate]:
        return [c for c in self.list_certificates() if c.issuer_id == issuer_id]

    def count_certificates(self) -> int:
        return len(self.list_certificates())

    def close(self) -> None:
        """Release resources. Default: nothing to do."""
