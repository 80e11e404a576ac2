"""
BlockCred Error Taxonomy
=========================

Every failure the pipeline surfaces to a caller is one of these.

    ValidationError        malformed or missing input
    NotFoundError          student / issuer / certificate absent
    PermissionDeniedError  issuer lacks the capability for a cert type
    UpstreamError          content store or ledger unreachable / rejecting
    PersistenceError       record store write failed

Validation, not-found and permission errors are raised before any
external side effect. Upstream and persistence errors may leave
orphaned content pins or ledger transactions behind.
"""

from __future__ import annotations


class BlockCredError(Exception):
    """Base class for all BlockCred errors."""


class ValidationError(BlockCredError):
    """Malformed or missing input."""


class MetadataSerializationError(ValidationError):
    """Certificate metadata cannot be rendered as canonical JSON."""


class InvalidStatusTransitionError(ValidationError):
    """A status change that the certificate lifecycle does not allow."""


class CertIDCollisionError(ValidationError):
    """A certificate with the computed CertID already exists."""

    def __init__(self, cert_id: str):
        super().__init__(f"certificate {cert_id} already exists")
        self.cert_id = cert_id


class NotFoundError(BlockCredError):
    """A student, issuer or certificate does not exist."""


class PermissionDeniedError(BlockCredError):
    """The issuer is not allowed to issue the requested certificate type."""


class UpstreamError(BlockCredError):
    """The content store or the ledger failed or rejected a request."""


class RPCError(UpstreamError):
    """A JSON-RPC error object returned by the ledger node."""

    def __init__(self, method: str, code: int, message: str):
        super().__init__(f"RPC error in {method} ({code}): {message}")
        self.method = method
        self.code = code
        self.rpc_message = message


class PersistenceError(BlockCredError):
    """The record store could not complete a write."""
