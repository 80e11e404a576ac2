"""
Hash Engine
============

Pure digest functions used by issuance:

    file_digest(bytes)            → hex SHA-256 of the artifact
    canonical_json(metadata)      → sorted, compact UTF-8 JSON
    metadata_digest(metadata)     → hex SHA-256 of the canonical JSON
    compute_cert_id(fh, sid, t)   → "0x" + SHA-256(fh + sid + RFC3339(t))

No I/O. The only failure is metadata that cannot be serialized, which
raises MetadataSerializationError and aborts issuance.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from blockcred.errors import MetadataSerializationError
from blockcred.utils import sha256_hex, to_rfc3339


def file_digest(data: bytes) -> str:
    """Hex SHA-256 of the raw artifact bytes."""
    return sha256_hex(bytes(data))


def canonical_json(metadata: Any) -> str:
    """
    Serialize metadata deterministically.

    Keys are sorted, separators compact and non-ASCII kept as-is, so the
    same mapping always yields the same bytes. Values must already be
    JSON-native (no ``default=`` fallback); NaN and infinity are
    rejected.

    Raises:
        MetadataSerializationError: if the value cannot be serialized.
    """
    try:
        return json.dumps(
            metadata,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise MetadataSerializationError(f"metadata is not canonicalizable: {e}") from e


def metadata_digest(metadata: Any) -> str:
    """Hex SHA-256 of the canonical JSON form of ``metadata``."""
    return sha256_hex(canonical_json(metadata))


def compute_cert_id(file_hash: str, student_id: str, issued_at: datetime) -> str:
    """
    Deterministic certificate identifier.

    Identical inputs always give the identical id; the timestamp is
    taken at second granularity in UTC.
    """
    return "0x" + sha256_hex(file_hash + student_id + to_rfc3339(issued_at))

