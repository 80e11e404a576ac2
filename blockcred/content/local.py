"""
Local Content Store
====================

In-process content-addressed store for development and tests. Bytes are
kept in memory and addressed by a CIDv1 (raw codec, sha2-256 multihash,
base32 multibase), so identical bytes always map to the same CID, as on
IPFS.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import threading
from typing import Any, Optional

from blockcred.content.base import ContentStore, PinResult
from blockcred.errors import NotFoundError
from blockcred.hashing import canonical_json
from blockcred.utils import to_rfc3339, utc_now

logger = logging.getLogger("blockcred.content.local")

# CIDv1 prefix: version 1, raw codec (0x55), sha2-256 (0x12), 32-byte digest (0x20)
_CID_V1_RAW_SHA256 = bytes([0x01, 0x55, 0x12, 0x20])


def compute_cid(data: bytes) -> str:
    """CIDv1 string for ``data`` (multibase ``b`` + lowercase base32, no padding)."""
    digest = hashlib.sha256(data).digest()
    encoded = base64.b32encode(_CID_V1_RAW_SHA256 + digest).decode("ascii")
    return "b" + encoded.lower().rstrip("=")


class LocalContentStore(ContentStore):
    """
    Thread-safe in-memory pinning service.

    Args:
        gateway_url: Prefix joined with a CID to form the public URL.
    """

    def __init__(self, gateway_url: str = "https://gateway.pinata.cloud/ipfs/"):
        super().__init__(gateway_url=gateway_url)
        self._lock = threading.Lock()
        self._objects: dict[str, bytes] = {}
        self._pins: list[dict[str, Any]] = []

    def pin_file(self, data: bytes, filename: str, metadata: dict[str, Any]) -> PinResult:
        cid = compute_cid(data)
        with self._lock:
            self._objects[cid] = bytes(data)
            self._pins.append({"cid": cid, "name": filename, "keyvalues": dict(metadata)})
        return PinResult(cid=cid, pin_size=len(data), timestamp=to_rfc3339(utc_now()))

    def pin_json(self, content: Any, name: str) -> str:
        payload = canonical_json(content).encode("utf-8")
        result = self.pin_file(payload, name, {})
        return result.cid

    def get(self, cid: str) -> bytes:
        """Return the bytes pinned under ``cid``."""
        with self._lock:
            data: Optional[bytes] = self._objects.get(cid)
        if data is None:
            raise NotFoundError(f"content {cid} not pinned")
        return data

    @property
    def pin_count(self) -> int:
        """Number of pin records, duplicates included."""
        with self._lock:
            return len(self._pins)
