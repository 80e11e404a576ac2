"""
Content Store Interface
========================

Abstract base class for content-addressed artifact stores. Every
backend (Pinata, local in-process) implements the same interface so the
issuance saga never knows which one it talks to.

The interface ensures:
- Input checks happen before any network I/O
- A CID is always returned for a successful upload
- Public URLs are built the same way for every backend

Upload is not idempotent: pinning identical bytes twice returns the
same CID but may create a second pin record. That is accepted.

Data Flow:
    (bytes, filename, metadata) → ContentStore → CID → gateway URL
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from blockcred.errors import ValidationError

logger = logging.getLogger("blockcred.content.base")


class PinResult(BaseModel):
    """Response of a pin request: ``{IpfsHash, PinSize, Timestamp}``."""
    cid: str = Field(description="Content identifier")
    pin_size: int = Field(default=0, ge=0, description="Pinned size in bytes")
    timestamp: str = Field(default="", description="Pin time reported by the service")


class ContentStore(ABC):
    """
    Abstract base class for content stores.

    Subclasses implement ``pin_file`` and ``pin_json``; the public
    ``upload`` validates input, pins, and logs the outcome.

    Args:
        gateway_url: Prefix joined with a CID to form the public URL.
    """

    def __init__(self, gateway_url: str):
        self.gateway_url = gateway_url

    @abstractmethod
    def pin_file(self, data: bytes, filename: str, metadata: dict[str, Any]) -> PinResult:
        """
        Pin a binary artifact.

        Raises:
            UpstreamError: the service is unreachable, unconfigured,
                or rejected the request.
        """
        ...

    @abstractmethod
    def pin_json(self, content: Any, name: str) -> str:
        """Pin a JSON document and return its CID."""
        ...

    def upload(self, data: bytes, filename: str, metadata: dict[str, Any]) -> str:
        """
        Upload an artifact and return its CID.

        Raises:
            ValidationError: empty data or missing filename.
            UpstreamError: the backend failed.
        """
        if not data:
            raise ValidationError("file data is empty")
        if not filename or not filename.strip():
            raise ValidationError("file name is required")

        result = self.pin_file(data, filename, metadata)
        logger.info(
            f"Pinned {filename} ({len(data)} bytes) as {result.cid} "
            f"(pin size {result.pin_size})"
        )
        return result.cid

    def file_url(self, cid: str) -> str:
        """Public gateway URL for ``cid``."""
        return self.gateway_url + cid

    def close(self) -> None:
        """Release backend resources. Default: nothing to do."""
