"""
BlockCred Content Store
========================

Content-addressed storage for certificate artifacts.

Components:
    - base.py:   Abstract content store interface
    - pinata.py: Pinata IPFS pinning service (HTTPS)
    - local.py:  In-process store for development and tests
"""

from blockcred.content.base import ContentStore, PinResult
from blockcred.content.local import LocalContentStore, compute_cid
from blockcred.content.pinata import PinataContentStore

__all__ = [
    "ContentStore",
    "PinResult",
    "LocalContentStore",
    "PinataContentStore",
    "compute_cid",
]


def create_content_store(config) -> ContentStore:
    """Build the configured content store from a ContentStoreConfig."""
    from blockcred.config import ContentBackend

    if config.backend == ContentBackend.PINATA:
        return PinataContentStore.from_config(config)
    return LocalContentStore(gateway_url=config.gateway_url)
