"""
BlockCred Record Store
=======================

Components:
    - base.py:   Store interface consumed by the pipeline
    - memory.py: Thread-safe in-memory implementation
"""

from blockcred.store.base import Store
from blockcred.store.memory import MemoryStore

__all__ = ["Store", "MemoryStore"]
