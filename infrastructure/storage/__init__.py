"""
Store Abstraction Layer
=======================

Key/value persistence for the marketplace collections (memory or Django cache).
"""

from .cache_adapter import CacheStore
from .factory import StoreFactory
from .interface import StoreException, StoreInterface
from .memory_adapter import MemoryStore

__all__ = [
    "StoreInterface",
    "StoreException",
    "MemoryStore",
    "CacheStore",
    "StoreFactory",
]
