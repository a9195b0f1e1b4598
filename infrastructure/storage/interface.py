"""
Store Interface
===============

Abstract base class defining the contract for the marketplace key-value store.

Every value is a JSON-serializable structure (lists of record dicts, a cart
list, a session dict). Collections are read, modified in memory and written
back whole, so mutating services wrap their read-modify-write cycle in
``transaction()``.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator


class StoreInterface(ABC):
    """
    Abstract interface for marketplace persistence.

    Concrete implementations:
        - MemoryStore: process-local dict, used by tests and scripts
        - CacheStore: Django cache framework (LocMem or Redis)
    """

    def __init__(self):
        self._lock = threading.RLock()

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Read the value stored under ``key``.

        Args:
            key: Store key (see infrastructure.storage.keys)
            default: Returned when the key is absent

        Returns:
            A fresh deserialized copy of the value; mutating it does not
            affect the store until ``set`` is called.

        Raises:
            StoreException: If the backend fails or holds corrupt data
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Persist ``value`` under ``key``, replacing any previous value.

        Raises:
            StoreException: If the value is not JSON-serializable or the backend fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; a missing key is not an error."""
        pass

    @contextmanager
    def transaction(self) -> Iterator["StoreInterface"]:
        """
        Serialize a read-modify-write cycle against this store.

        The lock is re-entrant so transactional service methods can call
        each other.
        """
        with self._lock:
            yield self


class StoreException(Exception):
    """Base exception for store operations."""

    pass
