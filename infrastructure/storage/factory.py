"""
Store Factory
=============

Factory pattern for creating store instances based on configuration.
Implements the Dependency Inversion Principle.
"""

import logging
from typing import Literal, Optional

from django.conf import settings

from utils.service_base import ServiceError

from .cache_adapter import CacheStore
from .interface import StoreInterface
from .memory_adapter import MemoryStore

logger = logging.getLogger(__name__)

StoreBackend = Literal["memory", "cache"]


class StoreFactory:
    """
    Factory for creating store instances.

    Usage:
        # In settings.py
        INFRASTRUCTURE = {"STORE_BACKEND": "cache"}  # or 'memory' for tests

        # In your code
        store = StoreFactory.create()
    """

    @staticmethod
    def create(backend: Optional[StoreBackend] = None) -> StoreInterface:
        """
        Create a store instance.

        Args:
            backend: 'memory' or 'cache'. If None, reads
                     settings.INFRASTRUCTURE["STORE_BACKEND"]

        Raises:
            ServiceError: If the backend type is unknown
        """
        backend_type = backend or settings.INFRASTRUCTURE.get("STORE_BACKEND", "cache")

        logger.info(f"Creating store backend: {backend_type}")

        if backend_type == "memory":
            return MemoryStore()
        elif backend_type == "cache":
            return CacheStore()
        else:
            raise ServiceError(f"Invalid store backend: {backend_type}. Must be 'memory' or 'cache'")
