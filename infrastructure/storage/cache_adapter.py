"""
Cache Store Adapter
===================

Store backed by Django's cache framework. With ``REDIS_URL`` configured the
default cache is Django's Redis backend, otherwise a local-memory cache.

Configuration (settings.py):
    INFRASTRUCTURE = {
        "STORE_BACKEND": "cache",
        "STORE_CACHE_ALIAS": "default",
    }
"""

import json
import logging
from typing import Any, Optional

from django.conf import settings
from django.core.cache import caches
from django.core.serializers.json import DjangoJSONEncoder

from .interface import StoreException, StoreInterface

logger = logging.getLogger(__name__)


class CacheStore(StoreInterface):
    """
    Django cache implementation of StoreInterface.

    Entries never expire (timeout=None); session lifetime is enforced by the
    session's own ``expires_at``.
    """

    def __init__(self, alias: Optional[str] = None):
        super().__init__()
        self.alias = alias or settings.INFRASTRUCTURE.get("STORE_CACHE_ALIAS", "default")
        self._cache = caches[self.alias]
        logger.info(f"Cache store initialized (alias: {self.alias})")

    def get(self, key: str, default: Any = None) -> Any:
        try:
            raw = self._cache.get(key)
        except Exception as e:
            logger.error(f"Cache read failed for key {key}: {e}", exc_info=True)
            raise StoreException(f"Failed to read key {key}: {e}") from e

        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"Corrupt value under store key {key}: {e}")
            raise StoreException(f"Corrupt value under key {key}") from e

    def set(self, key: str, value: Any) -> None:
        try:
            raw = json.dumps(value, cls=DjangoJSONEncoder)
        except TypeError as e:
            raise StoreException(f"Value for key {key} is not JSON-serializable: {e}") from e

        try:
            self._cache.set(key, raw, timeout=None)
        except Exception as e:
            logger.error(f"Cache write failed for key {key}: {e}", exc_info=True)
            raise StoreException(f"Failed to write key {key}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._cache.delete(key)
        except Exception as e:
            logger.error(f"Cache delete failed for key {key}: {e}", exc_info=True)
            raise StoreException(f"Failed to delete key {key}: {e}") from e
