"""
Memory Store Adapter
====================

Process-local store. Values are kept as JSON text so readers always get an
independent copy, exactly as with the cache-backed store.
"""

import json
import logging
from typing import Any, Dict

from django.core.serializers.json import DjangoJSONEncoder

from .interface import StoreException, StoreInterface

logger = logging.getLogger(__name__)


class MemoryStore(StoreInterface):
    """In-memory implementation of StoreInterface."""

    def __init__(self):
        super().__init__()
        self._data: Dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"Corrupt value under store key {key}: {e}")
            raise StoreException(f"Corrupt value under key {key}") from e

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, cls=DjangoJSONEncoder)
        except TypeError as e:
            raise StoreException(f"Value for key {key} is not JSON-serializable: {e}") from e

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        """Stored keys, for diagnostics and tests."""
        return sorted(self._data.keys())
