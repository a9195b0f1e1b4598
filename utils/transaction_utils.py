"""
Store Transaction Utilities for SaveBite
========================================

Decorators that run a service method inside its context store's critical
section and turn store failures into ``internal_error`` results.

Usage Examples:
    class OrderService(BaseService):
        @store_atomic
        def place_order(self, caller, details):
            # read-modify-write of listings, orders and cart
            ...

        @store_guarded
        def get_orders(self, caller, filters):
            # read-only, no lock needed
            ...

Services validate everything before their first write, so a failure never
leaves a half-applied mutation in the store.
"""

import logging
import time
from functools import wraps

from infrastructure.storage.interface import StoreException

from .service_base import ErrorCodes, service_err

logger = logging.getLogger(__name__)


def _store_failure(func, error):
    logger.error(f"Store failure in {func.__qualname__}: {error}", exc_info=True)
    return service_err(ErrorCodes.INTERNAL_ERROR, "Storage is unavailable, please try again")


def store_atomic(func):
    """
    Run the wrapped method while holding ``self.context.store``'s lock.

    Nested calls are safe: the store lock is re-entrant.
    """

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            with self.context.store.transaction():
                logger.debug(f"Executing {func.__qualname__} in store transaction")
                return func(self, *args, **kwargs)
        except StoreException as e:
            return _store_failure(func, e)

    return wrapper


def store_guarded(func):
    """Convert StoreException raised by a read-only method into an internal_error result."""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except StoreException as e:
            return _store_failure(func, e)

    return wrapper


def log_transaction_performance(func):
    """
    Decorator to log how long a store transaction held the lock.

    Usage:
        @log_transaction_performance
        @store_atomic
        def expire_listings(self):
            pass
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            result = func(*args, **kwargs)
            elapsed = time.time() - start_time
            logger.debug(f"Transaction {func.__name__} completed in {elapsed:.3f}s")
            return result
        except Exception as e:
            elapsed = time.time() - start_time
            logger.error(f"Transaction {func.__name__} failed after {elapsed:.3f}s: {e}")
            raise

    return wrapper
