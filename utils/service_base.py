"""
Shared service-layer utilities.

Provides the ServiceResult pattern (inspired by Rust's Result type) and the
BaseService class used by every SaveBite domain service.

Guidelines
- Keep services free of global state; pass dependencies via the context.
- Return structured results instead of raising for expected outcomes.
- Reserve exceptions for truly exceptional/unrecoverable scenarios.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    A result type that encapsulates success or failure from service operations.

    Attributes:
        ok: True if operation succeeded, False otherwise
        value: The success value (present if ok=True)
        error: Error code (present if ok=False), one of ErrorCodes
        error_detail: Human-readable error message (present if ok=False)
        message: Optional human-readable message on success

    Examples:
        >>> result = catalog_service.get_listing(listing_id)
        >>> if result.ok:
        ...     listing = result.value
        >>> else:
        ...     print(result.error, result.error_detail)
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None
    message: Optional[str] = None

    def map(self, func: Callable[[T], Any]) -> "ServiceResult":
        """Transform the success value if ok=True, otherwise pass through error."""
        if self.ok and self.value is not None:
            return service_ok(func(self.value), self.message)
        return self

    def flat_map(self, func: Callable[[T], "ServiceResult"]) -> "ServiceResult":
        """Chain service operations that return ServiceResult."""
        if self.ok:
            return func(self.value)
        return self

    def to_dict(self) -> dict:
        """
        Convert to the success-flag + message shape consumed by presentation code.

        Returns:
            {"success": True, "message": ..., "data": ...} or
            {"success": False, "error": code, "message": detail}
        """
        if self.ok:
            return {"success": True, "message": self.message or "", "data": self.value}
        return {"success": False, "error": self.error, "message": self.error_detail}


def service_ok(value: Optional[T] = None, message: Optional[str] = None) -> ServiceResult[T]:
    """Create a successful ServiceResult."""
    return ServiceResult(ok=True, value=value, message=message)


def service_err(error: str, error_detail: str = "") -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: Error code (see ErrorCodes)
        error_detail: Human-readable error message

    Example:
        >>> return service_err(ErrorCodes.NOT_FOUND, f"Listing {listing_id} not found")
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error)


def format_serializer_errors(errors: Dict[str, Any]) -> str:
    """Flatten DRF serializer errors into a single "field: message" string."""
    parts = []
    for field_name, messages in errors.items():
        if isinstance(messages, dict):
            parts.append(format_serializer_errors(messages))
            continue
        if not isinstance(messages, (list, tuple)):
            messages = [messages]
        text = " ".join(str(m) for m in messages)
        if field_name == "non_field_errors":
            parts.append(text)
        else:
            parts.append(f"{field_name}: {text}")
    return "; ".join(parts)


def validation_err(errors: Dict[str, Any]) -> ServiceResult:
    """Wrap DRF serializer errors as a validation_error result."""
    return service_err(ErrorCodes.VALIDATION_ERROR, format_serializer_errors(errors))


class ServiceError(Exception):
    """Raised for unrecoverable service conditions (misconfiguration and the like).

    Prefer returning ServiceResult for expected failures.
    """

    pass


class BaseService:
    """
    Base class for all services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator

    Usage:
        class CatalogService(BaseService):
            def __init__(self, context):
                super().__init__()
                self.context = context

            @BaseService.log_performance
            def list_listings(self, filters):
                ...
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log performance of service methods.

        Logs execution time, failed results at warning level and any
        exception (which is re-raised).
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000

                if isinstance(result, ServiceResult):
                    if result.ok:
                        self.logger.debug(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                    else:
                        self.logger.warning(
                            f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms"
                        )
                else:
                    self.logger.debug(f"{method_name} completed in {elapsed_time:.2f}ms")

                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


class ErrorCodes:
    """Error kinds reported by SaveBite services."""

    # Missing/malformed input or a broken business rule
    VALIDATION_ERROR = "validation_error"

    # Missing/expired session, insufficient role, wrong credentials
    AUTH_ERROR = "auth_error"

    # Duplicate email
    CONFLICT = "conflict"

    # Unknown id
    NOT_FOUND = "not_found"

    # Store failure
    INTERNAL_ERROR = "internal_error"
