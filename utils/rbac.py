import logging
from typing import Optional

# Canonical role names
ROLE_CUSTOMER = "customer"
ROLE_BUSINESS = "business"
ROLE_ADMIN = "admin"

ROLES = (ROLE_CUSTOMER, ROLE_BUSINESS, ROLE_ADMIN)

logger = logging.getLogger(__name__)


def is_admin(user: Optional[dict]) -> bool:
    return bool(user) and user.get("role") == ROLE_ADMIN


def is_business(user: Optional[dict]) -> bool:
    """Business check. Admins may act on behalf of any business, so they count as well."""
    return bool(user) and user.get("role") in (ROLE_BUSINESS, ROLE_ADMIN)


def is_customer(user: Optional[dict]) -> bool:
    return bool(user) and user.get("role") == ROLE_CUSTOMER


def is_self_or_admin(user: Optional[dict], target_id: str) -> bool:
    return bool(user) and (user.get("id") == target_id or is_admin(user))


def owns_listing(user: Optional[dict], listing: dict) -> bool:
    return bool(user) and listing.get("business_id") == user.get("id")


def can_manage_listing(user: Optional[dict], listing: dict) -> bool:
    return is_admin(user) or owns_listing(user, listing)


def log_denial(user: Optional[dict], action: str) -> None:
    logger.warning(
        "RBAC denial: user_id=%s role=%s action=%s",
        (user or {}).get("id"),
        (user or {}).get("role"),
        action,
    )
