"""
Business logic services for authentication.

Services encapsulate business rules and coordinate between
infrastructure (store, password hasher) and domain records.
"""

from .auth_service import AuthService
from .profile_service import ProfileService


__all__ = [
    "AuthService",
    "ProfileService",
]
