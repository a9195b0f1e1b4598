"""
Observability Infrastructure

Prometheus metrics for logins, registrations, sessions and profile changes.
"""

from .metrics import (
    active_sessions,
    login_failed,
    login_total,
    record_login_attempt,
    record_password_change,
    record_registration_attempt,
    registration_total,
)

__all__ = [
    "active_sessions",
    "login_total",
    "login_failed",
    "registration_total",
    "record_login_attempt",
    "record_registration_attempt",
    "record_password_change",
]
