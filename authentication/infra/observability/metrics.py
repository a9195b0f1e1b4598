"""
Prometheus Metrics

Defines the Prometheus metrics for SaveBite authentication and account
administration. Collected in the default registry; exposing them is left to
the hosting process.
"""

from prometheus_client import Counter, Gauge

# ===== Login Metrics =====

login_total = Counter("savebite_auth_login_total", "Total login attempts", ["status"])
"""
Total login attempts counter.
Labels: status (success/failed)

Example:
    login_total.labels(status='success').inc()
"""

login_failed = Counter("savebite_auth_login_failed", "Failed login attempts", ["reason"])
"""
Failed login attempts counter.
Labels: reason (missing_fields, invalid_credentials, account_blocked)
"""


# ===== Registration Metrics =====

registration_total = Counter("savebite_auth_registration_total", "Total registration attempts", ["status", "role"])
"""
Total registration attempts.
Labels: status (success/failed), role (customer/business/unknown)
"""

registration_failed = Counter("savebite_auth_registration_failed", "Failed registration attempts", ["reason"])
"""
Failed registrations counter.
Labels: reason (email_exists, validation_error)
"""


# ===== Account Administration Metrics =====

user_status_changes = Counter("savebite_auth_user_status_changes_total", "User status changes by admins", ["status"])
"""
Status changes applied by admins.
Labels: status (active/blocked/pending)
"""

profile_updates_total = Counter("savebite_auth_profile_updates_total", "Total profile updates")

password_changes_total = Counter("savebite_auth_password_changes_total", "Total password changes", ["status"])


# ===== Session Metrics =====

sessions_expired = Counter("savebite_auth_sessions_expired_total", "Sessions discarded on read after expiry")

active_sessions = Gauge("savebite_auth_active_sessions", "Sessions created minus sessions ended in this process")


# ===== Helper Functions =====


def record_login_attempt(success: bool, reason: str = None):
    """
    Record login attempt metrics.

    Args:
        success: Whether login was successful
        reason: Failure reason (if failed)
    """
    status = "success" if success else "failed"
    login_total.labels(status=status).inc()

    if not success and reason:
        login_failed.labels(reason=reason).inc()


def record_registration_attempt(success: bool, role: str = None, reason: str = None):
    """
    Record registration attempt metrics.

    Args:
        success: Whether registration was successful
        role: Requested role, if known
        reason: Failure reason (if failed)
    """
    status = "success" if success else "failed"
    registration_total.labels(status=status, role=role or "unknown").inc()

    if not success and reason:
        registration_failed.labels(reason=reason).inc()


def record_password_change(success: bool):
    password_changes_total.labels(status="success" if success else "failed").inc()
