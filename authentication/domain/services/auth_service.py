"""
AuthService - Core Authentication Business Logic.

Owns the session of one profile: registration, login, logout and
current-user resolution. All authorization checks elsewhere start from
``current_user()``.
"""

import logging
from typing import Optional

from django.conf import settings

from authentication.domain.models import (
    build_session,
    build_user,
    find_user,
    find_user_by_email,
    public_user,
    session_expired,
)
from authentication.infra.observability.metrics import (
    active_sessions,
    record_login_attempt,
    record_registration_attempt,
    sessions_expired,
)
from authentication.serializers import RegisterSerializer
from infrastructure.context import MarketplaceContext
from infrastructure.storage.keys import USERS_KEY
from utils.logging_utils import mask_value, sanitize_payload
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok, validation_err
from utils.transaction_utils import store_atomic


logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService(BaseService):
    """
    Authentication service encapsulating all session business logic.

    Handles registration, login, logout and current-user resolution for the
    profile carried by the context.
    """

    def __init__(self, context: MarketplaceContext):
        """
        Initialize AuthService with injected dependencies.

        Args:
            context: Store, profile, clock and password hasher to act with
        """
        super().__init__()
        self.context = context

    @property
    def session_ttl_days(self) -> int:
        return int(settings.SAVEBITE["SESSION_TTL_DAYS"])

    # ===== Registration / Login =====

    @BaseService.log_performance
    @store_atomic
    def register(self, data: dict) -> ServiceResult:
        """
        Register a new customer or business and sign the profile in.

        Business Logic:
        1. Validate required fields, email format and role
        2. Reject emails already registered (case-insensitive)
        3. Create the user with a hashed password and status=active
        4. Persist it and start a session for this profile

        Returns:
            ServiceResult with the public user dict
        """
        logger.info("Registration attempt %s", sanitize_payload(data or {}, ["email", "role"]))

        serializer = RegisterSerializer(data=data or {})
        if not serializer.is_valid():
            record_registration_attempt(False, role=(data or {}).get("role"), reason="validation_error")
            return validation_err(serializer.errors)
        payload = serializer.validated_data

        users = self.context.store.get(USERS_KEY, [])
        if find_user_by_email(users, payload["email"]):
            record_registration_attempt(False, role=payload["role"], reason="email_exists")
            return service_err(ErrorCodes.CONFLICT, "Email is already registered")

        credential = self.context.password_hasher.hash(payload["password"])
        user = build_user(payload, credential, self.context.now())
        users.append(user)
        self.context.store.set(USERS_KEY, users)

        self._start_session(user)
        record_registration_attempt(True, role=user["role"])
        logger.info(f"User registered: {user['id']} ({user['role']})")
        return service_ok(public_user(user), "Registration successful!")

    @BaseService.log_performance
    @store_atomic
    def login(self, email: str, password: str) -> ServiceResult:
        """
        Authenticate with email/password and start a session.

        The password is verified before the account status so that a blocked
        account never reveals itself to a caller without valid credentials.
        """
        if not email or not password:
            record_login_attempt(False, reason="missing_fields")
            return service_err(ErrorCodes.VALIDATION_ERROR, "Email and password are required")

        users = self.context.store.get(USERS_KEY, [])
        user = find_user_by_email(users, email)

        if user is None or not self.context.password_hasher.verify(password, user.get("password", "")):
            logger.warning(f"Failed login for {mask_value(email)}")
            record_login_attempt(False, reason="invalid_credentials")
            return service_err(ErrorCodes.AUTH_ERROR, INVALID_CREDENTIALS)

        if user.get("status") == "blocked":
            logger.warning(f"Blocked account login attempt: {user['id']}")
            record_login_attempt(False, reason="account_blocked")
            return service_err(ErrorCodes.AUTH_ERROR, "Your account has been blocked. Please contact support.")

        self._start_session(user)
        record_login_attempt(True)
        return service_ok(public_user(user), "Login successful!")

    @store_atomic
    def logout(self) -> ServiceResult:
        if self.context.store.get(self.context.session_key) is not None:
            self.context.store.delete(self.context.session_key)
            active_sessions.dec()
        return service_ok(None, "Logged out successfully")

    # ===== Session resolution =====

    def get_session(self) -> Optional[dict]:
        """
        Return the valid session of this profile, or None.

        An expired session is deleted as part of the read.
        """
        with self.context.store.transaction():
            session = self.context.store.get(self.context.session_key)
            if session is None:
                return None
            if session_expired(session, self.context.now()):
                logger.info(f"Session expired for user {session.get('user_id')}")
                self.context.store.delete(self.context.session_key)
                sessions_expired.inc()
                active_sessions.dec()
                return None
            return session

    def current_user(self) -> Optional[dict]:
        """Public user dict for the valid session, or None."""
        return public_user(self._session_user())

    def _session_user(self) -> Optional[dict]:
        session = self.get_session()
        if session is None:
            return None
        return find_user(self.context.store.get(USERS_KEY, []), session["user_id"])

    def refresh_session(self, user: dict) -> None:
        """Rewrite the denormalized user fields of this profile's session."""
        session = self.context.store.get(self.context.session_key)
        if session is None or session.get("user_id") != user["id"]:
            return
        session.update(user_email=user["email"], user_name=user["name"], user_role=user["role"])
        self.context.store.set(self.context.session_key, session)

    def _start_session(self, user: dict) -> dict:
        replacing = self.context.store.get(self.context.session_key) is not None
        session = build_session(user, self.context.now(), self.session_ttl_days)
        self.context.store.set(self.context.session_key, session)
        if not replacing:
            active_sessions.inc()
        return session
