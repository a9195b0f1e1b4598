"""
Unit tests for AuthService: registration, login, logout and sessions.
"""

import pytest

from authentication.domain.services import AuthService
from infrastructure.storage.keys import USERS_KEY
from marketplace.tests.factories import BusinessRegistrationPayloadFactory, RegistrationPayloadFactory
from utils.service_base import ErrorCodes


@pytest.mark.unit
class TestRegister:
    @pytest.fixture(autouse=True)
    def setup(self, context, clock):
        self.context = context
        self.clock = clock
        self.service = AuthService(context)

    def test_register_customer_signs_in(self):
        payload = RegistrationPayloadFactory(email="jane@example.com")

        result = self.service.register(payload)

        assert result.ok
        assert result.message == "Registration successful!"
        assert result.value["email"] == "jane@example.com"
        assert result.value["role"] == "customer"
        assert result.value["status"] == "active"
        assert "password" not in result.value
        assert "business_name" not in result.value
        assert self.service.current_user()["id"] == result.value["id"]

    def test_password_is_stored_hashed(self):
        self.service.register(RegistrationPayloadFactory(password="secret123"))

        stored = self.context.store.get(USERS_KEY)[0]
        assert stored["password"] != "secret123"
        assert self.context.password_hasher.verify("secret123", stored["password"])

    def test_business_defaults(self):
        payload = BusinessRegistrationPayloadFactory(name="Corner Deli", business_name="", business_type="")

        result = self.service.register(payload)

        assert result.ok
        assert result.value["business_name"] == "Corner Deli"
        assert result.value["business_type"] == "other"

    def test_duplicate_email_is_case_insensitive(self):
        self.service.register(RegistrationPayloadFactory(email="jane@example.com"))

        result = self.service.register(RegistrationPayloadFactory(email="JANE@example.com"))

        assert not result.ok
        assert result.error == ErrorCodes.CONFLICT
        assert result.error_detail == "Email is already registered"
        assert len(self.context.store.get(USERS_KEY)) == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": "not-an-email"},
            {"name": ""},
            {"password": ""},
            {"role": "admin"},
        ],
    )
    def test_invalid_input(self, overrides):
        result = self.service.register(RegistrationPayloadFactory(**overrides))

        assert not result.ok
        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert self.context.store.get(USERS_KEY, []) == []


@pytest.mark.unit
class TestLogin:
    @pytest.fixture(autouse=True)
    def setup(self, context, clock, service_container):
        self.context = context
        self.clock = clock
        self.service = AuthService(context)
        self.user = self.service.register(
            RegistrationPayloadFactory(email="jane@example.com", password="secret123")
        ).value
        self.service.logout()
        self.other_profile = AuthService(service_container.context("other"))

    def _block(self):
        users = self.context.store.get(USERS_KEY)
        users[0]["status"] = "blocked"
        self.context.store.set(USERS_KEY, users)

    def test_login_success(self):
        result = self.service.login("Jane@Example.com", "secret123")

        assert result.ok
        assert result.message == "Login successful!"
        assert self.service.current_user()["id"] == self.user["id"]

    def test_missing_fields(self):
        result = self.service.login("", "secret123")

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.error_detail == "Email and password are required"

    @pytest.mark.parametrize("email,password", [("jane@example.com", "wrong"), ("nobody@example.com", "secret123")])
    def test_invalid_credentials(self, email, password):
        result = self.service.login(email, password)

        assert result.error == ErrorCodes.AUTH_ERROR
        assert result.error_detail == "Invalid email or password"
        assert self.service.current_user() is None

    def test_blocked_account(self):
        self._block()

        result = self.service.login("jane@example.com", "secret123")

        assert result.error == ErrorCodes.AUTH_ERROR
        assert result.error_detail == "Your account has been blocked. Please contact support."
        assert self.service.current_user() is None

    def test_blocked_account_with_wrong_password_looks_like_bad_credentials(self):
        self._block()

        result = self.service.login("jane@example.com", "wrong")

        assert result.error_detail == "Invalid email or password"

    def test_sessions_are_per_profile(self):
        self.service.login("jane@example.com", "secret123")

        assert self.other_profile.current_user() is None

    def test_logout(self):
        self.service.login("jane@example.com", "secret123")

        result = self.service.logout()

        assert result.ok
        assert result.message == "Logged out successfully"
        assert self.service.current_user() is None
        assert self.service.logout().ok

    def test_session_valid_until_ttl(self):
        self.service.login("jane@example.com", "secret123")

        self.clock.advance(days=6, hours=23)
        assert self.service.current_user() is not None

        self.clock.advance(hours=1)
        assert self.service.current_user() is None
        assert self.context.store.get(self.context.session_key) is None

    def test_current_user_reads_live_record(self):
        self.service.login("jane@example.com", "secret123")
        users = self.context.store.get(USERS_KEY)
        users[0]["name"] = "Jane Renamed"
        self.context.store.set(USERS_KEY, users)

        assert self.service.current_user()["name"] == "Jane Renamed"
