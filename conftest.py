from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from authentication.domain.models import build_user
from infrastructure.container import ServiceContainer
from infrastructure.storage import MemoryStore
from infrastructure.storage.keys import USERS_KEY
from marketplace.tests.factories import (
    BusinessRegistrationPayloadFactory,
    ListingPayloadFactory,
    OrderDetailsFactory,
    RegistrationPayloadFactory,
)

START = datetime(2026, 6, 15, 12, 0, tzinfo=dt_timezone.utc)

ADMIN_EMAIL = "root@savebite.test"
ADMIN_PASSWORD = "admin-pass"


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now=START):
        self.current = now

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def service_container(store, clock):
    return ServiceContainer(store=store, clock=clock)


@pytest.fixture
def context(service_container):
    return service_container.context()


@pytest.fixture
def api(service_container):
    return service_container.api()


@pytest.fixture
def make_api(service_container):
    """Build a MarketplaceApi for another profile sharing the same store."""
    return service_container.api


@pytest.fixture
def admin_user(service_container, clock):
    context = service_container.context("admin")
    users = context.store.get(USERS_KEY, [])
    user = build_user(
        {"name": "Site Admin", "email": ADMIN_EMAIL},
        context.password_hasher.hash(ADMIN_PASSWORD),
        clock(),
        role="admin",
    )
    users.append(user)
    context.store.set(USERS_KEY, users)
    return user


@pytest.fixture
def admin_api(service_container, admin_user):
    admin = service_container.api("admin")
    assert admin.login(ADMIN_EMAIL, ADMIN_PASSWORD).ok
    return admin


@pytest.fixture
def business_api(service_container):
    business = service_container.api("business")
    result = business.register(
        BusinessRegistrationPayloadFactory(name="Green Garden Cafe", business_name="Green Garden Cafe")
    )
    assert result.ok, result.error_detail
    return business


@pytest.fixture
def customer_api(service_container):
    customer = service_container.api("customer")
    result = customer.register(RegistrationPayloadFactory())
    assert result.ok, result.error_detail
    return customer


@pytest.fixture
def listing_payload(clock):
    """Build listing input expiring two days from the test clock."""

    def build(**overrides):
        overrides.setdefault("expiry_date", (clock() + timedelta(days=2)).isoformat())
        return ListingPayloadFactory(**overrides)

    return build


@pytest.fixture
def order_details(clock):
    """Build checkout details with a pickup three hours from the test clock."""

    def build(**overrides):
        overrides.setdefault("pickup_time", (clock() + timedelta(hours=3)).isoformat())
        return OrderDetailsFactory(**overrides)

    return build
