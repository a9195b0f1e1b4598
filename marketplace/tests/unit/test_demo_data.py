from io import StringIO

import pytest
from django.core.management import call_command

from infrastructure.container import container
from infrastructure.storage.keys import LISTINGS_KEY, USERS_KEY
from marketplace.demo_data import ADMIN_EMAIL, ADMIN_PASSWORD, DEMO_BUSINESSES, DEMO_LISTINGS, seed_demo_data


@pytest.mark.unit
class TestSeedDemoData:
    @pytest.fixture(autouse=True)
    def setup(self, context, make_api):
        self.context = context
        self.make_api = make_api

    def test_seed(self):
        created = seed_demo_data(self.context)

        assert created == {"users": 1 + len(DEMO_BUSINESSES), "listings": len(DEMO_LISTINGS)}
        listings = self.context.store.get(LISTINGS_KEY)
        assert {listing["business_name"] for listing in listings} == {b["name"] for b in DEMO_BUSINESSES}

    def test_seed_is_idempotent(self):
        seed_demo_data(self.context)

        assert seed_demo_data(self.context) == {"users": 0, "listings": 0}
        assert len(self.context.store.get(USERS_KEY)) == 1 + len(DEMO_BUSINESSES)

    def test_admin_can_log_in(self):
        seed_demo_data(self.context)

        result = self.make_api("admin").login(ADMIN_EMAIL, ADMIN_PASSWORD)

        assert result.ok
        assert result.value["role"] == "admin"

    def test_demo_businesses_cannot_log_in_by_default(self):
        seed_demo_data(self.context)

        assert not self.make_api("cafe").login(DEMO_BUSINESSES[0]["email"], "").ok
        assert not self.make_api("cafe").login(DEMO_BUSINESSES[0]["email"], "anything").ok

    def test_business_password(self):
        seed_demo_data(self.context, business_password="bakery-pass")

        assert self.make_api("bakery").login(DEMO_BUSINESSES[1]["email"], "bakery-pass").ok

    def test_seeded_listings_are_browsable(self):
        seed_demo_data(self.context)

        listings = self.make_api("visitor").list_listings({"category": "meals", "sort": "discount"}).value

        assert [item["food_name"] for item in listings] == ["Avocado Sandwich", "Vegetable Pasta Salad"]
        assert [item["discount_badge"] for item in listings] == [40, 38]


@pytest.mark.unit
class TestSeedDemoDataCommand:
    def setup_method(self):
        container.reset()

    def teardown_method(self):
        container.reset()

    def test_command(self):
        out = StringIO()

        call_command("seed_demo_data", stdout=out)
        call_command("seed_demo_data", stdout=out)

        output = out.getvalue()
        assert "Created 4 users and 6 listings." in output
        assert "Demo data already present, nothing created." in output
        assert len(container.store().get(LISTINGS_KEY)) == len(DEMO_LISTINGS)
