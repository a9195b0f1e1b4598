from datetime import timedelta

import pytest

from utils.service_base import ErrorCodes


@pytest.mark.unit
class TestStatsService:
    @pytest.fixture(autouse=True)
    def setup(self, admin_api, business_api, customer_api, listing_payload, order_details, clock):
        self.admin_api = admin_api
        self.business_api = business_api
        self.customer_api = customer_api
        self.business = business_api.current_user()

        self.salad = business_api.create_listing(
            listing_payload(
                food_name="Vegetable Pasta Salad",
                category="meals",
                original_price="12.99",
                discounted_price="7.99",
                quantity=5,
                expiry_date=(clock() + timedelta(days=2)).isoformat(),
            )
        ).value
        self.bread = business_api.create_listing(
            listing_payload(
                food_name="Artisan Bread Loaf",
                category="bakery",
                original_price="7.99",
                discounted_price="4.99",
                quantity=4,
                expiry_date=(clock() + timedelta(hours=20)).isoformat(),
            )
        ).value

        customer_api.add_to_cart(self.salad["id"], 2)
        self.kept = customer_api.place_order(order_details()).value
        customer_api.add_to_cart(self.bread["id"], 1)
        self.cancelled = customer_api.place_order(order_details()).value
        business_api.update_order_status(self.cancelled["id"], "cancelled")

    def test_admin_stats(self):
        stats = self.admin_api.get_stats("admin").value

        assert stats["total_users"] == 3
        assert stats["total_customers"] == 1
        assert stats["total_businesses"] == 1
        assert stats["total_admins"] == 1
        assert stats["total_listings"] == 2
        assert stats["active_listings"] == 2
        assert stats["total_orders"] == 2
        assert stats["total_revenue"] == "17.26"
        assert stats["total_food_saved"] == 2
        assert 0 < len(stats["recent_activity"]) <= 5

    def test_category_breakdown(self):
        breakdown = {row["category"]: row for row in self.admin_api.get_stats("admin").value["category_breakdown"]}

        assert breakdown["meals"] == {"category": "meals", "count": 1, "weight": 1.5, "percentage": 50}
        assert breakdown["bakery"] == {"category": "bakery", "count": 1, "weight": 0.9, "percentage": 50}
        assert breakdown["produce"]["count"] == 0
        assert breakdown["produce"]["percentage"] == 0

    def test_monthly_orders(self):
        months = self.admin_api.get_stats("admin").value["monthly_orders"]

        assert [row["month"] for row in months][:3] == ["Jan", "Feb", "Mar"]
        assert months[4]["value"] == 0
        assert months[5] == {"month": "Jun", "value": 2}
        assert months[6]["value"] is None

    def test_business_stats(self):
        stats = self.business_api.get_stats("business").value

        assert stats["business_id"] == self.business["id"]
        assert stats["active_listings"] == 2
        assert stats["pending_orders"] == 1
        assert stats["food_saved"] == 2
        assert stats["total_revenue"] == "15.98"
        assert len(stats["recent_activity"]) == 3
        assert [listing["id"] for listing in stats["expiring_listings"]] == [self.bread["id"]]
        assert stats["expiring_listings"][0]["discount_badge"] == 38

    def test_admin_can_view_a_business_dashboard(self):
        stats = self.admin_api.get_stats("business", business_id=self.business["id"]).value

        assert stats["business_id"] == self.business["id"]
        assert stats["food_saved"] == 2

    def test_overview(self):
        stats = self.customer_api.get_stats("overview").value

        assert stats == {"total_meals_saved": 2, "co2_reduced": 5.0, "partner_businesses": 1}

    def test_permissions(self):
        assert self.customer_api.get_stats("admin").error == ErrorCodes.AUTH_ERROR
        assert self.business_api.get_stats("admin").error == ErrorCodes.AUTH_ERROR
        assert self.customer_api.get_stats("business").error == ErrorCodes.AUTH_ERROR
        assert self.customer_api.get_stats("weekly").error == ErrorCodes.VALIDATION_ERROR

        self.customer_api.logout()
        assert self.customer_api.get_stats("overview").error == ErrorCodes.AUTH_ERROR

    def test_recent_activity_scoping(self):
        assert self.customer_api.recent_activity().error == ErrorCodes.AUTH_ERROR

        business_entries = self.business_api.recent_activity(limit=0).value
        assert all(self.business["id"] in entry["business_ids"] for entry in business_entries)
        assert len(self.admin_api.recent_activity(limit=2).value) == 2
