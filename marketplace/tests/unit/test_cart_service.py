from datetime import timedelta

import pytest

from infrastructure.storage.keys import cart_key
from marketplace.cart.domain.services import CartService, PricingService
from utils.datetime_utils import to_iso
from utils.service_base import ErrorCodes


@pytest.mark.unit
class TestCartService:
    @pytest.fixture(autouse=True)
    def setup(self, context, clock):
        self.context = context
        self.clock = clock
        self.service = CartService(context, PricingService(tax_rate="0.08"))
        self.listing = {
            "id": "listing-1",
            "business_id": "business-1",
            "business_name": "Green Garden Cafe",
            "food_name": "Vegetable Pasta Salad",
            "category": "meals",
            "original_price": "12.99",
            "discounted_price": "7.99",
            "quantity": 3,
            "expiry_date": to_iso(clock() + timedelta(days=1)),
            "image_url": "",
            "pickup_only": True,
            "pickup_address": "123 Main St",
            "status": "active",
        }

    def test_add_listing_snapshots_fields(self):
        result = self.service.add_listing(self.listing, 1)

        assert result.ok
        assert result.message == "Item added to cart"
        assert result.value["adjusted"] is False
        item = result.value["item"]
        assert item["id"] == "listing-1"
        assert item["name"] == "Vegetable Pasta Salad"
        assert item["quantity"] == 1
        assert item["business_id"] == "business-1"
        assert item["discounted_price"] == "7.99"
        assert "category" not in item

    def test_add_listing_clamps_to_stock(self):
        result = self.service.add_listing(self.listing, 5)

        assert result.ok
        assert result.value["adjusted"] is True
        assert result.value["item"]["quantity"] == 3
        assert result.message == "Only 3 available, quantity adjusted"

    def test_add_listing_accumulates(self):
        self.service.add_listing(self.listing, 2)

        result = self.service.add_listing(self.listing, 2)

        assert result.value["item"]["quantity"] == 3
        assert result.value["adjusted"] is True
        assert len(self.service.items()) == 1

    def test_add_listing_when_cart_already_holds_all_stock(self):
        self.service.add_listing(self.listing, 3)

        result = self.service.add_listing(self.listing, 1)

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.error_detail == "Only 3 available and all of them are already in your cart"

    def test_add_expired_listing(self):
        self.listing["expiry_date"] = to_iso(self.clock() - timedelta(minutes=1))

        result = self.service.add_listing(self.listing, 1)

        assert result.error_detail == "This listing has expired"
        assert self.service.items() == []

    @pytest.mark.parametrize("changes", [{"status": "sold-out", "quantity": 0}, {"quantity": 0}])
    def test_add_unavailable_listing(self, changes):
        self.listing.update(changes)

        result = self.service.add_listing(self.listing, 1)

        assert result.error_detail == "This listing is no longer available"

    def test_add_requires_positive_quantity(self):
        assert self.service.add_listing(self.listing, 0).error == ErrorCodes.VALIDATION_ERROR
        assert self.service.add({"id": "x"}, 0).error == ErrorCodes.VALIDATION_ERROR

    def test_snapshot_is_not_affected_by_later_listing_changes(self):
        self.service.add_listing(self.listing, 1)
        self.listing["discounted_price"] = "1.00"

        assert self.service.items()[0]["discounted_price"] == "7.99"

    def test_set_quantity(self):
        self.service.add_listing(self.listing, 1)

        assert self.service.set_quantity("listing-1", 2).value[0]["quantity"] == 2
        assert self.service.set_quantity("listing-1", 0).value == []
        assert self.service.set_quantity("listing-1", 1).error == ErrorCodes.NOT_FOUND

    def test_remove_absent_item_is_noop(self):
        self.service.add_listing(self.listing, 1)

        result = self.service.remove("other")

        assert result.ok
        assert len(result.value) == 1

    def test_clear(self):
        self.service.add_listing(self.listing, 1)

        assert self.service.clear().value == []
        assert self.service.items() == []

    def test_update_listing_quantity_clamps(self):
        self.service.add_listing(self.listing, 1)

        result = self.service.update_listing_quantity("listing-1", 10, self.listing)

        assert result.value["adjusted"] is True
        assert result.value["item"]["quantity"] == 3

    def test_update_quantity_of_deleted_listing_can_only_lower(self):
        self.service.add_listing(self.listing, 3)

        lowered = self.service.update_listing_quantity("listing-1", 1, None)
        assert lowered.value["item"]["quantity"] == 1

        raised = self.service.update_listing_quantity("listing-1", 5, None)
        assert raised.error == ErrorCodes.VALIDATION_ERROR
        assert raised.error_detail == "This listing is no longer available"
        assert self.service.items()[0]["quantity"] == 1

    def test_add_listing_accepts_numeric_string(self):
        result = self.service.add_listing(self.listing, "2")

        assert result.ok
        assert result.value["item"]["quantity"] == 2

    @pytest.mark.parametrize("quantity", ["abc", None, 0, 1.5])
    def test_add_listing_rejects_invalid_quantity(self, quantity):
        result = self.service.add_listing(self.listing, quantity)

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.error_detail.startswith("quantity: ")
        assert self.service.items() == []

    @pytest.mark.parametrize("quantity", ["abc", None, ""])
    def test_update_listing_quantity_rejects_invalid_quantity(self, quantity):
        self.service.add_listing(self.listing, 2)

        result = self.service.update_listing_quantity("listing-1", quantity, self.listing)

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert self.service.items()[0]["quantity"] == 2

    def test_update_quantity_to_zero_removes(self):
        self.service.add_listing(self.listing, 1)

        result = self.service.update_listing_quantity("listing-1", 0, self.listing)

        assert result.value["items"] == []

    def test_summary(self):
        self.service.add_listing(self.listing, 2)

        summary = self.service.summary()

        assert summary["item_count"] == 2
        assert summary["totals"] == {"subtotal": "15.98", "savings": "10.00", "tax": "1.28", "total": "17.26"}

    def test_carts_are_per_profile(self, service_container):
        self.service.add_listing(self.listing, 1)
        other = CartService(service_container.context("other"))

        assert other.items() == []
        assert self.context.store.get(cart_key(self.context.profile_id))[0]["id"] == "listing-1"
