from unittest.mock import MagicMock

import pytest

from infrastructure.events import LocalEventBus
from marketplace.infra.events.listeners import (
    handle_listing_event,
    handle_order_placed,
    handle_order_status_changed,
    register_marketplace_listeners,
)

ITEMS = [
    {"id": "l1", "name": "Avocado Sandwich", "business_id": "b1"},
    {"id": "l2", "name": "Artisan Bread Loaf", "business_id": "b2"},
]


@pytest.mark.unit
class TestMarketplaceListeners:
    def setup_method(self):
        self.activity_service = MagicMock()

    def test_listing_event(self):
        handle_listing_event(
            self.activity_service,
            {
                "event_type": "listing.expired",
                "payload": {"listing_id": "l1", "business_id": "b1", "food_name": "Avocado Sandwich", "actor_id": None},
            },
        )

        self.activity_service.record.assert_called_once_with(
            "listing-expired",
            "Listing expired: Avocado Sandwich",
            item={"id": "l1", "name": "Avocado Sandwich"},
            business_ids=["b1"],
            actor_id=None,
        )

    def test_order_placed_describes_several_items(self):
        handle_order_placed(
            self.activity_service,
            {"event_type": "order.placed", "payload": {"order_id": "o1", "user_id": "c1", "items": ITEMS}},
        )

        args, kwargs = self.activity_service.record.call_args
        assert args == ("order-placed", "New order received for Avocado Sandwich and 1 more")
        assert kwargs["business_ids"] == ["b1", "b2"]
        assert kwargs["item"] == {"id": "o1", "name": "Avocado Sandwich"}

    @pytest.mark.parametrize(
        "status,entry_type,message",
        [
            ("completed", "order-completed", "Order completed for Avocado Sandwich and 1 more"),
            ("cancelled", "order-cancelled", "Order cancelled for Avocado Sandwich and 1 more"),
        ],
    )
    def test_order_status_changed(self, status, entry_type, message):
        handle_order_status_changed(
            self.activity_service,
            {"event_type": "order.status_changed", "payload": {"order_id": "o1", "status": status, "items": ITEMS}},
        )

        args, _ = self.activity_service.record.call_args
        assert args == (entry_type, message)

    def test_reopened_order_is_not_logged(self):
        handle_order_status_changed(
            self.activity_service,
            {"event_type": "order.status_changed", "payload": {"order_id": "o1", "status": "pending", "items": ITEMS}},
        )

        self.activity_service.record.assert_not_called()

    def test_register_marketplace_listeners(self):
        bus = LocalEventBus()

        register_marketplace_listeners(bus, self.activity_service)
        bus.publish("listing.created", {"listing_id": "l1", "business_id": "b1", "food_name": "Soup"})

        self.activity_service.record.assert_called_once()
        assert len(bus.handlers("order.placed")) == 1

    def test_published_events_use_context_clock(self, business_api, listing_payload, clock):
        handler = MagicMock()
        business_api.context.event_bus.subscribe("listing.created", handler)
        clock.advance(hours=5)

        listing = business_api.create_listing(listing_payload()).value

        envelope = handler.call_args[0][0]
        assert envelope["occurred_at"] == clock().isoformat()
        assert envelope["payload"]["listing_id"] == listing["id"]
        assert business_api.recent_activity().value[0]["timestamp"] == listing["created_at"]
