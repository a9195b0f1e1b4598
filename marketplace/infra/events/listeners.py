import logging
from functools import partial

from activity.services import ActivityLogService


logger = logging.getLogger(__name__)

LISTING_ACTIVITY = {
    "listing.created": ("listing-created", "New listing created: {item}"),
    "listing.updated": ("listing-updated", "Listing updated: {item}"),
    "listing.deleted": ("listing-deleted", "Listing deleted: {item}"),
    "listing.expired": ("listing-expired", "Listing expired: {item}"),
}

ORDER_STATUS_ACTIVITY = {
    "completed": ("order-completed", "Order completed for {item}"),
    "cancelled": ("order-cancelled", "Order cancelled for {item}"),
}


def _describe_items(items: list) -> str:
    names = [item["name"] for item in items]
    if len(names) > 1:
        return f"{names[0]} and {len(names) - 1} more"
    return names[0] if names else "an order"


def handle_listing_event(activity_service: ActivityLogService, event_data):
    """Handle listing.created/updated/deleted/expired events."""
    payload = event_data.get("payload", {})
    entry_type, template = LISTING_ACTIVITY[event_data["event_type"]]
    activity_service.record(
        entry_type,
        template.format(item=payload.get("food_name")),
        item={"id": payload.get("listing_id"), "name": payload.get("food_name")},
        business_ids=[payload.get("business_id")],
        actor_id=payload.get("actor_id"),
    )


def handle_order_placed(activity_service: ActivityLogService, event_data):
    """Handle order.placed event."""
    payload = event_data.get("payload", {})
    items = payload.get("items", [])
    logger.info(f"[Marketplace Listener] Order placed: {payload.get('order_id')}")
    activity_service.record(
        "order-placed",
        f"New order received for {_describe_items(items)}",
        item={"id": payload.get("order_id"), "name": items[0]["name"] if items else None},
        business_ids=[item["business_id"] for item in items],
        actor_id=payload.get("user_id"),
    )


def handle_order_status_changed(activity_service: ActivityLogService, event_data):
    """Handle order.status_changed event. Reopening an order is not logged."""
    payload = event_data.get("payload", {})
    activity = ORDER_STATUS_ACTIVITY.get(payload.get("status"))
    if activity is None:
        return

    entry_type, template = activity
    items = payload.get("items", [])
    activity_service.record(
        entry_type,
        template.format(item=_describe_items(items)),
        item={"id": payload.get("order_id"), "name": items[0]["name"] if items else None},
        business_ids=[item["business_id"] for item in items],
        actor_id=payload.get("actor_id"),
    )


def register_marketplace_listeners(event_bus, activity_service: ActivityLogService):
    """Register all marketplace event listeners on ``event_bus``."""
    for event_type in LISTING_ACTIVITY:
        event_bus.subscribe(event_type, partial(handle_listing_event, activity_service))
    event_bus.subscribe("order.placed", partial(handle_order_placed, activity_service))
    event_bus.subscribe("order.status_changed", partial(handle_order_status_changed, activity_service))
    logger.info("Marketplace event listeners registered")
