from dataclasses import dataclass
from decimal import Decimal

from .base import DomainEvent


def _order_items(order: dict) -> list:
    return [{"id": item["id"], "name": item["name"], "business_id": item["business_id"]} for item in order["items"]]


@dataclass
class OrderPlacedEvent(DomainEvent):
    """Event: Order placed."""

    def __init__(self, order: dict, total_amount: Decimal):
        super().__init__(
            event_type="order.placed",
            payload={
                "order_id": order["id"],
                "user_id": order["user_id"],
                "total_amount": str(total_amount),
                "items": _order_items(order),
            },
        )


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """Event: Order completed, cancelled or reopened."""

    def __init__(self, order: dict, previous_status: str, actor_id: str):
        super().__init__(
            event_type="order.status_changed",
            payload={
                "order_id": order["id"],
                "user_id": order["user_id"],
                "status": order["status"],
                "previous_status": previous_status,
                "actor_id": actor_id,
                "items": _order_items(order),
            },
        )
