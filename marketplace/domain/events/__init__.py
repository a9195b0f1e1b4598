from .base import DomainEvent
from .listing_events import ListingCreatedEvent, ListingDeletedEvent, ListingExpiredEvent, ListingUpdatedEvent
from .order_events import OrderPlacedEvent, OrderStatusChangedEvent


__all__ = [
    "DomainEvent",
    "ListingCreatedEvent",
    "ListingUpdatedEvent",
    "ListingDeletedEvent",
    "ListingExpiredEvent",
    "OrderPlacedEvent",
    "OrderStatusChangedEvent",
]
