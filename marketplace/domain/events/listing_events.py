from dataclasses import dataclass
from typing import Optional

from .base import DomainEvent


def _listing_payload(listing: dict, actor_id: Optional[str]) -> dict:
    return {
        "listing_id": listing["id"],
        "business_id": listing["business_id"],
        "food_name": listing["food_name"],
        "actor_id": actor_id,
    }


@dataclass
class ListingCreatedEvent(DomainEvent):
    """Event: Listing created."""

    def __init__(self, listing: dict, actor_id: str):
        super().__init__(event_type="listing.created", payload=_listing_payload(listing, actor_id))


@dataclass
class ListingUpdatedEvent(DomainEvent):
    """Event: Listing edited by its owner or an admin."""

    def __init__(self, listing: dict, actor_id: str, changed_fields: list):
        payload = _listing_payload(listing, actor_id)
        payload["changed_fields"] = sorted(changed_fields)
        super().__init__(event_type="listing.updated", payload=payload)


@dataclass
class ListingDeletedEvent(DomainEvent):
    """Event: Listing removed."""

    def __init__(self, listing: dict, actor_id: str):
        super().__init__(event_type="listing.deleted", payload=_listing_payload(listing, actor_id))


@dataclass
class ListingExpiredEvent(DomainEvent):
    """Event: Listing flipped to expired by reconciliation."""

    def __init__(self, listing: dict):
        super().__init__(event_type="listing.expired", payload=_listing_payload(listing, None))
