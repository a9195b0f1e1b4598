"""
CatalogService - Listing CRUD, Browsing & Expiry Reconciliation

Handles listing browsing (filter, search, sort, limit), CRUD operations for
businesses and admins, and the reconciliation step that flips listings past
their expiry date to ``expired``.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from django.conf import settings

from infrastructure.context import MarketplaceContext
from infrastructure.storage.keys import LISTINGS_KEY
from marketplace.cart.domain.services.pricing_service import PricingService, money_str, to_decimal
from marketplace.catalog.domain.models import effective_status, is_past_expiry
from marketplace.catalog.serializers import EDITABLE_FIELDS, ListingFilterSerializer, ListingSerializer
from marketplace.domain.events import ListingCreatedEvent, ListingDeletedEvent, ListingExpiredEvent, ListingUpdatedEvent
from marketplace.infra.observability.metrics import active_listings, listings_created_total, listings_expired_total
from utils.datetime_utils import parse_iso, to_iso
from utils.rbac import can_manage_listing, is_business, log_denial
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok, validation_err
from utils.transaction_utils import log_transaction_performance, store_atomic, store_guarded


logger = logging.getLogger(__name__)


def _price(listing: dict):
    return to_decimal(listing["discounted_price"])


class CatalogService(BaseService):
    """
    Service for managing the listing catalog.

    Responsibilities:
    - List listings with filtering, search, sorting and a result cap
    - Get listing details
    - Create listings (business or admin)
    - Update / delete listings (owner or admin)
    - Reconcile expiry (active listings past their expiry become expired)

    All operations validate permissions and return ServiceResult.
    """

    def __init__(self, context: MarketplaceContext, pricing_service: Optional[PricingService] = None):
        """
        Initialize CatalogService.

        Args:
            context: Store, clock and event bus to act with
            pricing_service: Discount calculations (defaults to a fresh PricingService)
        """
        super().__init__()
        self.context = context
        self.pricing_service = pricing_service or PricingService()

    @property
    def persist_expiry_on_read(self) -> bool:
        return bool(settings.SAVEBITE.get("PERSIST_EXPIRY_ON_READ", True))

    # ===== Reads =====

    @BaseService.log_performance
    @store_guarded
    def list_listings(self, filters: Optional[Dict[str, Any]] = None) -> ServiceResult[List[dict]]:
        """
        List listings for browsing and dashboards.

        Applied in order: business_id, status, category ("all" disables it),
        case-insensitive search over food name, description and business name,
        sort (expiry, price-asc, price-desc, discount), limit.

        Args:
            filters: Optional filter dict

        Returns:
            ServiceResult with listing dicts, each carrying ``discount_badge``

        Example:
            >>> result = catalog_service.list_listings({"category": "meals", "sort": "discount"})
            >>> if result.ok:
            ...     best_deal = result.value[0]
        """
        serializer = ListingFilterSerializer(data=filters or {})
        if not serializer.is_valid():
            return validation_err(serializer.errors)
        filters = serializer.validated_data

        if self.persist_expiry_on_read:
            reconciled = self.expire_listings()
            if not reconciled.ok:
                return reconciled

        now = self.context.now()
        listings = [self._present(listing, now) for listing in self.context.store.get(LISTINGS_KEY, [])]
        active_listings.set(sum(1 for listing in listings if listing["status"] == "active"))

        if filters.get("business_id"):
            listings = [item for item in listings if item["business_id"] == filters["business_id"]]

        if filters.get("status"):
            listings = [item for item in listings if item["status"] == filters["status"]]

        category = filters.get("category")
        if category and category != "all":
            listings = [item for item in listings if item["category"] == category]

        search = (filters.get("search") or "").strip().lower()
        if search:
            listings = [
                item
                for item in listings
                if search in item["food_name"].lower()
                or search in (item.get("description") or "").lower()
                or search in (item.get("business_name") or "").lower()
            ]

        sort = filters.get("sort")
        if sort == "expiry":
            listings.sort(key=lambda item: parse_iso(item["expiry_date"]))
        elif sort == "price-asc":
            listings.sort(key=_price)
        elif sort == "price-desc":
            listings.sort(key=_price, reverse=True)
        elif sort == "discount":
            listings.sort(key=lambda item: item["discount_badge"], reverse=True)

        if filters.get("limit"):
            listings = listings[: filters["limit"]]

        return service_ok(listings)

    def find_listing(self, listing_id: str) -> Optional[dict]:
        """Stored listing with its effective status and badge, or None."""
        listing = next(
            (item for item in self.context.store.get(LISTINGS_KEY, []) if item["id"] == listing_id),
            None,
        )
        if listing is None:
            return None
        return self._present(listing, self.context.now())

    @store_guarded
    def get_listing(self, listing_id: str) -> ServiceResult[dict]:
        listing = self.find_listing(listing_id)
        if listing is None:
            return service_err(ErrorCodes.NOT_FOUND, "Listing not found")
        return service_ok(listing)

    # ===== Mutations =====

    @BaseService.log_performance
    @store_atomic
    def create_listing(self, caller: Optional[dict], data: Dict[str, Any]) -> ServiceResult[dict]:
        """
        Create a new listing owned by the caller (business or admin).

        Business Logic:
        1. Check the caller may sell
        2. Validate fields, price ordering, future expiry, quantity >= 0
        3. Snapshot business id/name from the caller
        4. Persist with status=active and publish listing.created
        """
        if not is_business(caller):
            log_denial(caller, "create_listing")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Only businesses can create listings")

        now = self.context.now()
        data = dict(data or {})
        data.setdefault("pickup_address", caller.get("business_address") or "")
        serializer = ListingSerializer(data=data, context={"now": now})
        if not serializer.is_valid():
            return validation_err(serializer.errors)

        listing = {
            "id": str(uuid.uuid4()),
            "business_id": caller["id"],
            "business_name": caller.get("business_name") or caller["name"],
        }
        listing.update(self._to_record(serializer.validated_data))
        listing["status"] = "active"
        listing["created_at"] = to_iso(now)

        listings = self.context.store.get(LISTINGS_KEY, [])
        listings.append(listing)
        self.context.store.set(LISTINGS_KEY, listings)

        ListingCreatedEvent(listing, actor_id=caller["id"]).publish(self.context.event_bus)
        listings_created_total.labels(category=listing["category"]).inc()
        self.logger.info(f"Listing created: {listing['id']} by {caller['id']}")
        return service_ok(self._present(listing, now), "Listing created successfully")

    @BaseService.log_performance
    @store_atomic
    def update_listing(self, caller: Optional[dict], listing_id: str, patch: Dict[str, Any]) -> ServiceResult[dict]:
        """
        Merge a patch into a listing (owner or admin).

        The merged record is validated as a whole; the expiry date is only
        required to be in the future when the patch changes it. Restocking a
        sold-out listing or extending an expired one reactivates it unless
        the patch sets a status explicitly.
        """
        listings = self.context.store.get(LISTINGS_KEY, [])
        listing = next((item for item in listings if item["id"] == listing_id), None)
        if listing is None:
            return service_err(ErrorCodes.NOT_FOUND, "Listing not found")

        if not can_manage_listing(caller, listing):
            log_denial(caller, "update_listing")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: You can only update your own listings")

        patch = {key: value for key, value in (patch or {}).items() if key in EDITABLE_FIELDS + ("status",)}
        now = self.context.now()
        merged = {key: listing.get(key) for key in EDITABLE_FIELDS}
        merged["status"] = listing["status"]
        merged.update(patch)

        serializer = ListingSerializer(data=merged, context={"now": now, "check_expiry": "expiry_date" in patch})
        if not serializer.is_valid():
            return validation_err(serializer.errors)
        validated = serializer.validated_data

        record = self._to_record(validated)
        if "status" in patch:
            record["status"] = validated["status"]
        elif listing["status"] == "sold-out" and record["quantity"] > 0:
            record["status"] = "active"
        elif listing["status"] == "expired" and "expiry_date" in patch:
            record["status"] = "active"
        else:
            record["status"] = listing["status"]

        changed = [key for key, value in record.items() if listing.get(key) != value]
        listing.update(record)
        listing["updated_at"] = to_iso(now)
        self.context.store.set(LISTINGS_KEY, listings)

        ListingUpdatedEvent(listing, actor_id=caller["id"], changed_fields=changed).publish(self.context.event_bus)
        return service_ok(self._present(listing, now), "Listing updated successfully")

    @BaseService.log_performance
    @store_atomic
    def delete_listing(self, caller: Optional[dict], listing_id: str) -> ServiceResult[None]:
        listings = self.context.store.get(LISTINGS_KEY, [])
        listing = next((item for item in listings if item["id"] == listing_id), None)
        if listing is None:
            return service_err(ErrorCodes.NOT_FOUND, "Listing not found")

        if not can_manage_listing(caller, listing):
            log_denial(caller, "delete_listing")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: You can only delete your own listings")

        self.context.store.set(LISTINGS_KEY, [item for item in listings if item["id"] != listing_id])

        ListingDeletedEvent(listing, actor_id=caller["id"]).publish(self.context.event_bus)
        self.logger.info(f"Listing deleted: {listing_id} by {caller['id']}")
        return service_ok(None, "Listing deleted successfully")

    @log_transaction_performance
    @store_atomic
    def expire_listings(self) -> ServiceResult[List[str]]:
        """
        Flip every active listing past its expiry date to ``expired``.

        Idempotent: already expired listings are left alone.

        Returns:
            ServiceResult with the ids flipped by this call
        """
        now = self.context.now()
        listings = self.context.store.get(LISTINGS_KEY, [])
        expired = [item for item in listings if item.get("status") == "active" and is_past_expiry(item, now)]
        if not expired:
            return service_ok([])

        for listing in expired:
            listing["status"] = "expired"
            listing["updated_at"] = to_iso(now)
        self.context.store.set(LISTINGS_KEY, listings)

        for listing in expired:
            ListingExpiredEvent(listing).publish(self.context.event_bus)
        listings_expired_total.inc(len(expired))
        self.logger.info(f"Expired {len(expired)} listings")
        return service_ok([listing["id"] for listing in expired])

    # ===== Helpers =====

    def _present(self, listing: dict, now: datetime) -> dict:
        presented = dict(listing)
        presented["status"] = effective_status(listing, now)
        presented["discount_badge"] = self.pricing_service.discount_percentage(
            listing["original_price"], listing["discounted_price"]
        )
        return presented

    @staticmethod
    def _to_record(validated: Dict[str, Any]) -> Dict[str, Any]:
        """Store representation of validated listing fields."""
        return {
            "food_name": validated["food_name"],
            "category": validated["category"],
            "description": validated.get("description", ""),
            "original_price": money_str(validated["original_price"]),
            "discounted_price": money_str(validated["discounted_price"]),
            "quantity": validated["quantity"],
            "expiry_date": to_iso(validated["expiry_date"]),
            "image_url": validated.get("image_url", ""),
            "pickup_only": validated.get("pickup_only", True),
            "pickup_address": validated.get("pickup_address", ""),
        }
