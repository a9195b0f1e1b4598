"""
CartService - Shopping Cart Management

One cart per profile, stored under the profile's cart key as a list of
listing snapshots taken when the listing is first added.

Two layers:
- primitives (add, set_quantity, remove, clear, totals) that trust the caller
- add_listing / update_listing_quantity, which check the live listing first
  and clamp quantities to the stock that is still available
"""

import logging
from typing import Dict, List, Optional

from infrastructure.context import MarketplaceContext
from marketplace.cart.serializers import AddToCartSerializer, UpdateCartQuantitySerializer
from marketplace.catalog.domain.models import effective_status
from marketplace.infra.observability.metrics import cart_additions_total
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok, validation_err
from utils.transaction_utils import store_atomic

from .pricing_service import PricingService


logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = (
    "business_id",
    "business_name",
    "original_price",
    "discounted_price",
    "image_url",
    "expiry_date",
    "pickup_only",
    "pickup_address",
)


def snapshot_listing(listing: dict, quantity: int) -> dict:
    """CartItem for ``listing``: an explicit copy of the fields an order needs."""
    item = {"id": listing["id"], "name": listing["food_name"], "quantity": quantity}
    for field_name in SNAPSHOT_FIELDS:
        item[field_name] = listing.get(field_name)
    return item


class CartService(BaseService):
    """
    Service for managing the profile's cart.

    Responsibilities:
    - Add, re-quantify, remove and clear cart items
    - Bound cart quantities by live listing stock
    - Calculate cart totals (delegates to PricingService)
    """

    def __init__(self, context: MarketplaceContext, pricing_service: Optional[PricingService] = None):
        """
        Initialize CartService.

        Args:
            context: Store and profile the cart belongs to
            pricing_service: PricingService for totals
        """
        super().__init__()
        self.context = context
        self.pricing_service = pricing_service or PricingService()

    def items(self) -> List[dict]:
        return self.context.store.get(self.context.cart_key, [])

    def _save(self, items: List[dict]) -> None:
        self.context.store.set(self.context.cart_key, items)

    # ===== Primitives =====

    @store_atomic
    def add(self, item: dict, quantity: int = 1) -> ServiceResult[List[dict]]:
        """
        Add ``quantity`` of a cart item, accumulating onto an existing entry.

        No stock check happens here; use add_listing for that.
        """
        if quantity < 1:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Quantity must be at least 1")

        items = self.items()
        existing = next((entry for entry in items if entry["id"] == item["id"]), None)
        if existing:
            existing["quantity"] += quantity
        else:
            entry = dict(item)
            entry["quantity"] = quantity
            items.append(entry)
        self._save(items)
        return service_ok(items, "Item added to cart")

    @store_atomic
    def set_quantity(self, item_id: str, quantity: int) -> ServiceResult[List[dict]]:
        """Set an entry's quantity; zero or less removes it."""
        items = self.items()
        existing = next((entry for entry in items if entry["id"] == item_id), None)
        if existing is None:
            return service_err(ErrorCodes.NOT_FOUND, "Item not in cart")

        if quantity <= 0:
            items = [entry for entry in items if entry["id"] != item_id]
            self._save(items)
            return service_ok(items, "Item removed from cart")

        existing["quantity"] = quantity
        self._save(items)
        return service_ok(items, "Cart updated")

    @store_atomic
    def remove(self, item_id: str) -> ServiceResult[List[dict]]:
        """Remove an entry; removing an absent item is a no-op."""
        items = [entry for entry in self.items() if entry["id"] != item_id]
        self._save(items)
        return service_ok(items, "Item removed from cart")

    @store_atomic
    def clear(self) -> ServiceResult[List[dict]]:
        self._save([])
        return service_ok([], "Cart cleared")

    def totals(self, items: Optional[List[dict]] = None) -> Dict:
        """Pure totals for the given items (default: the stored cart)."""
        return self.pricing_service.calculate_totals(self.items() if items is None else items)

    # ===== Stock-aware operations =====

    @BaseService.log_performance
    @store_atomic
    def add_listing(self, listing: dict, quantity: int = 1) -> ServiceResult[Dict]:
        """
        Add a live listing to the cart.

        Business Logic:
        1. Reject expired, sold-out or otherwise inactive listings
        2. Clamp the accumulated quantity to the listing's available quantity
        3. Report whether the requested quantity had to be adjusted

        Returns:
            ServiceResult with {"item", "adjusted", "items"}
        """
        serializer = AddToCartSerializer(data={"quantity": quantity})
        if not serializer.is_valid():
            return validation_err(serializer.errors)
        quantity = serializer.validated_data["quantity"]

        status = effective_status(listing, self.context.now())
        if status == "expired":
            cart_additions_total.labels(result="rejected").inc()
            return service_err(ErrorCodes.VALIDATION_ERROR, "This listing has expired")
        if status != "active" or int(listing.get("quantity", 0)) <= 0:
            cart_additions_total.labels(result="rejected").inc()
            return service_err(ErrorCodes.VALIDATION_ERROR, "This listing is no longer available")

        available = int(listing["quantity"])
        items = self.items()
        existing = next((entry for entry in items if entry["id"] == listing["id"]), None)
        in_cart = existing["quantity"] if existing else 0

        if in_cart >= available:
            cart_additions_total.labels(result="rejected").inc()
            return service_err(
                ErrorCodes.VALIDATION_ERROR,
                f"Only {available} available and all of them are already in your cart",
            )

        wanted = in_cart + quantity
        adjusted = wanted > available
        new_quantity = min(wanted, available)

        if existing:
            existing["quantity"] = new_quantity
            item = existing
        else:
            item = snapshot_listing(listing, new_quantity)
            items.append(item)
        self._save(items)

        cart_additions_total.labels(result="adjusted" if adjusted else "added").inc()
        message = f"Only {available} available, quantity adjusted" if adjusted else "Item added to cart"
        return service_ok({"item": item, "adjusted": adjusted, "items": items}, message)

    @store_atomic
    def update_listing_quantity(self, item_id: str, quantity: int, listing: Optional[dict]) -> ServiceResult[Dict]:
        """
        Re-quantify a cart entry, clamped to the live listing's stock.

        ``listing`` is None when the listing has been deleted; the entry can
        then only be lowered or removed.
        """
        items = self.items()
        existing = next((entry for entry in items if entry["id"] == item_id), None)
        if existing is None:
            return service_err(ErrorCodes.NOT_FOUND, "Item not in cart")

        serializer = UpdateCartQuantitySerializer(data={"quantity": quantity})
        if not serializer.is_valid():
            return validation_err(serializer.errors)
        quantity = serializer.validated_data["quantity"]

        if quantity <= 0:
            result = self.set_quantity(item_id, 0)
            return result.map(lambda remaining: {"item": None, "adjusted": False, "items": remaining})

        if listing is None:
            if quantity > existing["quantity"]:
                return service_err(ErrorCodes.VALIDATION_ERROR, "This listing is no longer available")
            limit = existing["quantity"]
        elif effective_status(listing, self.context.now()) != "active":
            limit = 0
        else:
            limit = int(listing.get("quantity", 0))
        if limit <= 0:
            return service_err(ErrorCodes.VALIDATION_ERROR, "This listing is no longer available")

        adjusted = quantity > limit
        existing["quantity"] = min(quantity, limit)
        self._save(items)
        message = f"Only {limit} available, quantity adjusted" if adjusted else "Cart updated"
        return service_ok({"item": existing, "adjusted": adjusted, "items": items}, message)

    def summary(self) -> Dict:
        """Cart items plus serialized totals, as returned by get_cart."""
        items = self.items()
        totals = self.totals(items)
        return {
            "items": items,
            "item_count": totals["items_count"],
            "totals": self.pricing_service.serialize_totals(totals),
        }
