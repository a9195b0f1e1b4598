"""
OrderService - Order Lifecycle Management

Turns the profile's cart into an immutable order, decrements listing stock,
and moves orders between pending, completed and cancelled.
Orchestrates cart and pricing services for the checkout workflow.
"""

import copy
import logging
import uuid
from typing import Dict, List, Optional

from infrastructure.context import MarketplaceContext
from infrastructure.storage.keys import LISTINGS_KEY, ORDERS_KEY
from marketplace.cart.domain.services.cart_service import CartService
from marketplace.cart.domain.services.pricing_service import PricingService
from marketplace.catalog.domain.models import effective_status
from marketplace.domain.events import OrderPlacedEvent, OrderStatusChangedEvent
from marketplace.infra.observability.metrics import (
    checkout_rejections_total,
    listings_sold_out_total,
    order_status_changes_total,
    order_value,
    orders_placed_total,
)
from marketplace.ordering.serializers import OrderDetailsSerializer, OrderFilterSerializer, OrderStatusSerializer
from utils.datetime_utils import to_iso
from utils.rbac import ROLE_BUSINESS, is_admin, is_customer, log_denial
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok, validation_err
from utils.transaction_utils import store_atomic, store_guarded

logger = logging.getLogger(__name__)


def order_business_ids(order: dict) -> set:
    return {item["business_id"] for item in order["items"]}


class OrderService(BaseService):
    """
    Service for managing order lifecycle.
    """

    def __init__(
        self,
        context: MarketplaceContext,
        cart_service: Optional[CartService] = None,
        pricing_service: Optional[PricingService] = None,
    ):
        """
        Initialize OrderService.

        Args:
            context: Store, profile, clock and event bus to act with
            cart_service: Service for the profile's cart (injected)
            pricing_service: Service for price calculations (injected)
        """
        super().__init__()
        self.context = context
        self.pricing_service = pricing_service or PricingService()
        self.cart_service = cart_service or CartService(context, self.pricing_service)

    @BaseService.log_performance
    @store_atomic
    def place_order(self, caller: Optional[dict], details: Dict) -> ServiceResult[dict]:
        """
        Check out the profile's cart.

        Business Logic:
        1. Require an authenticated caller and a non-empty cart
        2. Validate contact details and a future pickup time
        3. Resolve the pickup location among the cart's businesses
        4. Re-check every cart line against live stock (nothing is written on failure)
        5. Snapshot items and compute totals from the snapshot
        6. Decrement listing stock, marking emptied listings sold-out
        7. Clear the cart, persist the order, publish order.placed

        Deleted listings are skipped: their lines are still sold from the
        snapshot, there is just no stock left to decrement.

        Returns:
            ServiceResult with the new order dict
        """
        if not caller:
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Please log in to place an order")

        cart_items = self.cart_service.items()
        if not cart_items:
            checkout_rejections_total.labels(reason="empty_cart").inc()
            return service_err(ErrorCodes.VALIDATION_ERROR, "Cart is empty")

        now = self.context.now()
        serializer = OrderDetailsSerializer(data=details or {}, context={"now": now})
        if not serializer.is_valid():
            checkout_rejections_total.labels(reason="invalid_details").inc()
            return validation_err(serializer.errors)
        details = serializer.validated_data

        location_id = details.get("pickup_location_id") or cart_items[0]["business_id"]
        location_item = next((item for item in cart_items if item["business_id"] == location_id), None)
        if location_item is None:
            checkout_rejections_total.labels(reason="invalid_pickup_location").inc()
            return service_err(
                ErrorCodes.VALIDATION_ERROR, "Pickup location must be one of the businesses in your cart"
            )

        listings = self.context.store.get(LISTINGS_KEY, [])
        by_id = {listing["id"]: listing for listing in listings}
        stock_error = self._check_stock(cart_items, by_id, now)
        if stock_error:
            checkout_rejections_total.labels(reason="insufficient_stock").inc()
            return stock_error

        items = copy.deepcopy(cart_items)
        totals = self.pricing_service.calculate_totals(items)

        order = {
            "id": str(uuid.uuid4()),
            "user_id": caller["id"],
            "user_name": caller["name"],
            "user_email": caller["email"],
            "items": items,
            "customer_name": details["customer_name"],
            "customer_email": details["customer_email"],
            "customer_phone": details["customer_phone"],
            "pickup_time": to_iso(details["pickup_time"]),
            "pickup_location_id": location_id,
            "pickup_location_name": location_item.get("business_name"),
            "pickup_address": location_item.get("pickup_address") or "",
            "notes": details.get("notes", ""),
        }
        order.update(self.pricing_service.serialize_totals(totals))
        order["status"] = "pending"
        order["created_at"] = to_iso(now)

        for item in items:
            listing = by_id.get(item["id"])
            if listing is None:
                logger.info(f"Listing {item['id']} no longer exists; skipping stock decrement")
                continue
            listing["quantity"] = int(listing["quantity"]) - int(item["quantity"])
            listing["updated_at"] = to_iso(now)
            if listing["quantity"] <= 0:
                listing["quantity"] = max(listing["quantity"], 0)
                listing["status"] = "sold-out"
                listings_sold_out_total.inc()

        orders = self.context.store.get(ORDERS_KEY, [])
        orders.append(order)
        self.context.store.set(LISTINGS_KEY, listings)
        self.context.store.set(ORDERS_KEY, orders)
        self.cart_service.clear()

        OrderPlacedEvent(order, totals["total"]).publish(self.context.event_bus)
        orders_placed_total.labels(status="pending").inc()
        order_value.observe(float(totals["total"]))
        self.logger.info(f"Order {order['id']} placed by {caller['id']} ({len(items)} lines, total {order['total']})")
        return service_ok(order, "Order placed successfully")

    def _check_stock(self, cart_items: List[dict], by_id: Dict[str, dict], now) -> Optional[ServiceResult]:
        for item in cart_items:
            listing = by_id.get(item["id"])
            if listing is None:
                continue
            if effective_status(listing, now) != "active":
                return service_err(ErrorCodes.VALIDATION_ERROR, f"{item['name']} is no longer available")
            available = int(listing["quantity"])
            if available < int(item["quantity"]):
                return service_err(
                    ErrorCodes.VALIDATION_ERROR,
                    f"Not enough stock for {item['name']}: only {available} left",
                )
        return None

    @BaseService.log_performance
    @store_atomic
    def update_order_status(self, caller: Optional[dict], order_id: str, status: str) -> ServiceResult[dict]:
        """
        Move an order to pending, completed or cancelled.

        Allowed for admins and for businesses owning at least one item of
        the order. Stock is not restored on cancellation.
        """
        if not caller:
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Only businesses can update orders")

        orders = self.context.store.get(ORDERS_KEY, [])
        order = next((item for item in orders if item["id"] == order_id), None)
        if order is None:
            return service_err(ErrorCodes.NOT_FOUND, "Order not found")

        owns_items = caller.get("role") == ROLE_BUSINESS and caller["id"] in order_business_ids(order)
        if not (is_admin(caller) or owns_items):
            log_denial(caller, "update_order_status")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: You can only update orders for your listings")

        serializer = OrderStatusSerializer(data={"status": status})
        if not serializer.is_valid():
            return validation_err(serializer.errors)

        previous = order["status"]
        order["status"] = serializer.validated_data["status"]
        order["updated_at"] = to_iso(self.context.now())
        self.context.store.set(ORDERS_KEY, orders)

        if previous != order["status"]:
            OrderStatusChangedEvent(order, previous, actor_id=caller["id"]).publish(self.context.event_bus)
            order_status_changes_total.labels(status=order["status"]).inc()
        return service_ok(order, f"Order marked as {order['status']}")

    @store_guarded
    def get_orders(self, caller: Optional[dict], filters: Optional[Dict] = None) -> ServiceResult[List[dict]]:
        """
        Orders visible to the caller, newest first.

        Customers only see their own orders and businesses only orders
        containing their items, whatever the filters say. Admins see all.
        """
        if not caller:
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Please log in to view orders")

        serializer = OrderFilterSerializer(data=filters or {})
        if not serializer.is_valid():
            return validation_err(serializer.errors)
        filters = dict(serializer.validated_data)

        if is_customer(caller):
            filters["user_id"] = caller["id"]
        elif not is_admin(caller):
            filters["business_id"] = caller["id"]

        orders = self.context.store.get(ORDERS_KEY, [])
        if filters.get("user_id"):
            orders = [order for order in orders if order["user_id"] == filters["user_id"]]
        if filters.get("business_id"):
            orders = [order for order in orders if filters["business_id"] in order_business_ids(order)]
        if filters.get("status") and filters["status"] != "all":
            orders = [order for order in orders if order["status"] == filters["status"]]

        orders.sort(key=lambda order: order["created_at"], reverse=True)
        return service_ok(orders)

    @store_guarded
    def get_order(self, caller: Optional[dict], order_id: str) -> ServiceResult[dict]:
        if not caller:
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Please log in to view orders")

        order = next((item for item in self.context.store.get(ORDERS_KEY, []) if item["id"] == order_id), None)
        if order is None:
            return service_err(ErrorCodes.NOT_FOUND, "Order not found")

        visible = (
            is_admin(caller)
            or order["user_id"] == caller["id"]
            or (not is_customer(caller) and caller["id"] in order_business_ids(order))
        )
        if not visible:
            log_denial(caller, "get_order")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: You can only view your own orders")
        return service_ok(order)
