"""
StatsService - Dashboard Aggregates

Read-only aggregations over users, listings, orders and the activity log,
scoped by the caller's role:

- admin: platform-wide counts, revenue, category breakdown, monthly orders
- business: the caller's own listings and the orders containing them
- overview: public impact numbers for any signed-in user

Cancelled orders are left out of revenue and food-saved figures.
"""

import logging
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from django.conf import settings

from activity.services import ActivityLogService
from infrastructure.context import MarketplaceContext
from infrastructure.storage.keys import LISTINGS_KEY, ORDERS_KEY, USERS_KEY
from marketplace.cart.domain.services.pricing_service import PricingService, money_str, to_decimal
from marketplace.catalog.domain.models import effective_status
from marketplace.catalog.serializers import CATEGORIES
from utils.datetime_utils import parse_iso
from utils.rbac import ROLE_ADMIN, ROLE_BUSINESS, ROLE_CUSTOMER, is_admin, is_business, log_denial
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from utils.transaction_utils import store_guarded

logger = logging.getLogger(__name__)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Estimated kilograms of food per unit
MEAL_UNIT_WEIGHT = Decimal("0.5")
OTHER_UNIT_WEIGHT = Decimal("0.3")

SCOPES = ("admin", "business", "overview")


def _counted_orders(orders: List[dict]) -> List[dict]:
    return [order for order in orders if order.get("status") != "cancelled"]


def _one_decimal(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _percent(part: int, whole: int) -> int:
    if not whole:
        return 0
    return int((Decimal(part) / Decimal(whole) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StatsService(BaseService):
    def __init__(
        self,
        context: MarketplaceContext,
        activity_service: Optional[ActivityLogService] = None,
        pricing_service: Optional[PricingService] = None,
    ):
        super().__init__()
        self.context = context
        self.activity_service = activity_service or ActivityLogService(context)
        self.pricing_service = pricing_service or PricingService()

    @BaseService.log_performance
    @store_guarded
    def get_stats(self, caller: Optional[dict], scope: str = "overview", business_id: Optional[str] = None) -> ServiceResult[Dict]:
        """
        Dashboard numbers for ``scope`` (admin, business or overview).

        ``business_id`` lets an admin look at another business's dashboard;
        businesses always see their own.
        """
        if not caller:
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Please log in to view stats")
        if scope not in SCOPES:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Unknown stats scope: {scope}")

        if scope == "admin":
            if not is_admin(caller):
                log_denial(caller, "admin_stats")
                return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Only admins can view admin stats")
            return service_ok(self._admin_stats())

        if scope == "business":
            if not is_business(caller):
                log_denial(caller, "business_stats")
                return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Only businesses can view business stats")
            owner_id = business_id if (business_id and is_admin(caller)) else caller["id"]
            return service_ok(self._business_stats(owner_id))

        return service_ok(self._overview_stats())

    def _admin_stats(self) -> Dict:
        users = self.context.store.get(USERS_KEY, [])
        listings = self.context.store.get(LISTINGS_KEY, [])
        orders = self.context.store.get(ORDERS_KEY, [])
        counted = _counted_orders(orders)
        now = self.context.now()

        return {
            "total_users": len(users),
            "total_customers": sum(1 for u in users if u["role"] == ROLE_CUSTOMER),
            "total_businesses": sum(1 for u in users if u["role"] == ROLE_BUSINESS),
            "total_admins": sum(1 for u in users if u["role"] == ROLE_ADMIN),
            "total_listings": len(listings),
            "active_listings": sum(1 for listing in listings if effective_status(listing, now) == "active"),
            "total_orders": len(orders),
            "total_revenue": money_str(sum((to_decimal(order["total"]) for order in counted), Decimal("0"))),
            "total_food_saved": sum(item["quantity"] for order in counted for item in order["items"]),
            "recent_activity": self.activity_service.recent(limit=5),
            "category_breakdown": self.category_breakdown(listings),
            "monthly_orders": self.monthly_orders(orders),
        }

    def _business_stats(self, business_id: str) -> Dict:
        now = self.context.now()
        listings = [
            listing for listing in self.context.store.get(LISTINGS_KEY, []) if listing["business_id"] == business_id
        ]
        orders = [
            order
            for order in self.context.store.get(ORDERS_KEY, [])
            if any(item["business_id"] == business_id for item in order["items"])
        ]
        own_items = [
            item for order in _counted_orders(orders) for item in order["items"] if item["business_id"] == business_id
        ]

        window_end = now + timedelta(hours=int(settings.SAVEBITE["EXPIRING_SOON_HOURS"]))
        expiring = []
        for listing in listings:
            expiry = parse_iso(listing.get("expiry_date"))
            if listing.get("status") == "active" and expiry is not None and now < expiry < window_end:
                presented = dict(listing)
                presented["discount_badge"] = self.pricing_service.discount_percentage(
                    listing["original_price"], listing["discounted_price"]
                )
                expiring.append(presented)
        expiring.sort(key=lambda listing: parse_iso(listing["expiry_date"]))

        revenue = sum(
            (to_decimal(item["discounted_price"]) * item["quantity"] for item in own_items),
            Decimal("0"),
        )
        return {
            "business_id": business_id,
            "active_listings": sum(1 for listing in listings if effective_status(listing, now) == "active"),
            "pending_orders": sum(1 for order in orders if order["status"] == "pending"),
            "food_saved": sum(item["quantity"] for item in own_items),
            "total_revenue": money_str(revenue),
            "recent_activity": self.activity_service.recent(limit=3, business_id=business_id),
            "expiring_listings": expiring,
        }

    def _overview_stats(self) -> Dict:
        users = self.context.store.get(USERS_KEY, [])
        orders = _counted_orders(self.context.store.get(ORDERS_KEY, []))
        meals_saved = sum(item["quantity"] for order in orders for item in order["items"])
        co2_per_meal = to_decimal(settings.SAVEBITE["CO2_KG_PER_MEAL"])
        return {
            "total_meals_saved": meals_saved,
            "co2_reduced": _one_decimal(co2_per_meal * meals_saved),
            "partner_businesses": sum(1 for u in users if u["role"] == ROLE_BUSINESS),
        }

    @staticmethod
    def category_breakdown(listings: List[dict]) -> List[Dict]:
        """
        Listing count, estimated weight and share per category.

        Weight is 0.5 kg per unit for meals and 0.3 kg otherwise, rounded to
        one decimal. Unknown categories count as "other".
        """
        buckets = {category: {"count": 0, "weight": Decimal("0")} for category in CATEGORIES}
        for listing in listings:
            category = listing.get("category") if listing.get("category") in buckets else "other"
            unit_weight = MEAL_UNIT_WEIGHT if category == "meals" else OTHER_UNIT_WEIGHT
            buckets[category]["count"] += 1
            buckets[category]["weight"] += unit_weight * int(listing.get("quantity", 0))

        return [
            {
                "category": category,
                "count": data["count"],
                "weight": _one_decimal(data["weight"]),
                "percentage": _percent(data["count"], len(listings)),
            }
            for category, data in buckets.items()
        ]

    def monthly_orders(self, orders: List[dict]) -> List[Dict]:
        """Orders per month of the current year; months still to come are None."""
        now = self.context.now()
        counts = [0] * 12
        for order in orders:
            created = parse_iso(order.get("created_at"))
            if created is not None and created.year == now.year:
                counts[created.month - 1] += 1
        return [
            {"month": month, "value": counts[index] if index < now.month else None}
            for index, month in enumerate(MONTHS)
        ]
