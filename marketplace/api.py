"""
MarketplaceApi - the function-style boundary consumed by presentation code.

Every call resolves the caller from the profile's session, delegates to the
domain services and returns a ServiceResult (``result.to_dict()`` gives the
``{"success": ..., "message": ...}`` shape).

Usage:
    from infrastructure.container import container

    api = container.api("browser-1")
    api.login("admin@savebite.com", "admin123")
    result = api.list_listings({"category": "meals", "sort": "discount"})
"""

import logging
from typing import Dict, Optional

from activity.services import ActivityLogService
from authentication.domain.services import AuthService, ProfileService
from infrastructure.context import MarketplaceContext
from marketplace.services import CartService, CatalogService, OrderService, PricingService, StatsService
from utils.rbac import is_admin, is_business, is_customer, log_denial
from utils.service_base import ErrorCodes, ServiceResult, service_err, service_ok
from utils.transaction_utils import store_guarded


logger = logging.getLogger(__name__)


class MarketplaceApi:
    def __init__(self, context: MarketplaceContext):
        self.context = context
        self.pricing_service = PricingService()
        self.auth_service = AuthService(context)
        self.profile_service = ProfileService(context, self.auth_service)
        self.catalog_service = CatalogService(context, self.pricing_service)
        self.cart_service = CartService(context, self.pricing_service)
        self.order_service = OrderService(context, self.cart_service, self.pricing_service)
        self.activity_service = ActivityLogService(context)
        self.stats_service = StatsService(context, self.activity_service, self.pricing_service)

    def _caller(self) -> Optional[dict]:
        return self.auth_service.current_user()

    # ===== Auth =====

    def register(self, data: Dict) -> ServiceResult:
        return self.auth_service.register(data)

    def login(self, email: str, password: str) -> ServiceResult:
        return self.auth_service.login(email, password)

    def logout(self) -> ServiceResult:
        return self.auth_service.logout()

    def current_user(self) -> Optional[dict]:
        return self._caller()

    # ===== Listings =====

    def list_listings(self, filters: Optional[Dict] = None) -> ServiceResult:
        return self.catalog_service.list_listings(filters)

    def get_listing(self, listing_id: str) -> ServiceResult:
        return self.catalog_service.get_listing(listing_id)

    @store_guarded
    def create_listing(self, data: Dict) -> ServiceResult:
        return self.catalog_service.create_listing(self._caller(), data)

    @store_guarded
    def update_listing(self, listing_id: str, patch: Dict) -> ServiceResult:
        return self.catalog_service.update_listing(self._caller(), listing_id, patch)

    @store_guarded
    def delete_listing(self, listing_id: str) -> ServiceResult:
        return self.catalog_service.delete_listing(self._caller(), listing_id)

    # ===== Cart =====

    @store_guarded
    def get_cart(self) -> ServiceResult:
        return service_ok(self.cart_service.summary())

    @store_guarded
    def add_to_cart(self, listing_id: str, quantity: int = 1) -> ServiceResult:
        """Add a listing to the cart (customers only), clamped to available stock."""
        caller = self._caller()
        if not caller:
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Please log in to add items to your cart")
        if not is_customer(caller):
            log_denial(caller, "add_to_cart")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Only customers can add items to the cart")

        with self.context.store.transaction():
            listing = self.catalog_service.find_listing(listing_id)
            if listing is None:
                return service_err(ErrorCodes.NOT_FOUND, "Listing not found")
            return self.cart_service.add_listing(listing, quantity)

    @store_guarded
    def update_cart_quantity(self, listing_id: str, quantity: int) -> ServiceResult:
        with self.context.store.transaction():
            listing = self.catalog_service.find_listing(listing_id)
            return self.cart_service.update_listing_quantity(listing_id, quantity, listing)

    def remove_from_cart(self, listing_id: str) -> ServiceResult:
        return self.cart_service.remove(listing_id)

    def clear_cart(self) -> ServiceResult:
        return self.cart_service.clear()

    # ===== Orders =====

    @store_guarded
    def place_order(self, details: Dict) -> ServiceResult:
        return self.order_service.place_order(self._caller(), details)

    @store_guarded
    def update_order_status(self, order_id: str, status: str) -> ServiceResult:
        return self.order_service.update_order_status(self._caller(), order_id, status)

    @store_guarded
    def get_orders(self, filters: Optional[Dict] = None) -> ServiceResult:
        return self.order_service.get_orders(self._caller(), filters)

    @store_guarded
    def get_order(self, order_id: str) -> ServiceResult:
        return self.order_service.get_order(self._caller(), order_id)

    # ===== Users =====

    @store_guarded
    def get_users(self, filters: Optional[Dict] = None) -> ServiceResult:
        return self.profile_service.get_users(self._caller(), filters)

    @store_guarded
    def get_user(self, user_id: str) -> ServiceResult:
        return self.profile_service.get_user(self._caller(), user_id)

    @store_guarded
    def update_user_status(self, user_id: str, status: str) -> ServiceResult:
        return self.profile_service.update_user_status(self._caller(), user_id, status)

    @store_guarded
    def update_user_profile(self, user_id: str, patch: Dict) -> ServiceResult:
        return self.profile_service.update_user_profile(self._caller(), user_id, patch)

    @store_guarded
    def change_password(self, current_password: str, new_password: str) -> ServiceResult:
        return self.profile_service.change_password(self._caller(), current_password, new_password)

    # ===== Dashboards =====

    @store_guarded
    def get_stats(self, scope: str = "overview", business_id: Optional[str] = None) -> ServiceResult:
        return self.stats_service.get_stats(self._caller(), scope, business_id)

    @store_guarded
    def recent_activity(self, limit: int = 10) -> ServiceResult:
        """Activity feed: everything for admins, their own listings and orders for businesses."""
        caller = self._caller()
        if is_admin(caller):
            return service_ok(self.activity_service.recent(limit=limit))
        if is_business(caller):
            return service_ok(self.activity_service.recent(limit=limit, business_id=caller["id"]))
        log_denial(caller, "recent_activity")
        return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Only businesses and admins can view activity")
