"""
Marketplace Service Layer

This package gathers the business logic of the marketplace app, organized
into domain services that each take a MarketplaceContext.

Services:
- CatalogService: listing browsing, CRUD and expiry reconciliation
- CartService: per-profile cart operations
- OrderService: checkout and order lifecycle
- PricingService: discount percentages and totals
- StatsService: role-scoped dashboard aggregates

Usage:
    from marketplace.services import CatalogService

    catalog_service = CatalogService(context)
    result = catalog_service.list_listings({"category": "meals"})

    if result.ok:
        listings = result.value
    else:
        error = result.error
"""

from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from marketplace.cart.domain.services import CartService, PricingService
from marketplace.catalog.domain.services import CatalogService
from marketplace.ordering.domain.services import OrderService
from marketplace.stats.domain.services import StatsService

__all__ = [
    "BaseService",
    "ErrorCodes",
    "ServiceResult",
    "service_ok",
    "service_err",
    "CartService",
    "CatalogService",
    "OrderService",
    "PricingService",
    "StatsService",
]
