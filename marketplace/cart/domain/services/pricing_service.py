"""
PricingService - Price Calculations

Handles discount percentages and cart/order totals.
All calculations use Decimal for precision (no floating point errors);
amounts are persisted as two-decimal strings.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Iterable

from django.conf import settings

from utils.service_base import BaseService


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce a stored or user-supplied amount to Decimal (floats go through str)."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value) -> str:
    """Two-decimal string used for persisted amounts."""
    return str(quantize_money(to_decimal(value)))


class PricingService(BaseService):
    """
    Service for calculating discounts and totals.

    All methods are stateless (pure functions) for easy testing.
    """

    def __init__(self, tax_rate=None):
        """Initialize PricingService with the configured tax rate."""
        super().__init__()
        self.tax_rate = to_decimal(tax_rate if tax_rate is not None else settings.SAVEBITE["TAX_RATE"])

    def discount_percentage(self, original_price, discounted_price) -> int:
        """
        Integer discount percentage, rounded half-up.

        Example:
            >>> pricing_service.discount_percentage("12.99", "7.99")
            38
        """
        original = to_decimal(original_price)
        if original <= 0:
            return 0
        discounted = to_decimal(discounted_price)
        percentage = (original - discounted) / original * Decimal("100")
        return int(percentage.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def calculate_totals(self, items: Iterable[dict]) -> Dict[str, Decimal]:
        """
        Totals for cart items or order snapshots.

        subtotal = sum(discounted_price * quantity)
        savings  = sum((original_price - discounted_price) * quantity)
        tax      = subtotal * tax rate
        total    = subtotal + tax

        Example:
            >>> totals = pricing_service.calculate_totals(cart_items)
            >>> totals["total"]
            Decimal('17.26')
        """
        subtotal = Decimal("0")
        savings = Decimal("0")
        items_count = 0

        for item in items:
            quantity = int(item["quantity"])
            discounted = to_decimal(item["discounted_price"])
            original = to_decimal(item["original_price"])
            subtotal += discounted * quantity
            savings += (original - discounted) * quantity
            items_count += quantity

        subtotal = quantize_money(subtotal)
        tax = quantize_money(subtotal * self.tax_rate)
        return {
            "subtotal": subtotal,
            "savings": quantize_money(savings),
            "tax": tax,
            "total": subtotal + tax,
            "items_count": items_count,
        }

    @staticmethod
    def serialize_totals(totals: Dict[str, Decimal]) -> Dict[str, str]:
        """Money values as strings, ready for the store."""
        return {key: money_str(totals[key]) for key in ("subtotal", "savings", "tax", "total")}
