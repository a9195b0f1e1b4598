"""
Listing records.

Listings are stored as plain dicts in the ``savebite_listings`` collection;
prices as two-decimal strings, dates as ISO-8601 strings.
"""

from datetime import datetime

from utils.datetime_utils import parse_iso


def is_past_expiry(listing: dict, now: datetime) -> bool:
    expiry = parse_iso(listing.get("expiry_date"))
    return expiry is not None and expiry < now


def effective_status(listing: dict, now: datetime) -> str:
    """Status a reader should see: an active listing past its expiry date is expired."""
    if listing.get("status") == "active" and is_past_expiry(listing, now):
        return "expired"
    return listing.get("status")
