from datetime import datetime, timezone as dt_timezone
from typing import Optional

from django.utils import timezone
from django.utils.dateparse import parse_datetime


def to_iso(value: datetime) -> str:
    """Serialize an aware datetime for the store."""
    if timezone.is_naive(value):
        value = timezone.make_aware(value, dt_timezone.utc)
    return value.isoformat()


def parse_iso(value) -> Optional[datetime]:
    """
    Parse a stored or user-supplied timestamp.

    Accepts datetimes and ISO-8601 strings; naive values are taken as UTC.
    Returns None for empty or unparsable input.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = parse_datetime(str(value))
        except ValueError:
            return None
        if parsed is None:
            return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed
