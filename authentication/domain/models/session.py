from datetime import datetime, timedelta

from utils.datetime_utils import parse_iso, to_iso


def build_session(user: dict, now: datetime, ttl_days: int) -> dict:
    return {
        "user_id": user["id"],
        "user_email": user["email"],
        "user_name": user["name"],
        "user_role": user["role"],
        "created_at": to_iso(now),
        "expires_at": to_iso(now + timedelta(days=ttl_days)),
    }


def session_expired(session: dict, now: datetime) -> bool:
    """A session is valid only while now < expires_at; unparsable expiry counts as expired."""
    expires_at = parse_iso(session.get("expires_at"))
    return expires_at is None or now >= expires_at
