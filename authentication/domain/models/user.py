"""
User records.

Users are stored as plain dicts in the ``savebite_users`` collection. The
``password`` key always holds a hasher credential and never leaves the
service layer.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from utils.datetime_utils import to_iso
from utils.rbac import ROLE_BUSINESS

BUSINESS_FIELDS = ("business_name", "business_type", "business_address", "business_description")


def build_user(data: dict, credential: str, now: datetime, role: Optional[str] = None) -> dict:
    role = role or data["role"]
    user = {
        "id": str(uuid.uuid4()),
        "name": data["name"],
        "email": data["email"],
        "role": role,
        "password": credential,
        "status": "active",
        "phone": data.get("phone", ""),
        "created_at": to_iso(now),
    }
    if role == ROLE_BUSINESS:
        for field_name in BUSINESS_FIELDS:
            user[field_name] = data.get(field_name, "")
    return user


def public_user(user: Optional[dict]) -> Optional[dict]:
    if user is None:
        return None
    return {key: value for key, value in user.items() if key != "password"}


def find_user(users: List[dict], user_id: str) -> Optional[dict]:
    return next((u for u in users if u["id"] == user_id), None)


def find_user_by_email(users: List[dict], email: str) -> Optional[dict]:
    wanted = (email or "").strip().lower()
    return next((u for u in users if u["email"].lower() == wanted), None)
