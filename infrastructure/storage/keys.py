"""Store keys for the marketplace collections."""

USERS_KEY = "savebite_users"
LISTINGS_KEY = "savebite_listings"
ORDERS_KEY = "savebite_orders"
ACTIVITY_KEY = "savebite_activity"

CART_KEY_PREFIX = "savebite_cart"
SESSION_KEY_PREFIX = "savebite_session"


def cart_key(profile_id: str) -> str:
    return f"{CART_KEY_PREFIX}:{profile_id}"


def session_key(profile_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}:{profile_id}"
