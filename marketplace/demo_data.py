"""
Demo data: the default admin, three partner businesses and their listings.

Seeding is idempotent. The admin is only added when no user has its email,
businesses only when there are no business users, listings only when the
catalog is empty.
"""

import logging
import uuid
from datetime import timedelta
from typing import Dict, Optional

from django.contrib.auth.hashers import make_password

from infrastructure.context import MarketplaceContext
from infrastructure.storage.keys import LISTINGS_KEY, USERS_KEY
from utils.datetime_utils import to_iso
from utils.rbac import ROLE_ADMIN, ROLE_BUSINESS

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@savebite.com"
ADMIN_PASSWORD = "admin123"

DEMO_BUSINESSES = (
    {
        "name": "Green Garden Cafe",
        "email": "contact@greengarden.com",
        "business_type": "cafe",
        "business_address": "123 Main St, Anytown, USA",
    },
    {
        "name": "Fresh Bakery",
        "email": "info@freshbakery.com",
        "business_type": "bakery",
        "business_address": "456 Oak Ave, Anytown, USA",
    },
    {
        "name": "Sunny Grocery",
        "email": "hello@sunnygrocery.com",
        "business_type": "grocery",
        "business_address": "789 Pine Rd, Anytown, USA",
    },
)

PEXELS = "https://images.pexels.com/photos/{0}/pexels-photo-{0}.jpeg?auto=compress&cs=tinysrgb&w=1260&h=750&dpr=2"

# (business index, food name, category, description, original, discounted, quantity, days left, image, pickup only)
DEMO_LISTINGS = (
    (
        0,
        "Vegetable Pasta Salad",
        "meals",
        "Fresh pasta salad with seasonal vegetables, olives, and Italian dressing. Perfect for a quick lunch!",
        "12.99",
        "7.99",
        5,
        2,
        1373915,
        True,
    ),
    (
        0,
        "Avocado Sandwich",
        "meals",
        "Whole grain bread with avocado, tomato, lettuce and our special herb mayo. Healthy and delicious!",
        "9.99",
        "5.99",
        3,
        1,
        1647163,
        True,
    ),
    (
        1,
        "Assorted Pastry Box",
        "bakery",
        "A box of our daily fresh pastries including croissants, Danish pastries, and cinnamon rolls.",
        "18.99",
        "11.99",
        4,
        1,
        205961,
        True,
    ),
    (
        1,
        "Artisan Bread Loaf",
        "bakery",
        "Freshly baked artisan sourdough bread. Crispy crust with soft inside.",
        "7.99",
        "4.99",
        6,
        2,
        1756062,
        True,
    ),
    (
        2,
        "Organic Fruit Box",
        "produce",
        "A mix of seasonal organic fruits including apples, oranges, and bananas.",
        "15.99",
        "9.99",
        8,
        3,
        1132047,
        False,
    ),
    (
        2,
        "Fresh Dairy Bundle",
        "dairy",
        "A bundle of fresh dairy products including milk, yogurt, and cheese, approaching their sell-by date.",
        "22.99",
        "12.99",
        3,
        2,
        248412,
        True,
    ),
)


def seed_demo_data(context: MarketplaceContext, business_password: Optional[str] = None) -> Dict[str, int]:
    """
    Seed the store behind ``context``.

    Demo businesses get an unusable password unless ``business_password``
    is given.

    Returns:
        Counts of users and listings created by this call
    """
    created = {"users": 0, "listings": 0}
    now = context.now()

    with context.store.transaction():
        users = context.store.get(USERS_KEY, [])

        if not any(user["email"].lower() == ADMIN_EMAIL for user in users):
            users.append(
                {
                    "id": str(uuid.uuid4()),
                    "name": "Admin User",
                    "email": ADMIN_EMAIL,
                    "role": ROLE_ADMIN,
                    "password": context.password_hasher.hash(ADMIN_PASSWORD),
                    "status": "active",
                    "phone": "",
                    "created_at": to_iso(now),
                }
            )
            created["users"] += 1

        businesses = [user for user in users if user["role"] == ROLE_BUSINESS]
        if not businesses:
            for details in DEMO_BUSINESSES:
                credential = (
                    context.password_hasher.hash(business_password) if business_password else make_password(None)
                )
                business = {
                    "id": str(uuid.uuid4()),
                    "name": details["name"],
                    "email": details["email"],
                    "role": ROLE_BUSINESS,
                    "password": credential,
                    "status": "active",
                    "phone": "",
                    "business_name": details["name"],
                    "business_type": details["business_type"],
                    "business_address": details["business_address"],
                    "business_description": "",
                    "created_at": to_iso(now),
                }
                users.append(business)
                businesses.append(business)
                created["users"] += 1

        context.store.set(USERS_KEY, users)

        listings = context.store.get(LISTINGS_KEY, [])
        if not listings:
            for index, name, category, description, original, discounted, quantity, days, image, pickup_only in DEMO_LISTINGS:
                business = businesses[index % len(businesses)]
                listings.append(
                    {
                        "id": str(uuid.uuid4()),
                        "business_id": business["id"],
                        "business_name": business.get("business_name") or business["name"],
                        "food_name": name,
                        "category": category,
                        "description": description,
                        "original_price": original,
                        "discounted_price": discounted,
                        "quantity": quantity,
                        "expiry_date": to_iso(now + timedelta(days=days)),
                        "image_url": PEXELS.format(image),
                        "pickup_only": pickup_only,
                        "pickup_address": business.get("business_address", ""),
                        "status": "active",
                        "created_at": to_iso(now),
                    }
                )
                created["listings"] += 1
            context.store.set(LISTINGS_KEY, listings)

    logger.info(f"Demo data seeded: {created['users']} users, {created['listings']} listings")
    return created
