from prometheus_client import Counter, Gauge, Histogram


# Order Metrics
orders_placed_total = Counter("savebite_marketplace_orders_placed_total", "Total orders placed", ["status"])
order_value = Histogram(
    "savebite_marketplace_order_value",
    "Order total distribution",
    buckets=[5, 10, 25, 50, 100, 200, 500, float("inf")],
)
order_status_changes_total = Counter(
    "savebite_marketplace_order_status_changes_total", "Order status transitions", ["status"]
)

# Listing Metrics
listings_created_total = Counter("savebite_marketplace_listings_created_total", "Total listings created", ["category"])
listings_expired_total = Counter("savebite_marketplace_listings_expired_total", "Listings flipped to expired")
listings_sold_out_total = Counter("savebite_marketplace_listings_sold_out_total", "Listings sold out by orders")

# Cart Metrics
cart_additions_total = Counter("savebite_marketplace_cart_additions_total", "Cart additions", ["result"])
checkout_rejections_total = Counter(
    "savebite_marketplace_checkout_rejections_total", "Checkouts rejected before any write", ["reason"]
)

# Stock Metrics
active_listings = Gauge("savebite_marketplace_active_listings", "Active listings seen by the last catalog read")
