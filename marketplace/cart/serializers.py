from rest_framework import serializers


class AddToCartSerializer(serializers.Serializer):
    """Quantity requested when a listing is added to the cart."""

    quantity = serializers.IntegerField(
        min_value=1, default=1, error_messages={"min_value": "Quantity must be at least 1"}
    )


class UpdateCartQuantitySerializer(serializers.Serializer):
    """New quantity for a cart entry; zero or less removes it."""

    quantity = serializers.IntegerField()
