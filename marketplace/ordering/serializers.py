from rest_framework import serializers

ORDER_STATUSES = ("pending", "completed", "cancelled")


class OrderDetailsSerializer(serializers.Serializer):
    """
    Checkout form.

    Context:
        now: current time; the pickup time must be later
    """

    customer_name = serializers.CharField(max_length=150)
    customer_email = serializers.EmailField()
    customer_phone = serializers.CharField(max_length=40)
    pickup_time = serializers.DateTimeField()
    pickup_location_id = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_pickup_time(self, value):
        now = self.context.get("now")
        if now is not None and value <= now:
            raise serializers.ValidationError("Pickup time must be in the future")
        return value


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ORDER_STATUSES)


class OrderFilterSerializer(serializers.Serializer):
    user_id = serializers.CharField(required=False)
    business_id = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=("all",) + ORDER_STATUSES, required=False)
