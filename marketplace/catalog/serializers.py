from rest_framework import serializers

CATEGORIES = ("meals", "bakery", "produce", "dairy", "other")
LISTING_STATUSES = ("active", "sold-out", "expired")
SORT_OPTIONS = ("expiry", "price-asc", "price-desc", "discount")

# Fields a create or an update may set; everything else is assigned by the catalog
EDITABLE_FIELDS = (
    "food_name",
    "category",
    "description",
    "original_price",
    "discounted_price",
    "quantity",
    "expiry_date",
    "image_url",
    "pickup_only",
    "pickup_address",
)


class ListingSerializer(serializers.Serializer):
    """
    Validates a complete listing (a new one, or an existing one merged with a patch).

    Context:
        now: current time of the acting context
        check_expiry: reject an expiry date that is not in the future (default True)
    """

    food_name = serializers.CharField(max_length=120)
    category = serializers.ChoiceField(choices=CATEGORIES)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    original_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    discounted_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=0)
    expiry_date = serializers.DateTimeField()
    image_url = serializers.CharField(required=False, allow_blank=True, default="")
    pickup_only = serializers.BooleanField(required=False, default=True)
    pickup_address = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(choices=LISTING_STATUSES, required=False)

    def validate_expiry_date(self, value):
        now = self.context.get("now")
        if self.context.get("check_expiry", True) and now is not None and value <= now:
            raise serializers.ValidationError("Expiry date must be in the future")
        return value

    def validate(self, attrs):
        if attrs["discounted_price"] >= attrs["original_price"]:
            raise serializers.ValidationError("Discounted price must be less than original price")
        return attrs


class ListingFilterSerializer(serializers.Serializer):
    business_id = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=LISTING_STATUSES, required=False)
    category = serializers.ChoiceField(choices=("all",) + CATEGORIES, required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    sort = serializers.ChoiceField(choices=SORT_OPTIONS, required=False)
    limit = serializers.IntegerField(required=False, min_value=1)
