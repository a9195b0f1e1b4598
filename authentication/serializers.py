from rest_framework import serializers

from utils.rbac import ROLE_BUSINESS, ROLE_CUSTOMER, ROLES

USER_STATUSES = ("active", "blocked", "pending")


class RegisterSerializer(serializers.Serializer):
    """Self-service sign-up. Admin accounts are never created through registration."""

    name = serializers.CharField(max_length=150, trim_whitespace=True)
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)
    role = serializers.ChoiceField(choices=[ROLE_CUSTOMER, ROLE_BUSINESS])
    phone = serializers.CharField(required=False, allow_blank=True, default="")

    business_name = serializers.CharField(required=False, allow_blank=True, default="")
    business_type = serializers.CharField(required=False, allow_blank=True, default="")
    business_address = serializers.CharField(required=False, allow_blank=True, default="")
    business_description = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["role"] == ROLE_BUSINESS:
            attrs["business_name"] = attrs.get("business_name") or attrs["name"]
            attrs["business_type"] = attrs.get("business_type") or "other"
        else:
            for field_name in ("business_name", "business_type", "business_address", "business_description"):
                attrs.pop(field_name, None)
        return attrs


class ProfilePatchSerializer(serializers.Serializer):
    """Partial profile update; only the keys present in the patch are returned."""

    name = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=ROLES, required=False)
    business_name = serializers.CharField(required=False, allow_blank=True)
    business_type = serializers.CharField(required=False, allow_blank=True)
    business_address = serializers.CharField(required=False, allow_blank=True)
    business_description = serializers.CharField(required=False, allow_blank=True)


class UserStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=USER_STATUSES)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(trim_whitespace=False)
    new_password = serializers.CharField(trim_whitespace=False, min_length=6)

    def validate(self, attrs):
        if attrs["current_password"] == attrs["new_password"]:
            raise serializers.ValidationError("New password must differ from the current password")
        return attrs


class UserFilterSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLES, required=False)
    status = serializers.ChoiceField(choices=USER_STATUSES, required=False)
    search = serializers.CharField(required=False, allow_blank=True)
