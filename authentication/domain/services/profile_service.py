"""
ProfileService - user administration and self-service profile management.
"""

import logging
from typing import Optional

from authentication.domain.models import find_user, find_user_by_email, public_user
from authentication.infra.observability.metrics import profile_updates_total, record_password_change, user_status_changes
from authentication.serializers import (
    ChangePasswordSerializer,
    ProfilePatchSerializer,
    UserFilterSerializer,
    UserStatusSerializer,
)
from infrastructure.context import MarketplaceContext
from infrastructure.storage.keys import USERS_KEY
from utils.datetime_utils import to_iso
from utils.rbac import is_admin, is_self_or_admin, log_denial
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok, validation_err
from utils.transaction_utils import store_atomic, store_guarded

from .auth_service import AuthService


logger = logging.getLogger(__name__)


class ProfileService(BaseService):
    def __init__(self, context: MarketplaceContext, auth_service: Optional[AuthService] = None):
        super().__init__()
        self.context = context
        self.auth_service = auth_service or AuthService(context)

    @store_guarded
    def get_users(self, caller: Optional[dict], filters: Optional[dict] = None) -> ServiceResult:
        """
        List users for the admin panel.

        Filters: role, status, search (name, email or business name).
        Newest accounts first.
        """
        if not is_admin(caller):
            log_denial(caller, "get_users")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Only admins can view all users")

        serializer = UserFilterSerializer(data=filters or {})
        if not serializer.is_valid():
            return validation_err(serializer.errors)
        filters = serializer.validated_data

        users = self.context.store.get(USERS_KEY, [])
        if filters.get("role"):
            users = [u for u in users if u["role"] == filters["role"]]
        if filters.get("status"):
            users = [u for u in users if u.get("status") == filters["status"]]
        search = (filters.get("search") or "").strip().lower()
        if search:
            users = [
                u
                for u in users
                if search in u["name"].lower()
                or search in u["email"].lower()
                or search in (u.get("business_name") or "").lower()
            ]

        users.sort(key=lambda u: u["created_at"], reverse=True)
        return service_ok([public_user(u) for u in users])

    @store_guarded
    def get_user(self, caller: Optional[dict], user_id: str) -> ServiceResult:
        if not is_self_or_admin(caller, user_id):
            log_denial(caller, "get_user")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: You can only view your own profile")

        user = find_user(self.context.store.get(USERS_KEY, []), user_id)
        if user is None:
            return service_err(ErrorCodes.NOT_FOUND, "User not found")
        return service_ok(public_user(user))

    @BaseService.log_performance
    @store_atomic
    def update_user_status(self, caller: Optional[dict], target_id: str, status: str) -> ServiceResult:
        """
        Block, activate or park a user account (admin only).

        An admin can never change their own status, which rules out
        self-blocking.
        """
        if not is_admin(caller):
            log_denial(caller, "update_user_status")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Only admins can update user status")

        users = self.context.store.get(USERS_KEY, [])
        target = find_user(users, target_id)
        if target is None:
            return service_err(ErrorCodes.NOT_FOUND, "User not found")

        if target_id == caller["id"]:
            return service_err(ErrorCodes.VALIDATION_ERROR, "You cannot block your own account")

        serializer = UserStatusSerializer(data={"status": status})
        if not serializer.is_valid():
            return validation_err(serializer.errors)

        target["status"] = serializer.validated_data["status"]
        target["updated_at"] = to_iso(self.context.now())
        self.context.store.set(USERS_KEY, users)

        user_status_changes.labels(status=target["status"]).inc()
        logger.info(f"Admin {caller['id']} set user {target_id} status to {target['status']}")
        verb = "blocked" if target["status"] == "blocked" else "activated"
        return service_ok(public_user(target), f"User {verb} successfully")

    @BaseService.log_performance
    @store_atomic
    def update_user_profile(self, caller: Optional[dict], target_id: str, patch: dict) -> ServiceResult:
        """
        Merge a profile patch into a stored user.

        ``role`` is only honoured for admins. When callers update themselves
        the session's denormalized name/email/role follow.
        """
        if not is_self_or_admin(caller, target_id):
            log_denial(caller, "update_user_profile")
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: You can only update your own profile")

        users = self.context.store.get(USERS_KEY, [])
        target = find_user(users, target_id)
        if target is None:
            return service_err(ErrorCodes.NOT_FOUND, "User not found")

        serializer = ProfilePatchSerializer(data=patch or {}, partial=True)
        if not serializer.is_valid():
            return validation_err(serializer.errors)
        changes = dict(serializer.validated_data)

        if "role" in changes and not is_admin(caller):
            logger.info(f"Ignoring role change requested by non-admin {caller['id']}")
            changes.pop("role")

        new_email = changes.get("email")
        if new_email and new_email.lower() != target["email"].lower():
            owner = find_user_by_email(users, new_email)
            if owner is not None and owner["id"] != target_id:
                return service_err(ErrorCodes.CONFLICT, "Email is already registered")

        target.update(changes)
        target["updated_at"] = to_iso(self.context.now())
        self.context.store.set(USERS_KEY, users)

        if caller["id"] == target_id:
            self.auth_service.refresh_session(target)

        profile_updates_total.inc()
        return service_ok(public_user(target), "Profile updated successfully")

    @BaseService.log_performance
    @store_atomic
    def change_password(self, caller: Optional[dict], current_password: str, new_password: str) -> ServiceResult:
        if not caller:
            return service_err(ErrorCodes.AUTH_ERROR, "Unauthorized: Please log in")

        serializer = ChangePasswordSerializer(
            data={"current_password": current_password, "new_password": new_password}
        )
        if not serializer.is_valid():
            record_password_change(False)
            return validation_err(serializer.errors)

        users = self.context.store.get(USERS_KEY, [])
        user = find_user(users, caller["id"])
        if user is None:
            return service_err(ErrorCodes.NOT_FOUND, "User not found")

        if not self.context.password_hasher.verify(current_password, user["password"]):
            record_password_change(False)
            return service_err(ErrorCodes.AUTH_ERROR, "Current password is incorrect")

        user["password"] = self.context.password_hasher.hash(serializer.validated_data["new_password"])
        user["updated_at"] = to_iso(self.context.now())
        self.context.store.set(USERS_KEY, users)

        record_password_change(True)
        return service_ok(None, "Password changed successfully")
