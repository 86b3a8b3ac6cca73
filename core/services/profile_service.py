# =============================================================================
# core/services/profile_service.py - User Profile, Org and Warehouse Access
# =============================================================================
# Lookups that tie a Supabase auth user to their organization and the
# warehouses they may work in. Used by most authenticated routes.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import AccessDeniedError, DatabaseOperationError
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


class ProfileService:

    @staticmethod
    def get_profile(user_id: UUID | str) -> dict[str, Any] | None:
        """user_profiles row with the organization name joined in."""
        try:
            return SupabaseClient.fetch_single(
                "user_profiles",
                {"id": user_id},
                columns="id, full_name, email, organization_id, organizations(name)",
            )
        except SupabaseClientError as e:
            logger.warning(f"Could not load profile for {user_id}: {e}")
            return None

    @staticmethod
    def get_organization_id(user_id: UUID | str) -> str | None:
        profile = SupabaseClient.fetch_single(
            "user_profiles",
            {"id": user_id},
            columns="organization_id",
        )
        return profile.get("organization_id") if profile else None

    @staticmethod
    def get_user_warehouses(user_id: UUID | str) -> list[dict[str, Any]]:
        """
        Warehouses the user has an access row for.

        Access rows whose warehouse was deleted come back with a null join
        and are skipped.
        """
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("user_warehouse_access")
                .select("warehouse_id, warehouses(id, name, address)")
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch warehouses", str(e))

        return [row["warehouses"] for row in response.data or [] if row.get("warehouses")]

    @staticmethod
    def get_default_warehouse_id(user_id: UUID | str) -> str | None:
        """First warehouse the user has access to, if any."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("user_warehouse_access")
                .select("warehouse_id")
                .eq("user_id", normalize_uuid(user_id))
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Could not resolve default warehouse for {user_id}: {e}")
            return None

        rows = response.data or []
        return rows[0]["warehouse_id"] if rows else None

    @staticmethod
    def require_warehouse_access(user_id: UUID | str, warehouse_id: str) -> None:
        """
        Raises:
            AccessDeniedError: If the user has no access row for the warehouse
        """
        access = SupabaseClient.fetch_single(
            "user_warehouse_access",
            {"user_id": user_id, "warehouse_id": warehouse_id},
            columns="warehouse_id",
        )
        if not access:
            raise AccessDeniedError(
                "No access to this warehouse",
                code="WAREHOUSE_ACCESS_DENIED",
                details={"warehouse_id": warehouse_id},
            )

    @staticmethod
    def get_user_context(user_id: UUID | str, email: str | None) -> dict[str, Any]:
        """Profile plus warehouses, as returned to the mobile app at sign-in."""
        return {
            "id": normalize_uuid(user_id),
            "email": email,
            "profile": ProfileService.get_profile(user_id),
            "warehouses": ProfileService.get_user_warehouses(user_id),
        }
