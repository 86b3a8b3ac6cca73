# =============================================================================
# core/services/inventory_service.py - Inventory Lookup and Barcodes
# =============================================================================
# Mobile inventory browsing/scanning plus barcode assignment for new items.
# Barcode naming rules live in lib.barcodes; this service adds the
# database lookups that keep generated barcodes unique.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseOperationError, InvalidRequestError
from lib.barcodes import format_barcode, generate_prefix, next_serial_from_barcodes
from lib.supabase_client import SupabaseClient
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

INVENTORY_COLUMNS = (
    "id, name, barcode, category, subcategory, quantity_on_hand, "
    "unit_value, location, maintenance_status"
)

MAX_BARCODE_ATTEMPTS = 1000


class BarcodeExhaustedError(DatabaseOperationError):
    def __init__(self, prefix: str):
        super().__init__(
            "generate barcode",
            f"No free barcode for prefix {prefix} after {MAX_BARCODE_ATTEMPTS} attempts",
        )


class InventoryService:

    @staticmethod
    def list_inventory(
        user_id: UUID | str,
        warehouse_id: str | None = None,
        category: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """
        Inventory page for the mobile app, ordered by name.

        Raises:
            AccessDeniedError: If warehouse_id is given and the user can't see it
        """
        if warehouse_id:
            ProfileService.require_warehouse_access(user_id, warehouse_id)

        client = SupabaseClient.get_client()
        try:
            query = client.table("inventory_items").select(INVENTORY_COLUMNS)
            if warehouse_id:
                query = query.eq("warehouse_id", warehouse_id)
            if category:
                query = query.eq("category", category)
            if search:
                query = query.or_(f"name.ilike.%{search}%,barcode.ilike.%{search}%")
            response = (
                query.order("name")
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch inventory", str(e))

        return response.data or []

    @staticmethod
    def find_by_barcode(barcode: str | None, warehouse_id: str | None = None) -> dict[str, Any] | None:
        if not barcode:
            raise InvalidRequestError("Barcode is required")

        filters = {"barcode": barcode}
        if warehouse_id:
            filters["warehouse_id"] = warehouse_id
        return SupabaseClient.fetch_single("inventory_items", filters, columns=INVENTORY_COLUMNS)

    # -------------------------------------------------------------------------
    # Barcode Assignment
    # -------------------------------------------------------------------------

    @staticmethod
    def get_next_serial(prefix: str) -> str:
        """
        Next serial for a prefix based on existing barcodes.

        Falls back to "001" if the lookup fails.
        """
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("inventory_items")
                .select("barcode")
                .ilike("barcode", f"{prefix}-%")
                .execute()
            )
        except Exception as e:
            logger.warning(f"Serial lookup failed for {prefix}: {e}")
            return "001"

        return next_serial_from_barcodes(row.get("barcode") for row in response.data or [])

    @staticmethod
    def barcode_exists(barcode: str) -> bool:
        return SupabaseClient.fetch_single("inventory_items", {"barcode": barcode}, columns="id") is not None

    @staticmethod
    def generate_barcode(item_name: str) -> str:
        """
        Unique "PREFIX-NNN" barcode for a new item.

        Starts at the next serial and walks forward while the candidate is
        taken.

        Raises:
            BarcodeExhaustedError: After MAX_BARCODE_ATTEMPTS collisions
        """
        prefix = generate_prefix(item_name)
        start = int(InventoryService.get_next_serial(prefix))

        for attempt in range(MAX_BARCODE_ATTEMPTS):
            candidate = format_barcode(prefix, start + attempt)
            if not InventoryService.barcode_exists(candidate):
                return candidate

        raise BarcodeExhaustedError(prefix)

    @staticmethod
    def is_barcode_already_scanned(barcode: str, job_id: str) -> bool:
        """True if this barcode already has a scan event on the job."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("scan_events")
                .select("id")
                .eq("barcode", barcode)
                .eq("job_id", job_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("check scan history", str(e))
        return bool(response.data)
