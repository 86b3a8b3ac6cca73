# =============================================================================
# core/services/scan_service.py - Warehouse Scan Logic
# =============================================================================
# Check-out/check-in state lives in the scan_direction() database function;
# this service only validates input and relays the result. Rig scans move
# every item in a container with one barcode.
# =============================================================================

import logging
from typing import Any

from app.exceptions import (
    DatabaseOperationError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from core.models.scan import RigScanRequest, ScanDirection, ScanDirectionRequest
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

# Exact-case only: "Out" is rejected
ACCEPTED_DIRECTIONS = {d.value for d in ScanDirection} | {d.value.lower() for d in ScanDirection}
RIG_BARCODE_PREFIX = "RIG-"


class ScanService:
    """Scan handling for handheld scanners and the warehouse dashboard."""

    @staticmethod
    def scan_direction(request: ScanDirectionRequest) -> dict[str, Any]:
        """
        Record one item moving OUT to or IN from a job.

        Returns:
            {"ok": True, "result": <scan_direction() return value>}

        Raises:
            InvalidRequestError: Missing fields, bad direction, or the
                database function rejected the scan
        """
        if not request.job_code or not request.code or not request.direction:
            raise InvalidRequestError("Missing jobCode, code, or direction")

        if request.direction not in ACCEPTED_DIRECTIONS:
            raise InvalidRequestError("direction must be OUT or IN", code="INVALID_DIRECTION")

        direction = ScanDirection(request.direction.upper())
        params = {
            "p_job_code": request.job_code,
            "p_serial_or_barcode": request.code,
            "p_direction": direction.value,
            "p_scanned_by": request.scanned_by or None,
            "p_location": request.location or None,
        }

        try:
            result = SupabaseClient.call_rpc("scan_direction", params)
        except SupabaseClientError as e:
            logger.warning(f"scan_direction rejected {request.code} for {request.job_code}: {e.message}")
            raise InvalidRequestError(e.message, code="SCAN_REJECTED")

        logger.info(f"Scanned {request.code} {params['p_direction']} for job {request.job_code}")
        return {"ok": True, "result": result}

    @staticmethod
    def rig_scan(request: RigScanRequest) -> dict[str, Any]:
        """
        Move every item in a rig container to a new location/status.

        Scan events are written per item; failing to write them is logged
        but does not undo the move.
        """
        if not request.barcode or not request.location or not request.status:
            raise InvalidRequestError("barcode, location, and status are required")

        if not request.barcode.startswith(RIG_BARCODE_PREFIX):
            raise InvalidRequestError(
                f"Invalid rig barcode. Rig barcodes must start with {RIG_BARCODE_PREFIX}",
                code="INVALID_RIG_BARCODE",
            )

        rig = SupabaseClient.fetch_single(
            "rig_containers",
            {"barcode": request.barcode},
            columns="id, name, barcode",
        )
        if not rig:
            raise ResourceNotFoundError(
                "Rig",
                request.barcode,
                message=f"Rig not found with barcode: {request.barcode}",
            )

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("rig_container_items")
                .select("inventory_item_id, inventory_items:inventory_item_id(id, name, barcode)")
                .eq("rig_container_id", rig["id"])
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch rig items", str(e))

        rig_items = response.data or []
        if not rig_items:
            return {
                "success": True,
                "message": f'Rig "{rig["name"]}" has no items to update',
                "items_updated": 0,
            }

        item_ids = [row["inventory_item_id"] for row in rig_items]
        now = utc_now_iso()

        try:
            (
                client.table("inventory_items")
                .update({"location": request.location, "status": request.status, "updated_at": now})
                .in_("id", item_ids)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("update rig items", str(e))

        events = [
            {
                "barcode": (row.get("inventory_items") or {}).get("barcode"),
                "inventory_item_id": row["inventory_item_id"],
                "location": request.location,
                "status": request.status,
                "job_id": request.job_id or None,
                "scanned_at": now,
                "notes": f"Scanned as part of rig: {rig['name']} ({rig['barcode']})",
            }
            for row in rig_items
        ]

        try:
            client.table("scan_events").insert(events).execute()
        except Exception as e:
            logger.error(f"Failed to log scan events for rig {rig['barcode']}: {e}")

        logger.info(f"Rig {rig['barcode']} moved {len(item_ids)} items to {request.location}")
        return {
            "success": True,
            "rig_id": rig["id"],
            "rig_name": rig["name"],
            "rig_barcode": rig["barcode"],
            "items_updated": len(item_ids),
            "new_location": request.location,
            "new_status": request.status,
            "items": [row.get("inventory_items") for row in rig_items],
        }
