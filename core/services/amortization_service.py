# =============================================================================
# core/services/amortization_service.py - Amortization Recording
# =============================================================================
# Turns a job's gear list into read-only cost estimate line items and bumps
# each item's usage counters through increment_inventory_usage().
# =============================================================================

import logging
from typing import Any

from app.exceptions import BrightOpsException, DatabaseOperationError, InvalidRequestError
from core.models.job import AmortizationGear
from lib.amortization import calculate_total_amortization_for_gear
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import round_half_up, to_float

logger = logging.getLogger(__name__)


class AmortizationService:

    @staticmethod
    def fetch_amortization_rates(item_ids: list[str]) -> dict[str, dict[str, Any]]:
        """
        Map inventory item id -> {id, name, amortization_per_job}.

        Raises:
            DatabaseOperationError: If the lookup fails
        """
        if not item_ids:
            return {}

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("inventory_items")
                .select("id, name, amortization_per_job")
                .in_("id", item_ids)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch inventory items", str(e))

        return {row["id"]: row for row in response.data or []}

    @staticmethod
    def increment_usage(item_id: str, amortization_amount: float) -> None:
        """Add one job and the amortized amount to an item's lifetime counters."""
        SupabaseClient.call_rpc(
            "increment_inventory_usage",
            {"item_id": item_id, "jobs_used": 1, "amort_amount": amortization_amount},
        )

    @staticmethod
    def record_job_amortization(job_id: str | None, gear: list[AmortizationGear]) -> dict[str, Any]:
        """
        Insert one cost_estimate_line_items row per gear entry.

        Unknown items still get a line ("Unknown Item", zero amortization) so the
        estimate shows everything that was booked, but their usage counters
        are not touched.

        Returns:
            {"success": True, "total_amortization": float, "line_items": [...]}
        """
        if not job_id:
            raise InvalidRequestError("job_id is required")

        try:
            items = AmortizationService.fetch_amortization_rates(
                [g.inventory_item_id for g in gear]
            )

            line_items = []
            usage = []
            total_amortization = 0.0

            for index, entry in enumerate(gear):
                item = items.get(entry.inventory_item_id)
                per_job = to_float(item.get("amortization_per_job")) if item else 0.0
                line_total = calculate_total_amortization_for_gear(per_job, entry.quantity)
                total_amortization += line_total

                line_items.append({
                    "job_id": job_id,
                    "item_type": "equipment",
                    "item_name": (item or {}).get("name") or "Unknown Item",
                    "description": (
                        f"Amortization: ${per_job:.4f}/job × {entry.quantity} units = ${line_total:.2f}"
                    ),
                    "quantity": entry.quantity,
                    "unit_cost": 0,
                    "sort_order": index,
                    "is_editable": False,
                })
                if item:
                    usage.append((entry.inventory_item_id, line_total))

            client = SupabaseClient.get_client()
            if line_items:
                client.table("cost_estimate_line_items").insert(line_items).execute()

            for item_id, amount in usage:
                AmortizationService.increment_usage(item_id, amount)

        except BrightOpsException:
            raise
        except SupabaseClientError as e:
            raise DatabaseOperationError("record amortization", e.message)
        except Exception as e:
            logger.error(f"Failed to record amortization for job {job_id}: {e}")
            raise DatabaseOperationError("record amortization", str(e))

        total_amortization = round_half_up(total_amortization, 2)
        logger.info(f"Recorded {len(line_items)} amortization lines for job {job_id}: ${total_amortization}")
        return {
            "success": True,
            "total_amortization": total_amortization,
            "line_items": line_items,
        }
