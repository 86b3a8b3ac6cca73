# =============================================================================
# core/services/pullsheet_service.py - Pull Sheet Operations
# =============================================================================
# Pull sheets list the gear to pull from the warehouse for a job. This
# service covers the crew app's list/update calls, the printable HTML view,
# and the home-base permission flags.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from jinja2 import Environment, PackageLoader, select_autoescape

from app.exceptions import DatabaseOperationError, InvalidRequestError, ResourceNotFoundError
from core.models.pullsheet import PullSheetItemPatch, PullSheetPermissions, PullSheetQtyUpdate
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now

logger = logging.getLogger(__name__)

PULLSHEET_COLUMNS = (
    "id, name, code, status, scheduled_out_at, expected_return_at, warehouse_id, job_id, "
    "jobs(id, code, title, client_id, clients(name))"
)

PULLSHEET_ITEM_COLUMNS = (
    "id, item_name, qty_requested, qty_pulled, qty_fulfilled, category, prep_status, notes, "
    "inventory_item_id, inventory_items(id, name, barcode, location)"
)

PRINT_ITEM_COLUMNS = (
    "qty_requested, qty_pulled, item_name, product_id, inventory_item_id, "
    "products(id, sku, name), inventory_items(id, name, barcode)"
)


class PullSheetService:

    # -------------------------------------------------------------------------
    # Crew App
    # -------------------------------------------------------------------------

    @staticmethod
    def list_pullsheets(
        warehouse_id: str | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            query = client.table("pull_sheets").select(PULLSHEET_COLUMNS)
            if warehouse_id:
                query = query.eq("warehouse_id", warehouse_id)
            if status:
                query = query.eq("status", status)
            response = (
                query.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch pull sheets", str(e))
        return response.data or []

    @staticmethod
    def set_qty_pulled(request: PullSheetQtyUpdate) -> dict[str, Any]:
        """Overwrite qty_pulled on one item of one pull sheet."""
        if not request.pullsheet_id or not request.item_id or request.qty_pulled is None:
            raise InvalidRequestError("pullsheet_id, item_id, and qty_pulled are required")

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("pull_sheet_items")
                .update({"qty_pulled": request.qty_pulled})
                .eq("id", request.item_id)
                .eq("pull_sheet_id", request.pullsheet_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("update pull sheet item", str(e))

        if not response.data:
            raise ResourceNotFoundError("Pull sheet item", request.item_id)
        return response.data[0]

    @staticmethod
    def list_items(pullsheet_id: str) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("pull_sheet_items")
                .select(PULLSHEET_ITEM_COLUMNS)
                .eq("pull_sheet_id", pullsheet_id)
                .order("sort_index")
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch pull sheet items", str(e))
        return response.data or []

    @staticmethod
    def patch_item(pullsheet_id: str, request: PullSheetItemPatch) -> dict[str, Any]:
        """Update qty_pulled and/or prep_status; fields not sent are left alone."""
        if not request.item_id:
            raise InvalidRequestError("item_id is required")

        updates: dict[str, Any] = {}
        if request.qty_pulled is not None:
            updates["qty_pulled"] = request.qty_pulled
        if request.prep_status is not None:
            updates["prep_status"] = request.prep_status
        if not updates:
            raise InvalidRequestError("Nothing to update", suggestion="Send qty_pulled and/or prep_status")

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("pull_sheet_items")
                .update(updates)
                .eq("id", request.item_id)
                .eq("pull_sheet_id", pullsheet_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("update pull sheet item", str(e))

        if not response.data:
            raise ResourceNotFoundError("Pull sheet item", request.item_id)
        return response.data[0]

    @staticmethod
    def get_permissions(user_id: UUID | str) -> PullSheetPermissions | None:
        """Home-base membership flags, or None if the user isn't a member."""
        try:
            member = SupabaseClient.fetch_single(
                "home_base_members",
                {"user_id": user_id},
                columns="role, can_create_pullsheets, can_delete_pullsheets, can_finalize_pullsheets",
            )
        except SupabaseClientError as e:
            logger.warning(f"Could not load pull sheet permissions for {user_id}: {e}")
            return None
        return PullSheetPermissions(**member) if member else None

    # -------------------------------------------------------------------------
    # Printable View
    # -------------------------------------------------------------------------

    @staticmethod
    def resolve_for_print(
        pull_sheet_id: str | None = None,
        job_code: str | None = None,
    ) -> tuple[dict[str, Any], dict[str, Any] | None]:
        """
        Find the pull sheet (and its job) by id, or the newest one for a job code.

        Raises:
            InvalidRequestError: If neither parameter is given
            ResourceNotFoundError: If the sheet or job doesn't exist
        """
        if not pull_sheet_id and not job_code:
            raise InvalidRequestError("Provide pullSheetId or jobCode")

        client = SupabaseClient.get_client()

        if pull_sheet_id:
            sheet = SupabaseClient.fetch_single("pull_sheets", {"id": pull_sheet_id})
            if not sheet:
                raise ResourceNotFoundError("Pull sheet", pull_sheet_id)
            job = None
            if sheet.get("job_id"):
                job = SupabaseClient.fetch_single("jobs", {"id": sheet["job_id"]})
            return sheet, job

        job = SupabaseClient.fetch_single("jobs", {"code": job_code})
        if not job:
            raise ResourceNotFoundError("Job", job_code)

        try:
            response = (
                client.table("pull_sheets")
                .select("*")
                .eq("job_id", job["id"])
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch pull sheet", str(e))

        if not response.data:
            raise ResourceNotFoundError("Pull sheet", message="No pull sheet for job")
        return response.data[0], job

    @staticmethod
    def fetch_print_items(pull_sheet_id: str) -> list[dict[str, str | int]]:
        """Items flattened to sku/name/qty for the printable table."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("pull_sheet_items")
                .select(PRINT_ITEM_COLUMNS)
                .eq("pull_sheet_id", pull_sheet_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch pull sheet items", str(e))

        rows = []
        for item in response.data or []:
            product = item.get("products") or {}
            inventory = item.get("inventory_items") or {}
            rows.append({
                "sku": product.get("sku") or inventory.get("barcode") or "",
                "name": item.get("item_name") or product.get("name") or inventory.get("name") or "",
                "qty_requested": item.get("qty_requested") or 0,
                "qty_pulled": item.get("qty_pulled") or 0,
            })
        return rows

    @staticmethod
    def render_html(pull_sheet_id: str | None = None, job_code: str | None = None) -> str:
        sheet, job = PullSheetService.resolve_for_print(pull_sheet_id, job_code)
        items = PullSheetService.fetch_print_items(sheet["id"])
        return render_pullsheet_html(sheet, job, items)


PULLSHEET_TEMPLATE = "pullsheet.html"

_templates = Environment(
    loader=PackageLoader("core", "templates"),
    autoescape=select_autoescape(["html"]),
)


def render_pullsheet_html(
    sheet: dict[str, Any],
    job: dict[str, Any] | None,
    items: list[dict[str, Any]],
) -> str:
    """Standalone printable HTML page. Every database value is autoescaped."""
    window = [v for v in (sheet.get("scheduled_out_at"), sheet.get("expected_return_at")) if v]
    return _templates.get_template(PULLSHEET_TEMPLATE).render(
        sheet=sheet,
        job=job or {},
        items=items,
        window=window,
        generated=utc_now().strftime("%Y-%m-%d %H:%M UTC"),
    )
