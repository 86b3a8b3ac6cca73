# =============================================================================
# app/routers/pullsheets.py - Pull Sheet Endpoints
# =============================================================================
# - router (/api/pullsheet):       printable HTML view
# - v1_router (/api/v1/pullsheets): crew app list and item updates
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query
from fastapi.responses import HTMLResponse

from app.dependencies import SupabaseUserDep
from core.models.pullsheet import PullSheetItemPatch, PullSheetQtyUpdate
from core.services.pullsheet_service import PullSheetService

router = APIRouter()
v1_router = APIRouter()


@router.get("", response_class=HTMLResponse)
async def print_pullsheet(
    pull_sheet_id: Annotated[str | None, Query(alias="pullSheetId")] = None,
    job_code: Annotated[str | None, Query(alias="jobCode")] = None,
):
    """
    Printable pull sheet.

    Pass pullSheetId for a specific sheet, or jobCode for the job's latest one.
    """
    return HTMLResponse(PullSheetService.render_html(pull_sheet_id, job_code))


# =============================================================================
# Crew App
# =============================================================================

@v1_router.get("")
async def list_pullsheets(
    user: SupabaseUserDep,
    warehouse_id: Annotated[str | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    sheets = PullSheetService.list_pullsheets(warehouse_id, status, limit, offset)
    return {"success": True, "data": sheets, "count": len(sheets), "limit": limit, "offset": offset}


@v1_router.put("")
async def update_qty_pulled(request: PullSheetQtyUpdate, user: SupabaseUserDep):
    """Set how many units of an item have been pulled."""
    return {"success": True, "data": PullSheetService.set_qty_pulled(request)}


@v1_router.get("/permissions")
async def get_pullsheet_permissions(user: SupabaseUserDep):
    """The caller's home-base pull sheet permissions, or null if not a member."""
    permissions = PullSheetService.get_permissions(user.id)
    return {"success": True, "data": permissions.model_dump() if permissions else None}


@v1_router.get("/{pullsheet_id}/items")
async def list_pullsheet_items(
    pullsheet_id: Annotated[str, Path(description="Pull sheet ID")],
    user: SupabaseUserDep,
):
    items = PullSheetService.list_items(pullsheet_id)
    return {"success": True, "data": items, "count": len(items)}


@v1_router.patch("/{pullsheet_id}/items")
async def patch_pullsheet_item(
    pullsheet_id: Annotated[str, Path(description="Pull sheet ID")],
    request: PullSheetItemPatch,
    user: SupabaseUserDep,
):
    """Update qty_pulled and/or prep_status on one item."""
    return {"success": True, "data": PullSheetService.patch_item(pullsheet_id, request)}
