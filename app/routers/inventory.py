# =============================================================================
# app/routers/inventory.py - Inventory Endpoints (Crew App)
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import SupabaseUserDep
from core.models.inventory import BarcodeSuggestRequest, InventoryScanRequest
from core.services.inventory_service import InventoryService

router = APIRouter()


@router.get("")
async def list_inventory(
    user: SupabaseUserDep,
    warehouse_id: Annotated[str | None, Query(description="Warehouse to list (must be accessible)")] = None,
    category: Annotated[str | None, Query()] = None,
    search: Annotated[str | None, Query(description="Substring of name or barcode")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """Inventory items ordered by name."""
    items = InventoryService.list_inventory(user.id, warehouse_id, category, search, limit, offset)
    return {"success": True, "data": items, "count": len(items), "limit": limit, "offset": offset}


@router.post("")
async def scan_inventory(request: InventoryScanRequest, user: SupabaseUserDep):
    """Look up one item by its barcode."""
    item = InventoryService.find_by_barcode(request.barcode, request.warehouse_id)
    if not item:
        return {"success": False, "found": False, "message": "Item not found"}
    return {"success": True, "found": True, "data": item}


@router.post("/barcode")
async def suggest_barcode(request: BarcodeSuggestRequest, user: SupabaseUserDep):
    """
    Next free barcode for a new item.

    Example: "Shure SM58 Microphone" -> {"barcode": "SHURE-004"}
    """
    return {"barcode": InventoryService.generate_barcode(request.item_name)}
