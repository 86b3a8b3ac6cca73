# =============================================================================
# app/routers/directory.py - Clients and Warehouses (Crew App)
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import SupabaseUserDep
from core.models.job import ClientForm
from core.services.client_service import ClientService
from core.services.profile_service import ProfileService

router = APIRouter()


@router.get("/clients")
async def list_clients(
    user: SupabaseUserDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """Client contact list, ordered by name."""
    clients = ClientService.list_clients(limit, offset)
    return {"success": True, "data": clients, "count": len(clients)}


@router.get("/warehouses")
async def list_warehouses(user: SupabaseUserDep):
    """Warehouses the caller can access."""
    warehouses = ProfileService.get_user_warehouses(user.id)
    return {"success": True, "data": warehouses, "count": len(warehouses)}


@router.post("/clients", status_code=201)
async def create_client(form: ClientForm, user: SupabaseUserDep):
    """
    Add a client from the new-client form. Only the name is required.

    Example body:
        {"name": "Riverside Church", "email": "office@riverside.test"}
    """
    return {"success": True, "data": ClientService.create_from_form(form)}
