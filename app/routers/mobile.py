# =============================================================================
# app/routers/mobile.py - Sales App (Lease-to-Own) Endpoints
# =============================================================================
# The sales tablet app authenticates with a shared x-api-key header
# instead of user tokens; the guard is applied to the whole router when it
# is mounted in main.py.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from core.models.financing import ApplicationCreateRequest, CalculatorRequest, ClientCreateRequest
from core.services.client_service import ClientService
from core.services.financing_service import FinancingService

router = APIRouter()


@router.post("/calculator")
async def calculate_payment(request: CalculatorRequest):
    """
    Quote a monthly lease payment.

    Example body:
        {"purchaseCost": 12000, "termMonths": 36, "salesTax": 8.25, "residualPercentage": 10}
    """
    return FinancingService.calculate(request)


# =============================================================================
# Clients
# =============================================================================

@router.get("/clients")
async def search_clients(
    search: Annotated[str | None, Query(description="Substring of name, email or company")] = None,
):
    return {"clients": ClientService.search_clients(search)}


@router.post("/clients")
async def create_client(request: ClientCreateRequest):
    return {"client": ClientService.create_client(request)}


# =============================================================================
# Applications and Equipment
# =============================================================================

@router.get("/applications")
async def list_applications(
    client_id: Annotated[str | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
):
    return {"applications": FinancingService.list_applications(client_id, status)}


@router.post("/applications")
async def create_application(request: ApplicationCreateRequest):
    """Start a pending application, optionally recording the equipment on it."""
    return {"application": FinancingService.create_application(request)}


@router.get("/equipment")
async def list_equipment(
    application_id: Annotated[str | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
):
    return {"equipment": FinancingService.list_equipment(application_id, status)}


# =============================================================================
# Payments
# =============================================================================

@router.get("/payments")
async def list_payments(
    application_id: Annotated[str | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
    client_id: Annotated[str | None, Query()] = None,
):
    """Payment history with collected, outstanding and overdue totals."""
    payments = FinancingService.list_payments(application_id, status, client_id)
    return {
        "payments": payments,
        "summary": FinancingService.summarize_payments(payments),
    }
