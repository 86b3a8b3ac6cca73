# =============================================================================
# app/routers/revenue.py - Quarterly Revenue Endpoint
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import OrgContextDep
from core.services.revenue_service import RevenueService

router = APIRouter()


@router.get("/quarterly")
async def quarterly_revenue(
    context: OrgContextDep,
    count: Annotated[int, Query(ge=1, le=12, description="Number of quarters, current one included")] = 4,
):
    """Income, expenses, margin and growth per quarter, oldest first."""
    quarters = RevenueService.quarterly_summary(context.organization_id, count)
    return {"quarters": quarters, "count": len(quarters)}
