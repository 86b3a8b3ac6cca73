# =============================================================================
# app/routers/amortization.py - Job Amortization Endpoint
# =============================================================================

from fastapi import APIRouter

from core.models.job import AmortizationRequest
from core.services.amortization_service import AmortizationService

router = APIRouter()


@router.post("")
async def record_amortization(request: AmortizationRequest):
    """
    Add equipment amortization line items to a job's cost estimate.

    Each gear row becomes a non-editable line item, and each known item's
    usage counters are bumped.
    """
    return AmortizationService.record_job_amortization(request.job_id, request.gear)
