# =============================================================================
# app/routers/leads.py - Lead Scoring and Import Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import CurrentUserDep
from core.models.lead import LeadImportRequest, LeadScoreRequest
from core.services.lead_service import LeadService

router = APIRouter()


@router.post("/score")
async def score_lead(request: LeadScoreRequest, user: CurrentUserDep):
    """Recalculate one lead's score."""
    return LeadService.score_lead(request.lead_id, user.id)


@router.put("/score")
async def recalculate_all_scores(user: CurrentUserDep):
    """Recalculate every lead's score."""
    return LeadService.recalculate_all()


@router.post("/import-csv")
async def import_leads(request: LeadImportRequest):
    """
    Bulk-insert leads parsed from a CSV export.

    Column names are normalized (contact_email -> email, company -> org, ...).
    """
    return LeadService.import_leads(request.leads)
