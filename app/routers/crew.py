# =============================================================================
# app/routers/crew.py - Crew Scheduling Endpoints
# =============================================================================
# Employees mark which days they can work and request spots on jobs in
# their warehouse. Every call is scoped to the caller's employees row.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import SupabaseUserDep
from core.models.crew import AvailabilityRequest, JobAssignmentRequest
from core.services.crew_service import CrewService

router = APIRouter()


# =============================================================================
# Availability
# =============================================================================

@router.get("/availability")
async def list_availability(user: SupabaseUserDep):
    availability = CrewService.list_availability(user.id)
    return {"success": True, "data": availability, "count": len(availability)}


@router.post("/availability")
async def set_availability(request: AvailabilityRequest, user: SupabaseUserDep):
    """
    Set availability for one day (replaces any earlier entry for that day).

    Example body:
        {"date": "2025-07-04", "status": "unavailable", "notes": "Family event"}
    """
    return {"success": True, "data": CrewService.set_availability(user.id, request)}


# =============================================================================
# Job Assignments
# =============================================================================

@router.get("/job-assignments")
async def list_job_assignments(user: SupabaseUserDep):
    assignments = CrewService.list_assignments(user.id)
    return {"success": True, "data": assignments, "count": len(assignments)}


@router.post("/job-assignments")
async def request_job_assignment(request: JobAssignmentRequest, user: SupabaseUserDep):
    """Request to work a job; the assignment starts out pending."""
    return {"success": True, "data": CrewService.request_assignment(user.id, request)}


@router.delete("/job-assignments")
async def cancel_job_assignment(
    user: SupabaseUserDep,
    assignment_id: Annotated[str | None, Query(alias="id", description="Assignment ID")] = None,
):
    CrewService.cancel_assignment(user.id, assignment_id)
    return {"success": True}
