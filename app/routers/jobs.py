# =============================================================================
# app/routers/jobs.py - Job Endpoints
# =============================================================================
# Two surfaces:
# - router (/api/jobs):  dashboard booking form and job list
# - v1_router (/api/v1): crew app job lists
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import CurrentUserDep, SupabaseUserDep
from core.models.job import JobCreateRequest, JobForm
from core.services.job_service import JobService

router = APIRouter()
v1_router = APIRouter()


# =============================================================================
# Dashboard
# =============================================================================

@router.post("")
async def create_job(request: JobCreateRequest, user: CurrentUserDep):
    """
    Book a job with gear.

    Amortization for each gear line is looked up from inventory and
    totalled onto the job.

    Example body:
        {
            "client_name": "Riverside Church",
            "job_date": "2025-06-14",
            "gear": [{"gear_id": "a1...", "quantity": 2}],
            "total_price": 1800,
            "warehouse_location": "Main Warehouse"
        }
    """
    return JobService.create_job(user.id, request)


@router.get("")
async def list_jobs(user: CurrentUserDep):
    """All jobs, newest first."""
    return JobService.list_jobs()


# =============================================================================
# Crew App
# =============================================================================

@v1_router.get("/jobs")
async def list_jobs_for_mobile(
    user: SupabaseUserDep,
    warehouse_id: Annotated[str | None, Query(description="Only jobs in this warehouse")] = None,
    status: Annotated[str | None, Query(description="Filter by job status")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """Paged job list for the crew app, most recent start first."""
    jobs = JobService.list_jobs_for_mobile(warehouse_id, status, limit, offset)
    return {
        "success": True,
        "data": jobs,
        "count": len(jobs),
        "limit": limit,
        "offset": offset,
    }


@v1_router.get("/available-jobs")
async def list_available_jobs(user: SupabaseUserDep):
    """Scheduled or confirmed jobs in the caller's warehouse that haven't ended."""
    jobs = JobService.list_available_jobs(user.id)
    return {"success": True, "data": jobs, "count": len(jobs)}


@v1_router.post("/jobs", status_code=201)
async def create_job_record(form: JobForm, user: SupabaseUserDep):
    """Create a job from the new-job form; code and client_id are required."""
    return {"success": True, "data": JobService.create_from_form(user.id, form)}
