# =============================================================================
# core/models/crew.py - Crew Scheduling Schemas
# =============================================================================
# Employees mark the days they can work and request assignments to jobs in
# their own warehouse.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class AssignmentStatus(str, Enum):
    """Lifecycle of a crew assignment request."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class AvailabilityRequest(BaseModel):
    """
    Body of POST /api/v1/availability.

    Example:
        {"date": "2025-04-02", "status": "available", "notes": "after 2pm"}
    """
    date: str | None = Field(default=None, description="Calendar day (YYYY-MM-DD)")
    status: str | None = Field(default=None, description="e.g. available, unavailable, tentative")
    notes: str | None = None


class JobAssignmentRequest(BaseModel):
    """Body of POST /api/v1/job-assignments."""
    job_id: str | None = None
    role: str = Field(default="Crew", description="Role on the job")
