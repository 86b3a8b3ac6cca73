# =============================================================================
# core/services/crew_service.py - Crew Availability and Assignments
# =============================================================================
# Every operation is scoped to the caller's employees row. Employees may
# only request jobs in their own warehouse and only remove their own
# assignments.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    AccessDeniedError,
    DatabaseOperationError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from core.models.crew import AssignmentStatus, AvailabilityRequest, JobAssignmentRequest
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


class CrewService:

    @staticmethod
    def get_employee(user_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            ResourceNotFoundError: If the user has no employee record
        """
        employee = SupabaseClient.fetch_single(
            "employees",
            {"user_id": user_id},
            columns="id, warehouse_id",
        )
        if not employee:
            raise ResourceNotFoundError("Employee", message="Employee record not found")
        return employee

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------

    @staticmethod
    def list_availability(user_id: UUID | str) -> list[dict[str, Any]]:
        employee = CrewService.get_employee(user_id)
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("employee_availability")
                .select("*")
                .eq("employee_id", employee["id"])
                .order("date")
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch availability", str(e))
        return response.data or []

    @staticmethod
    def set_availability(user_id: UUID | str, request: AvailabilityRequest) -> dict[str, Any]:
        """Create or replace the employee's entry for one day."""
        if not request.date or not request.status:
            raise InvalidRequestError("date and status are required")

        employee = CrewService.get_employee(user_id)
        row = {
            "employee_id": employee["id"],
            "date": request.date,
            "status": request.status,
        }
        if request.notes is not None:
            row["notes"] = request.notes

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("employee_availability")
                .upsert(row, on_conflict="employee_id,date")
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("save availability", str(e))

        logger.info(f"Employee {employee['id']} set {request.date} to {request.status}")
        return response.data[0] if response.data else row

    # -------------------------------------------------------------------------
    # Job Assignments
    # -------------------------------------------------------------------------

    @staticmethod
    def list_assignments(user_id: UUID | str) -> list[dict[str, Any]]:
        employee = CrewService.get_employee(user_id)
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("job_assignments")
                .select("*, jobs(id, code, title, status, start_at, end_at, venue)")
                .eq("employee_id", employee["id"])
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch job assignments", str(e))
        return response.data or []

    @staticmethod
    def request_assignment(user_id: UUID | str, request: JobAssignmentRequest) -> dict[str, Any]:
        """
        Ask to work a job. The request starts out pending.

        Raises:
            ResourceNotFoundError: If the job doesn't exist
            AccessDeniedError: If the job is in another warehouse
        """
        if not request.job_id:
            raise InvalidRequestError("job_id is required")

        employee = CrewService.get_employee(user_id)

        job = SupabaseClient.fetch_single("jobs", {"id": request.job_id}, columns="id, warehouse_id")
        if not job:
            raise ResourceNotFoundError("Job", request.job_id)

        if job.get("warehouse_id") != employee.get("warehouse_id"):
            raise AccessDeniedError("Job is not in your warehouse", code="WRONG_WAREHOUSE")

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("job_assignments")
                .insert({
                    "job_id": request.job_id,
                    "employee_id": employee["id"],
                    "role": request.role or "Crew",
                    "status": AssignmentStatus.PENDING.value,
                })
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("create job assignment", str(e))

        logger.info(f"Employee {employee['id']} requested job {request.job_id}")
        return response.data[0] if response.data else {}

    @staticmethod
    def cancel_assignment(user_id: UUID | str, assignment_id: str | None) -> None:
        """Delete one of the caller's own assignments."""
        if not assignment_id:
            raise InvalidRequestError("Assignment id is required")

        employee = CrewService.get_employee(user_id)
        client = SupabaseClient.get_client()
        try:
            (
                client.table("job_assignments")
                .delete()
                .eq("id", normalize_uuid(assignment_id))
                .eq("employee_id", employee["id"])
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("delete job assignment", str(e))
