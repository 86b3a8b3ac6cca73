# =============================================================================
# core/services/job_service.py - Job Booking and Listing
# =============================================================================
# Handles job creation from the booking form (with per-gear amortization),
# plus the job listings used by the dashboard and the mobile crew app.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    DatabaseOperationError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from core.models.job import JobCreateRequest, JobForm, JobStatus
from core.services.amortization_service import AmortizationService
from core.services.crew_service import CrewService
from core.services.profile_service import ProfileService
from lib.amortization import calculate_total_amortization_for_gear
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid, round_half_up, to_float, utc_now_iso

logger = logging.getLogger(__name__)

ALL_LOCATIONS = "All Locations"

MOBILE_JOB_COLUMNS = (
    "id, code, title, status, start_at, end_at, warehouse_id, client_id, clients(name)"
)


class JobService:
    """
    Job operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def resolve_warehouse_id(user_id: UUID | str, warehouse_location: str | None) -> str | None:
        """
        Pick the warehouse a new job belongs to.

        A named warehouse wins; "All Locations" or an unknown name falls
        back to the caller's first accessible warehouse.
        """
        if warehouse_location and warehouse_location != ALL_LOCATIONS:
            try:
                warehouse = SupabaseClient.fetch_single(
                    "warehouses", {"name": warehouse_location}, columns="id"
                )
            except SupabaseClientError as e:
                logger.warning(f"Warehouse lookup failed for {warehouse_location!r}: {e}")
                warehouse = None
            if warehouse:
                return warehouse["id"]

        return ProfileService.get_default_warehouse_id(user_id)

    @staticmethod
    def create_job(user_id: UUID | str, request: JobCreateRequest) -> dict[str, Any]:
        """
        Create a job and its job_gear rows.

        If the gear rows can't be written the job is deleted again so a
        booking is never half-saved.

        Returns:
            {"success": True, "job": {...}, "job_gear": [...]}
        """
        if not request.client_name or not request.job_date or not request.gear or request.total_price is None:
            raise InvalidRequestError("Missing required fields")

        warehouse_id = JobService.resolve_warehouse_id(user_id, request.warehouse_location)
        rates = AmortizationService.fetch_amortization_rates([g.gear_id for g in request.gear])

        gear_rows = []
        for line in request.gear:
            each = to_float((rates.get(line.gear_id) or {}).get("amortization_per_job"))
            gear_rows.append({
                "gear_id": line.gear_id,
                "quantity": line.quantity,
                "amortization_each": each,
                "amortization_total": calculate_total_amortization_for_gear(each, line.quantity),
            })
        total_amortization = round_half_up(sum(r["amortization_total"] for r in gear_rows), 2)

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("jobs")
                .insert({
                    "title": f"Job for {request.client_name}",
                    "client_name": request.client_name,
                    "event_start_date": request.job_date,
                    "cost_estimate_amount": request.total_price,
                    "total_amortization": total_amortization,
                    "created_by": normalize_uuid(user_id),
                    "warehouse_id": warehouse_id,
                })
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("create job", str(e))

        if not response.data:
            raise DatabaseOperationError("create job", "Insert returned no data")
        job = response.data[0]

        for row in gear_rows:
            row["job_id"] = job["id"]

        try:
            gear_response = client.table("job_gear").insert(gear_rows).execute()
        except Exception as e:
            logger.error(f"Failed to add gear to job {job['id']}, rolling back: {e}")
            try:
                client.table("jobs").delete().eq("id", job["id"]).execute()
            except Exception as rollback_error:
                logger.error(f"Rollback of job {job['id']} failed: {rollback_error}")
            raise DatabaseOperationError("add gear to job", str(e))

        for row in gear_rows:
            try:
                AmortizationService.increment_usage(row["gear_id"], row["amortization_total"])
            except SupabaseClientError as e:
                logger.warning(f"Usage counter update failed for {row['gear_id']}: {e}")

        logger.info(f"Created job {job['id']} for {request.client_name} with {len(gear_rows)} gear lines")
        return {
            "success": True,
            "job": {
                "id": job["id"],
                "client_name": request.client_name,
                "job_date": request.job_date,
                "total_price": request.total_price,
                "total_amortization": total_amortization,
            },
            "job_gear": gear_response.data or gear_rows,
        }

    @staticmethod
    def list_jobs() -> list[dict[str, Any]]:
        """Dashboard job list, newest first."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("jobs")
                .select("id, title, client_name, event_start_date, cost_estimate_amount, total_amortization, created_at")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch jobs", str(e))
        return response.data or []

    @staticmethod
    def list_jobs_for_mobile(
        warehouse_id: str | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Jobs with client names, most recent start first."""
        client = SupabaseClient.get_client()
        try:
            query = client.table("jobs").select(MOBILE_JOB_COLUMNS)
            if warehouse_id:
                query = query.eq("warehouse_id", warehouse_id)
            if status:
                query = query.eq("status", status)
            response = (
                query.order("start_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch jobs", str(e))
        return response.data or []

    @staticmethod
    def list_available_jobs(user_id: UUID | str) -> list[dict[str, Any]]:
        """
        Upcoming open jobs in the employee's warehouse.

        Raises:
            ResourceNotFoundError: If the user has no employee record
        """
        employee = CrewService.get_employee(user_id)
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("jobs")
                .select(MOBILE_JOB_COLUMNS)
                .eq("warehouse_id", employee["warehouse_id"])
                .in_("status", list(JobStatus.OPEN))
                .gte("end_at", utc_now_iso())
                .order("start_at")
                .limit(50)
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch available jobs", str(e))
        return response.data or []

    @staticmethod
    def get_job(job_id: str) -> dict[str, Any]:
        job = SupabaseClient.fetch_single("jobs", {"id": job_id}, columns="id, warehouse_id, title, code")
        if not job:
            raise ResourceNotFoundError("Job", job_id)
        return job

    @staticmethod
    def create_from_form(user_id: UUID | str, form: JobForm) -> dict[str, Any]:
        """Plain job record from the job form (no gear or amortization)."""
        row = form.model_dump(mode="json")
        row["created_by"] = normalize_uuid(user_id)

        client = SupabaseClient.get_client()
        try:
            response = client.table("jobs").insert([row]).execute()
        except Exception as e:
            raise DatabaseOperationError("create job", str(e))

        if not response.data:
            raise DatabaseOperationError("create job", "Insert returned no data")

        logger.info(f"Created job {form.code} for client {form.client_id}")
        return response.data[0]
