# =============================================================================
# tests/test_job_service.py - Tests for Job Booking and Listing
# =============================================================================
# Tests for:
# - Warehouse resolution for new jobs
# - Job creation with gear, amortization totals and rollback
# - Crew app listings and the job form
# =============================================================================

import pytest
from pydantic import ValidationError

from app.exceptions import DatabaseOperationError, InvalidRequestError, ResourceNotFoundError
from core.models.job import JobCreateRequest, JobForm
from core.services.job_service import ALL_LOCATIONS, JobService
from tests.conftest import TEST_USER_ID


def _booking(**overrides) -> JobCreateRequest:
    body = {
        "client_name": "Riverside Church",
        "job_date": "2025-06-14",
        "gear": [{"gear_id": "g1", "quantity": 2}],
        "total_price": 1800,
    }
    body.update(overrides)
    return JobCreateRequest.model_validate(body)


def _stock_gear(fake_supabase) -> None:
    fake_supabase.queue("user_warehouse_access", [{"warehouse_id": "wh-1"}])
    fake_supabase.queue("inventory_items", [
        {"id": "g1", "name": "Shure SM58", "amortization_per_job": 12.5},
    ])


class TestResolveWarehouse:
    """Test JobService.resolve_warehouse_id."""

    def test_named_warehouse(self, fake_supabase):
        """Test a known warehouse name wins."""
        fake_supabase.queue("warehouses", {"id": "wh-2"})

        assert JobService.resolve_warehouse_id(TEST_USER_ID, "Nashville") == "wh-2"
        assert fake_supabase.queries_for("user_warehouse_access") == []

    def test_all_locations_uses_default(self, fake_supabase):
        """Test "All Locations" falls back to the caller's first warehouse."""
        fake_supabase.queue("user_warehouse_access", [{"warehouse_id": "wh-1"}])

        assert JobService.resolve_warehouse_id(TEST_USER_ID, ALL_LOCATIONS) == "wh-1"
        assert fake_supabase.queries_for("warehouses") == []

    def test_unknown_name_uses_default(self, fake_supabase):
        """Test an unmatched warehouse name falls back too."""
        fake_supabase.queue("warehouses", None)
        fake_supabase.queue("user_warehouse_access", [{"warehouse_id": "wh-1"}])

        assert JobService.resolve_warehouse_id(TEST_USER_ID, "Atlantis") == "wh-1"

    def test_no_access_rows(self, fake_supabase):
        """Test a user without warehouses gets None."""
        fake_supabase.queue("user_warehouse_access", [])
        assert JobService.resolve_warehouse_id(TEST_USER_ID, None) is None


class TestCreateJob:
    """Test JobService.create_job."""

    @pytest.mark.parametrize("missing", ["client_name", "job_date", "gear", "total_price"])
    def test_missing_fields(self, fake_supabase, missing):
        """Test every booking field is required."""
        with pytest.raises(InvalidRequestError) as exc:
            JobService.create_job(TEST_USER_ID, _booking(**{missing: None}))
        assert exc.value.message == "Missing required fields"
        assert fake_supabase.queries_for("jobs") == []

    def test_creates_job_and_gear(self, fake_supabase):
        """Test the job row, gear rows and usage counters."""
        _stock_gear(fake_supabase)
        fake_supabase.queue("jobs", [{"id": "job-9"}])
        fake_supabase.queue("job_gear", [])

        result = JobService.create_job(TEST_USER_ID, _booking())

        assert result["success"] is True
        assert result["job"]["id"] == "job-9"
        assert result["job"]["total_amortization"] == 25.0

        job_row = fake_supabase.queries_for("jobs")[0].first_arg("insert")
        assert job_row["title"] == "Job for Riverside Church"
        assert job_row["warehouse_id"] == "wh-1"
        assert job_row["created_by"] == str(TEST_USER_ID)

        gear_rows = fake_supabase.queries_for("job_gear")[0].first_arg("insert")
        assert gear_rows == [{
            "gear_id": "g1",
            "quantity": 2,
            "amortization_each": 12.5,
            "amortization_total": 25.0,
            "job_id": "job-9",
        }]
        assert result["job_gear"] == gear_rows

        function_name, params = fake_supabase.queries_for("rpc:increment_inventory_usage")[0].called("rpc")[0][0]
        assert params == {"item_id": "g1", "jobs_used": 1, "amort_amount": 25.0}

    def test_unpriced_gear_has_zero_amortization(self, fake_supabase):
        """Test gear without an inventory rate still books at zero."""
        fake_supabase.queue("user_warehouse_access", [{"warehouse_id": "wh-1"}])
        fake_supabase.queue("inventory_items", [])
        fake_supabase.queue("jobs", [{"id": "job-9"}])
        fake_supabase.queue("job_gear", [])

        result = JobService.create_job(TEST_USER_ID, _booking())

        assert result["job"]["total_amortization"] == 0

    def test_gear_failure_deletes_job(self, fake_supabase):
        """Test a failed gear insert rolls the job back."""
        _stock_gear(fake_supabase)
        fake_supabase.queue("jobs", [{"id": "job-9"}])
        fake_supabase.queue("job_gear", RuntimeError("violates foreign key"))

        with pytest.raises(DatabaseOperationError) as exc:
            JobService.create_job(TEST_USER_ID, _booking())

        assert "violates foreign key" in exc.value.message
        rollback = fake_supabase.queries_for("jobs")[1]
        assert rollback.called("delete")
        assert rollback.called("eq")[0][0] == ("id", "job-9")
        assert fake_supabase.queries_for("rpc:increment_inventory_usage") == []

    def test_failed_rollback_keeps_gear_error(self, fake_supabase):
        """Test a failing delete doesn't mask the original error."""
        _stock_gear(fake_supabase)
        fake_supabase.queue("jobs", [{"id": "job-9"}], RuntimeError("delete refused"))
        fake_supabase.queue("job_gear", RuntimeError("violates foreign key"))

        with pytest.raises(DatabaseOperationError) as exc:
            JobService.create_job(TEST_USER_ID, _booking())

        assert exc.value.details["operation"] == "add gear to job"
        assert exc.value.details["error"] == "violates foreign key"

    def test_empty_insert_response(self, fake_supabase):
        """Test an insert that returns nothing is an error."""
        _stock_gear(fake_supabase)
        fake_supabase.queue("jobs", [])

        with pytest.raises(DatabaseOperationError):
            JobService.create_job(TEST_USER_ID, _booking())


class TestListings:
    """Test job lists for the dashboard and crew app."""

    def test_mobile_paging(self, fake_supabase):
        """Test filters and the offset/limit range."""
        fake_supabase.queue("jobs", [{"id": "j1"}])

        jobs = JobService.list_jobs_for_mobile("wh-1", "Confirmed", limit=25, offset=50)

        assert jobs == [{"id": "j1"}]
        query = fake_supabase.queries_for("jobs")[0]
        assert [args for args, _ in query.called("eq")] == [("warehouse_id", "wh-1"), ("status", "Confirmed")]
        assert query.called("range")[0][0] == (50, 74)

    def test_available_jobs_scoped_to_employee(self, fake_supabase):
        """Test available jobs use the employee's warehouse and open statuses."""
        fake_supabase.queue("employees", {"id": "emp-1", "warehouse_id": "wh-3"})
        fake_supabase.queue("jobs", [])

        assert JobService.list_available_jobs(TEST_USER_ID) == []

        query = fake_supabase.queries_for("jobs")[0]
        assert query.called("eq")[0][0] == ("warehouse_id", "wh-3")
        assert query.called("in_")[0][0] == ("status", ["Scheduled", "Confirmed"])
        assert query.called("limit")[0][0] == (50,)

    def test_available_jobs_without_employee(self, fake_supabase):
        """Test a 404 when the user has no employee record."""
        fake_supabase.queue("employees", None)

        with pytest.raises(ResourceNotFoundError):
            JobService.list_available_jobs(TEST_USER_ID)

    def test_get_job_missing(self, fake_supabase):
        """Test unknown job ids raise 404."""
        fake_supabase.queue("jobs", None)
        with pytest.raises(ResourceNotFoundError):
            JobService.get_job("nope")


class TestJobForm:
    """Test the job form and plain job creation."""

    @pytest.mark.parametrize("body", [
        {"client_id": "c1"},
        {"code": "", "client_id": "c1"},
        {"code": "JOB-1"},
    ])
    def test_required_fields(self, body):
        """Test code and client_id are required."""
        with pytest.raises(ValidationError):
            JobForm.model_validate(body)

    def test_create_from_form(self, fake_supabase):
        """Test the form is stored as a job row."""
        fake_supabase.queue("jobs", [{"id": "job-2", "code": "JOB-2"}])
        form = JobForm(code="JOB-2", client_id="c1", start_at="2025-06-14T18:00:00Z")

        assert JobService.create_from_form(TEST_USER_ID, form)["id"] == "job-2"

        row = fake_supabase.queries_for("jobs")[0].first_arg("insert")[0]
        assert row["code"] == "JOB-2"
        assert row["client_id"] == "c1"
        assert row["start_at"].startswith("2025-06-14T18:00:00")
        assert row["created_by"] == str(TEST_USER_ID)
