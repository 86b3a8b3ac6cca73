# =============================================================================
# tests/test_lead_service.py - Tests for Lead Scoring and CSV Import
# =============================================================================

import pytest

from app.exceptions import ConflictError, DatabaseOperationError, InvalidRequestError
from core.services.lead_service import LeadService
from lib.supabase_client import SupabaseClientError
from tests.conftest import TEST_USER_ID


class TestScoreLead:
    """Test LeadService.score_lead."""

    def test_scores_and_logs_activity(self, fake_supabase):
        """Test the new score is returned and logged."""
        fake_supabase.queue("rpc:calculate_lead_score", 72)

        assert LeadService.score_lead("lead-1", TEST_USER_ID) == {"score": 72}

        activity = fake_supabase.queries_for("lead_activities")[0].first_arg("insert")
        assert activity["activity_type"] == "score_changed"
        assert activity["description"] == "Lead score recalculated to 72"
        assert activity["created_by"] == str(TEST_USER_ID)

    def test_requires_lead_id(self, fake_supabase):
        """Test a missing lead id."""
        with pytest.raises(InvalidRequestError):
            LeadService.score_lead(None, TEST_USER_ID)

    def test_rpc_failure(self, fake_supabase):
        """Test scoring failures surface as database errors."""
        fake_supabase.queue("rpc:calculate_lead_score", SupabaseClientError("function missing"))
        with pytest.raises(DatabaseOperationError):
            LeadService.score_lead("lead-1", TEST_USER_ID)


class TestRecalculateAll:
    """Test LeadService.recalculate_all."""

    def test_skips_failures(self, fake_supabase):
        """Test one failing lead doesn't stop the rest."""
        fake_supabase.queue("leads", [{"id": "a"}, {"id": "b"}, {"id": "c"}])
        fake_supabase.queue("rpc:calculate_lead_score", 10, RuntimeError("bad row"), 30)

        result = LeadService.recalculate_all()

        assert result == {"message": "Updated scores for 3 leads", "updated": 2}


class TestNormalizeImportRow:
    """Test CSV column mapping."""

    def test_alternate_columns(self):
        """Test alternate column names and defaults."""
        lead = LeadService.normalize_import_row(
            {"contact_email": " Events@Venue.COM ", "company": "Ryman", "position": "Booker"},
            1,
        )
        assert lead["email"] == "events@venue.com"
        assert lead["name"] == "Unknown"
        assert lead["org"] == "Ryman"
        assert lead["title"] == "Booker"
        assert lead["status"] == "uncontacted"
        assert "source" not in lead

    def test_missing_email(self):
        """Test rows without email name their position."""
        with pytest.raises(InvalidRequestError) as exc:
            LeadService.normalize_import_row({"name": "No Email"}, 3)
        assert exc.value.message == "Lead 3: Missing email address"


class TestImportLeads:
    """Test LeadService.import_leads."""

    def test_empty(self, fake_supabase):
        """Test an empty payload is rejected."""
        with pytest.raises(InvalidRequestError) as exc:
            LeadService.import_leads([])
        assert exc.value.message == "No leads provided"

    def test_imports(self, fake_supabase):
        """Test a batch insert."""
        fake_supabase.queue("leads", [{"id": "l1"}, {"id": "l2"}])

        result = LeadService.import_leads([{"email": "a@x.com"}, {"email": "b@x.com", "source": "expo"}])

        assert result["count"] == 2
        assert result["message"] == "Successfully imported 2 leads"
        inserted = fake_supabase.queries_for("leads")[0].first_arg("insert")
        assert inserted[1]["source"] == "expo"

    def test_duplicates(self, fake_supabase):
        """Test unique violations become a 409."""
        fake_supabase.queue("leads", Exception("duplicate key value violates unique constraint (23505)"))

        with pytest.raises(ConflictError) as exc:
            LeadService.import_leads([{"email": "a@x.com"}])
        assert exc.value.code == "DUPLICATE_LEADS"
        assert exc.value.status_code == 409
