# =============================================================================
# tests/test_directory_service.py - Tests for Clients, Profiles and Warehouses
# =============================================================================

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from app.exceptions import AccessDeniedError, DatabaseOperationError, InvalidRequestError
from core.models.financing import ClientCreateRequest
from core.models.job import ClientForm
from core.services.client_service import ClientService
from core.services.profile_service import ProfileService
from lib.supabase_client import SupabaseClient, SupabaseClientError
from tests.conftest import TEST_ORG_ID, TEST_USER_ID


class TestClientService:
    """Test the client directory."""

    def test_list_paging(self, fake_supabase):
        """Test contact columns, name order and range."""
        fake_supabase.queue("clients", [{"id": "c1", "name": "Ace Events"}])

        assert ClientService.list_clients(limit=10, offset=20) == [{"id": "c1", "name": "Ace Events"}]

        query = fake_supabase.queries_for("clients")[0]
        assert query.first_arg("select") == "id, name, email, phone"
        assert query.first_arg("order") == "name"
        assert query.called("range")[0][0] == (20, 29)

    def test_search(self, fake_supabase):
        """Test the search term matches name, email or company."""
        fake_supabase.queue("clients", [])

        ClientService.search_clients("ryman")

        assert fake_supabase.queries_for("clients")[0].first_arg("or_") == (
            "name.ilike.%ryman%,email.ilike.%ryman%,company.ilike.%ryman%"
        )

    def test_mobile_create_requires_email(self, fake_supabase):
        """Test the sales app must send name and email."""
        with pytest.raises(InvalidRequestError):
            ClientService.create_client(ClientCreateRequest(name="Dana"))

    def test_list_failure(self, fake_supabase):
        """Test database errors surface as DatabaseOperationError."""
        fake_supabase.queue("clients", RuntimeError("timeout"))
        with pytest.raises(DatabaseOperationError):
            ClientService.list_clients()


class TestClientForm:
    """Test the new-client form."""

    def test_name_required(self):
        """Test an empty name is rejected."""
        with pytest.raises(ValidationError):
            ClientForm(name="")

    def test_email_must_be_valid(self):
        """Test a malformed email is rejected."""
        with pytest.raises(ValidationError):
            ClientForm(name="Dana", email="not-an-email")

    def test_create_from_form(self, fake_supabase):
        """Test missing contact details are stored as empty strings."""
        fake_supabase.queue("clients", [{"id": "c9", "name": "Dana"}])

        created = ClientService.create_from_form(ClientForm(name="Dana"))

        assert created == {"id": "c9", "name": "Dana"}
        rows = fake_supabase.queries_for("clients")[0].first_arg("insert")
        assert rows == [{"name": "Dana", "email": "", "phone": ""}]


class TestProfileService:
    """Test profile, organization and warehouse lookups."""

    def test_organization_id(self, fake_supabase):
        """Test the organization comes from user_profiles."""
        fake_supabase.queue("user_profiles", {"organization_id": TEST_ORG_ID})
        assert ProfileService.get_organization_id(TEST_USER_ID) == TEST_ORG_ID

    def test_no_profile(self, fake_supabase):
        """Test a missing profile has no organization."""
        fake_supabase.queue("user_profiles", None)
        assert ProfileService.get_organization_id(TEST_USER_ID) is None

    def test_profile_lookup_failure_is_none(self, fake_supabase):
        """Test profile errors are logged and treated as no profile."""
        with patch.object(SupabaseClient, "fetch_single", side_effect=SupabaseClientError("boom")):
            assert ProfileService.get_profile(TEST_USER_ID) is None

    def test_warehouses_skip_deleted(self, fake_supabase):
        """Test access rows with a null warehouse join are dropped."""
        fake_supabase.queue("user_warehouse_access", [
            {"warehouse_id": "wh-1", "warehouses": {"id": "wh-1", "name": "Nashville"}},
            {"warehouse_id": "wh-2", "warehouses": None},
        ])

        assert ProfileService.get_user_warehouses(TEST_USER_ID) == [{"id": "wh-1", "name": "Nashville"}]

    def test_default_warehouse_failure_is_none(self, fake_supabase):
        """Test a failing default-warehouse lookup yields None."""
        fake_supabase.queue("user_warehouse_access", RuntimeError("timeout"))
        assert ProfileService.get_default_warehouse_id(TEST_USER_ID) is None

    def test_require_warehouse_access(self, fake_supabase):
        """Test a missing access row is a 403."""
        fake_supabase.queue("user_warehouse_access", None)

        with pytest.raises(AccessDeniedError) as exc:
            ProfileService.require_warehouse_access(TEST_USER_ID, "wh-9")

        assert exc.value.code == "WAREHOUSE_ACCESS_DENIED"
        assert exc.value.details == {"warehouse_id": "wh-9"}
