# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeSupabase: records every query chain and answers execute() from
#   per-table queues, so services run unmodified against canned rows
# - API client fixtures with auth dependencies overridden
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("MOBILE_API_KEY", "test-mobile-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from typing import Any
from unittest.mock import MagicMock, patch
from uuid import UUID

import pytest

TEST_USER_ID = UUID("11111111-1111-1111-1111-111111111111")
TEST_ORG_ID = "22222222-2222-2222-2222-222222222222"
MOBILE_API_KEY = os.environ["MOBILE_API_KEY"]


# =============================================================================
# Fake Supabase Client
# =============================================================================

class FakeResponse:
    """Stand-in for postgrest's APIResponse."""

    def __init__(self, data: Any):
        self.data = data


class FakeQuery:
    """
    Chainable query builder.

    Every builder method (select, eq, in_, update, ...) is recorded and
    returns the same query. execute() returns the canned result, or raises
    it when the result is an exception.
    """

    def __init__(self, name: str, result: Any):
        self.name = name
        self.result = result
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, method: str):
        if method.startswith("__"):
            raise AttributeError(method)

        def record(*args, **kwargs):
            self.calls.append((method, args, kwargs))
            return self

        return record

    def execute(self) -> FakeResponse:
        if isinstance(self.result, Exception):
            raise self.result
        return FakeResponse(self.result)

    def called(self, method: str) -> list[tuple[tuple, dict]]:
        """Arguments of every call to one builder method."""
        return [(args, kwargs) for name, args, kwargs in self.calls if name == method]

    def first_arg(self, method: str) -> Any:
        """First positional argument of the first call to a builder method."""
        return self.called(method)[0][0][0]


class FakeSupabase:
    """
    Minimal supabase-py Client replacement.

    Results are queued per table (or "rpc:<name>"). Each table() call takes
    the next queued result; the last one is reused once the queue runs dry.

    Example:
        fake.queue("jobs", [{"id": "j1"}])
        fake.queue("rpc:scan_direction", {"status": "OUT"})
    """

    def __init__(self):
        self._results: dict[str, list[Any]] = {}
        self.queries: list[FakeQuery] = []
        self.auth = MagicMock()

    def queue(self, name: str, *results: Any) -> "FakeSupabase":
        self._results.setdefault(name, []).extend(results)
        return self

    def _next(self, name: str) -> Any:
        pending = self._results.get(name)
        if not pending:
            return None
        return pending.pop(0) if len(pending) > 1 else pending[0]

    def table(self, name: str) -> FakeQuery:
        query = FakeQuery(name, self._next(name))
        self.queries.append(query)
        return query

    def rpc(self, function_name: str, params: dict[str, Any]) -> FakeQuery:
        key = f"rpc:{function_name}"
        query = FakeQuery(key, self._next(key))
        query.calls.append(("rpc", (function_name, params), {}))
        self.queries.append(query)
        return query

    def queries_for(self, name: str) -> list[FakeQuery]:
        return [q for q in self.queries if q.name == name]


@pytest.fixture
def fake_supabase():
    """Patch SupabaseClient so every service talks to a FakeSupabase."""
    from lib.supabase_client import SupabaseClient

    fake = FakeSupabase()
    with patch.object(SupabaseClient, "get_client", return_value=fake), \
            patch.object(SupabaseClient, "get_anon_client", return_value=fake):
        yield fake


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def auth_user():
    from app.auth.models import AuthUser

    return AuthUser(id=TEST_USER_ID, email="crew@brightaudio.test")


@pytest.fixture
def api_client():
    """TestClient with no auth overrides."""
    from fastapi.testclient import TestClient

    from app.main import app

    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def authed_client(auth_user):
    """TestClient where every user dependency resolves to auth_user."""
    from fastapi.testclient import TestClient

    from app.auth.dependencies import (
        get_current_user,
        get_current_user_optional,
        get_supabase_user,
    )
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: auth_user
    app.dependency_overrides[get_current_user_optional] = lambda: auth_user
    app.dependency_overrides[get_supabase_user] = lambda: auth_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mobile_headers():
    return {"x-api-key": MOBILE_API_KEY}


# =============================================================================
# Sample Rows
# =============================================================================

@pytest.fixture
def sample_jobs():
    """Job rows spanning two quarters of 2025."""
    return [
        {"id": "j1", "event_date": "2025-01-15T18:00:00Z", "income_amount": 5000, "estimated_cost": 2000},
        {"id": "j2", "event_date": "2025-02-20T18:00:00Z", "income_amount": "3000", "estimated_cost": 1000},
        {"id": "j3", "event_date": "2025-04-05T18:00:00Z", "income_amount": 10000, "estimated_cost": 4000},
        {"id": "j4", "event_date": None, "income_amount": 999, "estimated_cost": 1},
    ]
