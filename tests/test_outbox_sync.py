# =============================================================================
# tests/test_outbox_sync.py - Tests for the Local Outbox and Sync Client
# =============================================================================
# Tests for:
# - LocalOutboxStore on in-memory SQLite (migrations, pending, marking)
# - OutboxSyncService against a mocked HTTP client
# - categorize_error messages
# =============================================================================

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from lib.sync.local_store import LocalOutboxStore, run_migrations
from lib.sync.network_monitor import NetworkMonitor
from lib.sync.outbox import ChangeOperation, SyncStatus, create_outbox_entry
from lib.sync.outbox_sync import OutboxSyncService, categorize_error

API_URL = "http://api.test/api/sync/changes"
CAPTURE_START = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    """Fresh in-memory outbox store."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    return LocalOutboxStore(engine)


@pytest.fixture
def online_monitor():
    return NetworkMonitor("http://api.test/api/v1/health/live", initial_status="online")


def _http_response(status_code: int, body: dict | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.reason_phrase = "Error" if status_code >= 400 else "OK"
    response.json.return_value = body or {}
    return response


def _service(store, monitor, http_client, **kwargs) -> OutboxSyncService:
    return OutboxSyncService(
        store,
        monitor,
        api_url=API_URL,
        auth_token="access-token",
        http_client=http_client,
        **kwargs,
    )


def _record(store, qty: int):
    """Record an UPDATE captured `qty` seconds after a fixed start time."""
    entry = create_outbox_entry(
        "pull_sheet_items",
        "UPDATE",
        "item-1",
        old_values={"qty_pulled": qty - 1},
        new_values={"qty_pulled": qty},
    )
    entry.created_at = CAPTURE_START + timedelta(seconds=qty)
    return store.record(entry)


class TestOutboxEntry:
    """Test outbox change records."""

    def test_create_entry(self):
        """Test new entries are unsynced with a fresh id."""
        entry = create_outbox_entry("jobs", "DELETE", 42)
        assert entry.operation is ChangeOperation.DELETE
        assert entry.record_id == "42"
        assert entry.synced_at is None
        assert entry.sync_attempts == 0

    def test_unknown_operation(self):
        """Test unknown operations are rejected."""
        with pytest.raises(ValueError):
            create_outbox_entry("jobs", "UPSERT", "1")

    def test_payload_shape(self):
        """Test the JSON shape posted to the server."""
        payload = create_outbox_entry("jobs", "INSERT", "1", new_values={"title": "Gala"}).to_payload()
        assert payload["operation"] == "INSERT"
        assert payload["new_values"] == {"title": "Gala"}
        assert isinstance(payload["created_at"], str)


class TestLocalOutboxStore:
    """Test LocalOutboxStore."""

    def test_migrations_create_tables_once(self, store):
        """Test the initial migration ran and is not re-applied."""
        assert store.has_table("changes_outbox")
        assert store.has_table("schema_migrations")
        assert run_migrations(store.engine) == []

    def test_pending_oldest_first(self, store):
        """Test pending changes come back in capture order."""
        first = _record(store, 1)
        second = _record(store, 2)

        pending = store.get_pending()
        assert [p.id for p in pending] == [first.id, second.id]
        assert pending[0].new_values == {"qty_pulled": 1}

    def test_mark_synced(self, store):
        """Test synced changes leave the pending list."""
        entry = _record(store, 1)
        store.mark_synced([entry.id])

        assert store.count_pending() == 0
        assert store.count_all() == 1
        assert store.last_synced_at() is not None

    def test_increment_attempts(self, store):
        """Test failed deliveries are counted with their error."""
        entry = _record(store, 1)
        store.increment_attempts([entry.id], error="boom")
        store.increment_attempts([entry.id], error="boom again")

        pending = store.get_pending()[0]
        assert pending.sync_attempts == 2
        assert pending.error == "boom again"
        assert store.get_retryable(max_attempts=2) == []

    def test_clear_synced(self, store):
        """Test only acknowledged changes are deleted."""
        synced = _record(store, 1)
        _record(store, 2)
        store.mark_synced([synced.id])

        assert store.clear_synced() == 1
        assert store.count_all() == 1


class TestOutboxSyncService:
    """Test OutboxSyncService."""

    def test_nothing_pending(self, store, online_monitor):
        """Test an empty outbox makes no request."""
        http = MagicMock()
        result = _service(store, online_monitor, http).sync_pending()

        assert result.to_dict() == {"synced": 0, "failed": 0, "errors": []}
        http.post.assert_not_called()

    def test_offline_defers(self, store):
        """Test offline devices skip the round trip."""
        _record(store, 1)
        http = MagicMock()
        monitor = NetworkMonitor("http://api.test", initial_status="offline")

        result = _service(store, monitor, http).sync_pending()

        assert result.failed == 1
        assert result.errors[0]["error"] == "Network unavailable"
        http.post.assert_not_called()
        assert store.get_pending()[0].sync_attempts == 0

    def test_success(self, store, online_monitor):
        """Test acknowledged changes are marked synced."""
        first = _record(store, 1)
        second = _record(store, 2)
        http = MagicMock()
        http.post.return_value = _http_response(200, {"success": True, "synced": 2, "failed": 0})

        result = _service(store, online_monitor, http).sync_pending()

        assert result.synced == 2
        assert store.count_pending() == 0

        _, kwargs = http.post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer access-token"
        assert [c["id"] for c in kwargs["json"]["changes"]] == [first.id, second.id]

    def test_partial_failure(self, store, online_monitor):
        """Test per-change errors keep only those changes pending."""
        good = _record(store, 1)
        bad = _record(store, 2)
        http = MagicMock()
        http.post.return_value = _http_response(200, {
            "success": False,
            "synced": 1,
            "failed": 1,
            "errors": [{"changeId": bad.id, "error": "Invalid table: nope"}],
        })

        result = _service(store, online_monitor, http).sync_pending()

        assert result.synced == 1
        assert result.failed == 1
        pending = store.get_pending()
        assert [p.id for p in pending] == [bad.id]
        assert pending[0].error == "Invalid table: nope"
        assert good.id not in [p.id for p in pending]

    def test_http_error_counts_attempt(self, store, online_monitor):
        """Test a non-2xx response fails the whole batch."""
        _record(store, 1)
        http = MagicMock()
        http.post.return_value = _http_response(500)

        result = _service(store, online_monitor, http).sync_pending()

        assert result.failed == 1
        assert result.errors[0]["error"] == "Sync failed: 500 Error"
        assert store.get_pending()[0].sync_attempts == 1

    def test_retry_backoff(self, store, online_monitor):
        """Test retry waits base * 2^attempts before syncing."""
        entry = _record(store, 1)
        store.increment_attempts([entry.id], error="timeout")
        store.increment_attempts([entry.id], error="timeout")

        http = MagicMock()
        http.post.return_value = _http_response(200, {"success": True})
        sleep = MagicMock()

        result = _service(store, online_monitor, http, base_delay_ms=100, sleep=sleep).retry_failed(max_attempts=3)

        sleep.assert_called_once_with(0.4)
        assert result.synced == 1

    def test_retry_respects_cap(self, store, online_monitor):
        """Test changes at the retry cap are not retried."""
        entry = _record(store, 1)
        for _ in range(3):
            store.increment_attempts([entry.id])

        http = MagicMock()
        sleep = MagicMock()
        result = _service(store, online_monitor, http, sleep=sleep).retry_failed(max_attempts=3)

        assert result.synced == 0
        sleep.assert_not_called()
        http.post.assert_not_called()

    def test_status(self, store, online_monitor):
        """Test only tried-and-unsynced changes count as failed."""
        synced, tried = _record(store, 1), _record(store, 2)
        _record(store, 3)
        store.mark_synced([synced.id])
        store.increment_attempts([tried.id], error="timeout")

        status = _service(store, online_monitor, MagicMock()).get_sync_status()

        assert isinstance(status, SyncStatus)
        assert (status.pending, status.synced, status.failed) == (2, 1, 1)
        assert status.last_sync_at is not None

    def test_status_empty(self, store, online_monitor):
        """Test an empty outbox."""
        status = _service(store, online_monitor, MagicMock()).get_sync_status()
        assert status == SyncStatus()


class TestCategorizeError:
    """Test transport error messages."""

    def test_timeout_exception(self):
        """Test httpx timeouts."""
        assert categorize_error(httpx.ReadTimeout("slow")) == "Request timeout - server took too long"

    def test_connection_refused(self):
        """Test refused connections."""
        assert categorize_error(OSError("[Errno 111] Connection refused")) == (
            "Connection refused - server not reachable"
        )

    def test_network(self):
        """Test DNS failures."""
        assert categorize_error("getaddrinfo ENOTFOUND api.test") == "Network error - check your connection"

    def test_passthrough(self):
        """Test unrecognized messages pass through."""
        assert categorize_error(ValueError("weird")) == "weird"
