# =============================================================================
# tests/test_conflict_resolver.py - Tests for Local/Remote Conflict Resolution
# =============================================================================

from datetime import datetime, timedelta, timezone

import pytest

from lib.sync.conflict_resolver import (
    ConflictResolver,
    UnknownStrategyError,
    changed_fields,
    is_equivalent,
)

EARLIER = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
LATER = EARLIER + timedelta(minutes=5)


@pytest.fixture
def conflict():
    """Pull sheet item edited on the device, then on the server."""
    resolver = ConflictResolver()
    return resolver.detect_conflict(
        "pull_sheet_items",
        "item-1",
        {"qty_pulled": 4, "prep_status": "pulled"},
        {"qty_pulled": 2, "prep_status": "staged"},
        EARLIER,
        LATER,
    )


class TestChangedFields:
    """Test field comparison."""

    def test_changed_fields(self):
        """Test differing and one-sided keys are reported, sorted."""
        assert changed_fields({"a": 1, "b": 2}, {"a": 1, "b": 3, "c": None}) == ["b"]
        assert changed_fields({"a": 1}, {"b": 1}) == ["a", "b"]

    def test_nested_values_compare_by_content(self):
        """Test dict key order does not matter."""
        assert is_equivalent({"meta": {"x": 1, "y": 2}}, {"meta": {"y": 2, "x": 1}})


class TestDetectConflict:
    """Test ConflictResolver.detect_conflict."""

    def test_detects_newer_remote(self, conflict):
        """Test a newer, different remote copy is a conflict."""
        assert conflict is not None
        assert conflict.changed_fields == ["prep_status", "qty_pulled"]
        assert conflict.remote_timestamp == LATER

    def test_identical_values(self):
        """Test equal values are never a conflict."""
        resolver = ConflictResolver()
        assert resolver.detect_conflict("jobs", "1", {"a": 1}, {"a": 1}, EARLIER, LATER) is None

    def test_older_remote(self):
        """Test an older remote copy cannot have overwritten the edit."""
        resolver = ConflictResolver()
        assert resolver.detect_conflict("jobs", "1", {"a": 1}, {"a": 2}, LATER, EARLIER) is None

    def test_accepts_iso_strings(self):
        """Test PostgREST timestamps are parsed."""
        resolver = ConflictResolver()
        found = resolver.detect_conflict(
            "jobs", "1", {"a": 1}, {"a": 2}, "2025-03-01T10:00:00Z", "2025-03-01T10:05:00Z"
        )
        assert found is not None


class TestResolve:
    """Test resolution strategies."""

    def test_last_write_wins(self, conflict):
        """Test the newer remote copy wins by default."""
        resolution = ConflictResolver().resolve(conflict)
        assert resolution.winner == "remote"
        assert resolution.resolved_values["qty_pulled"] == 2

    def test_local_wins(self, conflict):
        """Test the local-wins strategy."""
        resolution = ConflictResolver("local-wins").resolve(conflict)
        assert resolution.winner == "local"
        assert resolution.resolved_values == {"qty_pulled": 4, "prep_status": "pulled"}

    def test_remote_wins(self, conflict):
        """Test the remote-wins strategy."""
        assert ConflictResolver("remote-wins").resolve(conflict).winner == "remote"

    def test_manual_with_resolver(self, conflict):
        """Test a registered manual resolver decides."""
        resolver = ConflictResolver("manual")
        resolver.set_manual_resolver(lambda c: {"qty_pulled": max(c.local_values["qty_pulled"], c.remote_values["qty_pulled"])})

        resolution = resolver.resolve(conflict)
        assert resolution.strategy == "manual"
        assert resolution.winner == "merged"
        assert resolution.resolved_values == {"qty_pulled": 4}

    def test_manual_without_resolver(self, conflict):
        """Test manual falls back to last-write-wins."""
        resolution = ConflictResolver("manual").resolve(conflict)
        assert resolution.strategy == "last-write-wins"

    def test_unknown_strategy(self):
        """Test unknown strategies are rejected."""
        with pytest.raises(UnknownStrategyError):
            ConflictResolver("coin-flip")

    def test_merge(self, conflict):
        """Test field-by-field merge starts from the remote copy."""
        resolution = ConflictResolver().resolve_with_merge(conflict, {"qty_pulled": "local"})
        assert resolution.resolved_values == {"qty_pulled": 4, "prep_status": "staged"}
