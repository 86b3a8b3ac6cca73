# =============================================================================
# tests/test_scan_service.py - Tests for Warehouse Scanning
# =============================================================================
# Tests for:
# - ScanService.scan_direction validation and RPC relay
# - ScanService.rig_scan item moves and scan event logging
# =============================================================================

import pytest

from app.exceptions import InvalidRequestError, ResourceNotFoundError
from core.models.scan import RigScanRequest, ScanDirection, ScanDirectionRequest
from core.services.scan_service import ACCEPTED_DIRECTIONS, ScanService
from lib.supabase_client import SupabaseClientError

RIG = {"id": "rig-1", "name": "Main PA", "barcode": "RIG-001"}


def _scan(**overrides) -> ScanDirectionRequest:
    body = {"jobCode": "JOB-2025-014", "code": "SHURE-007", "direction": "out"}
    body.update(overrides)
    return ScanDirectionRequest.model_validate(body)


class TestScanDirection:
    """Test ScanService.scan_direction."""

    def test_relays_rpc_result(self, fake_supabase):
        """Test the direction is upper-cased and the RPC result returned."""
        fake_supabase.queue("rpc:scan_direction", {"item": "SHURE-007", "status": "out"})

        result = ScanService.scan_direction(_scan(scannedBy="Dana"))

        assert result == {"ok": True, "result": {"item": "SHURE-007", "status": "out"}}
        function_name, params = fake_supabase.queries_for("rpc:scan_direction")[0].called("rpc")[0][0]
        assert params == {
            "p_job_code": "JOB-2025-014",
            "p_serial_or_barcode": "SHURE-007",
            "p_direction": "OUT",
            "p_scanned_by": "Dana",
            "p_location": None,
        }

    @pytest.mark.parametrize("missing", ["jobCode", "code", "direction"])
    def test_missing_fields(self, fake_supabase, missing):
        """Test every field is required."""
        with pytest.raises(InvalidRequestError) as exc:
            ScanService.scan_direction(_scan(**{missing: None}))
        assert exc.value.message == "Missing jobCode, code, or direction"

    def test_bad_direction(self, fake_supabase):
        """Test only OUT/IN are accepted."""
        with pytest.raises(InvalidRequestError) as exc:
            ScanService.scan_direction(_scan(direction="SIDEWAYS"))
        assert exc.value.code == "INVALID_DIRECTION"

    def test_mixed_case_rejected(self, fake_supabase):
        """Test only all-upper or all-lower directions are accepted."""
        with pytest.raises(InvalidRequestError):
            ScanService.scan_direction(_scan(direction="Out"))

    def test_accepted_directions(self):
        """Test the accepted spellings come from the ScanDirection enum."""
        assert ACCEPTED_DIRECTIONS == {"OUT", "IN", "out", "in"}
        assert ScanDirection("IN") is ScanDirection.IN

    def test_rpc_rejection_is_400(self, fake_supabase):
        """Test database errors surface with the database's message."""
        fake_supabase.queue("rpc:scan_direction", SupabaseClientError("Item already checked out"))

        with pytest.raises(InvalidRequestError) as exc:
            ScanService.scan_direction(_scan())
        assert exc.value.status_code == 400
        assert exc.value.message == "Item already checked out"


class TestRigScan:
    """Test ScanService.rig_scan."""

    def _request(self, **overrides) -> RigScanRequest:
        body = {"barcode": "RIG-001", "location": "Dock B", "status": "checked_out", "job_id": "job-1"}
        body.update(overrides)
        return RigScanRequest.model_validate(body)

    def test_requires_rig_prefix(self, fake_supabase):
        """Test non-rig barcodes are rejected."""
        with pytest.raises(InvalidRequestError) as exc:
            ScanService.rig_scan(self._request(barcode="SHURE-001"))
        assert exc.value.code == "INVALID_RIG_BARCODE"

    def test_missing_fields(self, fake_supabase):
        """Test barcode, location and status are required."""
        with pytest.raises(InvalidRequestError):
            ScanService.rig_scan(self._request(location=None))

    def test_unknown_rig(self, fake_supabase):
        """Test a 404 for unknown rig barcodes."""
        fake_supabase.queue("rig_containers", None)

        with pytest.raises(ResourceNotFoundError) as exc:
            ScanService.rig_scan(self._request())
        assert exc.value.message == "Rig not found with barcode: RIG-001"

    def test_empty_rig(self, fake_supabase):
        """Test an empty rig succeeds without updates."""
        fake_supabase.queue("rig_containers", RIG)
        fake_supabase.queue("rig_container_items", [])

        result = ScanService.rig_scan(self._request())

        assert result == {"success": True, "message": 'Rig "Main PA" has no items to update', "items_updated": 0}
        assert fake_supabase.queries_for("inventory_items") == []

    def test_moves_items_and_logs_events(self, fake_supabase):
        """Test every item is moved and gets a scan event."""
        fake_supabase.queue("rig_containers", RIG)
        fake_supabase.queue("rig_container_items", [
            {"inventory_item_id": "i1", "inventory_items": {"id": "i1", "name": "QSC K12", "barcode": "QSC-001"}},
            {"inventory_item_id": "i2", "inventory_items": {"id": "i2", "name": "QSC K12", "barcode": "QSC-002"}},
        ])

        result = ScanService.rig_scan(self._request())

        assert result["items_updated"] == 2
        assert result["new_location"] == "Dock B"

        update = fake_supabase.queries_for("inventory_items")[0]
        assert update.first_arg("update")["status"] == "checked_out"
        assert update.called("in_")[0][0] == ("id", ["i1", "i2"])

        events = fake_supabase.queries_for("scan_events")[0].first_arg("insert")
        assert [e["barcode"] for e in events] == ["QSC-001", "QSC-002"]
        assert events[0]["notes"] == "Scanned as part of rig: Main PA (RIG-001)"

    def test_event_logging_failure_is_ignored(self, fake_supabase):
        """Test the move still succeeds if scan events can't be written."""
        fake_supabase.queue("rig_containers", RIG)
        fake_supabase.queue("rig_container_items", [{"inventory_item_id": "i1", "inventory_items": None}])
        fake_supabase.queue("scan_events", RuntimeError("insert failed"))

        assert ScanService.rig_scan(self._request())["success"] is True
