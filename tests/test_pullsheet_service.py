# =============================================================================
# tests/test_pullsheet_service.py - Tests for Pull Sheet Operations
# =============================================================================
# Tests for:
# - Crew app quantity and prep updates
# - Print resolution by id or job code
# - render_pullsheet_html (escaping, empty state)
# =============================================================================

import pytest

from app.exceptions import InvalidRequestError, ResourceNotFoundError
from core.models.pullsheet import PullSheetItemPatch, PullSheetQtyUpdate
from core.services.pullsheet_service import PullSheetService, render_pullsheet_html

SHEET = {
    "id": "ps-1",
    "name": "Spring Gala",
    "code": "PS-014",
    "job_id": "job-1",
    "scheduled_out_at": "2025-04-10",
    "expected_return_at": "2025-04-12",
}
JOB = {"id": "job-1", "code": "JOB-2025-014", "title": "Spring Gala", "venue": "Ryman"}


class TestCrewUpdates:
    """Test quantity and prep updates."""

    def test_set_qty_pulled(self, fake_supabase):
        """Test the item is scoped to its pull sheet."""
        fake_supabase.queue("pull_sheet_items", [{"id": "item-1", "qty_pulled": 6}])

        row = PullSheetService.set_qty_pulled(
            PullSheetQtyUpdate(pullsheet_id="ps-1", item_id="item-1", qty_pulled=6)
        )

        assert row["qty_pulled"] == 6
        query = fake_supabase.queries_for("pull_sheet_items")[0]
        assert [args for args, _ in query.called("eq")] == [("id", "item-1"), ("pull_sheet_id", "ps-1")]

    def test_set_qty_requires_fields(self, fake_supabase):
        """Test all three fields are required, but zero is a valid quantity."""
        with pytest.raises(InvalidRequestError):
            PullSheetService.set_qty_pulled(PullSheetQtyUpdate(pullsheet_id="ps-1", item_id="item-1"))

        fake_supabase.queue("pull_sheet_items", [{"id": "item-1", "qty_pulled": 0}])
        row = PullSheetService.set_qty_pulled(
            PullSheetQtyUpdate(pullsheet_id="ps-1", item_id="item-1", qty_pulled=0)
        )
        assert row["qty_pulled"] == 0

    def test_set_qty_unknown_item(self, fake_supabase):
        """Test a 404 when no row matched."""
        fake_supabase.queue("pull_sheet_items", [])
        with pytest.raises(ResourceNotFoundError):
            PullSheetService.set_qty_pulled(
                PullSheetQtyUpdate(pullsheet_id="ps-1", item_id="nope", qty_pulled=1)
            )

    def test_patch_only_sent_fields(self, fake_supabase):
        """Test fields that weren't sent are left alone."""
        fake_supabase.queue("pull_sheet_items", [{"id": "item-1", "prep_status": "staged"}])

        PullSheetService.patch_item("ps-1", PullSheetItemPatch(item_id="item-1", prep_status="staged"))

        update = fake_supabase.queries_for("pull_sheet_items")[0].first_arg("update")
        assert update == {"prep_status": "staged"}

    def test_patch_nothing(self, fake_supabase):
        """Test an empty patch is rejected."""
        with pytest.raises(InvalidRequestError):
            PullSheetService.patch_item("ps-1", PullSheetItemPatch(item_id="item-1"))

    def test_permissions(self, fake_supabase):
        """Test membership flags, and None for non-members."""
        fake_supabase.queue("home_base_members", {"role": "lead", "can_create_pullsheets": True})
        permissions = PullSheetService.get_permissions("user-1")
        assert permissions.can_create_pullsheets is True
        assert permissions.can_finalize_pullsheets is False


class TestResolveForPrint:
    """Test PullSheetService.resolve_for_print."""

    def test_requires_a_key(self, fake_supabase):
        """Test one of pullSheetId or jobCode is required."""
        with pytest.raises(InvalidRequestError) as exc:
            PullSheetService.resolve_for_print()
        assert exc.value.message == "Provide pullSheetId or jobCode"

    def test_by_id(self, fake_supabase):
        """Test lookup by pull sheet id includes its job."""
        fake_supabase.queue("pull_sheets", SHEET)
        fake_supabase.queue("jobs", JOB)

        sheet, job = PullSheetService.resolve_for_print(pull_sheet_id="ps-1")

        assert sheet["code"] == "PS-014"
        assert job["venue"] == "Ryman"

    def test_by_job_code_newest_sheet(self, fake_supabase):
        """Test lookup by job code takes the newest sheet."""
        fake_supabase.queue("jobs", JOB)
        fake_supabase.queue("pull_sheets", [SHEET])

        sheet, job = PullSheetService.resolve_for_print(job_code="JOB-2025-014")

        assert sheet["id"] == "ps-1"
        query = fake_supabase.queries_for("pull_sheets")[0]
        assert query.called("order")[0] == (("created_at",), {"desc": True})

    def test_job_without_sheet(self, fake_supabase):
        """Test a 404 when the job has no pull sheet."""
        fake_supabase.queue("jobs", JOB)
        fake_supabase.queue("pull_sheets", [])

        with pytest.raises(ResourceNotFoundError) as exc:
            PullSheetService.resolve_for_print(job_code="JOB-2025-014")
        assert exc.value.message == "No pull sheet for job"

    def test_print_items_flattened(self, fake_supabase):
        """Test sku falls back to barcode and name to the product."""
        fake_supabase.queue("pull_sheet_items", [
            {"qty_requested": 4, "qty_pulled": None, "item_name": None,
             "products": {"sku": "SPK-12", "name": "K12.2"}, "inventory_items": None},
            {"qty_requested": 2, "qty_pulled": 2, "item_name": "Mic stand",
             "products": None, "inventory_items": {"barcode": "STAND-003", "name": "Stand"}},
        ])

        rows = PullSheetService.fetch_print_items("ps-1")

        assert rows == [
            {"sku": "SPK-12", "name": "K12.2", "qty_requested": 4, "qty_pulled": 0},
            {"sku": "STAND-003", "name": "Mic stand", "qty_requested": 2, "qty_pulled": 2},
        ]


class TestRenderHtml:
    """Test render_pullsheet_html."""

    def test_escapes_values(self):
        """Test database text is HTML-escaped."""
        items = [{"sku": "<b>", "name": "Cable & Snake", "qty_requested": 1, "qty_pulled": 0}]
        page = render_pullsheet_html({**SHEET, "name": "<script>alert(1)</script>"}, JOB, items)

        assert "<script>alert(1)</script>" not in page
        assert "&lt;script&gt;" in page
        assert "Cable &amp; Snake" in page
        assert "<td>&lt;b&gt;</td>" in page
        assert "2025-04-10 → 2025-04-12" in page

    def test_empty_items(self):
        """Test the empty-state row."""
        page = render_pullsheet_html(SHEET, None, [])
        assert "No items found" in page
        assert page.startswith("<!doctype html>")

    def test_window_escaped_and_joined(self):
        """Test the scheduling window is joined after escaping each end."""
        sheet = {**SHEET, "scheduled_out_at": "<now>", "expected_return_at": None}
        page = render_pullsheet_html(sheet, JOB, [])
        assert "<td>&lt;now&gt;</td>" in page
