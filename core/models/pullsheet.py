# =============================================================================
# core/models/pullsheet.py - Pull Sheet Schemas
# =============================================================================

from pydantic import BaseModel, Field


class PullSheetQtyUpdate(BaseModel):
    """
    Body of PUT /api/v1/pullsheets (set pulled quantity for one item).

    Example:
        {"pullsheet_id": "9a0b...", "item_id": "44de...", "qty_pulled": 6}
    """
    pullsheet_id: str | None = None
    item_id: str | None = None
    qty_pulled: int | None = Field(default=None, ge=0)


class PullSheetItemPatch(BaseModel):
    """Body of PATCH /api/v1/pullsheets/{id}/items."""

    item_id: str | None = None

    # Only the fields that are present get written
    qty_pulled: int | None = Field(default=None, ge=0)
    prep_status: str | None = None


class PullSheetPermissions(BaseModel):
    """Home-base member flags controlling pull sheet actions."""
    role: str | None = None
    can_create_pullsheets: bool = False
    can_delete_pullsheets: bool = False
    can_finalize_pullsheets: bool = False
