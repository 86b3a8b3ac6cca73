# =============================================================================
# core/models/sync.py - Server-side Sync Schemas
# =============================================================================
# Wire format of POST /api/sync/changes, mirroring lib.sync.OutboxEntry.
# =============================================================================

from typing import Any

from pydantic import BaseModel

# Tables the mobile outbox may write to
SYNCABLE_TABLES = frozenset({
    "inventory_items",
    "pull_sheets",
    "pull_sheet_items",
    "jobs",
    "job_assignments",
    "employees",
    "clients",
    "warehouses",
    "financing_applications",
    "payments",
    "return_manifests",
    "return_items",
    "tasks",
    "task_assignments",
    "venues",
    "notifications",
})


class SyncChange(BaseModel):
    """
    One replayed change.

    Example:
        {
            "id": "f00d...",
            "table_name": "pull_sheet_items",
            "operation": "UPDATE",
            "record_id": "44de...",
            "old_values": {"qty_pulled": 0, "updated_at": "2025-03-01T10:00:00Z"},
            "new_values": {"qty_pulled": 4}
        }
    """
    id: str
    table_name: str
    operation: str
    record_id: str
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None


class SyncChangesRequest(BaseModel):
    """
    Body of POST /api/sync/changes.

    Left untyped so one malformed change fails alone instead of
    rejecting the whole batch.
    """
    changes: Any = None
