# =============================================================================
# lib/sync/outbox.py - Outbox Change Records
# =============================================================================
# Shapes shared by the local outbox store, the sync service and the server
# endpoint. An OutboxEntry is one row-level change captured while offline.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from lib.utils import utc_now


class ChangeOperation(str, Enum):
    """Row-level operation captured in the outbox."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class OutboxEntry:
    """
    A pending change to replay against the server.

    synced_at stays None until the server acknowledges the change;
    sync_attempts and error track failed deliveries.
    """
    id: str
    table_name: str
    operation: ChangeOperation
    record_id: str
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=utc_now)
    synced_at: datetime | None = None
    sync_attempts: int = 0
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe dict in the shape POST /api/sync/changes expects."""
        return {
            "id": self.id,
            "table_name": self.table_name,
            "operation": self.operation.value,
            "record_id": self.record_id,
            "old_values": self.old_values,
            "new_values": self.new_values,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "sync_attempts": self.sync_attempts,
        }


@dataclass
class SyncStatus:
    """Snapshot of the outbox for status displays."""
    pending: int = 0
    synced: int = 0
    failed: int = 0
    last_sync_at: datetime | None = None


@dataclass
class SyncResult:
    """Outcome of one sync pass."""
    synced: int = 0
    failed: int = 0
    errors: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"synced": self.synced, "failed": self.failed, "errors": self.errors}


def create_outbox_entry(
    table_name: str,
    operation: ChangeOperation | str,
    record_id: str,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
) -> OutboxEntry:
    """
    Build a fresh, unsynced entry with a new id and the current timestamp.

    Example:
        entry = create_outbox_entry("pull_sheet_items", "UPDATE", item_id,
                                    old_values={"qty_pulled": 0},
                                    new_values={"qty_pulled": 4})
    """
    return OutboxEntry(
        id=str(uuid4()),
        table_name=table_name,
        operation=ChangeOperation(operation),
        record_id=str(record_id),
        old_values=old_values,
        new_values=new_values,
    )
