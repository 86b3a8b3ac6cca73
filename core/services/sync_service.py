# =============================================================================
# core/services/sync_service.py - Replay of Offline Outbox Changes
# =============================================================================
# Server side of lib.sync.OutboxSyncService. Each change is applied on its
# own so a bad row fails alone; conflicts are resolved last-write-wins and
# only logged.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from core.models.sync import SYNCABLE_TABLES, SyncChange
from lib.supabase_client import SupabaseClient
from lib.sync.outbox import ChangeOperation
from lib.utils import parse_timestamp

logger = logging.getLogger(__name__)


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error)


class SyncService:

    @staticmethod
    def check_conflict(change: SyncChange) -> bool:
        """
        True if the remote row was updated after the device read it.

        Tables without updated_at (or rows that vanished) are never conflicts.
        """
        try:
            local_ts = parse_timestamp((change.old_values or {}).get("updated_at"))
        except ValueError:
            logger.warning(f"Unreadable updated_at on change {change.id}; skipping conflict check")
            return False
        if local_ts is None:
            return False

        try:
            remote = SupabaseClient.fetch_single(
                change.table_name, {"id": change.record_id}, columns="updated_at"
            )
        except Exception as e:
            logger.debug(f"Conflict check skipped for {change.table_name}: {e}")
            return False

        try:
            remote_ts = parse_timestamp((remote or {}).get("updated_at"))
        except ValueError:
            return False
        if remote_ts is None or remote_ts <= local_ts:
            return False

        logger.warning(
            f"Conflict detected for {change.table_name}:{change.record_id} - using last-write-wins"
        )
        return True

    @staticmethod
    def apply_change(change: SyncChange) -> str | None:
        """
        Apply one change with the service client.

        Returns:
            None on success, otherwise the error message
        """
        if change.table_name not in SYNCABLE_TABLES:
            return f"Invalid table: {change.table_name}"

        try:
            operation = ChangeOperation(change.operation)
        except ValueError:
            return f"Unknown operation: {change.operation}"

        if operation is not ChangeOperation.DELETE and not change.new_values:
            return f"{operation.value} requires new_values"

        if operation is ChangeOperation.UPDATE:
            SyncService.check_conflict(change)

        client = SupabaseClient.get_client()
        table = client.table(change.table_name)
        try:
            if operation is ChangeOperation.INSERT:
                table.insert([{"id": change.record_id, **change.new_values}]).execute()
            elif operation is ChangeOperation.UPDATE:
                table.update(change.new_values).eq("id", change.record_id).execute()
            else:
                table.delete().eq("id", change.record_id).execute()
        except Exception as e:
            return _error_message(e)

        return None

    @staticmethod
    def apply_changes(user_id: UUID | str, changes: list[Any]) -> dict[str, Any]:
        """
        Apply a batch of outbox changes in order.

        Returns:
            {"success": failed == 0, "synced": n, "failed": n, "errors"?: [{changeId, error}]}
        """
        synced = 0
        errors: list[dict[str, str]] = []

        for raw in changes:
            change_id = raw.get("id", "unknown") if isinstance(raw, dict) else "unknown"
            try:
                change = SyncChange.model_validate(raw)
            except ValidationError as e:
                errors.append({"changeId": str(change_id), "error": f"Malformed change: {e.error_count()} invalid field(s)"})
                continue

            try:
                error = SyncService.apply_change(change)
            except Exception as e:
                logger.error(f"Change {change.id} failed unexpectedly: {e}")
                error = _error_message(e)
            if error is None:
                synced += 1
            else:
                errors.append({"changeId": change.id, "error": error})

        logger.info(f"Sync from user {user_id}: {synced} applied, {len(errors)} failed")

        result: dict[str, Any] = {
            "success": not errors,
            "synced": synced,
            "failed": len(errors),
        }
        if errors:
            result["errors"] = errors
        return result
