# =============================================================================
# lib/sync/ - Offline Outbox Sync
# =============================================================================
# Client-side pieces of the offline workflow:
# - outbox.py: change records and results
# - local_store.py: SQLAlchemy store and local migrations
# - network_monitor.py: reachability polling
# - conflict_resolver.py: local vs remote resolution strategies
# - outbox_sync.py: pushes pending changes to /api/sync/changes
# =============================================================================

from lib.sync.outbox import (
    ChangeOperation,
    OutboxEntry,
    SyncResult,
    SyncStatus,
    create_outbox_entry,
)
from lib.sync.conflict_resolver import Conflict, ConflictResolver, Resolution
from lib.sync.network_monitor import NetworkMonitor, get_network_monitor
from lib.sync.local_store import LocalOutboxStore, get_local_store
from lib.sync.outbox_sync import OutboxSyncService, categorize_error

__all__ = [
    "ChangeOperation",
    "OutboxEntry",
    "SyncResult",
    "SyncStatus",
    "create_outbox_entry",
    "Conflict",
    "ConflictResolver",
    "Resolution",
    "NetworkMonitor",
    "get_network_monitor",
    "LocalOutboxStore",
    "get_local_store",
    "OutboxSyncService",
    "categorize_error",
]
