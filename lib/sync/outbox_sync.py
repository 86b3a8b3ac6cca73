# =============================================================================
# lib/sync/outbox_sync.py - Outbox Sync Service
# =============================================================================
# Drains the local outbox to POST /api/sync/changes.
#
# Flow:
# 1. Read up to batch_size unsynced changes (oldest first)
# 2. Skip the round trip if the network monitor says we're offline
# 3. POST the batch with the user's bearer token
# 4. Mark acknowledged changes synced, bump attempts on the rest
#
# retry_failed() re-runs a pass after an exponential backoff based on how
# many times the pending changes have already failed.
# =============================================================================

from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from app.config import settings
from lib.sync.local_store import LocalOutboxStore
from lib.sync.network_monitor import NetworkMonitor
from lib.sync.outbox import OutboxEntry, SyncResult, SyncStatus

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30.0


class SyncRequestError(Exception):
    """The sync endpoint answered with a non-2xx status."""


def categorize_error(error: Exception | str) -> str:
    """
    Turn a transport failure into a message a field user can act on.

    Unrecognized errors pass through unchanged.
    """
    if isinstance(error, httpx.TimeoutException):
        return "Request timeout - server took too long"

    message = str(error)
    lowered = message.lower()

    if "network" in lowered or "enotfound" in lowered or "name or service not known" in lowered:
        return "Network error - check your connection"
    if "timeout" in lowered or "timedout" in lowered or "timed out" in lowered:
        return "Request timeout - server took too long"
    if "econnrefused" in lowered or "connection refused" in lowered:
        return "Connection refused - server not reachable"
    if "econnreset" in lowered or "connection reset" in lowered:
        return "Connection reset by server"
    return message


class OutboxSyncService:
    """
    Client-side bridge between the local outbox and the server.

    Example:
        service = OutboxSyncService(get_local_store(), get_network_monitor())
        service.set_auth_token(access_token)
        result = service.sync_pending()
    """

    def __init__(
        self,
        store: LocalOutboxStore,
        network_monitor: NetworkMonitor,
        api_url: str | None = None,
        auth_token: str | None = None,
        batch_size: int | None = None,
        max_retries: int | None = None,
        base_delay_ms: int | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.network_monitor = network_monitor
        self.api_url = api_url or settings.sync_api_url
        self.auth_token = auth_token
        self.batch_size = batch_size or settings.SYNC_BATCH_SIZE
        self.max_retries = max_retries or settings.SYNC_MAX_RETRIES
        self.base_delay_ms = base_delay_ms if base_delay_ms is not None else settings.SYNC_BASE_DELAY_MS
        self._http = http_client or httpx.Client(timeout=REQUEST_TIMEOUT_SECONDS)
        self._sleep = sleep

    def set_auth_token(self, token: str | None) -> None:
        self.auth_token = token

    def get_pending_changes(self, limit: int | None = None) -> list[OutboxEntry]:
        return self.store.get_pending(limit=limit or self.batch_size)

    def sync_pending(self) -> SyncResult:
        """Run one sync pass over the oldest pending batch."""
        changes = self.get_pending_changes()
        if not changes:
            return SyncResult()

        if self.network_monitor.is_offline():
            logger.info(f"Offline, deferring {len(changes)} changes")
            return SyncResult(
                failed=len(changes),
                errors=[{"changeId": c.id, "error": "Network unavailable"} for c in changes],
            )

        change_ids = [c.id for c in changes]

        try:
            body = self._post_changes(changes)
        except Exception as e:
            message = categorize_error(e)
            logger.error(f"Sync request failed: {message}")
            self.store.increment_attempts(change_ids, error=message)
            return SyncResult(
                failed=len(changes),
                errors=[{"changeId": cid, "error": message} for cid in change_ids],
            )

        errors = body.get("errors") or []
        errored = {e.get("changeId"): e.get("error", "Unknown error") for e in errors}

        succeeded = [cid for cid in change_ids if cid not in errored]
        self.store.mark_synced(succeeded)
        for cid, message in errored.items():
            if cid in change_ids:
                self.store.increment_attempts([cid], error=message)

        logger.info(f"Synced {len(succeeded)} changes, {len(errored)} failed")
        return SyncResult(
            synced=len(succeeded),
            failed=len(errored),
            errors=[{"changeId": cid, "error": msg} for cid, msg in errored.items()],
        )

    def _post_changes(self, changes: list[OutboxEntry]) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"

        response = self._http.post(
            self.api_url,
            json={"changes": [c.to_payload() for c in changes]},
            headers=headers,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        if response.status_code >= 400:
            raise SyncRequestError(f"Sync failed: {response.status_code} {response.reason_phrase}")
        return response.json()

    def retry_failed(self, max_attempts: int | None = None) -> SyncResult:
        """
        Back off, then sync again if any change is still under the retry cap.

        Delay is base_delay * 2^n where n is the highest attempt count among
        the retryable changes.
        """
        max_attempts = max_attempts or self.max_retries
        retryable = self.store.get_retryable(max_attempts=max_attempts, limit=self.batch_size)
        if not retryable:
            return SyncResult()

        highest = max(c.sync_attempts for c in retryable)
        delay_ms = self.base_delay_ms * (2 ** highest)
        logger.info(f"Retrying {len(retryable)} changes after {delay_ms}ms")
        self._sleep(delay_ms / 1000)

        return self.sync_pending()

    def get_sync_status(self) -> SyncStatus:
        pending = self.store.count_pending()
        return SyncStatus(
            pending=pending,
            synced=self.store.count_all() - pending,
            failed=self.store.count_failed(),
            last_sync_at=self.store.last_synced_at(),
        )

    def clear_synced(self) -> int:
        return self.store.clear_synced()
