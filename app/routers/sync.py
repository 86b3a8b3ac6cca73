# =============================================================================
# app/routers/sync.py - Offline Outbox Sync Endpoint
# =============================================================================
# Receives batches drained from device outboxes (lib.sync.OutboxSyncService).
# Errors are reported per change in the body, so the client can retry only
# what failed; auth and body-shape failures use the same envelope.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials

from app.auth.dependencies import security_optional, verify_with_supabase
from core.models.sync import SyncChangesRequest
from core.services.sync_service import SyncService

logger = logging.getLogger(__name__)

router = APIRouter()


def _failure(status_code: int, change_id: str, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "synced": 0,
            "failed": 0,
            "errors": [{"changeId": change_id, "error": error}],
        },
    )


@router.post("/changes")
async def sync_changes(
    request: SyncChangesRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
):
    """
    Apply a batch of outbox changes.

    Example body:
        {"changes": [{"id": "f00d...", "table_name": "pull_sheet_items", "operation": "UPDATE",
                      "record_id": "44de...", "new_values": {"qty_pulled": 4}}]}

    Returns:
        {"success": bool, "synced": n, "failed": n, "errors"?: [{"changeId", "error"}]}
    """
    if credentials is None:
        return _failure(status.HTTP_401_UNAUTHORIZED, "auth", "Missing authorization header")

    try:
        user = verify_with_supabase(credentials.credentials)
    except HTTPException as e:
        return _failure(status.HTTP_401_UNAUTHORIZED, "auth", e.detail)

    changes = request.changes if request.changes is not None else []
    if not isinstance(changes, list):
        return _failure(status.HTTP_400_BAD_REQUEST, "body", "changes must be an array")

    return SyncService.apply_changes(user.id, changes)
