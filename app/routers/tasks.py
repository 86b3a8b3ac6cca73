# =============================================================================
# app/routers/tasks.py - Background Task Status Endpoints
# =============================================================================
# Lets callers poll Celery jobs queued by the API, such as the chat
# autopilot reply returned as autopilot_task_id from POST /api/chat/send.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter()

# State -> (progress, message) for states that carry no payload
_STATE_MESSAGES = {
    "PENDING": (0, "Waiting in queue..."),
    "STARTED": (0, "Starting..."),
    "RETRY": (0, "Retrying..."),
}


class TaskStatusResponse(BaseModel):
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


def _get_result(task_id: str):
    from workers.celery_app import celery_app
    return celery_app.AsyncResult(task_id)


def _failure_text(result) -> str:
    return str(result.result) if result.result else "Unknown error"


@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(task_id: Annotated[str, Path(description="Celery task ID")]):
    """
    Current state of a background task.

    PENDING, STARTED and RETRY report progress 0; SUCCESS includes the
    result; FAILURE includes the error text.
    """
    try:
        result = _get_result(task_id)
        response = TaskStatusResponse(task_id=task_id, status=result.status)

        if result.status == "SUCCESS":
            response.result = result.result if isinstance(result.result, dict) else {"value": result.result}
            response.progress = 100
            response.message = "Complete"
        elif result.status == "FAILURE":
            response.error = _failure_text(result)
            response.message = "Failed"
        elif result.status in _STATE_MESSAGES:
            response.progress, response.message = _STATE_MESSAGES[result.status]

        return response

    except Exception as e:
        logger.error(f"Error getting task status for {task_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {e}")


@router.get("/{task_id}/result")
async def get_task_result(task_id: Annotated[str, Path(description="Celery task ID")]):
    """The task's return value once it has finished."""
    try:
        result = _get_result(task_id)

        if result.status == "SUCCESS":
            return {"task_id": task_id, "status": "SUCCESS", "result": result.result}
        if result.status == "FAILURE":
            return {"task_id": task_id, "status": "FAILURE", "error": _failure_text(result)}
        return {"task_id": task_id, "status": result.status, "message": "Task not yet complete"}

    except Exception as e:
        logger.error(f"Error getting task result for {task_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task result: {e}")


@router.delete("/{task_id}")
async def cancel_task(task_id: Annotated[str, Path(description="Celery task ID")]):
    """Revoke a task that hasn't finished yet."""
    try:
        result = _get_result(task_id)

        if result.status in ("SUCCESS", "FAILURE"):
            return {
                "task_id": task_id,
                "message": f"Task already {result.status.lower()}, cannot cancel",
                "cancelled": False,
            }

        result.revoke(terminate=True)
        logger.info(f"Cancelled task {task_id}")
        return {"task_id": task_id, "message": "Task cancelled", "cancelled": True}

    except Exception as e:
        logger.error(f"Error cancelling task {task_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to cancel task: {e}")
