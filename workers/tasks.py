# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Work that shouldn't hold up an HTTP request.
#
# Tasks:
# - generate_autopilot_response: OpenAI reply to a website chat visitor
# =============================================================================

import logging
from typing import Any

from celery import current_task, shared_task

logger = logging.getLogger(__name__)


def update_progress(message: str) -> None:
    """Publish a PROGRESS state so GET /api/v1/tasks/{id} shows what's happening."""
    if current_task:
        current_task.update_state(state="PROGRESS", meta={"message": message})


# =============================================================================
# Chat Autopilot
# =============================================================================

@shared_task(bind=True, name="workers.tasks.generate_autopilot_response")
def generate_autopilot_response(
    self,
    conversation_id: str,
    visitor_message: str,
    user_id: str | None = None,
) -> dict[str, Any]:
    """
    Reply to a visitor message as the Bright Audio bot.

    Queued by ChatService.send_message when the conversation has autopilot
    enabled. Failures are returned, not raised, so the widget never sees
    a retry storm; the visitor simply gets no bot reply.

    Args:
        conversation_id: chat_conversations ID
        visitor_message: The message being answered
        user_id: Staff user whose OpenAI key to prefer, if any

    Returns:
        Dict with:
        - success: bool
        - message: Bot reply (if successful)
        - error / code: Failure details (if not)
    """
    from app.exceptions import BrightOpsException
    from core.services.chat_service import ChatService

    logger.info(f"Generating autopilot reply for conversation {conversation_id}")
    update_progress("Generating reply...")

    try:
        result = ChatService.generate_autopilot_response(
            conversation_id,
            visitor_message,
            user_id=user_id,
        )
    except BrightOpsException as e:
        logger.error(f"Autopilot failed for conversation {conversation_id}: {e.code} {e.message}")
        return {"success": False, "error": e.message, "code": e.code}
    except Exception as e:
        logger.exception(f"Autopilot crashed for conversation {conversation_id}: {e}")
        return {"success": False, "error": str(e), "code": "INTERNAL_ERROR"}

    return {
        "success": True,
        "conversation_id": conversation_id,
        "message": result["message"],
    }
