# =============================================================================
# app/routers/chat.py - Website Chat Endpoints
# =============================================================================
# The widget posts visitor messages without auth; replies that need the
# OpenAI call run on the Celery worker (see ChatService.send_message).
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import CurrentUserDep
from core.models.chat import AutopilotRequest, ChatSendRequest
from core.services.chat_service import ChatService

router = APIRouter()


@router.post("/send")
async def send_message(request: ChatSendRequest):
    """
    Post a chat message.

    Visitor messages in autopilot conversations also queue a bot reply;
    the response then includes autopilot_task_id for polling
    GET /api/v1/tasks/{task_id}.
    """
    return ChatService.send_message(request)


@router.get("/send")
async def list_messages(
    conversation_id: Annotated[str | None, Query(description="Conversation ID")] = None,
):
    """Messages in a conversation, oldest first."""
    return ChatService.list_messages(conversation_id)


@router.post("/autopilot-response")
async def autopilot_response(request: AutopilotRequest, user: CurrentUserDep):
    """
    Generate a bot reply now, using the signed-in user's OpenAI key if set.

    The widget path queues this on the worker instead; this endpoint lets
    staff trigger it from the dashboard.
    """
    return ChatService.generate_autopilot_response(
        request.conversation_id,
        request.visitor_message,
        user_id=user.id,
    )
