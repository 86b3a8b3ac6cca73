# =============================================================================
# core/models/chat.py - Website Chat Schemas
# =============================================================================
# The public website chat widget writes visitor messages; staff reply as
# agents, and the autopilot replies as the bot.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SenderType(str, Enum):
    """
    Who wrote a chat message.

    - visitor: anonymous website visitor
    - agent: signed-in staff member
    - bot: autopilot reply
    """
    VISITOR = "visitor"
    AGENT = "agent"
    BOT = "bot"


class ChatSendRequest(BaseModel):
    """
    Body of POST /api/chat/send.

    A message with user_id is an agent reply; without one it's from the visitor.

    Example:
        {"conversation_id": "5c1e...", "message": "Do you rent line arrays?"}
    """
    conversation_id: str | None = None
    message: str | None = None
    user_id: str | None = None


class AutopilotRequest(BaseModel):
    """Body of POST /api/chat/autopilot-response."""

    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str | None = None
    visitor_message: str | None = Field(default=None, alias="visitorMessage")
