# =============================================================================
# core/services/chat_service.py - Website Chat and Autopilot
# =============================================================================
# Visitors chat from the public website; staff reply as agents. When a
# conversation has autopilot enabled, each visitor message queues an OpenAI
# reply on the Celery worker so the visitor's request returns immediately.
#
# Flow:
#   1. send_message() stores the message
#   2. Visitor message + autopilot -> workers.tasks.generate_autopilot_response
#   3. Task -> generate_autopilot_response() -> bot message (+ lead on booking)
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import (
    ConfigurationError,
    DatabaseOperationError,
    ExternalServiceError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from core.models.chat import ChatSendRequest, SenderType
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm here to help! Could you tell me more about your audio equipment needs?"

BOOKING_KEYWORDS = ("book", "meeting", "consultation")

SYSTEM_PROMPT = """You are a helpful assistant for Bright Audio, a professional audio equipment rental and production company.

Your primary goal is to:
1. Answer questions about our audio/visual equipment rental services
2. Collect visitor information (name, email, phone if not already provided)
3. Understand their event needs (date, type of event, equipment needed)
4. Book a consultation meeting when appropriate

Company Info:
- We provide professional audio equipment rentals
- We offer sound engineering services
- We serve events of all sizes
- We can provide quotes and consultations

When the visitor is ready or has provided enough information, suggest booking a meeting to discuss their needs in detail. Be friendly, professional, and helpful.

If asked about pricing, explain that it depends on the specific equipment and duration, and suggest a consultation.

Visitor Name: {visitor_name}
Visitor Email: {visitor_email}
Visitor Phone: {visitor_phone}"""


def get_openai_client(api_key: str):
    """OpenAI client for the given key (keys can differ per user)."""
    from openai import OpenAI
    return OpenAI(api_key=api_key)


def build_system_prompt(conversation: dict[str, Any]) -> str:
    return SYSTEM_PROMPT.format(
        visitor_name=conversation.get("visitor_name") or "Not provided",
        visitor_email=conversation.get("visitor_email") or "Not provided",
        visitor_phone=conversation.get("visitor_phone") or "Not provided",
    )


def build_history(messages: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Visitor lines become the user role; agent and bot lines the assistant."""
    return [
        {
            "role": "user" if msg.get("sender_type") == SenderType.VISITOR.value else "assistant",
            "content": msg.get("message") or "",
        }
        for msg in messages
    ]


def mentions_booking(reply: str) -> bool:
    text = reply.lower()
    return any(keyword in text for keyword in BOOKING_KEYWORDS)


class ChatService:

    @staticmethod
    def send_message(request: ChatSendRequest) -> dict[str, Any]:
        """
        Store a chat message and queue an autopilot reply when appropriate.

        Returns:
            The inserted message row, plus autopilot_task_id if a reply was queued
        """
        if not request.conversation_id or not request.message:
            raise InvalidRequestError("conversation_id and message are required")

        sender = SenderType.AGENT if request.user_id else SenderType.VISITOR
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("chat_messages")
                .insert({
                    "conversation_id": request.conversation_id,
                    "sender_type": sender.value,
                    "message": request.message,
                    "user_id": request.user_id or None,
                })
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("send message", str(e))

        message = dict(response.data[0]) if response.data else {}

        if sender is SenderType.VISITOR:
            task_id = ChatService._queue_autopilot(request.conversation_id, request.message)
            if task_id:
                message["autopilot_task_id"] = task_id

        return message

    @staticmethod
    def _queue_autopilot(conversation_id: str, visitor_message: str) -> str | None:
        """Dispatch the autopilot task if the conversation wants one. Never raises."""
        try:
            conversation = SupabaseClient.fetch_single(
                "chat_conversations",
                {"id": conversation_id},
                columns="autopilot_enabled",
            )
        except SupabaseClientError as e:
            logger.warning(f"Could not check autopilot for conversation {conversation_id}: {e}")
            return None

        if not conversation or not conversation.get("autopilot_enabled"):
            return None

        try:
            from workers.tasks import generate_autopilot_response
            result = generate_autopilot_response.delay(conversation_id, visitor_message)
        except Exception as e:
            logger.error(f"Failed to queue autopilot for conversation {conversation_id}: {e}")
            return None

        logger.info(f"Queued autopilot task {result.id} for conversation {conversation_id}")
        return result.id

    @staticmethod
    def list_messages(conversation_id: str | None) -> list[dict[str, Any]]:
        if not conversation_id:
            raise InvalidRequestError("conversation_id is required")

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("chat_messages")
                .select("*")
                .eq("conversation_id", conversation_id)
                .order("created_at")
                .execute()
            )
        except Exception as e:
            raise DatabaseOperationError("fetch messages", str(e))
        return response.data or []

    # -------------------------------------------------------------------------
    # Autopilot
    # -------------------------------------------------------------------------

    @staticmethod
    def resolve_openai_key(user_id: UUID | str | None = None) -> str:
        """
        The user's own OpenAI key if they saved one, else the server key.

        Raises:
            ConfigurationError: If neither is available
        """
        if user_id:
            try:
                profile = SupabaseClient.fetch_single(
                    "user_profiles",
                    {"id": normalize_uuid(user_id)},
                    columns="openai_api_key",
                )
            except SupabaseClientError as e:
                logger.warning(f"Could not read OpenAI key for user {user_id}: {e}")
                profile = None
            if profile and profile.get("openai_api_key"):
                return profile["openai_api_key"]

        if settings.OPENAI_API_KEY:
            return settings.OPENAI_API_KEY

        raise ConfigurationError(
            "OpenAI API key not configured. Please add it in Leads > Settings.",
            status_code=400,
        )

    @staticmethod
    def generate_autopilot_response(
        conversation_id: str | None,
        visitor_message: str | None,
        user_id: UUID | str | None = None,
    ) -> dict[str, str]:
        """
        Write a bot reply to the latest visitor message.

        If the reply steers toward a booking and the visitor left an email,
        a lead is created for them (once) and linked to the conversation.

        Returns:
            {"message": <bot reply>}
        """
        if not conversation_id:
            raise InvalidRequestError("conversation_id is required")

        api_key = ChatService.resolve_openai_key(user_id)

        conversation = SupabaseClient.fetch_single(
            "chat_conversations",
            {"id": conversation_id},
            columns="*, chat_messages(*)",
        )
        if not conversation:
            raise ResourceNotFoundError("Conversation", conversation_id)

        messages = [{"role": "system", "content": build_system_prompt(conversation)}]
        messages.extend(build_history(conversation.get("chat_messages") or []))
        messages.append({"role": "user", "content": visitor_message or ""})

        try:
            response = get_openai_client(api_key).chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=messages,
                temperature=settings.CHAT_AUTOPILOT_TEMPERATURE,
                max_tokens=settings.CHAT_AUTOPILOT_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(f"OpenAI API error for conversation {conversation_id}: {e}")
            raise ExternalServiceError("OpenAI", str(e))

        reply = None
        if response.choices:
            reply = response.choices[0].message.content
        reply = reply or FALLBACK_REPLY

        client = SupabaseClient.get_client()
        try:
            client.table("chat_messages").insert({
                "conversation_id": conversation_id,
                "sender_type": SenderType.BOT.value,
                "message": reply,
            }).execute()
        except Exception as e:
            raise DatabaseOperationError("save bot reply", str(e))

        if mentions_booking(reply) and conversation.get("visitor_email"):
            ChatService._capture_lead(conversation, visitor_message or "")

        return {"message": reply}

    @staticmethod
    def _capture_lead(conversation: dict[str, Any], visitor_message: str) -> dict[str, Any] | None:
        """Create a lead for the visitor unless one with that email exists."""
        email = conversation["visitor_email"]

        existing = SupabaseClient.fetch_single("leads", {"email": email}, columns="id")
        if existing:
            return None

        lead = {
            "email": email,
            "name": email.split("@")[0],
            "source": "Website Chat",
            "status": "new",
            "notes": f"Initial chat: {visitor_message}",
        }
        if conversation.get("visitor_phone"):
            lead["phone"] = conversation["visitor_phone"]

        client = SupabaseClient.get_client()
        try:
            response = client.table("leads").insert(lead).execute()
            if not response.data:
                return None
            created = response.data[0]
            (
                client.table("chat_conversations")
                .update({"lead_id": created["id"]})
                .eq("id", conversation["id"])
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to create lead from chat {conversation.get('id')}: {e}")
            return None

        logger.info(f"Created lead {created['id']} from chat {conversation['id']}")
        return created
