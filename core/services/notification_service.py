# =============================================================================
# core/services/notification_service.py - Outbound Email and SMS
# =============================================================================
# Provider credentials live in the leads_settings row (edited from the
# Leads > Settings page), not in server config, so each call reads them.
#
# - Email: SendGrid v3 Mail Send API
# - SMS:   Twilio Messages API (lease-to-own application invites)
# =============================================================================

import logging
from typing import Any
from uuid import UUID

import httpx

from app.exceptions import ConfigurationError, ExternalServiceError, InvalidRequestError
from core.models.notifications import EmailSendRequest, SmsSendRequest
from lib.financing import format_e164
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"
TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

DEFAULT_FROM_ADDRESS = "noreply@brightops.com"
DEFAULT_FROM_NAME = "Bright Ops"

REQUEST_TIMEOUT_SECONDS = 15.0

SMS_TEMPLATE = (
    "Hi {name}! \U0001F44B\n\n"
    "You've been invited to apply for a lease-to-own program with Bright Audio.\n\n"
    "Complete your application here:\n{url}\n\n"
    "Questions? Reply to this message."
)


def _load_settings(columns: str) -> dict[str, Any] | None:
    client = SupabaseClient.get_client()
    try:
        response = client.table("leads_settings").select(columns).limit(1).execute()
    except Exception as e:
        logger.error(f"Failed to load leads_settings: {e}")
        return None
    return response.data[0] if response.data else None


def _first_error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if not isinstance(body, dict):
        return default
    errors = body.get("errors") or []
    if errors and isinstance(errors[0], dict) and errors[0].get("message"):
        return errors[0]["message"]
    return body.get("message") or default


class NotificationService:

    @staticmethod
    def send_email(request: EmailSendRequest, user_id: UUID | str) -> dict[str, Any]:
        """
        Send an HTML email through SendGrid and log it against the lead.

        Returns:
            {"success": True, "messageId": ..., "statusCode": ...}

        Raises:
            InvalidRequestError: Missing fields
            ConfigurationError: No SendGrid key saved (400)
            ExternalServiceError: SendGrid rejected the send, with its status code
        """
        if not request.to or not request.subject or not request.html_content:
            raise InvalidRequestError("Missing required fields: to, subject, htmlContent")

        config = _load_settings(
            "sendgrid_api_key, email_from_name, email_from_address, email_reply_to"
        )
        if not config or not config.get("sendgrid_api_key"):
            raise ConfigurationError(
                "SendGrid API key not configured. Please add it in Settings.",
                status_code=400,
            )

        from_address = config.get("email_from_address") or DEFAULT_FROM_ADDRESS
        reply_to = config.get("email_reply_to") or from_address
        payload = {
            "personalizations": [{"to": [{"email": request.to}]}],
            "from": {
                "email": from_address,
                "name": config.get("email_from_name") or DEFAULT_FROM_NAME,
            },
            "reply_to": {"email": reply_to},
            "subject": request.subject,
            "content": [{"type": "text/html", "value": request.html_content}],
        }

        try:
            response = httpx.post(
                SENDGRID_URL,
                json=payload,
                headers={"Authorization": f"Bearer {config['sendgrid_api_key']}"},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            logger.error(f"SendGrid request failed: {e}")
            raise ExternalServiceError("SendGrid", str(e))

        if response.status_code >= 400:
            detail = _first_error_message(response, "Unknown SendGrid error")
            logger.error(f"SendGrid rejected email to {request.to}: {response.status_code} {detail}")
            raise ExternalServiceError("SendGrid", detail, status_code=response.status_code)

        message_id = response.headers.get("x-message-id")

        client = SupabaseClient.get_client()
        try:
            client.table("leads_emails").insert({
                "lead_id": request.lead_id or None,
                "recipient_email": request.to,
                "subject": request.subject,
                "html_content": request.html_content,
                "status": "sent",
                "sent_at": utc_now_iso(),
                "sent_by": normalize_uuid(user_id),
                "sendgrid_message_id": message_id,
            }).execute()
        except Exception as e:
            logger.error(f"Failed to log email to {request.to}: {e}")

        return {"success": True, "messageId": message_id, "statusCode": response.status_code}

    @staticmethod
    def send_application_sms(request: SmsSendRequest) -> dict[str, Any]:
        """
        Text a lease-to-own application link to a client.

        Returns:
            {"success": True, "messageSid": ..., "to": <E.164 number>}
        """
        if not request.phone_number:
            raise InvalidRequestError("Phone number is required")

        config = _load_settings(
            "twilio_account_sid, twilio_auth_token, twilio_messaging_service_sid"
        )
        if not config:
            raise ConfigurationError("Twilio settings not configured")

        sid = config.get("twilio_account_sid")
        token = config.get("twilio_auth_token")
        service_sid = config.get("twilio_messaging_service_sid")
        if not sid or not token or not service_sid:
            raise ConfigurationError("Twilio credentials incomplete. Please configure in settings.")

        to = format_e164(request.phone_number)
        body = SMS_TEMPLATE.format(
            name=request.client_name or "there",
            url=request.application_url or "",
        )

        try:
            response = httpx.post(
                TWILIO_MESSAGES_URL.format(sid=sid),
                data={"To": to, "MessagingServiceSid": service_sid, "Body": body},
                auth=(sid, token),
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            logger.error(f"Twilio request failed: {e}")
            raise ExternalServiceError("Twilio", str(e), status_code=500)

        if response.status_code >= 400:
            detail = _first_error_message(response, "Failed to send SMS")
            logger.error(f"Twilio rejected SMS to {to}: {detail}")
            raise ExternalServiceError("Twilio", detail, status_code=500)

        data = response.json()
        logger.info(f"Sent application SMS {data.get('sid')} to {to}")
        return {"success": True, "messageSid": data.get("sid"), "to": to}
