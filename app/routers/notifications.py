# =============================================================================
# app/routers/notifications.py - Outbound Email and SMS Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import CurrentUserDep
from core.models.notifications import EmailSendRequest, SmsSendRequest
from core.services.notification_service import NotificationService

router = APIRouter()


@router.post("/sendgrid/send")
async def send_email(request: EmailSendRequest, user: CurrentUserDep):
    """
    Send an email to a lead through SendGrid.

    Example body:
        {"to": "booker@venue.com", "subject": "Your quote", "htmlContent": "<p>Hi!</p>", "leadId": "e3..."}
    """
    return NotificationService.send_email(request, user.id)


@router.post("/financing/send-application-sms")
async def send_application_sms(request: SmsSendRequest):
    """Text a client the link to their lease-to-own application."""
    return NotificationService.send_application_sms(request)
