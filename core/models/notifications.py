# =============================================================================
# core/models/notifications.py - Outbound Email/SMS Schemas
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class EmailSendRequest(BaseModel):
    """
    Body of POST /api/sendgrid/send.

    Example:
        {"to": "booker@venue.com", "subject": "Your quote", "htmlContent": "<p>Hi!</p>", "leadId": "e3..."}
    """

    model_config = ConfigDict(populate_by_name=True)

    to: str | None = None
    subject: str | None = None
    html_content: str | None = Field(default=None, alias="htmlContent")
    lead_id: str | None = Field(default=None, alias="leadId")


class SmsSendRequest(BaseModel):
    """Body of POST /api/financing/send-application-sms."""

    model_config = ConfigDict(populate_by_name=True)

    phone_number: str | None = Field(default=None, alias="phoneNumber")
    client_name: str | None = Field(default=None, alias="clientName")
    application_url: str | None = Field(default=None, alias="applicationUrl")
