# =============================================================================
# tests/test_notification_service.py - Tests for SendGrid Email and Twilio SMS
# =============================================================================
# httpx.post is patched; credentials come from a faked leads_settings row.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import ConfigurationError, ExternalServiceError, InvalidRequestError
from core.models.notifications import EmailSendRequest, SmsSendRequest
from core.services.notification_service import SENDGRID_URL, NotificationService
from tests.conftest import TEST_USER_ID

EMAIL_SETTINGS = {
    "sendgrid_api_key": "SG.test",
    "email_from_name": "Bright Audio",
    "email_from_address": "hello@brightaudio.test",
    "email_reply_to": None,
}
TWILIO_SETTINGS = {
    "twilio_account_sid": "AC123",
    "twilio_auth_token": "secret",
    "twilio_messaging_service_sid": "MG456",
}


def _http_response(status_code: int, body: dict | None = None, headers: dict | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.json.return_value = body or {}
    return response


def _email() -> EmailSendRequest:
    return EmailSendRequest.model_validate({
        "to": "booker@venue.test",
        "subject": "Your quote",
        "htmlContent": "<p>Hi!</p>",
        "leadId": "lead-1",
    })


class TestSendEmail:
    """Test NotificationService.send_email."""

    def test_sends_and_logs(self, fake_supabase):
        """Test the SendGrid payload and the leads_emails log row."""
        fake_supabase.queue("leads_settings", [EMAIL_SETTINGS])

        with patch("core.services.notification_service.httpx.post",
                   return_value=_http_response(202, headers={"x-message-id": "msg-1"})) as mock_post:
            result = NotificationService.send_email(_email(), TEST_USER_ID)

        assert result == {"success": True, "messageId": "msg-1", "statusCode": 202}

        args, kwargs = mock_post.call_args
        assert args[0] == SENDGRID_URL
        assert kwargs["headers"]["Authorization"] == "Bearer SG.test"
        assert kwargs["json"]["reply_to"] == {"email": "hello@brightaudio.test"}
        assert kwargs["json"]["from"]["name"] == "Bright Audio"

        log = fake_supabase.queries_for("leads_emails")[0].first_arg("insert")
        assert log["sendgrid_message_id"] == "msg-1"
        assert log["sent_by"] == str(TEST_USER_ID)

    def test_missing_fields(self, fake_supabase):
        """Test to, subject and htmlContent are required."""
        with pytest.raises(InvalidRequestError):
            NotificationService.send_email(EmailSendRequest(to="a@b.test"), TEST_USER_ID)

    def test_not_configured(self, fake_supabase):
        """Test a 400 when no SendGrid key is saved."""
        fake_supabase.queue("leads_settings", [])
        with pytest.raises(ConfigurationError) as exc:
            NotificationService.send_email(_email(), TEST_USER_ID)
        assert exc.value.status_code == 400

    def test_sendgrid_rejection(self, fake_supabase):
        """Test SendGrid errors keep SendGrid's status and message."""
        fake_supabase.queue("leads_settings", [EMAIL_SETTINGS])
        rejected = _http_response(403, body={"errors": [{"message": "The from address does not match"}]})

        with patch("core.services.notification_service.httpx.post", return_value=rejected):
            with pytest.raises(ExternalServiceError) as exc:
                NotificationService.send_email(_email(), TEST_USER_ID)

        assert exc.value.status_code == 403
        assert exc.value.message == "The from address does not match"
        assert fake_supabase.queries_for("leads_emails") == []


class TestSendApplicationSms:
    """Test NotificationService.send_application_sms."""

    def test_sends(self, fake_supabase):
        """Test the number is normalized and the link included."""
        fake_supabase.queue("leads_settings", [TWILIO_SETTINGS])
        request = SmsSendRequest.model_validate({
            "phoneNumber": "(615) 555-0100",
            "clientName": "Dana",
            "applicationUrl": "https://apply.test/abc",
        })

        with patch("core.services.notification_service.httpx.post",
                   return_value=_http_response(201, body={"sid": "SM789"})) as mock_post:
            result = NotificationService.send_application_sms(request)

        assert result == {"success": True, "messageSid": "SM789", "to": "+16155550100"}

        args, kwargs = mock_post.call_args
        assert "AC123" in args[0]
        assert kwargs["auth"] == ("AC123", "secret")
        assert kwargs["data"]["MessagingServiceSid"] == "MG456"
        assert kwargs["data"]["Body"].startswith("Hi Dana!")
        assert "https://apply.test/abc" in kwargs["data"]["Body"]

    def test_incomplete_credentials(self, fake_supabase):
        """Test missing Twilio settings are a server-side configuration error."""
        fake_supabase.queue("leads_settings", [{**TWILIO_SETTINGS, "twilio_auth_token": None}])

        with pytest.raises(ConfigurationError) as exc:
            NotificationService.send_application_sms(SmsSendRequest(phoneNumber="6155550100"))
        assert exc.value.status_code == 500

    def test_requires_phone(self, fake_supabase):
        """Test a phone number is required."""
        with pytest.raises(InvalidRequestError):
            NotificationService.send_application_sms(SmsSendRequest())

    def test_twilio_rejection(self, fake_supabase):
        """Test Twilio errors are reported with Twilio's message."""
        fake_supabase.queue("leads_settings", [TWILIO_SETTINGS])
        rejected = _http_response(400, body={"message": "Invalid 'To' Phone Number"})

        with patch("core.services.notification_service.httpx.post", return_value=rejected):
            with pytest.raises(ExternalServiceError) as exc:
                NotificationService.send_application_sms(SmsSendRequest(phoneNumber="123"))

        assert exc.value.message == "Invalid 'To' Phone Number"
