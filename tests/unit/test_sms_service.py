"""
Unit tests for the Twilio SMS service
"""
import asyncio

import pytest
import requests
from twilio.base.exceptions import TwilioRestException

from homerecall.app.config import Settings
from homerecall.core.exceptions import SmsError
from homerecall.services.messaging import SmsService
from homerecall.services.messaging.sms_service import NOT_CONFIGURED_MESSAGE, default_feedback_message


@pytest.fixture
def twilio_settings():
    return Settings(
        TWILIO_ACCOUNT_SID="AC00000000000000000000000000000000",
        TWILIO_AUTH_TOKEN="auth-token",
        TWILIO_PHONE_NUMBER="+15550001111",
    )


@pytest.fixture
def twilio_client(mocker):
    client = mocker.Mock()
    client.messages.create.return_value = mocker.Mock(sid="SM123")
    return client


@pytest.mark.unit
class TestSmsService:

    def test_send(self, twilio_settings, twilio_client):
        service = SmsService(twilio_settings, client=twilio_client)

        result = asyncio.run(service.send("+14155551234", "hello"))

        assert result.message_sid == "SM123"
        assert result.to == "+14155551234"
        twilio_client.messages.create.assert_called_once_with(
            body="hello", from_="+15550001111", to="+14155551234"
        )

    def test_not_configured(self):
        service = SmsService(Settings(TWILIO_ACCOUNT_SID=None, TWILIO_AUTH_TOKEN=None, TWILIO_PHONE_NUMBER=None))

        assert service.configured is False
        with pytest.raises(SmsError) as exc:
            asyncio.run(service.send("+14155551234", "hello"))
        assert exc.value.message == NOT_CONFIGURED_MESSAGE
        assert exc.value.status_code == 400

    def test_client_built_from_settings(self, twilio_settings, mocker):
        client_cls = mocker.patch("homerecall.services.messaging.sms_service.Client")

        service = SmsService(twilio_settings)

        assert service.client is client_cls.return_value
        client_cls.assert_called_once_with("AC00000000000000000000000000000000", "auth-token")

    @pytest.mark.parametrize("code, message", [
        (21211, "Invalid phone number format. Please use E.164 format (e.g., +1234567890)"),
        (21608, "The phone number is not reachable or invalid"),
        (21614, "SMS not supported for this phone number"),
        (30003, "Twilio error: Unreachable destination handset"),
    ])
    def test_twilio_errors_are_mapped(self, twilio_settings, twilio_client, code, message):
        twilio_client.messages.create.side_effect = TwilioRestException(
            400, "https://api.twilio.com/Messages.json", msg="Unreachable destination handset", code=code
        )
        service = SmsService(twilio_settings, client=twilio_client)

        with pytest.raises(SmsError) as exc:
            asyncio.run(service.send("+14155551234", "hello"))

        assert exc.value.message == message
        assert exc.value.status_code == 400

    def test_transport_error_is_server_error(self, twilio_settings, twilio_client):
        twilio_client.messages.create.side_effect = requests.ConnectionError("reset")
        service = SmsService(twilio_settings, client=twilio_client)

        with pytest.raises(SmsError) as exc:
            asyncio.run(service.send("+14155551234", "hello"))

        assert exc.value.message == "Failed to send SMS"
        assert exc.value.status_code == 500


@pytest.mark.unit
def test_default_feedback_message():
    text = default_feedback_message("Jamie", "12 Oak St", "https://app.example.com/r/abc")
    assert text == (
        "Hi Jamie! Here's the link to provide feedback on your showing at 12 Oak St: "
        "https://app.example.com/r/abc"
    )
