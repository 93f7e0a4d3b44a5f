# services/messaging/sms_service.py
import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Optional

import requests
from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

from homerecall.core.exceptions import SmsError

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "Twilio not configured. Please set TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, "
    "and TWILIO_PHONE_NUMBER environment variables."
)

# Twilio error codes with a user-facing explanation
TWILIO_ERROR_MESSAGES = {
    21211: "Invalid phone number format. Please use E.164 format (e.g., +1234567890)",
    21608: "The phone number is not reachable or invalid",
    21614: "SMS not supported for this phone number",
}


@dataclass
class SmsResult:
    message_sid: str
    to: str


def default_feedback_message(buyer_name: str, address: str, public_url: str) -> str:
    return f"Hi {buyer_name}! Here's the link to provide feedback on your showing at {address}: {public_url}"


class SmsService:
    """Send text messages through Twilio."""

    def __init__(self, settings, client: Optional[Client] = None):
        self.settings = settings
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or self.settings.twilio_configured

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.settings.twilio_configured:
                raise SmsError(NOT_CONFIGURED_MESSAGE)
            self._client = Client(self.settings.TWILIO_ACCOUNT_SID, self.settings.TWILIO_AUTH_TOKEN)
        return self._client

    @staticmethod
    async def _run_blocking(fn, *args, **kwargs):
        """Run a blocking function in the default threadpool so async event loop isn't blocked."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args, **kwargs))

    def _send_blocking(self, to: str, body: str):
        """Blocking call to the Twilio SDK. Returns the created message or raises."""
        return self.client.messages.create(
            body=body,
            from_=self.settings.TWILIO_PHONE_NUMBER,
            to=to,
        )

    async def send(self, to: str, body: str) -> SmsResult:
        """
        Send one SMS. No retries.

        Raises:
            SmsError: 400 for configuration and Twilio request errors,
                500 for anything else the SDK reports
        """
        if not self.configured:
            raise SmsError(NOT_CONFIGURED_MESSAGE)

        logger.info(f"📱 [SMS] Sending message to {to}")
        try:
            message = await self._run_blocking(self._send_blocking, to, body)
        except TwilioRestException as exc:
            logger.error(f"📱 [SMS] Twilio rejected message to {to}: {exc.code} {exc.msg}")
            raise SmsError(TWILIO_ERROR_MESSAGES.get(exc.code, f"Twilio error: {exc.msg}"))
        except (TwilioException, requests.RequestException) as exc:
            logger.exception(f"📱 [SMS] Error sending message to {to}: {exc}")
            raise SmsError("Failed to send SMS", status_code=500)

        logger.info(f"📱 [SMS] Sent message to {to}: {message.sid}")
        return SmsResult(message_sid=message.sid, to=to)
