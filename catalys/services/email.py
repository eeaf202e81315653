from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

import httpx

from catalys.config import settings

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    text: Optional[str] = None


class ResendEmailClient:
    """
    Transactional email through the Resend HTTP API.

    Sending is best effort: without ``RESEND_API_KEY``/``RESEND_AUTH_EMAIL`` it is a
    logged no-op, and delivery failures are logged instead of raised so that the
    caller's flow never depends on email.
    """

    def __init__(self) -> None:
        self._base_url = settings.RESEND_API_BASE_URL.rstrip("/")
        self._timeout = settings.RESEND_REQUEST_TIMEOUT_SECONDS
        self._warned_unconfigured = False

    @property
    def is_configured(self) -> bool:
        return bool(settings.RESEND_API_KEY and settings.RESEND_AUTH_EMAIL)

    async def send(self, message: EmailMessage) -> bool:
        if not self.is_configured:
            if not self._warned_unconfigured:
                logger.warning("RESEND_API_KEY or RESEND_AUTH_EMAIL is not set; emails will not be sent.")
                self._warned_unconfigured = True
            return False

        payload = {
            "from": settings.RESEND_AUTH_EMAIL,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            payload["text"] = message.text
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url}/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
                )
            response.raise_for_status()
        except httpx.HTTPError:
            logger.exception("Email delivery failed", extra={"to": message.to, "subject": message.subject})
            return False
        return True


email_client = ResendEmailClient()


def get_email_client() -> ResendEmailClient:
    return email_client
