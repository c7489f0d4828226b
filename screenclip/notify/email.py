"""Transactional email senders.

Both providers are called over their plain HTTPS JSON APIs. Any transport
error or non-2xx response becomes EmailDispatchFailed.
"""

import html
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

import requests

from screenclip.errors import EmailDispatchFailed

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str


def clip_ready_email(to: str, link: str) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject="Your video is ready!",
        html=(
            "<h2>Processing Completed</h2>"
            "<p>Your video has been uploaded and processed and is ready to view.</p>"
            f'<p><a href="{html.escape(link, quote=True)}">Click here to view your video</a></p>'
        ),
    )


class EmailSender(ABC):
    """Abstract interface for one-shot transactional email."""

    @abstractmethod
    def send(self, message: EmailMessage) -> None:
        ...


class _HttpEmailSender(EmailSender):
    url: str = ""
    provider: str = ""

    def __init__(self, api_key: str, sender: str, timeout: float = 10.0):
        self._api_key = api_key
        self._sender = sender
        self._timeout = timeout

    def _payload(self, message: EmailMessage) -> dict:
        raise NotImplementedError

    def send(self, message: EmailMessage) -> None:
        try:
            response = requests.post(
                self.url,
                json=self._payload(message),
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("%s request failed: %s", self.provider, e)
            raise EmailDispatchFailed(f"Email send failed: {e}") from e

        if not response.ok:
            logger.error("%s rejected email (%s): %s", self.provider, response.status_code, response.text)
            raise EmailDispatchFailed(
                f"Email provider returned {response.status_code}"
            )
        logger.info("Email sent via %s to %s", self.provider, message.to)


class ResendEmailSender(_HttpEmailSender):
    url = RESEND_API_URL
    provider = "Resend"

    def _payload(self, message: EmailMessage) -> dict:
        return {
            "from": self._sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }


class SendGridEmailSender(_HttpEmailSender):
    url = SENDGRID_API_URL
    provider = "SendGrid"

    def _payload(self, message: EmailMessage) -> dict:
        return {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": {"email": self._sender},
            "subject": message.subject,
            "content": [{"type": "text/html", "value": message.html}],
        }


class LogEmailSender(EmailSender):
    """Writes emails to the log instead of sending them (local development)."""

    def __init__(self):
        self.sent: List[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        self.sent.append(message)
        logger.info("Email to %s: %s\n%s", message.to, message.subject, message.html)
