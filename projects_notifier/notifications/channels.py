"""Notification sink implementations.

Provides an ABC for notification sinks plus concrete implementations
for email (SMTP), webhooks, and a log-only sink for dry runs. Sinks
raise DeliveryError on failure; callers decide whether to swallow it.
"""

import asyncio
import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from email.message import EmailMessage

import httpx

from projects_notifier.errors import DeliveryError

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """Abstract base for notification delivery."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this sink (e.g. 'email', 'webhook')."""

    @abstractmethod
    async def send(self, subject: str, body: str) -> None:
        """Deliver one notification.

        Args:
            subject: Notification subject line.
            body: Plain-text body.

        Raises:
            DeliveryError: If delivery failed.
        """


class EmailSink(NotificationSink):
    """Delivers notifications as plain-text mail via SMTP with STARTTLS.

    The mail relay throttles bursts, so every send is followed by a fixed
    ``send_delay`` pause, whether or not it succeeded.
    """

    def __init__(
        self,
        host: str,
        port: int,
        login: str,
        password: str,
        recipient: str | None = None,
        send_delay: float = 1.0,
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._login = login
        self._password = password
        self._recipient = recipient or login
        self._send_delay = send_delay
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "email"

    def _build_message(self, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._login
        msg["To"] = self._recipient
        msg.set_content(body)
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        context = ssl.create_default_context()
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            server.ehlo()
            server.starttls(context=context)
            server.ehlo()
            server.login(self._login, self._password)
            server.send_message(msg)

    async def send(self, subject: str, body: str) -> None:
        msg = self._build_message(subject, body)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP delivery to {self._recipient} failed: {e}") from e
        finally:
            await asyncio.sleep(self._send_delay)


class WebhookSink(NotificationSink):
    """Delivers notifications as JSON POST to an arbitrary HTTP endpoint.

    Creates a new ``httpx.AsyncClient`` per call (short-lived, no pooling).
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._url = url
        self._headers = headers or {}
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "webhook"

    async def send(self, subject: str, body: str) -> None:
        payload = {"subject": subject, "body": body}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._url,
                    json=payload,
                    headers=self._headers,
                )
        except httpx.HTTPError as e:
            raise DeliveryError(f"Webhook {self._url} failed: {e}") from e

        if not resp.is_success:
            raise DeliveryError(f"Webhook {self._url} returned {resp.status_code}")


class LogSink(NotificationSink):
    """Writes notifications to the log instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "log"

    async def send(self, subject: str, body: str) -> None:
        self.sent.append((subject, body))
        logger.info("Notification %s\n%s", subject, body)
