"""Outbound mail backends."""

from __future__ import annotations

import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Optional

from .composer import MailMessage

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when a message could not be handed to the mail transport."""


class AbstractMailer(ABC):
    """Interface for mail transports."""

    @abstractmethod
    def send(self, message: MailMessage) -> None:
        """Deliver ``message`` or raise MailDeliveryError."""


class SMTPMailer(AbstractMailer):
    """Send mail through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _build(self, message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = message.sender
        email["To"] = message.recipient
        email["Subject"] = message.subject
        email.set_content("This message requires an HTML capable mail client.")
        email.add_alternative(message.html, subtype="html")
        return email

    def send(self, message: MailMessage) -> None:
        email = self._build(message)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(email)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send %r to %s: %s", message.subject, message.recipient, exc)
            raise MailDeliveryError(str(exc)) from exc

        logger.info("Sent %r to %s", message.subject, message.recipient)


class OutboxMailer(AbstractMailer):
    """Keep messages in memory instead of sending them."""

    def __init__(self):
        self.outbox: list[MailMessage] = []

    def send(self, message: MailMessage) -> None:
        self.outbox.append(message)
        logger.debug("Queued %r for %s in outbox", message.subject, message.recipient)

    def clear(self) -> None:
        self.outbox.clear()
