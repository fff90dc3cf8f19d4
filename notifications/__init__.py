"""Transactional email composition and delivery."""

from .composer import Action, MailMessage, Notification, build_message, compose
from .mailers import AbstractMailer, MailDeliveryError, OutboxMailer, SMTPMailer

__all__ = [
    "AbstractMailer",
    "Action",
    "MailDeliveryError",
    "MailMessage",
    "Notification",
    "OutboxMailer",
    "SMTPMailer",
    "build_message",
    "compose",
]
