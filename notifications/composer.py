"""Render transactional emails from a structured description."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape


TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
TEMPLATE_NAME = "transactional.html"

_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class Action:
    """Call-to-action button shown below the intro line."""

    instructions: str
    button_text: str
    link: str


@dataclass(frozen=True)
class Notification:
    name: str
    intro: str
    outro: str = ""
    action: Optional[Action] = None
    product_name: str = "E-Commerce"


@dataclass(frozen=True)
class MailMessage:
    sender: str
    recipient: str
    subject: str
    html: str


def compose(notification: Notification) -> str:
    """Return the HTML body for ``notification``."""

    template = _environment.get_template(TEMPLATE_NAME)
    return template.render(
        name=notification.name,
        intro=notification.intro,
        outro=notification.outro,
        action=notification.action,
        product_name=notification.product_name,
    )


def build_message(
    sender: str, recipient: str, subject: str, notification: Notification
) -> MailMessage:
    return MailMessage(
        sender=sender,
        recipient=recipient,
        subject=subject,
        html=compose(notification),
    )
