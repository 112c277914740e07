"""Outbound mail collaborator used by the password-reset flow."""

from __future__ import annotations

import html
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from string import Template
from typing import Mapping, Protocol

from .config import Settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).with_name("templates")
SMTP_TIMEOUT_SECONDS = 30


class Mailer(Protocol):
    """Anything able to deliver a templated message to a single recipient."""

    def send_mail(
        self, recipient: str, subject: str, template: str, variables: Mapping[str, str]
    ) -> bool:
        """Deliver the rendered template; return ``True`` when it was accepted."""
        ...


def render_template(template: str, variables: Mapping[str, str]) -> tuple[str, str]:
    """Render the text and HTML bodies of ``template``.

    Placeholders use ``string.Template`` syntax (``$ACTION``). Values are
    HTML-escaped in the HTML body. A missing variable raises ``KeyError``.
    """
    text_source = (TEMPLATE_DIR / f"{template}.txt").read_text(encoding="utf-8")
    html_source = (TEMPLATE_DIR / f"{template}.html").read_text(encoding="utf-8")
    escaped = {key: html.escape(str(value)) for key, value in variables.items()}
    return (
        Template(text_source).substitute(variables),
        Template(html_source).substitute(escaped),
    )


class SmtpMailer:
    """Send mail through an SMTP relay, opening one connection per message."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def send_mail(
        self, recipient: str, subject: str, template: str, variables: Mapping[str, str]
    ) -> bool:
        text_body, html_body = render_template(template, variables)
        message = EmailMessage()
        message["From"] = self._settings.mail_from
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")

        with smtplib.SMTP(
            self._settings.smtp_host, self._settings.smtp_port, timeout=SMTP_TIMEOUT_SECONDS
        ) as smtp:
            if self._settings.smtp_starttls:
                smtp.starttls()
            if self._settings.smtp_user:
                smtp.login(self._settings.smtp_user, self._settings.smtp_password)
            refused = smtp.send_message(message)

        if refused:
            logger.warning("smtp relay refused template %s for %d recipient(s)", template, len(refused))
            return False
        logger.info("sent %s mail via %s", template, self._settings.smtp_host)
        return True


class LoggingMailer:
    """Development mailer that renders messages and logs them instead of sending."""

    def send_mail(
        self, recipient: str, subject: str, template: str, variables: Mapping[str, str]
    ) -> bool:
        text_body, _ = render_template(template, variables)
        logger.info("mail delivery disabled; %r to %s:\n%s", subject, recipient, text_body)
        return True


def build_mailer(settings: Settings) -> Mailer:
    """Return the SMTP mailer when a relay is configured, else the logging one."""
    if settings.smtp_host:
        logger.info("mail configured for smtp relay %s:%s", settings.smtp_host, settings.smtp_port)
        return SmtpMailer(settings)
    logger.warning("SMTP_HOST is not set; outgoing mail will only be logged")
    return LoggingMailer()
