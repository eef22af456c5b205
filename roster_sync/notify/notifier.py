from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Protocol

from ..models.config_models import NotifyConfig, SmtpConfig

"""Notification channel for routing failures.

Notifications are fire-and-forget: a failed send is logged and never stops a
routing run.
"""

__all__ = [
    "Notifier",
    "LogNotifier",
    "SmtpNotifier",
    "build_notifier",
    "compose_message",
]

logger = logging.getLogger(__name__)


class Notifier(Protocol):  # pylint: disable=too-few-public-methods
    def send(self, subject: str, body: str) -> None: ...


class LogNotifier:  # pylint: disable=too-few-public-methods
    """Writes notifications to the log instead of sending mail."""

    def __init__(self, to_address: str) -> None:
        self.to_address = to_address

    def send(self, subject: str, body: str) -> None:
        logger.warning(f"notify to={self.to_address} subject={subject!r} body={body!r}")


def compose_message(to_address: str, from_address: str, subject: str, body: str) -> EmailMessage:
    message = EmailMessage()
    message["Message-ID"] = make_msgid()
    message["From"] = from_address
    message["To"] = to_address
    message["Subject"] = subject
    message.set_content(body)
    return message


class SmtpNotifier:  # pylint: disable=too-few-public-methods
    """Sends one plain-text email per notification using smtplib."""

    def __init__(self, settings: SmtpConfig, to_address: str, from_address: str) -> None:
        self.settings = settings
        self.to_address = to_address
        self.from_address = from_address

    def _connect(self) -> smtplib.SMTP:
        s = self.settings
        if s.use_ssl:
            return smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout_seconds)
        return smtplib.SMTP(s.host, s.port, timeout=s.timeout_seconds)

    def send(self, subject: str, body: str) -> None:
        message = compose_message(self.to_address, self.from_address, subject, body)
        try:
            smtp = self._connect()
            try:
                smtp.ehlo()
                if self.settings.use_starttls and not self.settings.use_ssl:
                    smtp.starttls()
                    smtp.ehlo()
                if self.settings.username and self.settings.password:
                    smtp.login(self.settings.username, self.settings.password)
                smtp.send_message(message, to_addrs=[self.to_address])
            finally:
                smtp.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"notification to {self.to_address} failed: {e}")
            return
        logger.info(f"notification sent to {self.to_address}: {subject}")


def build_notifier(config: NotifyConfig) -> Notifier:
    if config.smtp is None:
        return LogNotifier(config.to_address)
    return SmtpNotifier(config.smtp, config.to_address, config.from_address)
