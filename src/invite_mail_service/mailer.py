# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP dispatcher for composed invitations.

The dispatcher is built once at startup and shared by every request. It holds
no connection: each :meth:`MailDispatcher.send` call opens its own
``aiosmtplib`` session, authenticates, hands the message over and quits.

TLS behavior:
    - ``secure=True``: implicit TLS from the first byte (typically port 465)
    - ``secure=False``: plain connection upgraded with STARTTLS when the
      server advertises it (typically port 587)

Example:
    Sending a message::

        dispatcher = MailDispatcher("smtp.example.com", 465, "user", "secret", secure=True)
        message_id = await dispatcher.send(
            OutgoingMail(
                sender="Attendance Platform <user@example.com>",
                to="guest@example.com",
                subject="You're invited",
                text="...",
                html="<p>...</p>",
            )
        )
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid, parseaddr

import aiosmtplib

from .config_loader import ServiceConfig
from .errors import DeliveryError
from .logger import get_logger


@dataclass(frozen=True)
class OutgoingMail:
    """Fully formed message handed to the dispatcher."""

    sender: str
    to: str
    subject: str
    text: str
    html: str
    reply_to: str | None = None


class MailDispatcher:
    """Deliver :class:`OutgoingMail` through a single SMTP account.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port.
        user: Login name.
        password: Login password.
        secure: Whether to use implicit TLS.
    """

    def __init__(self, host: str, port: int, user: str, password: str, *, secure: bool):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.logger = get_logger("MailDispatcher")

    def build_message(self, mail: OutgoingMail) -> EmailMessage:
        """Build a multipart/alternative message with text and HTML parts.

        A ``Message-ID`` is generated from the sender's domain so the caller
        can correlate the delivery.
        """
        msg = EmailMessage()
        msg["From"] = mail.sender
        msg["To"] = mail.to
        msg["Subject"] = mail.subject
        if mail.reply_to:
            msg["Reply-To"] = mail.reply_to
        _, sender_address = parseaddr(mail.sender)
        domain = sender_address.rpartition("@")[2] or None
        msg["Message-ID"] = make_msgid(domain=domain)
        msg.set_content(mail.text)
        msg.add_alternative(mail.html, subtype="html")
        return msg

    def _client(self) -> aiosmtplib.SMTP:
        if self.secure:
            return aiosmtplib.SMTP(hostname=self.host, port=self.port, use_tls=True, start_tls=False)
        # start_tls=None lets aiosmtplib upgrade when STARTTLS is offered
        return aiosmtplib.SMTP(hostname=self.host, port=self.port, use_tls=False, start_tls=None)

    async def send(self, mail: OutgoingMail) -> str | None:
        """Deliver ``mail`` and return its ``Message-ID``.

        Raises:
            DeliveryError: On any connection, authentication or protocol
                failure, carrying the transport's error message.
        """
        msg = self.build_message(mail)
        smtp = self._client()
        try:
            await smtp.connect()
            try:
                await smtp.login(self.user, self.password)
                await smtp.send_message(msg)
            finally:
                try:
                    await smtp.quit()
                except (aiosmtplib.SMTPException, OSError):
                    smtp.close()
        except aiosmtplib.SMTPException as exc:
            raise DeliveryError(_describe(exc)) from exc
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise DeliveryError("SMTP operation timed out") from exc
        except OSError as exc:
            raise DeliveryError(_describe(exc)) from exc
        self.logger.debug("SMTP session with %s:%s completed", self.host, self.port)
        return msg["Message-ID"]


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def create_dispatcher(config: ServiceConfig) -> MailDispatcher | None:
    """Build the dispatcher, or ``None`` when SMTP credentials are missing."""
    if not config.smtp_configured:
        return None
    return MailDispatcher(
        config.smtp_host,
        config.smtp_port,
        config.smtp_user,
        config.smtp_password,
        secure=config.smtp_secure,
    )
