# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Invitation rendering and address helpers.

Everything in this module is pure: the same input always produces
byte-identical output, nothing touches the network.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Any

DEFAULT_ORGANIZATION = "Attendance Platform"
DEFAULT_RECIPIENT = "there"
DEFAULT_ROLE = "member"

_BRACKETED_ADDRESS = re.compile(r"<([^>]+)>")

TEXT_TEMPLATE = """Hi {recipient},

You've been invited to join {org} as a {role}.
Use the link below to complete your registration:

{link}

If you did not expect this email, you can ignore it."""

HTML_TEMPLATE = """
      <p>Hi {recipient},</p>
      <p>
        You've been invited to join <strong>{org}</strong>
        as a <strong>{role}</strong>.
      </p>
      <p>
        <a href="{link}" target="_blank">Click here to finish registration</a>
      </p>
      <p>If you did not expect this email, you can ignore it.</p>
    """


@dataclass(frozen=True)
class ComposedMessage:
    subject: str
    text: str
    html: str


def extract_email(value: Any) -> str | None:
    """Return the normalized address found in ``value``.

    Accepts a bare address or the ``"Display Name <addr@host>"`` form. The
    result is trimmed and lower-cased; ``None`` is returned for non-strings
    and for values without an ``@``.

    >>> extract_email("John Doe <JOHN@EXAMPLE.com>")
    'john@example.com'
    >>> extract_email("not-an-email") is None
    True
    """
    if not isinstance(value, str) or not value:
        return None
    match = _BRACKETED_ADDRESS.search(value)
    email = (match.group(1) if match else value).strip().lower()
    return email if "@" in email else None


def format_from(name: str | None, email: str | None) -> str | None:
    """Build the ``From`` header value, ``None`` without an address."""
    if not email:
        return None
    return f"{name} <{email}>" if name else email


def build_invite_email(
    *,
    link: str,
    first_name: str | None = None,
    last_name: str | None = None,
    role: str | None = None,
    organization_name: str | None = None,
) -> ComposedMessage:
    """Render subject, plain-text and HTML bodies of an invitation.

    User-supplied values are escaped in the HTML body only; the text body
    carries them verbatim.
    """
    names = [part.strip() for part in (first_name, last_name) if part and part.strip()]
    recipient = " ".join(names) or DEFAULT_RECIPIENT
    org = organization_name if organization_name and organization_name.strip() else DEFAULT_ORGANIZATION
    role_label = role.replace("_", " ") if role else DEFAULT_ROLE

    text = TEXT_TEMPLATE.format(recipient=recipient, org=org, role=role_label, link=link)
    html_body = HTML_TEMPLATE.format(
        recipient=html.escape(recipient),
        org=html.escape(org),
        role=html.escape(role_label),
        link=html.escape(link, quote=True),
    )
    return ComposedMessage(subject=f"You're invited to {org}", text=text, html=html_body)
