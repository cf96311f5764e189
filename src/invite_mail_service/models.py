# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for the send-invite request and its responses.

The request model never rejects a payload: callers may send numbers, nulls
or blanks for any field and get them normalized to ``None``. Deciding which
missing field is fatal is left to the handler, which owns the error message.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .composer import extract_email


class InviteRequest(BaseModel):
    """Invitation request as posted to ``/send-invite-email``.

    Attributes:
        email: Normalized recipient address, ``None`` when invalid.
        link: Trimmed registration link, ``None`` when missing or blank.
        first_name: Recipient first name.
        last_name: Recipient last name.
        role: Role the recipient is invited as (``team_lead`` style).
        organization_name: Inviting organization.
        from_address: Requester address, used as Reply-To fallback.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: str | None = None
    link: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None
    organization_name: str | None = None
    from_address: str | None = Field(default=None, alias="from")

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> str | None:
        """Drop non-strings and blanks, trim everything else."""
        if not isinstance(value, str):
            return None
        value = value.strip()
        return value or None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return extract_email(value)

    @classmethod
    def from_body(cls, body: Any) -> InviteRequest:
        """Build a request from a parsed JSON body of any shape."""
        return cls.model_validate(body if isinstance(body, dict) else {})


class HealthResponse(BaseModel):
    ok: bool = True


class DeliveryReport(BaseModel):
    """Successful hand-over to the SMTP server."""

    model_config = ConfigDict(populate_by_name=True)

    delivered: bool = True
    message_id: str | None = Field(default=None, alias="messageId")
