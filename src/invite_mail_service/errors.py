# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Error taxonomy of the invite mail service.

Every error carries the HTTP status it maps to and the JSON payload returned
to the caller; the API layer installs a single exception handler that
translates them into responses.
"""

from __future__ import annotations

from typing import Any


class InviteServiceError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ClientInputError(InviteServiceError):
    """Missing or invalid request fields."""

    status_code = 400


class PayloadTooLargeError(InviteServiceError):
    """Request body exceeds the accepted size."""

    status_code = 413


class AuthorizationError(InviteServiceError):
    """Missing or incorrect API key."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ConfigurationError(InviteServiceError):
    """The operator left SMTP credentials or the sender address unset."""

    status_code = 500


class DeliveryError(InviteServiceError):
    """The SMTP transport failed to hand over the message.

    The caller may retry; the service itself never does.
    """

    status_code = 502

    def to_payload(self) -> dict[str, Any]:
        return {"delivered": False, "reason": self.message}
