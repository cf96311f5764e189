# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Static OpenAPI document served at ``/openapi.json`` and rendered at ``/docs``."""

from __future__ import annotations

from typing import Any

API_TITLE = "Invite Email API"
API_VERSION = "1.0.0"


def _error_response(description: str) -> dict[str, Any]:
    return {
        "description": description,
        "content": {
            "application/json": {"schema": {"$ref": "#/components/schemas/Error"}},
        },
    }

OPENAPI_SPEC: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {
        "title": API_TITLE,
        "version": API_VERSION,
        "description": "Send invitation emails using SMTP",
    },
    "servers": [{"url": "/"}],
    "components": {
        "securitySchemes": {
            "ApiKeyAuth": {
                "type": "apiKey",
                "in": "header",
                "name": "x-api-key",
            },
        },
        "schemas": {
            "InviteRequest": {
                "type": "object",
                "required": ["email", "link"],
                "properties": {
                    "email": {"type": "string", "description": "Bare address or 'Name <address>'"},
                    "link": {"type": "string", "description": "Registration link"},
                    "first_name": {"type": "string"},
                    "last_name": {"type": "string"},
                    "role": {"type": "string", "description": "Underscores are rendered as spaces"},
                    "organization_name": {"type": "string"},
                    "from": {"type": "string", "description": "Requester address, used as Reply-To"},
                },
            },
            "DeliveryReport": {
                "type": "object",
                "properties": {
                    "delivered": {"type": "boolean"},
                    "messageId": {"type": "string", "nullable": True},
                },
            },
            "DeliveryFailure": {
                "type": "object",
                "properties": {
                    "delivered": {"type": "boolean"},
                    "reason": {"type": "string"},
                },
            },
            "Error": {
                "type": "object",
                "properties": {"error": {"type": "string"}},
            },
        },
    },
    "paths": {
        "/health": {
            "get": {
                "summary": "Health check",
                "responses": {
                    "200": {"description": "OK"},
                },
            },
        },
        "/send-invite-email": {
            "post": {
                "summary": "Send invite email",
                "security": [{"ApiKeyAuth": []}],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/InviteRequest"},
                            "example": {
                                "email": "user@gmail.com",
                                "link": "https://example.com/register",
                                "first_name": "John",
                                "last_name": "Doe",
                                "role": "Student",
                                "organization_name": "My School",
                            },
                        },
                    },
                },
                "responses": {
                    "200": {
                        "description": "Email sent",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/DeliveryReport"}},
                        },
                    },
                    "400": _error_response("Invalid request"),
                    "401": _error_response("Unauthorized"),
                    "500": _error_response("SMTP error"),
                    "502": {
                        "description": "Delivery failed",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/DeliveryFailure"}},
                        },
                    },
                },
            },
        },
    },
}
