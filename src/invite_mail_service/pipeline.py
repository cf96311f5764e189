# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Cross-cutting request stages: CORS headers and JSON body parsing.

Both stages are HTTP middleware. Starlette runs the most recently added
middleware first, so :func:`install_pipeline` registers the body parser before
CORS; CORS headers therefore land on body-parsing errors as well. Errors no
handler claims become a JSON ``500`` inside the CORS stage, headers included.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from .config_loader import ServiceConfig
from .errors import ClientInputError, InviteServiceError, PayloadTooLargeError
from .logger import get_logger

MAX_BODY_BYTES = 250 * 1024
ALLOW_HEADERS = "Content-Type, X-API-Key"
ALLOW_METHODS = "GET, POST, OPTIONS"
BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

logger = get_logger("RequestPipeline")


def cors_headers(config: ServiceConfig, origin: str | None) -> dict[str, str]:
    """Return the CORS headers for a request coming from ``origin``."""
    headers: dict[str, str] = {}
    if config.allow_any_origin:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin and origin in config.allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
    headers["Vary"] = "Origin"
    headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
    headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
    return headers


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def parse_json_body(request: Request, limit: int = MAX_BODY_BYTES) -> Any:
    """Read and decode a JSON request body.

    Non-JSON content types and empty bodies yield ``{}``.

    Raises:
        PayloadTooLargeError: If the body is larger than ``limit`` bytes.
        ClientInputError: If the body is not a JSON object or array.
    """
    if not _is_json(request.headers.get("content-type", "")):
        return {}
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError("Request body too large")
    raw = await request.body()
    if len(raw) > limit:
        raise PayloadTooLargeError("Request body too large")
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as exc:
        raise ClientInputError("Invalid JSON body") from exc
    if not isinstance(body, (dict, list)):
        raise ClientInputError("Invalid JSON body")
    return body


def install_pipeline(api: FastAPI, config: ServiceConfig, body_limit: int = MAX_BODY_BYTES) -> None:
    """Register the body parser and the CORS stage on ``api``."""

    @api.middleware("http")
    async def json_body_stage(request: Request, call_next):
        if request.method in BODY_METHODS:
            try:
                request.state.json_body = await parse_json_body(request, body_limit)
            except InviteServiceError as exc:
                logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")
                return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
        return await call_next(request)

    @api.middleware("http")
    async def cors_stage(request: Request, call_next):
        headers = cors_headers(config, request.headers.get("origin"))
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=headers)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            return JSONResponse(status_code=500, content={"error": "Internal Server Error"}, headers=headers)
        response.headers.update(headers)
        return response
