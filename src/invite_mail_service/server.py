# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""ASGI application entry point for uvicorn.

The module-level ``app`` is built on first access, resolving the configuration
from the environment at that point. Importing :func:`build_app` reads nothing.

Usage:
    uvicorn invite_mail_service.server:app --host 0.0.0.0 --port 8787
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from .api import create_app
from .config_loader import ServiceConfig, load_settings
from .logger import get_logger
from .mailer import create_dispatcher

logger = get_logger("InviteMailService")


def build_app(config: ServiceConfig | None = None) -> FastAPI:
    """Build the application from ``config`` (or the environment)."""
    config = config or load_settings()
    dispatcher = create_dispatcher(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler - announces the listening port."""
        if dispatcher is None:
            logger.warning("SMTP not configured: set SMTP_USER and SMTP_PASS to enable sending")
        logger.info(f"Invite Email API running on port {config.port}")
        yield

    return create_app(config, dispatcher, lifespan=lifespan)


def __getattr__(name: str) -> Any:
    if name == "app":
        app = build_app()
        globals()["app"] = app
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
