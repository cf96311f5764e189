# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""FastAPI application factory for the invite mail service.

The module exposes :func:`create_app`, which wires the request pipeline, the
send-invite route and the documentation routes around an explicit
:class:`~invite_mail_service.config_loader.ServiceConfig` and an optional
:class:`~invite_mail_service.mailer.MailDispatcher`. Both are kept on
``app.state`` and read by the route dependencies; nothing lives at module
level.

Authentication is enforced on the send route only, through the shared secret
carried in the ``X-API-Key`` header.

Example:
    Creating and running the API application::

        config = load_settings()
        app = create_app(config, create_dispatcher(config))

        uvicorn.run(app, host=config.host, port=config.port)
"""

from typing import Any, AsyncContextManager, Callable, Optional
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.security import APIKeyHeader

from .composer import build_invite_email, extract_email, format_from
from .config_loader import ServiceConfig
from .errors import (
    AuthorizationError,
    ClientInputError,
    ConfigurationError,
    DeliveryError,
    InviteServiceError,
)
from .mailer import MailDispatcher, OutgoingMail
from .models import DeliveryReport, HealthResponse, InviteRequest
from .openapi_spec import API_TITLE, OPENAPI_SPEC
from .pipeline import install_pipeline

logger = logging.getLogger(__name__)

API_KEY_HEADER_NAME = "X-API-Key"
api_key_scheme = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)


def get_config(request: Request) -> ServiceConfig:
    return request.app.state.config


def get_dispatcher(request: Request) -> Optional[MailDispatcher]:
    return request.app.state.dispatcher


async def require_api_key(
    api_key: str | None = Depends(api_key_scheme),
    config: ServiceConfig = Depends(get_config),
) -> None:
    """Validate the shared secret carried in the ``X-API-Key`` header.

    When no key is configured the dependency is effectively bypassed;
    otherwise a missing or different value raises a ``401``.
    """
    expected = config.api_key
    if expected is None:
        return
    if not api_key or api_key != expected:
        logger.warning("Rejected send-invite request with missing or invalid API key")
        raise AuthorizationError()


auth_dependency = Depends(require_api_key)


def create_app(
    config: ServiceConfig,
    dispatcher: MailDispatcher | None = None,
    lifespan: Callable[[FastAPI], AsyncContextManager] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    config:
        Resolved service settings.
    dispatcher:
        SMTP dispatcher, ``None`` when SMTP credentials are missing; the
        send route then answers ``500``.
    lifespan:
        Optional lifespan context manager for startup/shutdown events.

    Returns
    -------
    FastAPI
        A configured application ready to be served by Uvicorn or any ASGI
        server.
    """
    # Generated schema and docs are replaced by the static document below
    api = FastAPI(
        title=API_TITLE,
        lifespan=lifespan,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    api.state.config = config
    api.state.dispatcher = dispatcher
    install_pipeline(api, config)

    @api.exception_handler(InviteServiceError)
    async def service_error_handler(request: Request, exc: InviteServiceError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @api.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint for container monitoring (no authentication required)."""
        return HealthResponse(ok=True)

    @api.get("/openapi.json", include_in_schema=False)
    async def openapi_document() -> dict[str, Any]:
        return OPENAPI_SPEC

    @api.get("/docs", include_in_schema=False, response_class=HTMLResponse)
    async def docs():
        return get_swagger_ui_html(openapi_url="/openapi.json", title=f"{API_TITLE} - Swagger UI")

    @api.post("/send-invite-email", dependencies=[auth_dependency])
    async def send_invite_email(
        request: Request,
        config: ServiceConfig = Depends(get_config),
        dispatcher: Optional[MailDispatcher] = Depends(get_dispatcher),
    ):
        """Render an invitation and relay it through the SMTP account."""
        invite = InviteRequest.from_body(getattr(request.state, "json_body", {}))
        if invite.email is None or invite.link is None:
            raise ClientInputError("Email and link are required")
        if dispatcher is None:
            raise ConfigurationError("SMTP not configured")
        if not config.from_email:
            raise ConfigurationError("Sender email not configured")

        mail = build_invite_email(
            link=invite.link,
            first_name=invite.first_name,
            last_name=invite.last_name,
            role=invite.role,
            organization_name=invite.organization_name,
        )
        reply_to = config.reply_to or extract_email(invite.from_address)
        outgoing = OutgoingMail(
            sender=format_from(config.from_name, config.from_email),
            to=invite.email,
            subject=mail.subject,
            text=mail.text,
            html=mail.html,
            reply_to=reply_to,
        )

        try:
            message_id = await dispatcher.send(outgoing)
        except Exception as exc:
            reason = exc.message if isinstance(exc, DeliveryError) else str(exc)
            logger.error(f"Invite delivery to {invite.email} failed: {reason}")
            raise DeliveryError(reason) from exc

        logger.info(f"Invite delivered to {invite.email} (message id {message_id})")
        return DeliveryReport(message_id=message_id).model_dump(by_alias=True)

    return api
