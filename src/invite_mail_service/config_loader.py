# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for the invite mail service.

Settings are resolved once at startup from an optional INI file with
environment variables as fallbacks, and frozen into a :class:`ServiceConfig`.
Empty values count as unset everywhere.

Example:
    Configuration file format (config.ini)::

        [server]
        host = 0.0.0.0
        port = 8787
        api_key = my-shared-secret

        [smtp]
        host = smtp.gmail.com
        port = 465
        user = mailer@example.com
        password = app-password

        [invite]
        from_name = Attendance Platform
        from_email = mailer@example.com
        reply_to = support@example.com

        [cors]
        allowed_origins = https://app.example.com, https://admin.example.com

Environment variables:
    INVITE_CONFIG - Path to config.ini file (default: config.ini)
    HOST, PORT - HTTP binding (default: 0.0.0.0:8787)
    INVITE_LOG_LEVEL - Logging level (default: INFO)
    SMTP_HOST, SMTP_PORT - SMTP endpoint (default: smtp.gmail.com:465)
    SMTP_SECURE - Implicit TLS flag on ports other than 465 (always on for 465)
    SMTP_USER, SMTP_PASS - SMTP credentials
    INVITE_FROM_NAME - Sender display name (default: Attendance Platform)
    INVITE_FROM_EMAIL - Sender address (default: SMTP_USER)
    INVITE_REPLY_TO - Reply-To override
    INVITE_EMAIL_API_KEY - Shared secret required in the X-API-Key header
    INVITE_ALLOWED_ORIGINS - Comma-separated CORS allow-list (default: *)
"""

from __future__ import annotations

import configparser
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from invite_mail_service.logger import get_logger

DEFAULT_HTTP_HOST = "0.0.0.0"
DEFAULT_HTTP_PORT = 8787
DEFAULT_SMTP_HOST = "smtp.gmail.com"
DEFAULT_SMTP_PORT = 465
DEFAULT_FROM_NAME = "Attendance Platform"
ANY_ORIGIN = "*"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

logger = get_logger("ConfigLoader")


@dataclass(frozen=True)
class ServiceConfig:
    """Process-wide settings, read-only after startup.

    Attributes:
        host: Interface the HTTP server binds to.
        port: HTTP port.
        smtp_host: SMTP server hostname.
        smtp_port: SMTP server port.
        smtp_secure: Use implicit TLS when connecting.
        smtp_user: SMTP login, ``None`` when unset.
        smtp_password: SMTP password, ``None`` when unset.
        from_name: Display name of the sender.
        from_email: Sender address, ``None`` when neither it nor the SMTP
            user is set.
        reply_to: Reply-To override applied to every invite.
        api_key: Shared secret for the send endpoint, ``None`` disables
            authorization.
        allowed_origins: CORS allow-list, may contain ``*``.
        log_level: Root logging level name.
    """

    host: str = DEFAULT_HTTP_HOST
    port: int = DEFAULT_HTTP_PORT
    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_secure: bool = True
    smtp_user: str | None = None
    smtp_password: str | None = None
    from_name: str | None = DEFAULT_FROM_NAME
    from_email: str | None = None
    reply_to: str | None = None
    api_key: str | None = None
    allowed_origins: tuple[str, ...] = (ANY_ORIGIN,)
    log_level: str = "INFO"

    @property
    def allow_any_origin(self) -> bool:
        return ANY_ORIGIN in self.allowed_origins

    @property
    def smtp_configured(self) -> bool:
        """True when both SMTP user and password are available."""
        return bool(self.smtp_user and self.smtp_password)


def parse_bool(value: str | None) -> bool | None:
    """Interpret a boolean-like string, ``None`` when it is not one."""
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def parse_origins(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated origin list, dropping blank entries."""
    if value is None:
        return (ANY_ORIGIN,)
    return tuple(origin.strip() for origin in value.split(",") if origin.strip())


def load_settings(
    environ: Mapping[str, str] | None = None,
    config_path: str | os.PathLike[str] | None = None,
) -> ServiceConfig:
    """Resolve the service configuration.

    Values from the INI file win over environment variables, which win over
    defaults. A missing INI file is not an error.

    Args:
        environ: Mapping used instead of ``os.environ`` (mostly for tests).
        config_path: INI file path; defaults to ``INVITE_CONFIG`` or
            ``config.ini``.

    Returns:
        The frozen :class:`ServiceConfig`.

    Raises:
        ValueError: If a port is not an integer.
    """
    env = os.environ if environ is None else environ
    path = Path(config_path or env.get("INVITE_CONFIG") or "config.ini")
    parser = configparser.ConfigParser()
    if path.exists():
        parser.read(path)
        logger.debug("Loaded configuration file %s", path)

    def get(section: str, option: str, env_name: str, default: str | None = None) -> str | None:
        value: str | None = None
        if parser.has_option(section, option):
            value = parser.get(section, option)
        if value is None or not value.strip():
            value = env.get(env_name)
        if value is None or not value.strip():
            return default
        return value.strip()

    def get_int(section: str, option: str, env_name: str, default: int) -> int:
        value = get(section, option, env_name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise ValueError(f"Invalid integer for {env_name}: {value!r}") from exc

    smtp_port = get_int("smtp", "port", "SMTP_PORT", DEFAULT_SMTP_PORT)
    secure = parse_bool(get("smtp", "secure", "SMTP_SECURE"))
    smtp_user = get("smtp", "user", "SMTP_USER")

    config = ServiceConfig(
        host=get("server", "host", "HOST", DEFAULT_HTTP_HOST),
        port=get_int("server", "port", "PORT", DEFAULT_HTTP_PORT),
        smtp_host=get("smtp", "host", "SMTP_HOST", DEFAULT_SMTP_HOST),
        smtp_port=smtp_port,
        smtp_secure=True if smtp_port == 465 else bool(secure),
        smtp_user=smtp_user,
        smtp_password=get("smtp", "password", "SMTP_PASS"),
        from_name=get("invite", "from_name", "INVITE_FROM_NAME", DEFAULT_FROM_NAME),
        from_email=get("invite", "from_email", "INVITE_FROM_EMAIL", smtp_user),
        reply_to=get("invite", "reply_to", "INVITE_REPLY_TO"),
        api_key=get("server", "api_key", "INVITE_EMAIL_API_KEY"),
        allowed_origins=parse_origins(get("cors", "allowed_origins", "INVITE_ALLOWED_ORIGINS")),
        log_level=get("server", "log_level", "INVITE_LOG_LEVEL", "INFO").upper(),
    )
    if not config.smtp_configured:
        logger.warning("SMTP credentials missing: send requests will be rejected")
    return config
