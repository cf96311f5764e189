# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for the invite mail service.

Usage:
    invite-mail-service serve --port 8787
    invite-mail-service config --json
    invite-mail-service preview --link https://example.com/register --role team_lead

Settings come from the same sources as the server: ``config.ini`` (or the
file named by ``INVITE_CONFIG``) and the environment.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table

from invite_mail_service import __version__
from invite_mail_service.composer import build_invite_email
from invite_mail_service.config_loader import ServiceConfig, load_settings
from invite_mail_service.logger import configure_logging

console = Console()
err_console = Console(stderr=True)

SECRET_FIELDS = ("smtp_password", "api_key")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def _mask(value: Any) -> Any:
    if not value:
        return value
    return "****"


def describe_config(config: ServiceConfig) -> dict[str, Any]:
    """Return the configuration as a dict with secrets masked."""
    data = asdict(config)
    for field in SECRET_FIELDS:
        data[field] = _mask(data[field])
    data["allowed_origins"] = list(config.allowed_origins)
    data["allow_any_origin"] = config.allow_any_origin
    data["smtp_configured"] = config.smtp_configured
    return data


def _load(config_path: Optional[str]) -> ServiceConfig:
    try:
        return load_settings(config_path=config_path)
    except ValueError as exc:
        print_error(str(exc))
        sys.exit(1)


@click.group()
@click.version_option(__version__)
@click.option("--config", "-c", "config_path", default=None, help="Path to config.ini (default: $INVITE_CONFIG or config.ini).")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str]) -> None:
    """Invite mail service: render and relay invitation emails."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command("serve")
@click.option("--host", "-h", default=None, help="Host to bind to (default: from config).")
@click.option("--port", "-p", type=int, default=None, help="Port to listen on (default: from config).")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development.")
@click.pass_context
def serve_cmd(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from invite_mail_service.server import build_app

    config = _load(ctx.obj["config_path"])
    configure_logging(config.log_level)
    host = host or config.host
    port = port or config.port

    console.print("\n[bold cyan]Starting Invite Email API[/bold cyan]")
    console.print(f"  Listen:  {host}:{port}")
    console.print(f"  SMTP:    {config.smtp_host}:{config.smtp_port} ({'configured' if config.smtp_configured else 'not configured'})")
    console.print()

    if reload:
        # uvicorn needs an import string to reload; the module reads the environment itself
        if ctx.obj["config_path"]:
            os.environ["INVITE_CONFIG"] = ctx.obj["config_path"]
        uvicorn.run("invite_mail_service.server:app", host=host, port=port, reload=True, log_level="info")
        return
    uvicorn.run(build_app(config), host=host, port=port, log_level="info")


@main.command("config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_cmd(ctx: click.Context, as_json: bool) -> None:
    """Show the resolved configuration (secrets masked)."""
    data = describe_config(_load(ctx.obj["config_path"]))
    if as_json:
        print_json(data)
        return

    table = Table(title="Invite mail service configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(value)
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)


@main.command("preview")
@click.option("--link", "-l", required=True, help="Registration link.")
@click.option("--first-name", default=None, help="Recipient first name.")
@click.option("--last-name", default=None, help="Recipient last name.")
@click.option("--role", default=None, help="Role label (underscores become spaces).")
@click.option("--organization", "-o", default=None, help="Organization name.")
@click.option("--html", "as_html", is_flag=True, help="Print the HTML body instead of the text body.")
def preview_cmd(
    link: str,
    first_name: Optional[str],
    last_name: Optional[str],
    role: Optional[str],
    organization: Optional[str],
    as_html: bool,
) -> None:
    """Render an invitation without sending it."""
    link = link.strip()
    if not link:
        print_error("Link is required")
        sys.exit(1)
    mail = build_invite_email(
        link=link,
        first_name=first_name,
        last_name=last_name,
        role=role,
        organization_name=organization,
    )
    click.echo(f"Subject: {mail.subject}")
    click.echo()
    click.echo(mail.html if as_html else mail.text)


if __name__ == "__main__":
    main()
