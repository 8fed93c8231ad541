"""Webhook server command."""

from __future__ import annotations

from typing import Annotated

import typer
import uvicorn

from src.app.api.http.app import create_app
from src.app.runtime.logging import configure_logging
from src.cli.context import get_cli_context


def serve(
    ctx: typer.Context,
    host: Annotated[
        str | None, typer.Option(help="Bind address (defaults to app.host)")
    ] = None,
    port: Annotated[
        int | None, typer.Option(help="Bind port (defaults to app.port)")
    ] = None,
) -> None:
    """Run the webhook receiver."""
    cli = get_cli_context(ctx)
    config = cli.config

    configure_logging(config.app.log_level)
    bind_host = host or config.app.host
    bind_port = port or config.app.port
    cli.console.info(
        f"Listening on {bind_host}:{bind_port}{config.app.webhook_path}"
    )

    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        log_level=config.app.log_level.lower(),
    )
