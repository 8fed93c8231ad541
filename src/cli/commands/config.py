"""Inspect the configuration a command would run with."""

from __future__ import annotations

from typing import Annotated

import typer

from src.app.runtime.config.config_loader import load_config
from src.cli.context import get_cli_context

app = typer.Typer(no_args_is_help=True)

MASK = "********"

# (section, key) pairs that must never be printed
SECRET_FIELDS = (
    ("github", "token"),
    ("github", "webhook_secret"),
    ("cluster", "kubeconfig"),
)


@app.command("show")
def show(
    ctx: typer.Context,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Print the file without substitution or validation"),
    ] = False,
) -> None:
    """Print the effective configuration with secrets masked."""
    cli = get_cli_context(ctx)

    if raw:
        try:
            document = load_config(cli.config_path, processed=False)
        except FileNotFoundError:
            cli.console.fail(f"Configuration file not found: {cli.config_path}")
        except ValueError as e:
            cli.console.fail("Invalid configuration", str(e))
        cli.console.manifest(document)
        return

    effective = cli.config.model_dump(mode="json")
    for section, key in SECRET_FIELDS:
        if effective[section][key]:
            effective[section][key] = MASK
    cli.console.manifest({"config": effective})
