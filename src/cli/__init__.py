"""Main CLI application module.

Command Groups:
- serve: run the webhook receiver
- sync: resolve charts, render and apply Applications by hand
- config: inspect the loaded configuration
"""

from pathlib import Path
from typing import Annotated

import typer

from src.app.runtime.config.config_loader import CONFIG_PATH

from .commands import config_app, serve, sync_app
from .context import CLIContext

app = typer.Typer(
    help="🔄 Synkronized - sync published images into Argo CD",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            envvar="SYNKRONIZED_CONFIG",
            help="Path to config.yaml",
        ),
    ] = CONFIG_PATH,
) -> None:
    ctx.obj = CLIContext(config_path=config)


app.command("serve")(serve)
app.add_typer(sync_app, name="sync", help="Manual sync commands")
app.add_typer(config_app, name="config", help="Configuration commands")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
