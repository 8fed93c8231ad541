"""Per-invocation state shared by CLI commands.

The root callback stores a :class:`CLIContext` on the click context with the
``--config`` path. The file is only read the first time a command asks for
``config``, so ``--help`` works without one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import typer

from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.config.config_loader import CONFIG_PATH, load_config
from src.cli.shared.console import CLIConsole, console


@dataclass
class CLIContext:
    config_path: Path = CONFIG_PATH
    console: CLIConsole = field(default=console)
    _config: ConfigData | None = field(default=None, repr=False)

    @property
    def config(self) -> ConfigData:
        """Validated configuration; exits with status 1 if it cannot be loaded."""
        if self._config is None:
            try:
                self._config = load_config(self.config_path)
            except FileNotFoundError:
                self.console.fail(f"Configuration file not found: {self.config_path}")
            except ValueError as e:
                self.console.fail("Invalid configuration", str(e))
        return self._config


def get_cli_context(ctx: typer.Context) -> CLIContext:
    """The nearest CLIContext, created with defaults when none was stored."""
    return ctx.ensure_object(CLIContext)
