"""Rich output for the synkronized CLI."""

from collections.abc import Callable
from functools import wraps
from typing import Any, NoReturn

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.syntax import Syntax

from src.app.core.errors import SyncError
from src.app.core.models.project import ChartReference
from src.infra.k8s.controller import ApplyResult


class CLIConsole:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def status(self, status: str) -> Status:
        return self.console.status(status)

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def chart(self, chart: ChartReference) -> None:
        self.ok(f"{chart.name} {chart.version}")

    def apply_result(self, result: ApplyResult) -> None:
        target = f"{result.namespace}/{result.name}"
        if result.changed:
            self.ok(f"Applied {target} (resourceVersion {result.resource_version})")
        else:
            self.info(f"{target} unchanged")

    def manifest(self, document: dict[str, Any]) -> None:
        """Print a Kubernetes object as highlighted YAML, keys in insertion order."""
        text = yaml.safe_dump(document, sort_keys=False)
        self.console.print(Syntax(text, "yaml", word_wrap=True))

    def fail(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> NoReturn:
        """Print ``message`` (and a details panel) then exit with ``exit_code``."""
        self.error(f"[bold red]{message}[/bold red]")
        if details:
            self.console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Turn pipeline failures into a readable message and exit status 1.

    Ctrl-C exits with 130. Anything that is not a SyncError propagates so
    the traceback is not lost.
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except SyncError as e:
            console.fail(e.message, f"{e.category.value} error ({type(e).__name__})")
        except KeyboardInterrupt:
            console.console.print("\n[dim]Cancelled.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


console = CLIConsole()
