"""Manual sync commands.

These run the same stages as a webhook delivery, minus signature checking,
for a repository and image given on the command line:

- resolve-chart: look a chart template up in the Helm index
- render: print the Application that would be applied
- apply: render and apply it (manual redelivery)
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from src.app.api.http.deps import build_dependencies
from src.app.core.models.application import Application
from src.app.core.models.events import PublishEvent
from src.app.core.models.project import ChartReference
from src.app.runtime.config.config_data import ConfigData
from src.cli.context import get_cli_context
from src.cli.shared.console import with_error_handling
from src.infra.k8s.controller import ApplyResult

app = typer.Typer(no_args_is_help=True)

OwnerArg = Annotated[str, typer.Argument(help="Repository owner login")]
RepoArg = Annotated[str, typer.Argument(help="Repository name")]
ImageOpt = Annotated[
    str, typer.Option("--image", "-i", help="Published image reference")
]
PackageOpt = Annotated[
    str | None,
    typer.Option("--package", "-p", help="Package name (defaults to the repository name)"),
]


def _event(owner: str, repo: str, image: str, package: str | None) -> PublishEvent:
    return PublishEvent(
        package_name=package or repo,
        image_reference=image,
        owner_login=owner,
        repo_name=repo,
    )


async def _resolve_chart(config: ConfigData, name: str) -> ChartReference:
    deps = build_dependencies(config)
    try:
        return await deps.chart_resolver.resolve(name)
    finally:
        await deps.aclose()


async def _render(config: ConfigData, event: PublishEvent) -> Application:
    deps = build_dependencies(config)
    try:
        return await deps.pipeline.render(event)
    finally:
        await deps.aclose()


async def _apply(config: ConfigData, event: PublishEvent) -> ApplyResult:
    deps = build_dependencies(config)
    try:
        application = await deps.pipeline.render(event)
        return await deps.pipeline.apply(application)
    finally:
        await deps.aclose()


@app.command("resolve-chart")
@with_error_handling
def resolve_chart(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Chart template name")],
) -> None:
    """Resolve a chart template to the version the index lists first."""
    cli = get_cli_context(ctx)
    with cli.console.status(f"Fetching {cli.config.charts.index_url}..."):
        chart = asyncio.run(_resolve_chart(cli.config, name))
    cli.console.chart(chart)


@app.command("render")
@with_error_handling
def render(
    ctx: typer.Context,
    owner: OwnerArg,
    repo: RepoArg,
    image: ImageOpt,
    package: PackageOpt = None,
) -> None:
    """Print the Application a publish event for OWNER/REPO would apply."""
    cli = get_cli_context(ctx)
    application = asyncio.run(_render(cli.config, _event(owner, repo, image, package)))
    cli.console.manifest(application.to_manifest())


@app.command("apply")
@with_error_handling
def apply(
    ctx: typer.Context,
    owner: OwnerArg,
    repo: RepoArg,
    image: ImageOpt,
    package: PackageOpt = None,
) -> None:
    """Render and apply the Application for OWNER/REPO."""
    cli = get_cli_context(ctx)
    with cli.console.status(f"Syncing {owner}/{repo}..."):
        result = asyncio.run(_apply(cli.config, _event(owner, repo, image, package)))
    cli.console.apply_result(result)
