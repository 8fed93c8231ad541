"""FastAPI application factory.

Run with ``uvicorn --factory src.app.api.http.app:create_app`` or the
``synkronized serve`` command.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from src.app.api.http.app_data import ApplicationDependencies
from src.app.api.http.deps import build_dependencies
from src.app.api.http.error_handlers import register_exception_handlers
from src.app.api.http.routers import health, webhooks
from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.context import get_config


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    config: ConfigData = app.state.config

    if getattr(app.state, "app_dependencies", None) is None:
        app.state.app_dependencies = app.state.dependencies_factory(config)

    logger.info(
        f"Synkronized ready: webhook at {config.app.webhook_path}, "
        f"charts from {config.charts.repository}, "
        f"cluster backend {config.cluster.backend}"
    )
    try:
        yield
    finally:
        app_deps: ApplicationDependencies = app.state.app_dependencies
        await app_deps.aclose()
        app.state.app_dependencies = None


def create_app(
    config: ConfigData | None = None,
    *,
    dependencies: ApplicationDependencies | None = None,
    dependencies_factory: Callable[
        [ConfigData], ApplicationDependencies
    ] = build_dependencies,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Configuration to use; defaults to the process configuration
        dependencies: Prebuilt dependency container (tests)
        dependencies_factory: Builds the container at startup when none is given
    """
    config = config or get_config()

    app = FastAPI(
        title="Synkronized",
        description="Syncs published container images into Argo CD Applications",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.app_dependencies = dependencies
    app.state.dependencies_factory = dependencies_factory

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(webhooks.router, prefix=config.app.webhook_path)

    return app
