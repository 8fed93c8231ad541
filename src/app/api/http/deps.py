"""Dependency construction and FastAPI dependency providers."""

from __future__ import annotations

import httpx
from fastapi import Request

from src.app.api.http.app_data import ApplicationDependencies
from src.app.core.services import (
    ChartResolver,
    InMemoryChartCache,
    ProjectConfigService,
    SyncPipeline,
)
from src.app.runtime.config.config_data import ConfigData
from src.infra.k8s import get_k8s_controller
from src.infra.k8s.controller import ApplicationController


def build_dependencies(
    config: ConfigData,
    *,
    controller: ApplicationController | None = None,
    github_client: httpx.AsyncClient | None = None,
    charts_client: httpx.AsyncClient | None = None,
) -> ApplicationDependencies:
    """Create the shared clients and pipeline stages for one process.

    Explicit arguments replace the default clients, which is how tests run
    the full pipeline against mock transports.
    """
    github_client = github_client or httpx.AsyncClient(
        timeout=config.github.timeout_seconds
    )
    charts_client = charts_client or httpx.AsyncClient(
        timeout=config.charts.timeout_seconds, follow_redirects=True
    )
    controller = controller or get_k8s_controller(config.cluster)
    chart_cache = (
        InMemoryChartCache(config.charts.cache_ttl_seconds)
        if config.charts.cache_ttl_seconds > 0
        else None
    )

    project_config = ProjectConfigService(github_client, config.github)
    chart_resolver = ChartResolver(charts_client, config.charts, cache=chart_cache)

    return ApplicationDependencies(
        github_client=github_client,
        charts_client=charts_client,
        chart_cache=chart_cache,
        project_config=project_config,
        chart_resolver=chart_resolver,
        controller=controller,
        pipeline=SyncPipeline(config, project_config, chart_resolver, controller),
    )


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_sync_pipeline(request: Request) -> SyncPipeline:
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.pipeline
