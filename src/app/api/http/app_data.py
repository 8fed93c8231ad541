from __future__ import annotations

from dataclasses import dataclass

import httpx

from src.app.core.services import (
    ChartCache,
    ChartResolver,
    ProjectConfigService,
    SyncPipeline,
)
from src.infra.k8s.controller import ApplicationController


@dataclass
class ApplicationDependencies:
    github_client: httpx.AsyncClient
    charts_client: httpx.AsyncClient
    chart_cache: ChartCache | None
    project_config: ProjectConfigService
    chart_resolver: ChartResolver
    controller: ApplicationController
    pipeline: SyncPipeline

    async def aclose(self) -> None:
        await self.github_client.aclose()
        await self.charts_client.aclose()
        await self.controller.aclose()
