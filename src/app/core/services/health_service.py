"""Readiness checks for the collaborators every delivery needs.

Only the Helm chart index and the cluster API are probed. The GitHub
contents API is per-repository, so failures there surface on the delivery
itself rather than taking the whole service out of rotation.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from src.app.api.http.schemas.health import (
    ChartIndexHealth,
    ClusterHealth,
    DependencyStatus,
    Readiness,
    ReadinessChecks,
    ReadinessResponse,
)
from src.app.core.errors import SyncError

if TYPE_CHECKING:
    from src.app.api.http.app_data import ApplicationDependencies
    from src.app.runtime.config.config_data import ConfigData


class HealthCheckService:
    def __init__(self, app_deps: ApplicationDependencies, config: ConfigData) -> None:
        self._app_deps = app_deps
        self._config = config

    async def check_all(self) -> ReadinessResponse:
        """Run both probes concurrently and fold them into one verdict."""
        chart_index, cluster = await asyncio.gather(
            self.check_chart_index(), self.check_cluster()
        )
        checks = ReadinessChecks(chart_index=chart_index, cluster=cluster)

        return ReadinessResponse(
            status=Readiness.READY if checks.all_healthy else Readiness.NOT_READY,
            environment=self._config.app.environment,
            checks=checks,
        )

    async def check_chart_index(self) -> ChartIndexHealth:
        url = self._config.charts.index_url
        try:
            await self._app_deps.chart_resolver.fetch_index()
        except SyncError as e:
            logger.warning(f"Chart index not ready: {e.message}")
            return ChartIndexHealth(
                status=DependencyStatus.UNHEALTHY, url=url, error=e.message
            )
        return ChartIndexHealth(status=DependencyStatus.HEALTHY, url=url)

    async def check_cluster(self) -> ClusterHealth:
        backend = self._config.cluster.backend
        if await self._app_deps.controller.check_connection():
            return ClusterHealth(status=DependencyStatus.HEALTHY, backend=backend)

        logger.warning(f"Cluster API not ready ({backend} backend)")
        return ClusterHealth(
            status=DependencyStatus.UNHEALTHY,
            backend=backend,
            error="Cluster API did not answer",
        )
