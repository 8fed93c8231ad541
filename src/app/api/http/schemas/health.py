"""Probe response bodies for ``/health`` and ``/health/ready``."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DependencyStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class Readiness(str, Enum):
    READY = "ready"
    NOT_READY = "not_ready"


class DependencyHealth(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: DependencyStatus
    error: str | None = Field(
        default=None, description="Why the dependency is unhealthy"
    )


class ChartIndexHealth(DependencyHealth):
    url: str = Field(description="index.yaml that chart templates resolve against")


class ClusterHealth(DependencyHealth):
    backend: str = Field(description="Cluster client in use (kr8s or kubectl)")


class ReadinessChecks(BaseModel):
    chart_index: ChartIndexHealth
    cluster: ClusterHealth

    @property
    def all_healthy(self) -> bool:
        return all(
            check.status == DependencyStatus.HEALTHY
            for check in (self.chart_index, self.cluster)
        )


class ReadinessResponse(BaseModel):
    """Served with 200 when ``status`` is ready and 503 otherwise."""

    model_config = ConfigDict(use_enum_values=True)

    status: Readiness
    environment: str
    checks: ReadinessChecks


class LivenessResponse(BaseModel):
    status: str = "healthy"
    service: str = "synkronized"
