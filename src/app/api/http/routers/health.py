"""Kubernetes probes.

``/health`` only proves the process serves requests. ``/health/ready`` also
asks the chart repository for its index and the cluster API for a response,
since a delivery cannot complete without either.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from src.app.api.http.app_data import ApplicationDependencies
from src.app.api.http.schemas.health import (
    LivenessResponse,
    Readiness,
    ReadinessResponse,
)
from src.app.core.services.health_service import HealthCheckService

router = APIRouter(prefix="/health", tags=["health"])


def get_health_service(request: Request) -> HealthCheckService:
    deps: ApplicationDependencies = request.app.state.app_dependencies
    return HealthCheckService(deps, request.app.state.config)


@router.get("", response_model=LivenessResponse, summary="Liveness probe")
async def health() -> LivenessResponse:
    return LivenessResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={
        status.HTTP_503_SERVICE_UNAVAILABLE: {
            "description": "The chart index or the cluster API did not answer",
            "model": ReadinessResponse,
        },
    },
    summary="Readiness probe",
)
async def readiness(
    response: Response,
    health_service: HealthCheckService = Depends(get_health_service),
) -> ReadinessResponse:
    result = await health_service.check_all()
    if result.status == Readiness.NOT_READY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result
