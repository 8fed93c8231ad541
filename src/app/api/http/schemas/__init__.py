"""Response bodies served by the HTTP layer."""

from src.app.api.http.schemas.health import (
    ChartIndexHealth,
    ClusterHealth,
    DependencyHealth,
    DependencyStatus,
    LivenessResponse,
    Readiness,
    ReadinessChecks,
    ReadinessResponse,
)
from src.app.api.http.schemas.webhooks import WebhookErrorResponse, WebhookResponse

__all__ = [
    "ChartIndexHealth",
    "ClusterHealth",
    "DependencyHealth",
    "DependencyStatus",
    "LivenessResponse",
    "Readiness",
    "ReadinessChecks",
    "ReadinessResponse",
    "WebhookErrorResponse",
    "WebhookResponse",
]
