"""Core services exports."""

from .chart_cache import ChartCache, InMemoryChartCache
from .chart_resolver import ChartResolver
from .descriptor_builder import build_application, serialize_values
from .project_config import ProjectConfigService
from .signature import compute_signature, verify_signature
from .sync_pipeline import SyncOutcome, SyncPipeline, SyncState
from .yaml_merge import merge_documents

__all__ = [
    # Stages
    "verify_signature",
    "compute_signature",
    "merge_documents",
    "ProjectConfigService",
    "ChartResolver",
    "build_application",
    "serialize_values",
    # Pipeline
    "SyncPipeline",
    "SyncOutcome",
    "SyncState",
    # Caching
    "ChartCache",
    "InMemoryChartCache",
]
