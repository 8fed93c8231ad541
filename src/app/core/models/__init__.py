"""Domain models for the synchronization pipeline."""

from src.app.core.models.application import Application, DeploymentDescriptor
from src.app.core.models.events import (
    PublishEvent,
    UnsupportedEvent,
    normalize_event,
    require_publish_event,
)
from src.app.core.models.project import (
    ChartReference,
    ProjectDescriptor,
    SynkronizedFile,
    YamlDocument,
)

__all__ = [
    "Application",
    "ChartReference",
    "DeploymentDescriptor",
    "ProjectDescriptor",
    "PublishEvent",
    "SynkronizedFile",
    "UnsupportedEvent",
    "YamlDocument",
    "normalize_event",
    "require_publish_event",
]
