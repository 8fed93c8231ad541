"""Assembly of the Argo CD Application for a project."""

from __future__ import annotations

import yaml

from src.app.core.errors import ValuesSerializationError
from src.app.core.models.application import (
    Application,
    ApplicationDestination,
    ApplicationSource,
    ApplicationSpec,
    HelmSource,
    ObjectMeta,
    SyncPolicy,
)
from src.app.core.models.project import ChartReference, ProjectDescriptor, YamlDocument
from src.app.runtime.config.config_data import ChartsConfig, ClusterConfig


class _ValuesDumper(yaml.SafeDumper):
    """Safe dumper that never emits anchors, so cycles fail instead of aliasing."""

    def ignore_aliases(self, data):
        return True


def serialize_values(values: YamlDocument) -> str:
    """Render merged values as the YAML string embedded in ``spec.source.helm``."""
    if values is None:
        return ""
    try:
        return yaml.dump(
            values,
            Dumper=_ValuesDumper,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except (yaml.YAMLError, RecursionError) as e:
        raise ValuesSerializationError(
            f"Merged values could not be serialized: {type(e).__name__}: {e}"
        ) from e


def build_application(
    project: ProjectDescriptor,
    chart: ChartReference,
    values: YamlDocument,
    charts: ChartsConfig,
    cluster: ClusterConfig,
) -> Application:
    """Combine project, chart and values into a deployable Application."""
    return Application(
        metadata=ObjectMeta(name=project.app_name, namespace=cluster.argocd_namespace),
        spec=ApplicationSpec(
            project=cluster.project,
            source=ApplicationSource(
                repo_url=charts.repository,
                chart=chart.name,
                target_revision=chart.version,
                helm=HelmSource(values=serialize_values(values)),
            ),
            destination=ApplicationDestination(
                server=cluster.destination_server,
                namespace=project.app_name,
            ),
            sync_policy=SyncPolicy(sync_options=list(cluster.sync_options)),
        ),
    )
