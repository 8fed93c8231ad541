"""Argo CD ``Application`` custom resource.

Field names are snake_case in Python and camelCase on the wire; use
:meth:`Application.to_manifest` to get the body sent to the cluster API.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

APPLICATION_GROUP = "argoproj.io"
APPLICATION_VERSION = "v1alpha1"
APPLICATION_API_VERSION = f"{APPLICATION_GROUP}/{APPLICATION_VERSION}"
APPLICATION_KIND = "Application"
APPLICATION_PLURAL = "applications"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HelmSource(_CamelModel):
    values: str


class ApplicationSource(_CamelModel):
    repo_url: str = Field(alias="repoURL")
    chart: str
    target_revision: str
    helm: HelmSource


class ApplicationDestination(_CamelModel):
    server: str
    namespace: str


class AutomatedSync(_CamelModel):
    prune: bool = False
    self_heal: bool = False
    allow_empty: bool = False


class SyncPolicy(_CamelModel):
    automated: AutomatedSync = Field(default_factory=AutomatedSync)
    sync_options: list[str] = Field(default_factory=list)


class ApplicationSpec(_CamelModel):
    project: str = "default"
    source: ApplicationSource
    destination: ApplicationDestination
    sync_policy: SyncPolicy = Field(default_factory=SyncPolicy)


class ObjectMeta(_CamelModel):
    name: str
    namespace: str


class Application(_CamelModel):
    """The deployment descriptor applied for one webhook delivery."""

    api_version: str = APPLICATION_API_VERSION
    kind: str = APPLICATION_KIND
    metadata: ObjectMeta
    spec: ApplicationSpec

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def to_manifest(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


DeploymentDescriptor = Application
