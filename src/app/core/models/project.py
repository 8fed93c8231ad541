"""Project and chart value objects."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Plain tree as produced by yaml.safe_load: dicts, lists and scalars.
YamlDocument = Any


class SynkronizedSection(BaseModel):
    """The ``synkronized:`` block of a project's ``synkronized.yaml``."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    template: str = Field(min_length=1)


class SynkronizedFile(BaseModel):
    """Top-level layout of ``synkronized.yaml``."""

    model_config = ConfigDict(extra="ignore")

    synkronized: SynkronizedSection
    config: YamlDocument = None


class ProjectDescriptor(BaseModel):
    app_name: str
    template_name: str
    base_config: YamlDocument = None

    @classmethod
    def from_file(cls, document: SynkronizedFile) -> ProjectDescriptor:
        return cls(
            app_name=document.synkronized.name,
            template_name=document.synkronized.template,
            base_config=document.config,
        )


class ChartReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: str
