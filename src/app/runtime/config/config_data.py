"""Typed application configuration.

The ``config:`` section of ``config.yaml`` is validated into :class:`ConfigData`
once at process start and handed to every pipeline stage explicitly.
"""

from __future__ import annotations

import base64
import binascii
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_CHART_REPOSITORY = "https://charts.vaughn.sh"
DEFAULT_DESTINATION_SERVER = "https://kubernetes.default.svc"


class AppConfig(BaseModel):
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    webhook_path: str = "/github-hooks"


class GitHubConfig(BaseModel):
    api_url: str = "https://api.github.com"
    token: str = ""
    webhook_secret: str = Field(
        default="",
        description="Shared secret used to sign webhook deliveries",
    )
    config_path: str = "synkronized.yaml"
    timeout_seconds: float = 30.0

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ChartsConfig(BaseModel):
    repository: str = DEFAULT_CHART_REPOSITORY
    timeout_seconds: float = 30.0
    cache_ttl_seconds: int = Field(
        default=0,
        ge=0,
        description="Freshness window for resolved chart references; 0 disables caching",
    )

    @field_validator("repository")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def index_url(self) -> str:
        return f"{self.repository}/index.yaml"


class ClusterConfig(BaseModel):
    backend: Literal["kr8s", "kubectl"] = "kr8s"
    kubeconfig: str = Field(
        default="",
        description="Base64 encoded kubeconfig; empty uses the default client configuration",
    )
    context: str | None = None
    argocd_namespace: str = "argocd"
    destination_server: str = DEFAULT_DESTINATION_SERVER
    project: str = "default"
    field_manager: str = "kubectl-light"
    sync_options: list[str] = Field(default_factory=lambda: ["CreateNamespace=true"])

    @field_validator("kubeconfig")
    @classmethod
    def _check_base64(cls, value: str) -> str:
        value = "".join(value.split())
        try:
            base64.b64decode(value, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"not valid base64 text: {e}") from e
        return value


class ConfigData(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    charts: ChartsConfig = Field(default_factory=ChartsConfig)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
