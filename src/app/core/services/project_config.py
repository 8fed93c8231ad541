"""Project configuration lookup and value merging.

Each repository that wants automatic deployments carries a
``synkronized.yaml`` at the head of its default branch::

    synkronized:
      name: widget        # Argo CD application name
      template: standard  # chart name in the Helm index
    config:               # base Helm values
      replicas: 3

The file is read through the GitHub contents API, which returns it base64
encoded with embedded newlines.
"""

from __future__ import annotations

import base64
import binascii

import httpx
import yaml
from loguru import logger
from pydantic import ValidationError

from src.app.core.errors import (
    SourceFileMalformed,
    SourceFileMissing,
    SourceUnreachable,
    TransportDecodeError,
)
from src.app.core.models.events import PublishEvent
from src.app.core.models.project import ProjectDescriptor, SynkronizedFile, YamlDocument
from src.app.core.services.yaml_merge import merge_documents
from src.app.runtime.config.config_data import GitHubConfig


def decode_content(content: str, encoding: str | None = "base64") -> str:
    """Undo the contents API transport encoding."""
    if encoding not in (None, "base64"):
        raise TransportDecodeError(f"Unsupported content encoding: {encoding}")
    try:
        raw = base64.b64decode(content.replace("\n", ""), validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise TransportDecodeError(f"Unable to decode file content: {e}") from e


def parse_project_file(text: str) -> ProjectDescriptor:
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SourceFileMalformed(f"Project configuration is not valid YAML: {e}") from e

    if not isinstance(loaded, dict):
        raise SourceFileMalformed("Project configuration must be a mapping")

    try:
        document = SynkronizedFile.model_validate(loaded)
    except ValidationError as e:
        raise SourceFileMalformed(f"Project configuration is incomplete: {e}") from e

    return ProjectDescriptor.from_file(document)


def image_values(event: PublishEvent) -> dict[str, str]:
    """Values computed from the published image, merged over the base config."""
    return {"name": event.package_name, "image": event.image_reference}


def merge_values(project: ProjectDescriptor, event: PublishEvent) -> YamlDocument:
    return merge_documents(project.base_config, image_values(event))


class ProjectConfigService:
    """Fetches a project's ``synkronized.yaml`` from GitHub."""

    def __init__(self, client: httpx.AsyncClient, config: GitHubConfig) -> None:
        self._client = client
        self._config = config

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        return headers

    async def fetch_file(self, owner: str, repo: str) -> str:
        """Return the decoded text of the project file at the default branch head."""
        path = self._config.config_path
        url = f"{self._config.api_url}/repos/{owner}/{repo}/contents/{path}"

        try:
            response = await self._client.get(
                url, headers=self._headers(), timeout=self._config.timeout_seconds
            )
        except httpx.HTTPError as e:
            raise SourceUnreachable(f"GitHub could not be reached: {e}") from e

        if response.status_code == 404:
            raise SourceFileMissing(f"{path} not found in {owner}/{repo}")
        if not response.is_success:
            raise SourceUnreachable(
                f"GitHub API error {response.status_code} fetching {owner}/{repo}/{path}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportDecodeError(f"GitHub returned a non-JSON body: {e}") from e

        # A directory listing comes back as a list
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise SourceFileMissing(f"{path} in {owner}/{repo} is not a file")

        content = data.get("content")
        if not isinstance(content, str):
            raise TransportDecodeError(f"{path} in {owner}/{repo} has no inline content")

        return decode_content(content, data.get("encoding"))

    async def fetch_project(self, event: PublishEvent) -> ProjectDescriptor:
        text = await self.fetch_file(event.owner_login, event.repo_name)
        project = parse_project_file(text)
        logger.debug(
            f"Loaded project {project.app_name} (template {project.template_name}) "
            f"from {event.owner_login}/{event.repo_name}"
        )
        return project

    async def resolve_values(
        self, event: PublishEvent
    ) -> tuple[ProjectDescriptor, YamlDocument]:
        """Fetch the project file and merge the published image into its config."""
        project = await self.fetch_project(event)
        return project, merge_values(project, event)
