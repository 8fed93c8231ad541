"""Chart resolution against a Helm repository index.

The index (``<repository>/index.yaml``) maps chart names to a list of
version entries. The first entry for a name is taken as-is: the index's own
ordering is authoritative and no version comparison happens here.
"""

from __future__ import annotations

import httpx
import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.app.core.errors import IndexMalformed, IndexUnreachable, TemplateNotFound
from src.app.core.models.project import ChartReference
from src.app.core.services.chart_cache import ChartCache
from src.app.runtime.config.config_data import ChartsConfig


class ChartVersion(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    version: str
    app_version: str | None = Field(default=None, alias="appVersion")
    description: str | None = None
    digest: str | None = None
    urls: list[str] = Field(default_factory=list)


class HelmIndex(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    api_version: str | None = Field(default=None, alias="apiVersion")
    entries: dict[str, list[ChartVersion]] = Field(default_factory=dict)
    generated: str | None = None


def select_chart(index: HelmIndex, template_name: str) -> ChartReference:
    """Pick the position-zero entry for ``template_name``."""
    versions = index.entries.get(template_name)
    if not versions:
        raise TemplateNotFound(f"No viable charts were found for {template_name}")

    chart = versions[0]
    return ChartReference(name=chart.name, version=chart.version)


def parse_index(content: str | bytes) -> HelmIndex:
    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise IndexMalformed(f"Chart index is not valid YAML: {e}") from e

    if not isinstance(loaded, dict):
        raise IndexMalformed("Chart index is not a mapping")

    try:
        return HelmIndex.model_validate(loaded)
    except ValidationError as e:
        raise IndexMalformed(f"Chart index does not match the expected schema: {e}") from e


class ChartResolver:
    """Resolves chart template names to concrete (name, version) pairs.

    Every call fetches the index unless a cache is given, in which case
    resolved references are reused until the cache expires them.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ChartsConfig,
        cache: ChartCache | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self._cache = cache

    @property
    def repository(self) -> str:
        return self._config.repository

    async def fetch_index(self) -> HelmIndex:
        url = self._config.index_url
        logger.debug(f"Fetching chart index {url}")
        try:
            response = await self._client.get(
                url, timeout=self._config.timeout_seconds
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise IndexUnreachable(
                f"Chart index returned HTTP {e.response.status_code}: {url}"
            ) from e
        except httpx.HTTPError as e:
            raise IndexUnreachable(f"Chart index could not be reached: {e}") from e

        return parse_index(response.content)

    async def resolve(self, template_name: str) -> ChartReference:
        """Resolve ``template_name`` to the newest chart listed in the index.

        Raises:
            TemplateNotFound: the index has no entries for the name
            IndexUnreachable: transport failure or error status
            IndexMalformed: the index could not be decoded
        """
        if self._cache is not None:
            cached = await self._cache.get(template_name)
            if cached is not None:
                logger.debug(f"Using cached chart reference for {template_name}")
                return cached

        chart = select_chart(await self.fetch_index(), template_name)
        logger.info(f"Resolved chart {template_name} -> {chart.name}@{chart.version}")

        if self._cache is not None:
            await self._cache.put(template_name, chart)

        return chart
