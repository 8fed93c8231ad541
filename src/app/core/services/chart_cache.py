"""Short-lived cache of resolved chart references.

Resolution is cheap to repeat but hits the chart repository on every
delivery. When ``charts.cache_ttl_seconds`` is positive the resolver keeps
each template's answer for that long; a new chart version therefore takes
at most one TTL to be picked up.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import override

from src.app.core.models.project import ChartReference


class ChartCache(ABC):
    """Template name -> ChartReference with per-entry expiry."""

    @abstractmethod
    async def get(self, template_name: str) -> ChartReference | None:
        """Return the cached reference, or None if absent or expired."""

    @abstractmethod
    async def put(self, template_name: str, chart: ChartReference) -> None: ...


@dataclass(frozen=True)
class _Entry:
    chart: ChartReference
    expires_at: float


class InMemoryChartCache(ChartCache):
    """Process-local cache.

    Every operation completes without awaiting, so one instance can be
    shared by all requests on the event loop. Expired entries are swept on
    each ``put``, which bounds the store by the templates seen within one TTL.
    """

    def __init__(
        self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    @override
    async def get(self, template_name: str) -> ChartReference | None:
        entry = self._entries.get(template_name)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[template_name]
            return None
        return entry.chart

    @override
    async def put(self, template_name: str, chart: ChartReference) -> None:
        now = self._clock()
        self._sweep(now)
        self._entries[template_name] = _Entry(
            chart=chart, expires_at=now + self.ttl_seconds
        )

    def _sweep(self, now: float) -> None:
        expired = [name for name, entry in self._entries.items() if now >= entry.expires_at]
        for name in expired:
            del self._entries[name]
