"""Webhook-to-cluster synchronization pipeline.

One delivery moves through::

    Received -> Authenticated -> Normalized -> ConfigResolved
             -> ChartResolved -> Applied

or ends in Rejected from any state when a stage raises. Stages run in
order and fail fast; nothing is applied unless every earlier stage
succeeded. No state is kept between deliveries, and concurrent deliveries
for the same application are not coordinated (the last apply wins).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from loguru import logger

from src.app.core.errors import AuthenticationError, PayloadMalformed, SyncError
from src.app.core.models.application import Application
from src.app.core.models.events import PublishEvent, require_publish_event
from src.app.core.models.project import ChartReference
from src.app.core.services.chart_resolver import ChartResolver
from src.app.core.services.descriptor_builder import build_application
from src.app.core.services.project_config import ProjectConfigService
from src.app.core.services.signature import verify_signature
from src.app.runtime.config.config_data import ConfigData
from src.infra.k8s.controller import ApplicationController, ApplyResult

PING_EVENT = "ping"


class SyncState(str, Enum):
    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    NORMALIZED = "normalized"
    CONFIG_RESOLVED = "config_resolved"
    CHART_RESOLVED = "chart_resolved"
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass
class SyncOutcome:
    """What a delivery produced. Failures raise instead."""

    state: SyncState
    ping: bool = False
    event: PublishEvent | None = None
    chart: ChartReference | None = None
    application: Application | None = None
    result: ApplyResult | None = None


class SyncPipeline:
    """Runs the synchronization stages for one delivery at a time.

    Instances hold only the configuration and the shared outbound clients,
    so one pipeline serves all concurrent requests.
    """

    def __init__(
        self,
        config: ConfigData,
        project_config: ProjectConfigService,
        chart_resolver: ChartResolver,
        controller: ApplicationController,
    ) -> None:
        self._config = config
        self._project_config = project_config
        self._chart_resolver = chart_resolver
        self._controller = controller

    def authenticate(self, body: bytes, signature: str | None) -> None:
        verify_signature(body, signature, self._config.github.webhook_secret)

    async def _resolve(self, event: PublishEvent) -> tuple[ChartReference, Application]:
        project, values = await self._project_config.resolve_values(event)
        logger.debug(f"[{project.app_name}] {SyncState.CONFIG_RESOLVED.value}")

        chart = await self._chart_resolver.resolve(project.template_name)
        logger.debug(f"[{project.app_name}] {SyncState.CHART_RESOLVED.value}")

        application = build_application(
            project, chart, values, self._config.charts, self._config.cluster
        )
        return chart, application

    async def render(self, event: PublishEvent) -> Application:
        """Resolve config and chart for ``event`` and assemble the Application."""
        _, application = await self._resolve(event)
        return application

    async def apply(self, application: Application) -> ApplyResult:
        result = await self._controller.apply_application(application)
        source = application.spec.source
        logger.info(
            f"Applied application {application.name} "
            f"(chart {source.chart}@{source.target_revision}, changed={result.changed})"
        )
        return result

    async def synchronize(self, event: PublishEvent) -> SyncOutcome:
        """Render the Application for ``event`` and apply it to the cluster."""
        chart, application = await self._resolve(event)
        result = await self.apply(application)
        return SyncOutcome(
            state=SyncState.APPLIED,
            event=event,
            chart=chart,
            application=application,
            result=result,
        )

    async def handle_delivery(
        self,
        body: bytes,
        *,
        signature: str | None,
        event_type: str | None,
        delivery_id: str | None = None,
    ) -> SyncOutcome:
        """Run a raw webhook delivery through every stage.

        The signature is checked before anything else, including the ping
        short-circuit, so an unsigned ping is rejected like any other request.

        Raises:
            SyncError: any stage failure; the delivery is Rejected
        """
        delivery = delivery_id or "-"
        logger.debug(f"[{delivery}] {SyncState.RECEIVED.value} ({event_type})")

        try:
            self.authenticate(body, signature)
            logger.debug(f"[{delivery}] {SyncState.AUTHENTICATED.value}")

            if not event_type:
                raise PayloadMalformed("Expected X-GitHub-Event")
            if event_type == PING_EVENT:
                logger.info(f"[{delivery}] ping received")
                return SyncOutcome(state=SyncState.AUTHENTICATED, ping=True)

            event = require_publish_event(body)
            logger.debug(
                f"[{delivery}] {SyncState.NORMALIZED.value}: "
                f"{event.owner_login}/{event.repo_name} published {event.image_reference}"
            )

            return await self.synchronize(event)
        except AuthenticationError as e:
            logger.warning(
                f"[{delivery}] {SyncState.REJECTED.value}: webhook authentication failed: {e.message}"
            )
            raise
        except SyncError as e:
            logger.warning(
                f"[{delivery}] {SyncState.REJECTED.value}: {e.category.value} error: {e.message}"
            )
            raise
