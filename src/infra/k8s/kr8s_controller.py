"""Kr8s-based implementation of ApplicationController.

Uses the kr8s library for native async Kubernetes operations. kr8s has no
typed Application class, so requests go through the raw ``call_api``
helper against the argoproj.io group.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, override

import httpx
import kr8s
from loguru import logger

from src.app.core.errors import ApplyRejected, ApplyUnreachable
from src.app.core.models.application import (
    APPLICATION_API_VERSION,
    APPLICATION_PLURAL,
    Application,
)

from .controller import ApplicationController, ApplyResult, resource_version

APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"

# Gateway and availability errors are treated as connectivity failures
UNAVAILABLE_STATUSES = {502, 503, 504}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text


class Kr8sController(ApplicationController):
    """Cluster controller using the kr8s library.

    The kr8s API client is created lazily on first use and then shared by
    all requests running on the same event loop.
    """

    def __init__(
        self,
        field_manager: str,
        *,
        kubeconfig: str | None = None,
        context: str | None = None,
        temp_kubeconfig: Path | None = None,
    ) -> None:
        super().__init__(field_manager, temp_kubeconfig=temp_kubeconfig)
        self._kubeconfig = kubeconfig
        self._context = context
        self._api: Any = None

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        if self._api is None:
            try:
                self._api = await kr8s.asyncio.api(
                    kubeconfig=self._kubeconfig, context=self._context
                )
            except Exception as e:
                raise ApplyUnreachable(
                    f"Cluster API client could not be configured: {e}"
                ) from e
        return self._api

    async def _request(
        self,
        method: str,
        namespace: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        api = await self._get_api()
        try:
            async with api.call_api(
                method,
                version=APPLICATION_API_VERSION,
                namespace=namespace,
                url=url,
                raise_for_status=False,
                **kwargs,
            ) as response:
                await response.aread()
                return response
        except (httpx.TransportError, OSError) as e:
            raise ApplyUnreachable(f"Cluster API could not be reached: {e}") from e
        except kr8s.APITimeoutError as e:
            raise ApplyUnreachable(f"Cluster API timed out: {e}") from e
        except kr8s.ServerError as e:
            status_code = e.response.status_code if e.response is not None else None
            if status_code in UNAVAILABLE_STATUSES:
                raise ApplyUnreachable(f"Cluster API unavailable ({status_code}): {e}") from e
            raise ApplyRejected(f"Cluster API error: {e}") from e

    # =========================================================================
    # Application Operations
    # =========================================================================

    @override
    async def get_application(self, name: str, namespace: str) -> dict[str, Any] | None:
        response = await self._request("GET", namespace, f"{APPLICATION_PLURAL}/{name}")
        if response.status_code == 404:
            return None
        if response.status_code in UNAVAILABLE_STATUSES:
            raise ApplyUnreachable(
                f"Cluster API unavailable ({response.status_code}): {_error_message(response)}"
            )
        if not response.is_success:
            raise ApplyRejected(
                f"Cluster API refused to read application {name} "
                f"({response.status_code}): {_error_message(response)}"
            )
        return response.json()

    @override
    async def apply_application(self, application: Application) -> ApplyResult:
        name = application.name
        namespace = application.namespace

        before = await self.get_application(name, namespace)

        response = await self._request(
            "PATCH",
            namespace,
            f"{APPLICATION_PLURAL}/{name}",
            params={"fieldManager": self.field_manager, "force": "true"},
            content=json.dumps(application.to_manifest()),
            headers={"Content-Type": APPLY_PATCH_CONTENT_TYPE},
        )

        if response.status_code in UNAVAILABLE_STATUSES:
            raise ApplyUnreachable(
                f"Cluster API unavailable ({response.status_code}): {_error_message(response)}"
            )
        if not response.is_success:
            raise ApplyRejected(
                f"Cluster API rejected application {name} "
                f"({response.status_code}): {_error_message(response)}"
            )

        stored = response.json()
        version = resource_version(stored)
        changed = version != resource_version(before)
        logger.debug(
            f"Applied application {namespace}/{name} as {self.field_manager} "
            f"(resourceVersion={version}, changed={changed})"
        )
        return ApplyResult(
            name=name,
            namespace=namespace,
            resource_version=version,
            changed=changed,
        )

    @override
    async def check_connection(self) -> bool:
        try:
            api = await self._get_api()
            await api.version()
            return True
        except Exception as e:
            logger.warning(f"Cluster API health check failed: {e}")
            return False
