"""Unit tests for the kr8s-backed Application controller."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import kr8s
import pytest
from fastapi.testclient import TestClient

from src.app.api.http.app import create_app
from src.app.api.http.deps import build_dependencies
from src.app.core.errors import ApplyRejected, ApplyUnreachable
from src.app.core.models.project import ChartReference, ProjectDescriptor
from src.app.core.services.descriptor_builder import build_application
from src.app.runtime.config.config_data import ChartsConfig, ClusterConfig
from src.infra.k8s.kr8s_controller import APPLY_PATCH_CONTENT_TYPE, Kr8sController
from tests.fixtures import (
    CHART_REPOSITORY,
    GITHUB_API,
    contents_response,
    encode,
    helm_index,
    publish_payload,
    signed_headers,
)


def make_application(image: str = "ghcr.io/acme/widget:1"):
    return build_application(
        ProjectDescriptor(app_name="widget", template_name="standard"),
        ChartReference(name="standard", version="1.0.0"),
        {"image": image},
        ChartsConfig(),
        ClusterConfig(),
    )


class FakeApi:
    """Stands in for kr8s.asyncio.Api with a tiny SSA-aware object store."""

    def __init__(self) -> None:
        self.stored: dict[str, Any] | None = None
        self.revision = 0
        self.calls: list[dict[str, Any]] = []
        self.next_status: int | None = None
        self.raise_on_call: Exception | None = None
        self.version = AsyncMock(return_value={"gitVersion": "v1.30.0"})

    @asynccontextmanager
    async def call_api(self, method: str, **kwargs: Any):
        self.calls.append({"method": method, **kwargs})
        if self.raise_on_call is not None:
            raise self.raise_on_call
        yield self._respond(method, kwargs)

    def _respond(self, method: str, kwargs: dict[str, Any]) -> httpx.Response:
        if self.next_status is not None:
            return httpx.Response(self.next_status, json={"message": "injected failure"})

        if method == "GET":
            if self.stored is None:
                return httpx.Response(404, json={"reason": "NotFound"})
            return httpx.Response(200, json=self.stored)

        manifest = json.loads(kwargs["content"])
        if self.stored is None or self.stored["spec"] != manifest["spec"]:
            self.revision += 1
            manifest["metadata"]["resourceVersion"] = str(self.revision)
            self.stored = manifest
        return httpx.Response(200, json=self.stored)


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def controller(api: FakeApi) -> Kr8sController:
    controller = Kr8sController("kubectl-light")
    controller._api = api
    return controller


class TestGetApplication:
    async def test_missing_application_is_none(self, controller, api) -> None:
        assert await controller.get_application("widget", "argocd") is None

        call = api.calls[0]
        assert call["method"] == "GET"
        assert call["version"] == "argoproj.io/v1alpha1"
        assert call["namespace"] == "argocd"
        assert call["url"] == "applications/widget"
        assert call["raise_for_status"] is False

    async def test_forbidden_is_rejected(self, controller, api) -> None:
        api.next_status = 403
        with pytest.raises(ApplyRejected, match="injected failure"):
            await controller.get_application("widget", "argocd")

    @pytest.mark.parametrize("status_code", [502, 503, 504])
    async def test_gateway_errors_are_unreachable(self, controller, api, status_code) -> None:
        api.next_status = status_code
        with pytest.raises(ApplyUnreachable):
            await controller.get_application("widget", "argocd")


class TestApplyApplication:
    async def test_server_side_apply_request(self, controller, api) -> None:
        application = make_application()

        result = await controller.apply_application(application)

        patch_call = api.calls[-1]
        assert patch_call["method"] == "PATCH"
        assert patch_call["params"] == {"fieldManager": "kubectl-light", "force": "true"}
        assert patch_call["headers"] == {"Content-Type": APPLY_PATCH_CONTENT_TYPE}
        assert json.loads(patch_call["content"]) == application.to_manifest()

        assert result.name == "widget"
        assert result.namespace == "argocd"
        assert result.resource_version == "1"
        assert result.changed is True

    async def test_identical_apply_is_unchanged(self, controller, api) -> None:
        first = await controller.apply_application(make_application())
        second = await controller.apply_application(make_application())

        assert second.changed is False
        assert second.resource_version == first.resource_version

    async def test_new_image_is_changed(self, controller, api) -> None:
        await controller.apply_application(make_application("ghcr.io/acme/widget:1"))
        result = await controller.apply_application(make_application("ghcr.io/acme/widget:2"))

        assert result.changed is True
        assert result.resource_version == "2"

    async def test_invalid_object_is_rejected(self, controller, api) -> None:
        api.next_status = 422
        with pytest.raises(ApplyRejected):
            await controller.apply_application(make_application())

    async def test_transport_failure_is_unreachable(self, controller, api) -> None:
        api.raise_on_call = httpx.ConnectError("connection refused")
        with pytest.raises(ApplyUnreachable, match="connection refused"):
            await controller.apply_application(make_application())

    async def test_timeout_is_unreachable(self, controller, api) -> None:
        api.raise_on_call = kr8s.APITimeoutError("Timeout while waiting for the Kubernetes API server")
        with pytest.raises(ApplyUnreachable, match="timed out"):
            await controller.get_application("widget", "argocd")

    async def test_server_error_is_rejected(self, controller, api) -> None:
        api.raise_on_call = kr8s.ServerError(
            "forbidden", response=httpx.Response(403, json={"message": "forbidden"})
        )
        with pytest.raises(ApplyRejected, match="forbidden"):
            await controller.apply_application(make_application())

    async def test_unavailable_server_error_is_unreachable(self, controller, api) -> None:
        api.raise_on_call = kr8s.ServerError("unavailable", response=httpx.Response(503))
        with pytest.raises(ApplyUnreachable, match="503"):
            await controller.apply_application(make_application())


class TestConnection:
    async def test_check_connection(self, controller, api) -> None:
        assert await controller.check_connection() is True
        api.version.assert_awaited_once()

    async def test_check_connection_failure(self, controller, api) -> None:
        api.version.side_effect = httpx.ConnectError("refused")
        assert await controller.check_connection() is False

    async def test_client_configuration_failure_is_unreachable(self) -> None:
        controller = Kr8sController("kubectl-light", kubeconfig="/missing/kubeconfig")

        with patch(
            "src.infra.k8s.kr8s_controller.kr8s.asyncio.api",
            AsyncMock(side_effect=ValueError("no kubeconfig")),
        ):
            with pytest.raises(ApplyUnreachable, match="no kubeconfig"):
                await controller.get_application("widget", "argocd")


PROJECT_FILE = "synkronized:\n  name: widget\n  template: standard\n"


def test_cluster_timeout_during_delivery_is_a_400(sync_config, mock_http, api, controller):
    mock_http.add(
        f"{GITHUB_API}/repos/acme/widget/contents/synkronized.yaml",
        contents_response(PROJECT_FILE),
    )
    mock_http.add(
        f"{CHART_REPOSITORY}/index.yaml",
        helm_index({"standard": [{"name": "standard", "version": "4.2.0"}]}),
    )
    api.raise_on_call = kr8s.APITimeoutError("Timeout while waiting for the Kubernetes API server")
    deps = build_dependencies(
        sync_config,
        controller=controller,
        github_client=mock_http.client(),
        charts_client=mock_http.client(),
    )
    body = encode(publish_payload())

    with TestClient(create_app(sync_config, dependencies=deps)) as client:
        response = client.post("/github-hooks", content=body, headers=signed_headers(body))

    assert response.status_code == 400
    assert response.json()["message"].startswith("Cluster API timed out")
