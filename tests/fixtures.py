"""Shared fixtures and fakes for the test suite."""

from __future__ import annotations

import base64
import copy
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import yaml

from src.app.core.models.application import Application
from src.app.core.services.signature import compute_signature
from src.app.runtime.config.config_data import (
    AppConfig,
    ChartsConfig,
    ClusterConfig,
    ConfigData,
    GitHubConfig,
)
from src.infra.k8s.controller import ApplicationController, ApplyResult

WEBHOOK_SECRET = "test-webhook-secret"
GITHUB_API = "https://api.github.test"
CHART_REPOSITORY = "https://charts.example.test"

__all__ = [
    "WEBHOOK_SECRET",
    "GITHUB_API",
    "CHART_REPOSITORY",
    "FakeApplicationController",
    "MockHttp",
    "contents_response",
    "helm_index",
    "publish_payload",
    "signed_headers",
    "encode",
    "sync_config",
    "fake_controller",
    "mock_http",
]


class FakeApplicationController(ApplicationController):
    """In-memory cluster with server-side apply semantics.

    Stores one object per (namespace, name). An apply whose spec matches the
    stored spec leaves the object and its resourceVersion untouched.
    """

    def __init__(self, field_manager: str = "kubectl-light") -> None:
        super().__init__(field_manager)
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}
        self.apply_calls: list[Application] = []
        self.reachable = True
        self._revision = 0

    async def get_application(self, name: str, namespace: str) -> dict[str, Any] | None:
        return copy.deepcopy(self.objects.get((namespace, name)))

    async def apply_application(self, application: Application) -> ApplyResult:
        self.apply_calls.append(application)
        manifest = application.to_manifest()
        key = (application.namespace, application.name)

        current = self.objects.get(key)
        if current is not None and current["spec"] == manifest["spec"]:
            return ApplyResult(
                name=application.name,
                namespace=application.namespace,
                resource_version=current["metadata"]["resourceVersion"],
                changed=False,
            )

        self._revision += 1
        stored = copy.deepcopy(manifest)
        stored["metadata"]["resourceVersion"] = str(self._revision)
        stored["metadata"]["managedFields"] = [{"manager": self.field_manager}]
        self.objects[key] = stored
        return ApplyResult(
            name=application.name,
            namespace=application.namespace,
            resource_version=str(self._revision),
            changed=True,
        )

    async def check_connection(self) -> bool:
        return self.reachable


class MockHttp:
    """Routes requests by URL to canned handlers and records them."""

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, response: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> None:
        if isinstance(response, httpx.Response):
            status_code, headers, content = response.status_code, response.headers, response.content
            self.routes[url] = lambda _request: httpx.Response(
                status_code, headers=headers, content=content
            )
        else:
            self.routes[url] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url.copy_with(query=None))
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return route(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def calls_to(self, url: str) -> int:
        return sum(1 for r in self.requests if str(r.url.copy_with(query=None)) == url)


def contents_response(text: str) -> httpx.Response:
    """GitHub contents API response with base64 content wrapped at 60 chars."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60)) + "\n"
    return httpx.Response(
        200,
        json={
            "type": "file",
            "encoding": "base64",
            "name": "synkronized.yaml",
            "path": "synkronized.yaml",
            "content": wrapped,
        },
    )


def helm_index(entries: dict[str, list[dict[str, Any]]]) -> httpx.Response:
    body = yaml.safe_dump(
        {"apiVersion": "v1", "entries": entries, "generated": "2024-01-01T00:00:00Z"}
    )
    return httpx.Response(200, text=body)


def publish_payload(
    *,
    owner: str = "acme",
    repo: str = "widget",
    package: str | None = "widget",
    package_url: str | None = "ghcr.io/acme/widget:1.4.0",
    action: str = "published",
) -> dict[str, Any]:
    registry_package: dict[str, Any] = {
        "id": 101,
        "ecosystem": "CONTAINER",
        "package_type": "CONTAINER",
        "owner": {"login": owner, "id": 7, "type": "Organization"},
        "package_version": {
            "id": 202,
            "version": "sha256:abc123",
            "package_url": package_url,
            "container_metadata": {"tag": {"name": "1.4.0", "digest": "sha256:abc123"}},
            "metadata": [],
            "package_files": [],
        },
        "registry": {"url": "https://ghcr.io/acme", "vendor": "GitHub Inc"},
    }
    if package is not None:
        registry_package["name"] = package

    return {
        "action": action,
        "registry_package": registry_package,
        "repository": {
            "id": 303,
            "name": repo,
            "full_name": f"{owner}/{repo}",
            "owner": {"login": owner, "id": 7},
            "default_branch": "main",
        },
        "sender": {"login": "octocat", "id": 1, "site_admin": False},
    }


def signed_headers(body: bytes, event: str = "registry_package", secret: str = WEBHOOK_SECRET) -> dict[str, str]:
    return {
        "X-GitHub-Event": event,
        "X-Hub-Signature-256": compute_signature(body, secret),
        "X-GitHub-Delivery": "delivery-1",
        "Content-Type": "application/json",
    }


def encode(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


@pytest.fixture
def sync_config() -> ConfigData:
    return ConfigData(
        app=AppConfig(environment="test"),
        github=GitHubConfig(
            api_url=GITHUB_API, token="test-token", webhook_secret=WEBHOOK_SECRET
        ),
        charts=ChartsConfig(repository=CHART_REPOSITORY),
        cluster=ClusterConfig(),
    )


@pytest.fixture
def fake_controller() -> FakeApplicationController:
    return FakeApplicationController()


@pytest.fixture
def mock_http() -> MockHttp:
    return MockHttp()
