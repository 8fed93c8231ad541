"""Unit tests for the GitHub webhook intake endpoint."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
import yaml
from fastapi.testclient import TestClient

from src.app.api.http.app import create_app
from src.app.api.http.deps import build_dependencies
from src.app.core.services.signature import compute_signature
from src.app.runtime.config.config_data import ConfigData
from tests.fixtures import (
    CHART_REPOSITORY,
    GITHUB_API,
    FakeApplicationController,
    MockHttp,
    contents_response,
    encode,
    helm_index,
    publish_payload,
    signed_headers,
)

HOOK_PATH = "/github-hooks"
CONTENTS_URL = f"{GITHUB_API}/repos/acme/widget/contents/synkronized.yaml"
INDEX_URL = f"{CHART_REPOSITORY}/index.yaml"

PROJECT_FILE = """\
synkronized:
  name: widget
  template: standard
config:
  replicas: 2
"""


@pytest.fixture
def client(
    sync_config: ConfigData,
    mock_http: MockHttp,
    fake_controller: FakeApplicationController,
) -> Iterator[TestClient]:
    mock_http.add(CONTENTS_URL, contents_response(PROJECT_FILE))
    mock_http.add(
        INDEX_URL, helm_index({"standard": [{"name": "standard", "version": "1.2.3"}]})
    )
    deps = build_dependencies(
        sync_config,
        controller=fake_controller,
        github_client=mock_http.client(),
        charts_client=mock_http.client(),
    )
    with TestClient(create_app(sync_config, dependencies=deps)) as test_client:
        yield test_client


class TestPing:
    def test_signed_ping_is_acknowledged(
        self, client: TestClient, mock_http: MockHttp, fake_controller
    ) -> None:
        body = b"{ this body is never parsed"

        response = client.post(HOOK_PATH, content=body, headers=signed_headers(body, "ping"))

        assert response.status_code == 200
        assert response.json() == {"status": "pong"}
        assert mock_http.requests == []
        assert fake_controller.apply_calls == []

    def test_ping_with_bad_signature_is_rejected(self, client: TestClient) -> None:
        body = b'{"zen": "Keep it logically awesome."}'
        headers = signed_headers(body, "ping")
        headers["X-Hub-Signature-256"] = compute_signature(body, "not-the-secret")

        response = client.post(HOOK_PATH, content=body, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"message": "Bad signature."}


class TestAuthentication:
    def test_missing_signature(self, client: TestClient, fake_controller) -> None:
        body = encode(publish_payload())
        headers = signed_headers(body)
        del headers["X-Hub-Signature-256"]

        response = client.post(HOOK_PATH, content=body, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"message": "Signature is missing."}
        assert fake_controller.apply_calls == []

    def test_malformed_signature(self, client: TestClient) -> None:
        body = encode(publish_payload())
        headers = signed_headers(body)
        headers["X-Hub-Signature-256"] = "sha256=zz"

        response = client.post(HOOK_PATH, content=body, headers=headers)

        assert response.status_code == 400

    def test_body_changed_after_signing(self, client: TestClient, mock_http) -> None:
        body = encode(publish_payload())
        headers = signed_headers(body)

        response = client.post(
            HOOK_PATH, content=body.replace(b"1.4.0", b"6.6.6"), headers=headers
        )

        assert response.status_code == 400
        assert mock_http.requests == []


class TestPayload:
    def test_missing_event_header(self, client: TestClient) -> None:
        body = encode(publish_payload())
        headers = signed_headers(body)
        del headers["X-GitHub-Event"]

        response = client.post(HOOK_PATH, content=body, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"message": "Expected X-GitHub-Event"}

    def test_unsupported_action(self, client: TestClient, fake_controller) -> None:
        body = encode(publish_payload(action="updated"))

        response = client.post(HOOK_PATH, content=body, headers=signed_headers(body))

        assert response.status_code == 400
        assert "not accepted" in response.json()["message"]
        assert fake_controller.apply_calls == []

    def test_malformed_json(self, client: TestClient) -> None:
        body = b"{not json"

        response = client.post(HOOK_PATH, content=body, headers=signed_headers(body))

        assert response.status_code == 400
        assert response.json()["message"].startswith("Unable to parse webhook request body")


class TestPublish:
    def test_publish_applies_application(
        self, client: TestClient, fake_controller: FakeApplicationController
    ) -> None:
        body = encode(publish_payload())

        response = client.post(HOOK_PATH, content=body, headers=signed_headers(body))

        assert response.status_code == 200
        assert response.json() == {
            "status": "applied",
            "application": "widget",
            "changed": True,
        }

        stored = fake_controller.objects[("argocd", "widget")]
        assert stored["spec"]["source"]["targetRevision"] == "1.2.3"
        values = yaml.safe_load(stored["spec"]["source"]["helm"]["values"])
        assert values["image"] == "ghcr.io/acme/widget:1.4.0"
        assert values["replicas"] == 2

    def test_redelivery_reports_unchanged(self, client: TestClient) -> None:
        body = encode(publish_payload())

        client.post(HOOK_PATH, content=body, headers=signed_headers(body))
        response = client.post(HOOK_PATH, content=body, headers=signed_headers(body))

        assert response.status_code == 200
        assert response.json()["changed"] is False

    def test_missing_project_file(self, client: TestClient, mock_http: MockHttp) -> None:
        mock_http.add(CONTENTS_URL, httpx.Response(404, json={"message": "Not Found"}))
        body = encode(publish_payload())

        response = client.post(HOOK_PATH, content=body, headers=signed_headers(body))

        assert response.status_code == 400
        assert "synkronized.yaml not found" in response.json()["message"]

    def test_chart_index_down(
        self, client: TestClient, mock_http: MockHttp, fake_controller
    ) -> None:
        mock_http.add(INDEX_URL, httpx.Response(503, text="unavailable"))
        body = encode(publish_payload())

        response = client.post(HOOK_PATH, content=body, headers=signed_headers(body))

        assert response.status_code == 400
        assert fake_controller.apply_calls == []
