"""GitHub ``registry_package`` webhook schema and its canonical event.

Only the fields the pipeline needs (or that are useful in logs) are modelled;
everything else in the delivery is ignored. The envelope is a closed tagged
variant on ``action``: ``published`` is normalized into a
:class:`PublishEvent`, any other tag into :class:`UnsupportedEvent`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from src.app.core.errors import PayloadMalformed, PayloadUnsupported

PUBLISHED_ACTION = "published"


# =============================================================================
# Webhook schema
# =============================================================================


class _WebhookModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Account(_WebhookModel):
    login: str | None = None
    id: int | None = None
    type: str | None = None


class Repository(_WebhookModel):
    name: str | None = None
    full_name: str | None = None
    owner: Account | None = None
    default_branch: str | None = None
    html_url: str | None = None


class ContainerTag(_WebhookModel):
    name: str | None = None
    digest: str | None = None


class ContainerMetadata(_WebhookModel):
    tag: ContainerTag | None = None


class PackageVersion(_WebhookModel):
    id: int | None = None
    version: str | None = None
    name: str | None = None
    package_url: str | None = None
    html_url: str | None = None
    container_metadata: ContainerMetadata | None = None


class RegistryPackage(_WebhookModel):
    id: int | None = None
    name: str | None = None
    namespace: str | None = None
    ecosystem: str | None = None
    package_type: str | None = None
    html_url: str | None = None
    owner: Account | None = None
    package_version: PackageVersion | None = None


class Installation(_WebhookModel):
    id: int | None = None
    node_id: str | None = None


class RegistryPackagePublished(_WebhookModel):
    """Body of a ``registry_package`` delivery with ``action: published``."""

    action: str
    registry_package: RegistryPackage | None = None
    repository: Repository | None = None
    sender: Account | None = None
    installation: Installation | None = None


# =============================================================================
# Canonical events
# =============================================================================


class PublishEvent(BaseModel):
    """A container image was published for a repository."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    image_reference: str
    owner_login: str
    repo_name: str
    package_version: str | None = None


@dataclass(frozen=True)
class UnsupportedEvent:
    """Any envelope whose action tag is not handled."""

    tag: str


def _decode_envelope(body: bytes) -> dict[str, Any]:
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PayloadMalformed(f"Unable to parse webhook request body: {e}") from e

    if not isinstance(payload, dict):
        raise PayloadMalformed(
            "Unable to parse webhook request body: expected a JSON object"
        )
    if not isinstance(payload.get("action"), str):
        raise PayloadMalformed(
            "Unable to parse webhook request body: missing 'action' tag"
        )
    return payload


def _to_publish_event(published: RegistryPackagePublished) -> PublishEvent:
    repository = published.repository
    package = published.registry_package

    owner_login = repository.owner.login if repository and repository.owner else None
    repo_name = repository.name if repository else None
    version = package.package_version if package else None
    image_reference = version.package_url if version else None

    missing = [
        field
        for field, value in (
            ("repository.owner.login", owner_login),
            ("repository.name", repo_name),
            ("registry_package.package_version.package_url", image_reference),
        )
        if not value
    ]
    if missing:
        raise PayloadMalformed(
            f"Unable to parse webhook request body: missing {', '.join(missing)}"
        )

    return PublishEvent(
        package_name=(package.name if package and package.name else repo_name),
        image_reference=image_reference,
        owner_login=owner_login,
        repo_name=repo_name,
        package_version=version.version if version else None,
    )


def normalize_event(body: bytes) -> PublishEvent | UnsupportedEvent:
    """Decode an authenticated webhook body into its canonical event.

    Raises:
        PayloadMalformed: body is not a tagged JSON object, or a published
            event lacks a field required by later stages
    """
    payload = _decode_envelope(body)

    action = payload["action"]
    if action != PUBLISHED_ACTION:
        return UnsupportedEvent(tag=action)

    try:
        published = RegistryPackagePublished.model_validate(payload)
    except ValidationError as e:
        raise PayloadMalformed(f"Unable to parse webhook request body: {e}") from e

    return _to_publish_event(published)


def require_publish_event(body: bytes) -> PublishEvent:
    """Like :func:`normalize_event` but rejects unsupported actions."""
    event = normalize_event(body)
    if isinstance(event, UnsupportedEvent):
        raise PayloadUnsupported(
            f"The supplied webhook payload type is not accepted: action '{event.tag}'"
        )
    return event
