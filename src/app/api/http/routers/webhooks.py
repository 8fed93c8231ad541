"""GitHub webhook intake endpoint.

Endpoint Summary:
    POST <app.webhook_path>  - Receive a signed GitHub delivery (default /github-hooks)

Headers:
    X-GitHub-Event       - Event type; "ping" is acknowledged without syncing
    X-Hub-Signature-256  - sha256=<hex> HMAC of the raw body
    X-GitHub-Delivery    - Delivery id, used only for log correlation
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request

from src.app.api.http.deps import get_sync_pipeline
from src.app.api.http.schemas.webhooks import WebhookErrorResponse, WebhookResponse
from src.app.core.services import SyncPipeline

router = APIRouter(tags=["webhooks"])


@router.post(
    "",
    response_model=WebhookResponse,
    response_model_exclude_none=True,
    responses={
        400: {
            "description": "Delivery rejected (authentication, payload, resolution or apply failure)",
            "model": WebhookErrorResponse,
        },
    },
    summary="Receive a GitHub webhook delivery",
    description="Authenticate a registry_package delivery and sync its Argo CD Application.",
)
async def github_hooks(
    request: Request,
    x_github_event: str | None = Header(default=None),
    x_hub_signature_256: str | None = Header(default=None),
    x_github_delivery: str | None = Header(default=None),
    pipeline: SyncPipeline = Depends(get_sync_pipeline),
) -> WebhookResponse:
    """Run a delivery through the sync pipeline.

    The raw body is read before any parsing so the signature covers exactly
    the bytes GitHub signed.
    """
    body = await request.body()

    outcome = await pipeline.handle_delivery(
        body,
        signature=x_hub_signature_256,
        event_type=x_github_event,
        delivery_id=x_github_delivery,
    )

    if outcome.ping:
        return WebhookResponse(status="pong")

    return WebhookResponse(
        status=outcome.state.value,
        application=outcome.application.name if outcome.application else None,
        changed=outcome.result.changed if outcome.result else None,
    )
