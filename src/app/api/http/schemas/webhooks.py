"""Pydantic schemas for the webhook intake endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field


class WebhookResponse(BaseModel):
    """Response returned when a delivery was handled.

    Example:
        ```json
        {"status": "applied", "application": "widget", "changed": true}
        ```
    """

    status: str = Field(description="'applied' for publish events, 'pong' for ping")
    application: str | None = Field(
        default=None, description="Name of the applied Argo CD Application"
    )
    changed: bool | None = Field(
        default=None,
        description="False when the apply left the stored Application untouched",
    )


class WebhookErrorResponse(BaseModel):
    """Body of every rejected delivery."""

    message: str = Field(description="Human readable reason for the rejection")
