"""Exception handlers mapping pipeline errors to HTTP responses.

Every :class:`SyncError` becomes a 400 with ``{"message": ...}``. The
response does not tell a malformed request apart from a failed upstream
dependency; the category is only visible in the logs.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from starlette.responses import JSONResponse

from src.app.api.http.schemas.webhooks import WebhookErrorResponse
from src.app.core.errors import SyncError


async def sync_error_handler(request: Request, exc: Exception) -> JSONResponse:
    message = exc.message if isinstance(exc, SyncError) else str(exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=WebhookErrorResponse(message=message).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SyncError, sync_error_handler)
