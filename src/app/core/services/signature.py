"""Webhook signature verification.

GitHub signs each delivery with HMAC-SHA256 over the raw body using the
webhook secret and sends the digest as ``X-Hub-Signature-256: sha256=<hex>``.
The secret must never be logged.
"""

from __future__ import annotations

import hashlib
import hmac

from src.app.core.errors import SignatureMalformed, SignatureMismatch, SignatureMissing

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def compute_signature(body: bytes, secret: str) -> str:
    """Return the ``sha256=<hex>`` header value for ``body``."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature_header: str | None, secret: str) -> None:
    """Verify that ``body`` was signed with ``secret``.

    Args:
        body: Raw request body bytes.
        signature_header: Value of the X-Hub-Signature-256 header, if any.
        secret: Shared webhook secret.

    Raises:
        SignatureMissing: header absent or empty
        SignatureMalformed: ``sha256=`` prefix missing or digest not valid hex
        SignatureMismatch: digest does not match the body
    """
    if not signature_header:
        raise SignatureMissing()

    if not signature_header.startswith(SIGNATURE_PREFIX):
        raise SignatureMalformed("Signature prefix is missing.")

    try:
        supplied = bytes.fromhex(signature_header.removeprefix(SIGNATURE_PREFIX))
    except ValueError as e:
        raise SignatureMalformed() from e

    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()

    if not hmac.compare_digest(expected, supplied):
        raise SignatureMismatch()
