"""Error taxonomy for the synchronization pipeline.

Every stage raises a subclass of :class:`SyncError`. The HTTP layer maps all
of them to a uniform 400 response carrying only the message text, so the
classes exist to keep the categories apart in logs and tests:

- AuthenticationError: missing, malformed or mismatched webhook signature
- PayloadError: unsupported event action or malformed JSON body
- ResolutionError: project config and chart lookups. "Not found" failures
  (likely caller misconfiguration) derive from ``NotFoundError``;
  "unreachable" failures (likely transient infrastructure) derive from
  ``UnreachableError``
- ApplyError: cluster API rejected the descriptor or could not be reached
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Top-level error categories."""

    AUTHENTICATION = "authentication"
    PAYLOAD = "payload"
    RESOLUTION = "resolution"
    APPLY = "apply"


class SyncError(Exception):
    """Base class for all pipeline errors."""

    category: ErrorCategory
    default_message = "Synchronization failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(SyncError):
    """Marker base for resources that do not exist."""


class UnreachableError(SyncError):
    """Marker base for dependencies that could not be contacted."""


# =============================================================================
# Authentication
# =============================================================================


class AuthenticationError(SyncError):
    category = ErrorCategory.AUTHENTICATION


class SignatureMissing(AuthenticationError):
    default_message = "Signature is missing."


class SignatureMalformed(AuthenticationError):
    default_message = "Malformed signature."


class SignatureMismatch(AuthenticationError):
    default_message = "Bad signature."


# =============================================================================
# Payload
# =============================================================================


class PayloadError(SyncError):
    category = ErrorCategory.PAYLOAD


class PayloadMalformed(PayloadError):
    default_message = "Unable to parse webhook request body."


class PayloadUnsupported(PayloadError):
    default_message = "The supplied webhook payload type is not accepted."


# =============================================================================
# Resolution
# =============================================================================


class ResolutionError(SyncError):
    category = ErrorCategory.RESOLUTION


class SourceFileMissing(ResolutionError, NotFoundError):
    default_message = "Project configuration file not found."


class SourceFileMalformed(ResolutionError):
    default_message = "Project configuration file is not valid."


class TransportDecodeError(ResolutionError):
    default_message = "Unable to decode project configuration content."


class SourceUnreachable(ResolutionError, UnreachableError):
    default_message = "Source repository could not be reached."


class TemplateNotFound(ResolutionError, NotFoundError):
    default_message = "No viable charts were found."


class IndexUnreachable(ResolutionError, UnreachableError):
    default_message = "Chart index could not be reached."


class IndexMalformed(ResolutionError):
    default_message = "Chart index is not valid."


class ValuesSerializationError(ResolutionError):
    default_message = "Merged values could not be serialized."


# =============================================================================
# Apply
# =============================================================================


class ApplyError(SyncError):
    category = ErrorCategory.APPLY


class ApplyRejected(ApplyError):
    default_message = "Cluster API rejected the application."


class ApplyUnreachable(ApplyError, UnreachableError):
    default_message = "Cluster API could not be reached."
