"""Abstract cluster controller interface.

Defines the contract for applying Argo CD Applications, implemented by
different backends (kr8s library, kubectl subprocess).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.app.core.models.application import Application

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of a server-side apply.

    ``changed`` is False when the stored object's resourceVersion did not
    move, i.e. the apply was a no-op.
    """

    name: str
    namespace: str
    resource_version: str | None
    changed: bool


def resource_version(obj: dict[str, Any] | None) -> str | None:
    if not obj:
        return None
    return obj.get("metadata", {}).get("resourceVersion")


# =============================================================================
# Abstract Controller
# =============================================================================


class ApplicationController(ABC):
    """Abstract base class for cluster operations on Argo CD Applications.

    Applies use server-side apply with a fixed field manager and forced
    conflict resolution: the caller takes ownership of every field it sets,
    so applying the same Application twice is a no-op and concurrent
    appliers end in "last apply wins".
    """

    def __init__(
        self, field_manager: str, *, temp_kubeconfig: Path | None = None
    ) -> None:
        self.field_manager = field_manager
        self._temp_kubeconfig = temp_kubeconfig

    async def aclose(self) -> None:
        """Delete the decoded kubeconfig this controller was handed, if any."""
        if self._temp_kubeconfig is not None:
            self._temp_kubeconfig.unlink(missing_ok=True)
            self._temp_kubeconfig = None

    @abstractmethod
    async def get_application(self, name: str, namespace: str) -> dict[str, Any] | None:
        """Fetch a stored Application.

        Returns:
            The stored object, or None if it does not exist

        Raises:
            ApplyUnreachable: the cluster API could not be reached
        """
        ...

    @abstractmethod
    async def apply_application(self, application: Application) -> ApplyResult:
        """Server-side apply an Application.

        Raises:
            ApplyRejected: the API refused the object (validation, RBAC)
            ApplyUnreachable: the cluster API could not be reached
        """
        ...

    @abstractmethod
    async def check_connection(self) -> bool:
        """Return True if the cluster API answers."""
        ...
