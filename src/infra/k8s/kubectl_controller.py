"""ApplicationController that shells out to the kubectl binary.

Useful where the kr8s client cannot authenticate (exec plugins, unusual
auth providers) but a configured kubectl on PATH can.
"""

from __future__ import annotations

import asyncio
import json
import subprocess
from pathlib import Path
from typing import Any, override

from loguru import logger

from src.app.core.errors import ApplyRejected, ApplyUnreachable
from src.app.core.models.application import APPLICATION_GROUP, Application

from .controller import ApplicationController, ApplyResult, CommandResult, resource_version

APPLICATION_RESOURCE = f"applications.{APPLICATION_GROUP}"

# stderr fragments kubectl prints when the API server cannot be contacted
CONNECTIVITY_MARKERS = (
    "unable to connect to the server",
    "connection refused",
    "i/o timeout",
    "no such host",
    "tls handshake timeout",
    "the server is currently unable to handle the request",
)


def _is_connectivity_error(stderr: str) -> bool:
    lowered = stderr.lower()
    return any(marker in lowered for marker in CONNECTIVITY_MARKERS)


class KubectlController(ApplicationController):
    """Each call spawns kubectl in a worker thread so the event loop keeps serving."""

    def __init__(
        self,
        field_manager: str,
        *,
        kubeconfig: str | None = None,
        context: str | None = None,
        temp_kubeconfig: Path | None = None,
    ) -> None:
        super().__init__(field_manager, temp_kubeconfig=temp_kubeconfig)
        self._kubeconfig = kubeconfig
        self._context = context

    def _global_args(self) -> list[str]:
        args: list[str] = []
        if self._kubeconfig:
            args.extend(["--kubeconfig", self._kubeconfig])
        if self._context:
            args.extend(["--context", self._context])
        return args

    async def _run_kubectl(
        self,
        args: list[str],
        *,
        input_data: str | None = None,
    ) -> CommandResult:
        """Run ``kubectl <global args> <args>``, feeding ``input_data`` on stdin.

        Raises:
            ApplyUnreachable: If kubectl itself is missing
        """
        cmd = ["kubectl", *self._global_args(), *args]

        def _run() -> CommandResult:
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    input=input_data,
                )
            except FileNotFoundError as e:
                raise ApplyUnreachable(f"kubectl is not installed: {e}") from e
            return CommandResult(
                success=result.returncode == 0,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
                returncode=result.returncode,
            )

        return await asyncio.to_thread(_run)

    def _decode(self, stdout: str, action: str) -> dict[str, Any]:
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise ApplyRejected(f"kubectl returned unreadable output for {action}: {e}") from e

    def _raise_for_result(self, result: CommandResult, action: str) -> None:
        stderr = result.stderr.strip()
        if _is_connectivity_error(stderr):
            raise ApplyUnreachable(f"Cluster API could not be reached: {stderr}")
        raise ApplyRejected(f"Cluster API rejected {action}: {stderr}")

    # =========================================================================
    # Application Operations
    # =========================================================================

    @override
    async def get_application(self, name: str, namespace: str) -> dict[str, Any] | None:
        result = await self._run_kubectl(
            [
                "get",
                APPLICATION_RESOURCE,
                name,
                "-n",
                namespace,
                "-o",
                "json",
                "--ignore-not-found",
            ]
        )
        if not result.success:
            self._raise_for_result(result, f"reading application {name}")
        if not result.stdout.strip():
            return None
        return self._decode(result.stdout, f"reading application {name}")

    @override
    async def apply_application(self, application: Application) -> ApplyResult:
        name = application.name
        namespace = application.namespace

        before = await self.get_application(name, namespace)

        result = await self._run_kubectl(
            [
                "apply",
                "--server-side",
                "--force-conflicts",
                f"--field-manager={self.field_manager}",
                "-n",
                namespace,
                "-o",
                "json",
                "-f",
                "-",
            ],
            input_data=json.dumps(application.to_manifest()),
        )
        if not result.success:
            self._raise_for_result(result, f"application {name}")

        version = resource_version(self._decode(result.stdout, f"application {name}"))
        changed = version != resource_version(before)
        logger.debug(
            f"Applied application {namespace}/{name} with kubectl "
            f"(resourceVersion={version}, changed={changed})"
        )
        return ApplyResult(
            name=name,
            namespace=namespace,
            resource_version=version,
            changed=changed,
        )

    @override
    async def check_connection(self) -> bool:
        try:
            result = await self._run_kubectl(["version", "-o", "json"])
        except ApplyUnreachable:
            return False
        return result.success
