from __future__ import annotations

import base64
import binascii
import os
import tempfile
from pathlib import Path

from loguru import logger

from src.app.runtime.config.config_data import ClusterConfig
from src.infra.k8s.controller import ApplicationController


def materialize_kubeconfig(encoded: str) -> Path | None:
    """Write a base64 encoded kubeconfig to a private temporary file.

    Returns:
        Path to the file, or None when ``encoded`` is empty

    Raises:
        ValueError: if the value is not valid base64 text
    """
    if not encoded:
        return None

    try:
        content = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"cluster.kubeconfig is not valid base64: {e}") from e

    fd, path = tempfile.mkstemp(prefix="synkronized-kubeconfig-", suffix=".yaml")
    with os.fdopen(fd, "w") as f:
        f.write(content)
    os.chmod(path, 0o600)
    logger.debug(f"Wrote kubeconfig to {path}")
    return Path(path)


def get_k8s_controller(config: ClusterConfig) -> ApplicationController:
    """Build the ApplicationController for the configured backend."""
    kubeconfig_path = materialize_kubeconfig(config.kubeconfig)
    kubeconfig = str(kubeconfig_path) if kubeconfig_path else None

    if config.backend == "kubectl":
        from src.infra.k8s.kubectl_controller import KubectlController

        return KubectlController(
            config.field_manager,
            kubeconfig=kubeconfig,
            context=config.context,
            temp_kubeconfig=kubeconfig_path,
        )

    from src.infra.k8s.kr8s_controller import Kr8sController

    return Kr8sController(
        config.field_manager,
        kubeconfig=kubeconfig,
        context=config.context,
        temp_kubeconfig=kubeconfig_path,
    )
