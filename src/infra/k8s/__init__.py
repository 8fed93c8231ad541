"""Cluster access for Argo CD Applications.

Two interchangeable backends implement :class:`ApplicationController`:
``Kr8sController`` talks to the API server through kr8s, while
``KubectlController`` shells out to kubectl. ``get_k8s_controller`` picks one
from ``cluster.backend``.
"""

from .controller import ApplicationController, ApplyResult, CommandResult
from .helpers import get_k8s_controller

__all__ = [
    "ApplicationController",
    "ApplyResult",
    "CommandResult",
    "get_k8s_controller",
]
