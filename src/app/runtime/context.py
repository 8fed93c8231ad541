"""Process-wide runtime context.

Holds the validated configuration. It is loaded once on first access and
can be overridden for the duration of a ``with_context`` block, which is how
tests substitute their own settings.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path

from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.config.config_loader import CONFIG_PATH, load_config

_config_override: ContextVar[ConfigData | None] = ContextVar(
    "config_override", default=None
)
_loaded_config: ConfigData | None = None


def _config_path() -> Path:
    return Path(os.getenv("SYNKRONIZED_CONFIG", str(CONFIG_PATH)))


def get_config() -> ConfigData:
    """Return the active configuration, loading config.yaml on first use."""
    global _loaded_config

    override = _config_override.get()
    if override is not None:
        return override

    if _loaded_config is None:
        _loaded_config = load_config(_config_path())
    return _loaded_config


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[ConfigData]:
    """Temporarily replace the active configuration."""
    token = _config_override.set(config_override)
    try:
        yield get_config()
    finally:
        _config_override.reset(token)
