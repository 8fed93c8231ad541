"""Read config.yaml into a validated ConfigData.

Everything under the top-level ``config:`` key is validated; any other keys
are ignored so the file can carry YAML anchors or notes for operators.
"""

import os
from pathlib import Path
from typing import Any, Literal, overload

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.config.config_utils import substitute_env_vars

CONFIG_PATH = Path("config.yaml")


def active_environment() -> str:
    return os.getenv("APP_ENVIRONMENT", "development")


def promote_environment_overrides(environment: str) -> list[str]:
    """Copy ``{ENVIRONMENT}_NAME`` variables onto ``NAME``.

    Lets one shell carry e.g. both STAGING_GITHUB_TOKEN and
    PRODUCTION_GITHUB_TOKEN while config.yaml only references GITHUB_TOKEN.

    Returns:
        The unprefixed names that were set
    """
    prefix = f"{environment.upper()}_"
    promoted = []
    for name, value in list(os.environ.items()):
        if name.startswith(prefix) and len(name) > len(prefix):
            target = name.removeprefix(prefix)
            os.environ[target] = value
            promoted.append(target)

    if promoted:
        logger.info(f"Applied {len(promoted)} {environment} overrides")
        logger.debug(f"Override keys: {promoted}")
    return promoted


def _parse(content: str) -> Any:
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e


def _validate(document: Any) -> ConfigData:
    if not isinstance(document, dict) or "config" not in document:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    try:
        return ConfigData.model_validate(document["config"] or {})
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


@overload
def load_config(
    file_path: Path = ..., *, processed: Literal[False]
) -> dict[str, Any]: ...


@overload
def load_config(
    file_path: Path = ..., processed: Literal[True] = ...
) -> ConfigData: ...


def load_config(
    file_path: Path = CONFIG_PATH, processed: bool = True
) -> ConfigData | dict[str, Any]:
    """
    Load the service configuration.

    Args:
        file_path: YAML file to read (default: ./config.yaml)
        processed: When False, return the parsed file as-is with placeholders
                   left in place. Used by ``synkronized config show --raw``.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On YAML syntax errors, a missing ``config`` key, an unset
                    required variable, or a value that fails validation

    Loading a processed config mutates os.environ: a .env file beside the
    config is loaded and environment-prefixed overrides are promoted. Secret
    files are exported during substitution.
    """
    content = Path(file_path).read_text()

    if not processed:
        return _parse(content)

    # Variables already set in the shell win over the .env file
    load_dotenv(Path(file_path).parent / ".env", override=False)

    environment = active_environment()
    logger.info(f"Loading configuration for environment: {environment}")
    promote_environment_overrides(environment)

    config = _validate(_parse(substitute_env_vars(content)))

    if not config.github.webhook_secret:
        logger.warning(
            "No webhook secret configured; every signed delivery will be rejected"
        )
    return config
