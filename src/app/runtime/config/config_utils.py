"""Placeholder substitution and secret files for config.yaml.

Secrets (webhook secret, GitHub token, kubeconfig) can be dropped as files
into a secrets directory instead of being exported. Each file becomes one
environment variable named after the file stem, so
``secrets/keys/github_webhook_token.txt`` provides ``GITHUB_WEBHOOK_TOKEN``.
Variables already present in the environment always win.
"""

import os
import re
from collections.abc import Iterator
from pathlib import Path

from loguru import logger

# Secrets here are tokens and base64 kubeconfigs; anything bigger is a mistake
MAX_SECRET_FILE_SIZE = 65536

_PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[^}:]+)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}"
)

_secrets_loaded = False


def project_root() -> Path:
    """Directory holding pyproject.toml, or the checkout root as a fallback."""
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    # src/app/runtime/config/config_utils.py
    return here.parents[4]


def secret_dirs() -> Iterator[Path]:
    """Candidate secrets directories, most specific first."""
    custom_dir = os.getenv("SECRETS_KEYS_DIR")
    if custom_dir:
        yield Path(custom_dir)
    yield project_root() / "secrets" / "keys"


def secret_env_name(path: Path) -> str:
    return re.sub(r"[^A-Z0-9_]", "_", path.stem.upper())


def _read_secret(path: Path) -> str | None:
    try:
        size = path.stat().st_size
        if size > MAX_SECRET_FILE_SIZE:
            logger.warning(
                f"Skipping secret file {path.name}: {size} bytes exceeds {MAX_SECRET_FILE_SIZE}"
            )
            return None
        return path.read_text(encoding="utf-8").strip() or None
    except OSError as exc:
        logger.warning(f"Unable to read secret file {path}: {exc}")
        return None


def load_secret_files(directory: Path) -> list[str]:
    """Export every file in ``directory`` as an environment variable.

    Returns:
        Names of the variables that were set
    """
    loaded: list[str] = []
    for path in sorted(directory.iterdir()):
        if not path.is_file():
            continue

        name = secret_env_name(path)
        if not name or name in os.environ:
            continue

        value = _read_secret(path)
        if value is None:
            continue

        os.environ[name] = value
        loaded.append(name)
        logger.debug(f"Loaded secret {name} from {path.name}")
    return loaded


def _load_secrets_once() -> None:
    global _secrets_loaded
    if _secrets_loaded:
        return

    directory = next((d for d in secret_dirs() if d.is_dir()), None)
    if directory is not None:
        load_secret_files(directory)
    _secrets_loaded = True


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    _load_secrets_once()

    def replace(match: re.Match[str]) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = os.getenv(name)
        if value is not None:
            return value
        if op == ":-":
            return arg
        if op == ":?":
            raise ValueError(f"Required environment variable {name}: {arg}")
        raise ValueError(f"Required environment variable {name} not set")

    return _PLACEHOLDER.sub(replace, text)
