"""Read observer settings from a YAML file and an optional .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from loguru import logger

from pinvault_observer.core.errors import ObserverConfigurationError


def _deep_update(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | Path) -> dict[str, Any]:
    """Parse the observer settings file.

    A missing file or a document that is not a mapping yields ``{}``.
    Malformed YAML raises ObserverConfigurationError carrying the parser error.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("Observer config not found at {}, using defaults", path)
        return {}

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ObserverConfigurationError(
            f"Cannot parse observer config {path}",
            code="invalid_yaml",
            details={"path": str(path)},
            original_error=exc,
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Observer config {} is a {}, expected a mapping", path, type(data).__name__)
        return {}
    return data


def load_config_with_env(
    path: str | Path,
    defaults: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
) -> dict[str, Any]:
    """Export .env into the environment, then merge the YAML over defaults.

    env_file None searches for a .env from the working directory upwards.
    Variables already set in the environment are never overwritten.
    """
    if env_file is None:
        load_dotenv(find_dotenv(usecwd=True))
    else:
        load_dotenv(env_file)
    return _deep_update(defaults or {}, load_config(path))
