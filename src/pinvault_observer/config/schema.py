"""Config schema and accessor."""

from __future__ import annotations

import os
from typing import Any

from loguru import logger

from pinvault_observer.core.errors import ObserverConfigurationError

# Env keys that override config (loaded once per reload)
_ENV_OVERRIDE_KEYS = (
    "PVO_OBSERVER_DELIMITER",
    "PVO_LOG_SUBSCRIBER_ERRORS",
    "LOG_LEVEL",
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Values used when neither the YAML file nor the environment sets a key
DEFAULTS: dict[str, Any] = {
    "observer_delimiter": None,
    "log_subscriber_errors": True,
    "log_level": "INFO",
}


def _load_env_overrides() -> dict[str, str]:
    """Load env overrides once per reload."""
    return {k: os.environ.get(k, "") for k in _ENV_OVERRIDE_KEYS}


def _parse_bool_env(val: str) -> bool | None:
    """Parse env string to bool; None if not a recognized bool."""
    v = val.lower()
    if v in ("1", "true", "yes"):
        return True
    if v in ("0", "false", "no"):
        return False
    return None


class Config:
    """Observer settings from YAML data, with environment overrides."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}
        self._env: dict[str, str] = _load_env_overrides()

    def reload(self, data: dict[str, Any], *, validate: bool = True) -> None:
        """Replace config data."""
        self._data = data or {}
        self._env = _load_env_overrides()
        if validate:
            self._validate()
        logger.debug(
            "Config reloaded: delimiter={!r} log_subscriber_errors={}",
            self.observer_delimiter,
            self.log_subscriber_errors,
        )

    def _validate(self) -> None:
        """Validate config structure; raise ObserverConfigurationError on failure."""
        delimiter = self._data.get("observer_delimiter")
        if delimiter is not None and delimiter is not False and not isinstance(delimiter, str):
            raise ObserverConfigurationError(
                "observer_delimiter must be a string",
                code="invalid_delimiter",
                details={"type": type(delimiter).__name__},
            )
        level = self._data.get("log_level")
        if level is not None and str(level).upper() not in _LOG_LEVELS:
            raise ObserverConfigurationError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}",
                code="invalid_log_level",
                details={"value": level},
            )

    @property
    def observer_delimiter(self) -> str | None:
        """Default delimiter for observables that don't set their own. None disables splitting."""
        env_val = self._env.get("PVO_OBSERVER_DELIMITER", "")
        if env_val:
            return env_val
        val = self._data.get("observer_delimiter")
        if val and isinstance(val, str):
            return val
        return None

    @property
    def log_subscriber_errors(self) -> bool:
        env_val = self._env.get("PVO_LOG_SUBSCRIBER_ERRORS", "")
        parsed = _parse_bool_env(env_val)
        if parsed is not None:
            return parsed
        return bool(self._data.get("log_subscriber_errors", DEFAULTS["log_subscriber_errors"]))

    @property
    def log_level(self) -> str:
        env_level = self._env.get("LOG_LEVEL", "").upper()
        if env_level in _LOG_LEVELS:
            return env_level
        return str(self._data.get("log_level", DEFAULTS["log_level"])).upper()


cfg: Config = Config({})
