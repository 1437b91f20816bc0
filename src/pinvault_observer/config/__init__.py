"""Configuration: YAML + env overlay."""

from pinvault_observer.config.loader import load_config, load_config_with_env
from pinvault_observer.config.schema import DEFAULTS, Config, cfg

__all__ = ["DEFAULTS", "Config", "cfg", "load_config", "load_config_with_env"]
