"""Process setup for hosts: logging through loguru and config loading."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from loguru import logger

from pinvault_observer.config import DEFAULTS, Config, cfg, load_config_with_env


def _intercept_logging(level: str) -> None:
    """Route stdlib logging records (asyncio and friends) to loguru."""

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                log_level: str | int = logger.level(record.levelname).name
            except ValueError:
                log_level = record.levelno
            msg = record.getMessage()
            logger.patch(
                lambda r: r.update(
                    name=record.name,
                    function=record.funcName,
                    line=record.lineno,
                ),
            ).opt(exception=record.exc_info).log(log_level, msg)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger("asyncio").setLevel(level)


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru. Replace default logging.
    Level: verbose=True enables DEBUG; otherwise cfg.log_level (LOG_LEVEL env wins)."""
    level = "DEBUG" if verbose else cfg.log_level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=("<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}"),
    )
    _intercept_logging(level)


def reload_config(config_path: str | Path) -> Config:
    """Load config from path over DEFAULTS and update global cfg."""
    data = load_config_with_env(config_path, defaults=DEFAULTS)
    cfg.reload(data)
    return cfg


def configure(config_path: str | Path | None = None, *, verbose: bool = False) -> Config:
    """Load optional YAML config, then set up logging from it."""
    if config_path is not None:
        reload_config(config_path)
        logger.info("Config loaded from {}", config_path)
    setup_logging(verbose)
    return cfg
