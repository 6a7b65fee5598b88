"""Logging setup shared by the CLI and the HTTP service."""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LOGGER_NAME = "repowiki"
_ENV_LEVEL_KEY = "REPOWIKI_LOG_LEVEL"
# Request URLs can carry tokens; keep transport loggers at WARNING.
_NOISY_LOGGERS = ("httpx", "httpcore")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger nested under ``repowiki``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console (and optional file) handlers on the ``repowiki`` logger.

    ``REPOWIKI_LOG_LEVEL`` overrides the level chosen from ``verbose``.
    """
    level = _resolve_level(verbose)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[repowiki] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(sink)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def _resolve_level(verbose: bool) -> int:
    env_level = os.environ.get(_ENV_LEVEL_KEY, "").upper()
    if env_level in {"DEBUG", "INFO", "WARNING", "ERROR"}:
        return getattr(logging, env_level)
    return logging.DEBUG if verbose else logging.INFO


__all__ = ["configure_logging", "get_logger"]
