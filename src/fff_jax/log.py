"""Logger configuration for applications that want fff-jax debug output."""

from __future__ import annotations

import logging
import os
import sys

__all__ = ["setup_logger"]


def setup_logger(
    name: str = "fff_jax",
    level: str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Library modules only emit records through ``logging.getLogger(__name__)``;
    nothing is attached until an application calls this.

    Args:
        name: Logger name (the package name by default)
        level: Log level; falls back to FFF_JAX_LOG_LEVEL, then WARNING
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    level = level or os.getenv("FFF_JAX_LOG_LEVEL", "WARNING")
    format_string = format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(fmt=format_string, datefmt="%Y-%m-%d %H:%M:%S")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, level.upper()))
        logger.propagate = False

    return logger
