"""Logging setup for the generation pipeline.

Usage in modules:
    from .gen_logging import get_logger
    logger = get_logger(__name__)

Every logger lives under the "servergen" hierarchy. Records may carry a
``target`` extra (e.g. "python-fastapi"); it is printed as a bracketed tag.
"""

from __future__ import annotations

import logging
import sys

_LOGGER_NAME = "servergen"

_TIMESTAMP_FORMAT = "%H:%M:%S %d/%m/%Y"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a child logger under the servergen hierarchy.

    "servergen.codegen" and "codegen" both map to "servergen.codegen".
    """
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


class _GenFormatter(logging.Formatter):
    """Format as ``[time] [LEVEL] [target] message``."""

    def __init__(self) -> None:
        super().__init__(datefmt=_TIMESTAMP_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        stamp = self.formatTime(record, self.datefmt)
        level = "WARN" if record.levelno == logging.WARNING else record.levelname
        target = getattr(record, "target", None)
        tag = f" [{target}]" if target else ""
        line = f"[{stamp}] [{level}]{tag} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure the servergen logger hierarchy.

    Levels:
        --verbose / -v  -> DEBUG
        (default)       -> INFO
        --quiet / -q    -> WARNING
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)

    # Called once per CLI invocation, but tests may call it repeatedly
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_GenFormatter())
    root_logger.addHandler(handler)
