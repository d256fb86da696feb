"""Logging configuration and the failure sink used by error reporting."""

from __future__ import annotations

import logging
import sys
from typing import Protocol

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
FAILURE_LOGGER_NAME = "scim_api.failures"


def configure_logging(level: str = "INFO") -> None:
    """Configure process-wide logging.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class FailureSink(Protocol):
    def record(self, message: str) -> None:
        ...


class LoggingFailureSink:
    """Record handled failures on a dedicated logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(FAILURE_LOGGER_NAME)

    def record(self, message: str) -> None:
        self._logger.error(message)
