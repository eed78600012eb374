"""
Hotspring Utils Package
=======================

Logging and environment lookup shared by the host and its plugins.
"""

from __future__ import annotations

from hotspring.utils.env import Env
from hotspring.utils.logger import (
    JsonFormatter,
    LogHandler,
    LogLevel,
    LogRecord,
    Logger,
    StreamHandler,
    TextFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    # Environment
    "Env",
    # Logging
    "Logger",
    "LogLevel",
    "LogRecord",
    "LogHandler",
    "StreamHandler",
    "TextFormatter",
    "JsonFormatter",
    "get_logger",
    "configure_logging",
]
