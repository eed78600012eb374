"""Shared fixtures for the Hotspring test suite."""

from typing import Any, List, Tuple

import pytest

from hotspring.plugins import PluginManager
from hotspring.utils.env import Env
from hotspring.utils.logger import LogHandler, LogLevel, LogRecord, Logger


class CollectingHandler(LogHandler):
    """Keeps emitted records in memory."""

    def __init__(self, level: LogLevel = LogLevel.DEBUG):
        super().__init__(level=level)
        self.records: List[LogRecord] = []

    def emit(self, record: LogRecord) -> None:
        self.records.append(record)

    def messages(self, level: LogLevel = None) -> List[str]:
        return [
            r.message for r in self.records
            if level is None or r.level == level
        ]


class FakeHost:
    """Host application that records what gets mounted."""

    def __init__(self) -> None:
        self.mounted: List[Tuple[str, Any, str, Any]] = []

    def mount_route(self, method, path, handler) -> None:
        self.mounted.append(("route", method, path, handler))

    def mount_middleware(self, path, handler) -> None:
        self.mounted.append(("middleware", None, path, handler))

    @property
    def routes(self) -> List[Tuple[Any, str]]:
        return [(m, p) for kind, m, p, _ in self.mounted if kind == "route"]


@pytest.fixture
def log_handler() -> CollectingHandler:
    return CollectingHandler()


@pytest.fixture
def logger(log_handler) -> Logger:
    return Logger("test", handlers=[log_handler])


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def env() -> Env:
    return Env(environ={"SMTP_HOST": "mail.example.com", "EMPTY": ""})


@pytest.fixture
def manager(host, logger, env) -> PluginManager:
    return PluginManager(host, logger=logger, env=env)
