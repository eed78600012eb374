"""
Hotspring Plugin Context
========================

The scoped capability bundle handed to a plugin's lifecycle hooks.

A fresh ``PluginContext`` is built every time a plugin loads. It carries
the host application, the plugin's effective configuration, a logger
scoped to the plugin, a ``PluginUtils`` instance and a read-only view of
the contexts of the plugin's loaded dependencies.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Sequence,
    Set,
    Union,
)

from hotspring.plugins.hooks import invoke
from hotspring.utils.env import Env
from hotspring.utils.logger import Logger

if TYPE_CHECKING:
    from hotspring.plugins.base import LoadedPlugin
    from hotspring.plugins.manager import HostApplication


class DependencyContexts(Mapping):
    """
    Live view of dependency contexts, keyed by plugin name.

    Holds the dependency names and the manager's registry rather than
    references to other plugins' records; each lookup goes through the
    registry, and only dependencies that are currently loaded are visible.
    """

    def __init__(
        self,
        registry: Mapping[str, "LoadedPlugin"],
        names: Sequence[str],
    ) -> None:
        self._registry = registry
        self._names = tuple(names)

    def __getitem__(self, name: str) -> "PluginContext":
        if name in self._names:
            entry = self._registry.get(name)
            if entry is not None and entry.context is not None:
                return entry.context
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        for name in self._names:
            entry = self._registry.get(name)
            if entry is not None and entry.context is not None:
                yield name

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"<DependencyContexts {list(self)}>"


class PluginUtils:
    """
    Helpers available to plugins through ``context.utils``.

    Globals registered here live in a registry owned by the plugin
    manager, so separate hosts never see each other's values.

    Example:
        async def init(context):
            url = context.utils.env("REDIS_URL", "redis://localhost")
            context.utils.register_global("cache", RedisCache(url))
            context.utils.schedule(warm_cache, delay=5)
    """

    def __init__(
        self,
        app: "HostApplication",
        logger: Logger,
        shared: Dict[str, Any],
        env: Optional[Env] = None,
    ) -> None:
        self.app = app
        self._logger = logger
        self._shared = shared
        self._env = env or Env()
        self._timers: List[asyncio.TimerHandle] = []
        self._tasks: Set["asyncio.Task[Any]"] = set()

    def env(self, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """Environment variable ``key``, or ``fallback`` when unset or empty."""
        return self._env.get(key, fallback)

    def create_logger(self, scope: str) -> Logger:
        """Logger scoped below this plugin's logger."""
        return self._logger.child(scope)

    def register_global(self, name: str, value: Any) -> None:
        """Share ``value`` with every plugin on the same manager."""
        self._shared[name] = value

    def get_global(self, name: str, default: Any = None) -> Any:
        """Value registered with ``register_global``."""
        return self._shared.get(name, default)

    def schedule(
        self,
        fn: Callable[[], Union[None, Awaitable[None]]],
        delay: float,
    ) -> asyncio.TimerHandle:
        """
        Run ``fn`` after ``delay`` seconds on the running event loop.

        ``fn`` may be a plain function or a coroutine function. Pending
        calls are cancelled when the plugin unloads.
        """
        loop = asyncio.get_running_loop()

        def fire() -> None:
            self._timers.remove(handle)
            task = loop.create_task(invoke(fn))
            self._tasks.add(task)
            task.add_done_callback(self._report)

        handle = loop.call_later(delay, fire)
        self._timers.append(handle)
        return handle

    def _report(self, task: "asyncio.Task[Any]") -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self._logger.error("Scheduled task failed", exception=task.exception())

    def cancel_scheduled(self) -> int:
        """
        Cancel scheduled calls that have not fired yet, and calls that
        fired but are still running.

        Returns:
            Number of calls cancelled
        """
        cancelled = len(self._timers) + len(self._tasks)
        for handle in self._timers:
            handle.cancel()
        for task in self._tasks:
            task.cancel()
        self._timers.clear()
        self._tasks.clear()
        return cancelled

    def get_database(self, name: str = "default") -> Any:
        """
        Database connection registered by a database plugin.

        Database plugins publish connections with
        ``register_global("database.<name>", connection)``; ``None`` is
        returned until one does.
        """
        return self._shared.get(f"database.{name}")


@dataclass
class PluginContext:
    """
    Context passed to ``init``, ``setup`` and ``teardown``.

    Attributes:
        app: Host application
        config: Effective plugin configuration
        logger: Logger scoped to the plugin
        utils: Helper bundle
        dependencies: Contexts of loaded dependencies by name
    """

    app: "HostApplication"
    config: Dict[str, Any]
    logger: Logger
    utils: PluginUtils
    dependencies: Mapping = field(default_factory=dict)
