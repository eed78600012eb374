"""
Hotspring Application Host
==========================

The host application plugins are composed into. ``Application`` owns:
- its configuration
- a route table and a middleware table plugins mount onto
- a logger
- its own ``PluginManager`` (never shared between applications)
- startup and shutdown sequencing

Example:
    from hotspring import Application
    from hotspring.plugins import create_plugin

    app = Application("shop", config={"plugins": {"email": {"from": "shop@example.com"}}})
    app.use(email_plugin)          # config taken from plugins.email
    app.use(notifications_plugin)

    async with app.lifespan():
        ...  # hand app.router / app.middleware to the HTTP layer
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Coroutine, List, Mapping, Optional

from hotspring.core.config import Config
from hotspring.core.middleware import MiddlewareStack
from hotspring.core.router import Router
from hotspring.plugins.base import Handler, LoadedPlugin, PluginDescriptor, RouteMethod
from hotspring.plugins.manager import PluginManager
from hotspring.utils.env import Env
from hotspring.utils.logger import Logger, LogLevel, StreamHandler

LifecycleCallback = Callable[[], Coroutine[Any, Any, None]]


@dataclass
class AppState:
    """Application runtime state container."""

    is_running: bool = False
    is_debug: bool = False
    startup_time: float = 0.0


class Application:
    """
    Hotspring host application.

    Implements the host interface the plugin manager mounts onto
    (``mount_route`` / ``mount_middleware``) and sequences plugin loading
    at startup and unloading at shutdown.

    Attributes:
        config: Application configuration
        router: Mounted routes
        middleware: Mounted middleware
        plugins: Plugin manager owned by this application
        state: Runtime state
    """

    def __init__(
        self,
        name: str = "hotspring",
        debug: bool = False,
        config: Optional[Mapping[str, Any]] = None,
        logger: Optional[Logger] = None,
        env: Optional[Env] = None,
    ) -> None:
        self.name = name
        self.config = Config(config)
        self.config.load_env()
        self.state = AppState(is_debug=self.config.get_bool("app.debug", debug))

        self.router = Router()
        self.middleware = MiddlewareStack()
        self.logger = logger or Logger(
            name,
            level=LogLevel.DEBUG if self.state.is_debug else LogLevel.INFO,
            handlers=[StreamHandler()],
        )
        self.plugins = PluginManager(self, logger=self.logger, env=env)

        self._on_startup: List[LifecycleCallback] = []
        self._on_shutdown: List[LifecycleCallback] = []

    # Host interface

    def mount_route(self, method: RouteMethod, path: str, handler: Handler) -> None:
        """Add a route to the route table."""
        self.router.add(method, path, handler)
        self.logger.debug(f"Mounted route {method.value} {path}")

    def mount_middleware(self, path: str, handler: Handler) -> None:
        """Add middleware to the middleware table."""
        self.middleware.add(handler, path=path)
        self.logger.debug(f"Mounted middleware on {path}")

    # Plugins

    def use(
        self,
        descriptor: PluginDescriptor,
        config: Optional[Mapping[str, Any]] = None,
    ) -> LoadedPlugin:
        """
        Register a plugin.

        Without explicit ``config`` the ``plugins.<name>`` config section
        is used.
        """
        if config is None:
            config = self.config.section(f"plugins.{descriptor.name}")
        return self.plugins.register(descriptor, config)

    # Lifecycle

    def on_startup(self, func: LifecycleCallback) -> LifecycleCallback:
        """Register a startup hook, run after all plugins are loaded."""
        self._on_startup.append(func)
        return func

    def on_shutdown(self, func: LifecycleCallback) -> LifecycleCallback:
        """Register a shutdown hook, run before plugins are unloaded."""
        self._on_shutdown.append(func)
        return func

    async def startup(self) -> None:
        """
        Load every plugin, run their ``setup`` hooks, then startup hooks.

        Any failure propagates: a host whose plugins failed to load should
        not start serving.
        """
        start_time = time.perf_counter()

        await self.plugins.load_all()
        await self.plugins.setup_all()

        for hook in self._on_startup:
            await hook()

        self.state.is_running = True
        self.state.startup_time = time.perf_counter() - start_time
        self.logger.info(
            f"{self.name} started in {self.state.startup_time:.3f}s",
            plugins=len(self.plugins),
        )

    async def shutdown(self) -> None:
        """Run shutdown hooks, then unload plugins in reverse load order."""
        self.state.is_running = False

        for hook in self._on_shutdown:
            await hook()

        await self.plugins.unload_all()
        self.logger.info(f"{self.name} shutdown complete")

    @asynccontextmanager
    async def lifespan(self) -> AsyncIterator["Application"]:
        """Start on enter, shut down on exit."""
        await self.startup()
        try:
            yield self
        finally:
            await self.shutdown()


def create_app(name: str = "hotspring", debug: bool = False, **kwargs: Any) -> Application:
    """
    Factory function for creating Application instances.

    Useful for application factories and testing.
    """
    return Application(name=name, debug=debug, **kwargs)
