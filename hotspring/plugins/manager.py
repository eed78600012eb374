"""
Hotspring Plugin Manager
========================

Plugin registration, dependency-ordered loading, unloading and hot reload.

The manager is owned by a host application and mounts each plugin's
middleware, routes and asset interceptors onto it. Every step runs
sequentially on the event loop: one plugin finishes loading before the
next one starts, because later plugins may rely on state that earlier
``init`` hooks set up and because mount order decides dispatch precedence
on the host.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    runtime_checkable,
)

from hotspring.plugins.base import (
    NAME_PATTERN,
    VERSION_PATTERN,
    AssetConfig,
    CommandConfig,
    ClientExtensions,
    Handler,
    LoadedPlugin,
    PluginDescriptor,
    PluginState,
    RouteMethod,
)
from hotspring.plugins.context import DependencyContexts, PluginContext, PluginUtils
from hotspring.plugins.errors import (
    ConfigValidationError,
    DuplicatePluginError,
    HookExecutionError,
    IdentityError,
    MissingDependencyError,
    PluginNotFoundError,
)
from hotspring.plugins.hooks import HookRegistry, PluginEvents, invoke
from hotspring.plugins.resolver import DependencyResolver
from hotspring.plugins.schema import ConfigValidator
from hotspring.utils.env import Env
from hotspring.utils.logger import Logger, get_logger

if TYPE_CHECKING:
    from hotspring.core.response import Response


@runtime_checkable
class HostApplication(Protocol):
    """What the manager needs from the application it mounts plugins on."""

    def mount_route(self, method: RouteMethod, path: str, handler: Handler) -> None:
        ...

    def mount_middleware(self, path: str, handler: Handler) -> None:
        ...


class AssetInterceptor:
    """
    Request handler mounted for a plugin asset mapping.

    Resolves the requested path to a file under ``from_path`` but always
    answers 404: the host has no static file serving.
    """

    def __init__(self, asset: AssetConfig) -> None:
        self.asset = asset

    @property
    def pattern(self) -> str:
        return f"{self.asset.to_path.rstrip('/')}/*"

    def resolve(self, request_path: str) -> Optional[PurePosixPath]:
        """
        Local path a public request path maps to.

        Returns ``None`` for paths outside the public prefix and for paths
        with ``..`` segments.
        """
        prefix = self.asset.to_path.rstrip("/") + "/"
        if not request_path.startswith(prefix):
            return None

        relative = PurePosixPath(request_path[len(prefix):])
        if ".." in relative.parts:
            return None

        return PurePosixPath(self.asset.from_path) / relative

    async def __call__(self, request: Any, *args: Any, **kwargs: Any) -> "Response":
        from hotspring.core.response import Response

        return Response.not_found()

    def __repr__(self) -> str:
        return f"<AssetInterceptor {self.pattern} -> {self.asset.from_path}>"


class PluginManager:
    """
    Plugin lifecycle manager.

    Holds every registered plugin in a single name-indexed registry.
    Contexts reach their dependencies through that registry by name.

    Example:
        manager = PluginManager(app)

        manager.register(email, {"from": "noreply@example.com"})
        manager.register(notifications)   # depends on "email"

        await manager.load_all()
        await manager.reload_plugin("notifications")
        await manager.unload_all()
    """

    def __init__(
        self,
        app: HostApplication,
        logger: Optional[Logger] = None,
        env: Optional[Env] = None,
    ) -> None:
        """
        Initialize manager.

        Args:
            app: Host application plugins are mounted on
            logger: Parent logger (plugin loggers are its children)
            env: Environment lookup handed to plugin utilities
        """
        self.app = app
        self.logger = logger or get_logger("hotspring")
        self.env = env or Env()
        self.hooks = HookRegistry()
        self.validator = ConfigValidator()
        self.resolver = DependencyResolver()

        self._plugins: Dict[str, LoadedPlugin] = {}
        self._load_order: List[str] = []
        self._shared: Dict[str, Any] = {}

    # Registration

    def register(
        self,
        descriptor: PluginDescriptor,
        config: Optional[Mapping[str, Any]] = None,
    ) -> LoadedPlugin:
        """
        Register a plugin.

        All checks run before the registry is touched, so a rejected
        plugin leaves no trace.

        Args:
            descriptor: Plugin descriptor
            config: Caller configuration, overriding ``default_config``

        Returns:
            The new registry record, in state ``registered``

        Raises:
            IdentityError: Malformed name or version
            DuplicatePluginError: Name already registered
            MissingDependencyError: A dependency is not registered yet
            ConfigValidationError: Configuration violates the schema
        """
        config = dict(config or {})
        self.logger.info(f"Registering plugin: {descriptor}")

        self._check_identity(descriptor)

        if descriptor.name in self._plugins:
            raise DuplicatePluginError(descriptor.name)

        self._check_dependencies(descriptor)

        if descriptor.config_schema is not None:
            result = self.validator.validate(config, descriptor.config_schema)
            if not result.valid:
                raise ConfigValidationError(descriptor.name, result.errors)

        for peer in descriptor.peer_dependencies:
            if peer not in self._plugins:
                self.logger.warning(
                    f"Plugin {descriptor.name} works best with {peer}, which is not registered",
                    plugin=descriptor.name,
                )

        loaded = LoadedPlugin(
            descriptor=descriptor,
            config={**descriptor.default_config, **config},
        )
        self._plugins[descriptor.name] = loaded

        self.logger.info(f"Plugin {descriptor.name} registered successfully")
        return loaded

    def _check_identity(self, descriptor: PluginDescriptor) -> None:
        if not descriptor.name:
            raise IdentityError("Plugin must have a name")

        if not descriptor.version:
            raise IdentityError("Plugin must have a version")

        if not NAME_PATTERN.fullmatch(descriptor.name):
            raise IdentityError(f"Invalid plugin name: {descriptor.name}")

        if not VERSION_PATTERN.fullmatch(descriptor.version):
            raise IdentityError(f"Invalid plugin version: {descriptor.version}")

    def _check_dependencies(self, descriptor: PluginDescriptor) -> None:
        for dependency in descriptor.dependencies:
            if dependency not in self._plugins:
                raise MissingDependencyError(descriptor.name, dependency)

    # Loading

    async def load_all(self) -> None:
        """
        Load every registered plugin in dependency order.

        Stops at the first failure; plugins loaded before it stay loaded.

        Raises:
            CircularDependencyError: If the dependency graph has a cycle
            PluginError: Whatever the failing ``load_plugin`` raised
        """
        self.logger.info("Loading all plugins...")

        self._load_order = self.resolver.resolve_order(self._plugins)

        for name in self._load_order:
            await self.load_plugin(name)

        self.logger.info("All plugins loaded successfully")

    async def load_plugin(self, name: str) -> None:
        """
        Load a single plugin.

        Does nothing if the plugin is already loaded. On failure the plugin
        stays in its previous state and may be loaded again later.

        Raises:
            PluginNotFoundError: Unknown plugin
            HookExecutionError: ``init`` raised
            UnsupportedMethodError: A route uses an unsupported method
        """
        loaded = self._plugins.get(name)
        if loaded is None:
            raise PluginNotFoundError(name)

        if loaded.is_loaded:
            return

        self.logger.info(f"Loading plugin: {name}")
        descriptor = loaded.descriptor
        context = self._create_context(loaded)

        try:
            if descriptor.init is not None:
                try:
                    await invoke(descriptor.init, context)
                except Exception as e:
                    raise HookExecutionError(name, "init", e) from e

            routes = [
                (RouteMethod.parse(route.method, name), route)
                for route in descriptor.routes
            ]
        except Exception as e:
            context.utils.cancel_scheduled()
            self.logger.error(f"Failed to load plugin {name}: {e}", exception=e, plugin=name)
            await self.hooks.trigger(PluginEvents.FAILED, loaded, e)
            raise

        for middleware in descriptor.middleware:
            self.app.mount_middleware(middleware.path or "*", middleware.handler)

        for method, route in routes:
            self.app.mount_route(method, route.path, route.handler)

        for asset in descriptor.assets:
            interceptor = AssetInterceptor(asset)
            self.app.mount_route(RouteMethod.GET, interceptor.pattern, interceptor)

        loaded.attach(context)

        self.logger.info(f"Plugin {name} loaded successfully")
        await self.hooks.trigger(PluginEvents.LOADED, loaded)

    def _create_context(self, loaded: LoadedPlugin) -> PluginContext:
        name = loaded.name
        logger = self.logger.child(name, plugin=name)

        return PluginContext(
            app=self.app,
            config=loaded.config,
            logger=logger,
            utils=PluginUtils(self.app, logger, self._shared, self.env),
            dependencies=DependencyContexts(self._plugins, loaded.descriptor.dependencies),
        )

    async def setup_all(self) -> None:
        """
        Run the ``setup`` hook of every loaded plugin in load order.

        Called by the host once all plugins are loaded.

        Raises:
            HookExecutionError: A ``setup`` hook raised
        """
        for name in self._load_order:
            loaded = self._plugins.get(name)
            if loaded is None or not loaded.is_loaded or loaded.descriptor.setup is None:
                continue

            try:
                await invoke(loaded.descriptor.setup, loaded.context)
            except Exception as e:
                self.logger.error(f"Setup of plugin {name} failed: {e}", exception=e, plugin=name)
                raise HookExecutionError(name, "setup", e) from e

    # Unloading

    async def unload_plugin(self, name: str) -> None:
        """
        Unload a plugin.

        Runs ``teardown`` and drops the context. Mounted routes and
        middleware stay on the host. Does nothing for plugins that are not
        loaded.

        Raises:
            HookExecutionError: ``teardown`` raised (the plugin stays loaded)
        """
        loaded = self._plugins.get(name)
        if loaded is None or not loaded.is_loaded:
            return

        self.logger.info(f"Unloading plugin: {name}")
        context = loaded.context

        if loaded.descriptor.teardown is not None:
            try:
                await invoke(loaded.descriptor.teardown, context)
            except Exception as e:
                self.logger.error(f"Failed to unload plugin {name}: {e}", exception=e, plugin=name)
                raise HookExecutionError(name, "teardown", e) from e

        context.utils.cancel_scheduled()
        loaded.detach()

        self.logger.info(f"Plugin {name} unloaded successfully")
        await self.hooks.trigger(PluginEvents.UNLOADED, loaded)

    async def unload_all(self) -> None:
        """Unload loaded plugins, dependents before their dependencies."""
        loaded_names = [name for name in self._load_order if self.is_loaded(name)]
        # Plugins loaded individually are not in the last resolved order
        loaded_names += [
            name for name, p in self._plugins.items()
            if p.is_loaded and name not in loaded_names
        ]

        for name in reversed(loaded_names):
            await self.unload_plugin(name)

    async def reload_plugin(self, name: str) -> None:
        """Hot reload: unload then load again with a fresh context."""
        await self.unload_plugin(name)
        await self.load_plugin(name)

    # Accessors

    def get_plugin(self, name: str) -> Optional[LoadedPlugin]:
        """Get plugin record by name."""
        return self._plugins.get(name)

    def get_all_plugins(self) -> List[LoadedPlugin]:
        """All plugin records in registration order."""
        return list(self._plugins.values())

    def is_loaded(self, name: str) -> bool:
        """Check if plugin is loaded."""
        loaded = self._plugins.get(name)
        return loaded is not None and loaded.state is PluginState.LOADED

    @property
    def load_order(self) -> List[str]:
        """Order computed by the last ``load_all``."""
        return list(self._load_order)

    def get_commands(self) -> Dict[str, CommandConfig]:
        """CLI commands of loaded plugins, by command name."""
        commands: Dict[str, CommandConfig] = {}
        for loaded in self._plugins.values():
            if loaded.is_loaded:
                for command in loaded.descriptor.commands:
                    commands[command.name] = command
        return commands

    def get_client_extensions(self) -> Dict[str, ClientExtensions]:
        """Client extensions of loaded plugins, by plugin name."""
        return {
            name: loaded.descriptor.client_extensions
            for name, loaded in self._plugins.items()
            if loaded.is_loaded and loaded.descriptor.client_extensions is not None
        }

    def __contains__(self, name: str) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[LoadedPlugin]:
        return iter(self._plugins.values())

    def __len__(self) -> int:
        return len(self._plugins)


async def hot_reload(manager: PluginManager, name: str) -> None:
    """Unload and reload ``name`` on ``manager``."""
    await manager.reload_plugin(name)
