"""
Hotspring Plugin Base Types
===========================

Descriptors authored by plugin developers, the manager's per-plugin
record, and helpers for building descriptors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
)

from hotspring.plugins.errors import UnsupportedMethodError
from hotspring.plugins.hooks import invoke
from hotspring.plugins.schema import ConfigSchema, as_config_schema

if TYPE_CHECKING:
    from hotspring.plugins.context import PluginContext

NAME_PATTERN = re.compile(r"^[a-z0-9_@/-]+$")
VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+(-[a-zA-Z0-9-]+)?$")

LifecycleHook = Callable[["PluginContext"], Union[None, Awaitable[None]]]
Handler = Callable[..., Any]


class RouteMethod(str, Enum):
    """HTTP methods a plugin route may declare."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, method: Union[str, "RouteMethod"], plugin: Optional[str] = None) -> "RouteMethod":
        """
        Resolve a declared method, case-insensitively.

        Raises:
            UnsupportedMethodError: For anything outside the supported set
        """
        if isinstance(method, RouteMethod):
            return method
        try:
            return cls(str(method).upper())
        except ValueError:
            raise UnsupportedMethodError(str(method), plugin) from None


class PluginState(str, Enum):
    """Lifecycle state of a registered plugin."""

    REGISTERED = "registered"
    LOADED = "loaded"
    UNLOADED = "unloaded"


@dataclass(frozen=True)
class RouteConfig:
    """Route contributed by a plugin."""

    path: str
    method: str
    handler: Handler


@dataclass(frozen=True)
class MiddlewareConfig:
    """Middleware contributed by a plugin; ``path`` defaults to every path."""

    handler: Handler
    path: str = "*"


@dataclass(frozen=True)
class AssetConfig:
    """
    Static asset mapping.

    Attributes:
        from_path: Local directory the files live in
        to_path: Public URL prefix they are exposed under
    """

    from_path: str
    to_path: str


@dataclass(frozen=True)
class CommandOption:
    """Option accepted by a plugin CLI command."""

    name: str
    alias: Optional[str] = None
    description: str = ""
    type: str = "string"
    required: bool = False
    default: Any = None


@dataclass(frozen=True)
class CommandConfig:
    """CLI command contributed by a plugin."""

    name: str
    handler: Callable[[List[Any], Dict[str, Any]], Union[None, Awaitable[None]]]
    description: str = ""
    options: Tuple[CommandOption, ...] = ()


@dataclass(frozen=True)
class ClientExtension:
    """Lazily loaded client-side component, hook or utility."""

    name: str
    loader: Callable[[], Awaitable[Any]]
    props: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClientExtensions:
    """Client-side extensions shipped with a plugin."""

    components: Tuple[ClientExtension, ...] = ()
    hooks: Tuple[ClientExtension, ...] = ()
    utilities: Tuple[ClientExtension, ...] = ()


def _coerce(items: Optional[Iterable[Any]], cls: Type[Any]) -> Tuple[Any, ...]:
    """Turn a list of dataclass instances or mappings into a tuple of ``cls``."""
    if not items:
        return ()

    names = {f.name for f in fields(cls)}
    result = []
    for item in items:
        if isinstance(item, cls):
            result.append(item)
        elif isinstance(item, Mapping):
            data = dict(item)
            # Accept the "from"/"to" spelling for assets
            if cls is AssetConfig:
                data.setdefault("from_path", data.pop("from", None))
                data.setdefault("to_path", data.pop("to", None))
            if cls is CommandConfig and "options" in data:
                data["options"] = _coerce(data["options"], CommandOption)
            result.append(cls(**{k: v for k, v in data.items() if k in names}))
        else:
            raise TypeError(f"Expected {cls.__name__} or mapping, got {type(item).__name__}")
    return tuple(result)


@dataclass(frozen=True)
class PluginDescriptor:
    """
    Immutable description of a plugin.

    Lists are stored as tuples and ``config_schema`` is normalised to a
    ``ConfigSchema``, so a descriptor cannot change after registration.

    Example:
        email = PluginDescriptor(
            name="email",
            version="1.0.0",
            default_config={"provider": "smtp"},
            init=setup_mailer,
            routes=[RouteConfig("/email/send", "POST", send_email)],
        )
    """

    name: str
    version: str
    description: str = ""
    author: str = ""
    license: str = ""
    homepage: str = ""
    repository: str = ""
    dependencies: Sequence[str] = ()
    peer_dependencies: Sequence[str] = ()
    config_schema: Optional[ConfigSchema] = None
    default_config: Mapping[str, Any] = field(default_factory=dict)
    init: Optional[LifecycleHook] = None
    setup: Optional[LifecycleHook] = None
    teardown: Optional[LifecycleHook] = None
    routes: Sequence[RouteConfig] = ()
    middleware: Sequence[MiddlewareConfig] = ()
    assets: Sequence[AssetConfig] = ()
    commands: Sequence[CommandConfig] = ()
    client_extensions: Optional[ClientExtensions] = None

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        set_(self, "dependencies", tuple(self.dependencies or ()))
        set_(self, "peer_dependencies", tuple(self.peer_dependencies or ()))
        set_(self, "config_schema", as_config_schema(self.config_schema))
        set_(self, "default_config", dict(self.default_config or {}))
        set_(self, "routes", _coerce(self.routes, RouteConfig))
        set_(self, "middleware", _coerce(self.middleware, MiddlewareConfig))
        set_(self, "assets", _coerce(self.assets, AssetConfig))
        set_(self, "commands", _coerce(self.commands, CommandConfig))

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class LoadedPlugin:
    """
    The manager's record of a registered plugin.

    ``context`` is set exactly while ``state`` is ``LOADED``; use
    ``attach``/``detach`` rather than assigning either field directly.

    Attributes:
        descriptor: Registered descriptor
        config: Defaults merged with caller-supplied configuration
        state: Lifecycle state
        context: Context handed to hooks, present only while loaded
    """

    descriptor: PluginDescriptor
    config: Dict[str, Any]
    state: PluginState = PluginState.REGISTERED
    context: Optional["PluginContext"] = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def version(self) -> str:
        return self.descriptor.version

    @property
    def is_loaded(self) -> bool:
        return self.state is PluginState.LOADED

    def attach(self, context: "PluginContext") -> None:
        """Mark loaded with ``context``."""
        self.context = context
        self.state = PluginState.LOADED

    def detach(self) -> None:
        """Mark unloaded and drop the context."""
        self.context = None
        self.state = PluginState.UNLOADED

    def __repr__(self) -> str:
        return f"<LoadedPlugin {self.descriptor} ({self.state.value})>"


def create_plugin(name: str, version: str, **options: Any) -> PluginDescriptor:
    """
    Create a plugin descriptor.

    Routes, middleware, assets and commands may be given as dataclass
    instances or plain mappings; ``config_schema`` may be a mapping.

    Example:
        cache = create_plugin(
            "cache",
            "1.2.0",
            default_config={"ttl": 60},
            routes=[{"path": "/cache/stats", "method": "GET", "handler": stats}],
        )
    """
    return PluginDescriptor(name=name, version=version, **options)


def create_plugin_bundle(
    name: str,
    version: str,
    plugins: Sequence[PluginDescriptor],
    description: str = "",
) -> PluginDescriptor:
    """
    Combine several descriptors into one plugin.

    The bundle's ``init`` runs each bundled ``init`` in order with the
    bundle's context; routes, middleware, assets and commands are
    concatenated. Bundled dependencies and config schemas are not merged.
    """
    bundled = tuple(plugins)

    async def init(context: "PluginContext") -> None:
        for plugin in bundled:
            if plugin.init is not None:
                await invoke(plugin.init, context)

    return create_plugin(
        name,
        version,
        description=description,
        init=init,
        routes=merge_routes(*(p.routes for p in bundled)),
        middleware=merge_middleware(*(p.middleware for p in bundled)),
        assets=[a for p in bundled for a in p.assets],
        commands=[c for p in bundled for c in p.commands],
    )


def merge_routes(*route_lists: Iterable[RouteConfig]) -> List[RouteConfig]:
    """Concatenate route lists, preserving order."""
    return [route for routes in route_lists for route in routes]


def merge_middleware(*middleware_lists: Iterable[MiddlewareConfig]) -> List[MiddlewareConfig]:
    """Concatenate middleware lists, preserving order."""
    return [entry for entries in middleware_lists for entry in entries]


def plugin(
    name: str,
    version: str = "0.1.0",
    **options: Any,
) -> Callable[[type], PluginDescriptor]:
    """
    Decorator that turns a class into a plugin descriptor.

    The class is instantiated once; its ``init``/``setup``/``teardown``
    methods become the lifecycle hooks and its ``routes``, ``middleware``,
    ``assets``, ``commands``, ``dependencies``, ``config_schema`` and
    ``default_config`` attributes are picked up when present.

    Example:
        @plugin(name="greeter", version="1.0.0")
        class Greeter:
            default_config = {"greeting": "hello"}

            async def init(self, context):
                context.logger.info(context.config["greeting"])
    """
    attributes = (
        "dependencies",
        "peer_dependencies",
        "config_schema",
        "default_config",
        "routes",
        "middleware",
        "assets",
        "commands",
        "client_extensions",
    )

    def decorator(cls: type) -> PluginDescriptor:
        instance = cls()
        found: Dict[str, Any] = {
            attr: getattr(instance, attr)
            for attr in attributes
            if hasattr(instance, attr)
        }
        for hook in ("init", "setup", "teardown"):
            if callable(getattr(instance, hook, None)):
                found[hook] = getattr(instance, hook)

        found.setdefault("description", (cls.__doc__ or "").strip())
        return create_plugin(name, version, **{**found, **options})

    return decorator
