"""
Hotspring Plugin System
=======================

Plugin descriptors, config schemas, dependency ordering and the lifecycle
manager.
"""

from __future__ import annotations

from hotspring.plugins.base import (
    AssetConfig,
    ClientExtension,
    ClientExtensions,
    CommandConfig,
    CommandOption,
    LoadedPlugin,
    MiddlewareConfig,
    PluginDescriptor,
    PluginState,
    RouteConfig,
    RouteMethod,
    create_plugin,
    create_plugin_bundle,
    merge_middleware,
    merge_routes,
    plugin,
)
from hotspring.plugins.context import DependencyContexts, PluginContext, PluginUtils
from hotspring.plugins.errors import (
    CircularDependencyError,
    ConfigValidationError,
    DuplicatePluginError,
    HookExecutionError,
    IdentityError,
    MissingDependencyError,
    PluginError,
    PluginNotFoundError,
    UnsupportedMethodError,
)
from hotspring.plugins.hooks import Hook, HookRegistry, PluginEvents
from hotspring.plugins.manager import AssetInterceptor, HostApplication, PluginManager, hot_reload
from hotspring.plugins.resolver import DependencyResolver, resolve_order
from hotspring.plugins.schema import (
    ConfigSchema,
    ConfigValidator,
    PropertySchema,
    ValidationResult,
    create_config_schema,
    validate_config,
)

__all__ = [
    # Descriptors
    "PluginDescriptor",
    "RouteConfig",
    "RouteMethod",
    "MiddlewareConfig",
    "AssetConfig",
    "CommandConfig",
    "CommandOption",
    "ClientExtension",
    "ClientExtensions",
    "LoadedPlugin",
    "PluginState",
    "create_plugin",
    "create_plugin_bundle",
    "merge_routes",
    "merge_middleware",
    "plugin",
    # Schema
    "ConfigSchema",
    "PropertySchema",
    "ConfigValidator",
    "ValidationResult",
    "create_config_schema",
    "validate_config",
    # Ordering
    "DependencyResolver",
    "resolve_order",
    # Context
    "PluginContext",
    "PluginUtils",
    "DependencyContexts",
    # Manager
    "PluginManager",
    "HostApplication",
    "AssetInterceptor",
    "hot_reload",
    # Hooks
    "Hook",
    "HookRegistry",
    "PluginEvents",
    # Errors
    "PluginError",
    "PluginNotFoundError",
    "IdentityError",
    "DuplicatePluginError",
    "ConfigValidationError",
    "MissingDependencyError",
    "CircularDependencyError",
    "UnsupportedMethodError",
    "HookExecutionError",
]
