"""
Hotspring - Plugin Composition for Python Web Applications
==========================================================

Hotspring composes an application out of self-describing plugins. A plugin
declares its identity, dependencies, configuration schema, lifecycle hooks,
and the routes, middleware and static assets it contributes. The plugin
manager validates, orders, initializes and mounts them onto a host
application.

Features:
---------
- Declarative plugin descriptors
- Configuration schemas with aggregated validation errors
- Dependency-ordered loading with cycle detection
- Per-plugin context: scoped logger, env lookup, shared globals, scheduling
- Route, middleware and static asset mounting
- Unload, reload and lifecycle events

Quick Start:
    from hotspring import Application, create_plugin

    hello = create_plugin("hello", "1.0.0", routes=[
        {"path": "/hello", "method": "GET", "handler": say_hello},
    ])

    app = Application("demo")
    app.use(hello)

    async with app.lifespan():
        ...
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

from typing import TYPE_CHECKING

from hotspring.core.application import Application, create_app
from hotspring.core.config import Config
from hotspring.core.response import Response
from hotspring.plugins import (
    PluginContext,
    PluginDescriptor,
    PluginError,
    PluginManager,
    create_config_schema,
    create_plugin,
    create_plugin_bundle,
    plugin,
)

if TYPE_CHECKING:
    from hotspring.utils.env import Env
    from hotspring.utils.logger import Logger


def __getattr__(name: str):
    """Lazy loading of utilities."""
    _imports = {
        "Logger": "hotspring.utils.logger",
        "Env": "hotspring.utils.env",
    }

    if name in _imports:
        import importlib
        module = importlib.import_module(_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'hotspring' has no attribute '{name}'")


__all__ = [
    "__version__",
    "__license__",
    # Core
    "Application",
    "create_app",
    "Config",
    "Response",
    # Plugins
    "PluginManager",
    "PluginDescriptor",
    "PluginContext",
    "PluginError",
    "create_plugin",
    "create_plugin_bundle",
    "create_config_schema",
    "plugin",
    # Utils (lazy)
    "Logger",
    "Env",
]
