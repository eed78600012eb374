"""
Hotspring Plugin Errors
=======================

Exceptions raised while registering, ordering, loading and unloading
plugins.
"""

from __future__ import annotations

from typing import List, Optional


class PluginError(Exception):
    """Plugin-related error."""
    pass


class PluginNotFoundError(PluginError):
    """Plugin is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Plugin {name} not found")
        self.plugin = name


class IdentityError(PluginError):
    """Malformed or missing plugin name or version."""
    pass


class DuplicatePluginError(PluginError):
    """A plugin with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Plugin "{name}" is already registered')
        self.plugin = name


class ConfigValidationError(PluginError):
    """
    Plugin configuration does not satisfy its schema.

    Attributes:
        plugin: Plugin name
        errors: Every schema violation found
    """

    def __init__(self, plugin: str, errors: List[str]) -> None:
        super().__init__(
            f"Plugin {plugin} configuration invalid: {', '.join(errors)}"
        )
        self.plugin = plugin
        self.errors = list(errors)


class MissingDependencyError(PluginError):
    """A declared dependency has not been registered yet."""

    def __init__(self, plugin: str, dependency: str) -> None:
        super().__init__(f"Plugin {plugin} requires dependency: {dependency}")
        self.plugin = plugin
        self.dependency = dependency


class CircularDependencyError(PluginError):
    """The dependency graph contains a cycle."""

    def __init__(self, plugin: str) -> None:
        super().__init__(
            f"Circular dependency detected involving plugin: {plugin}"
        )
        self.plugin = plugin


class UnsupportedMethodError(PluginError):
    """A route declares an HTTP method outside the supported set."""

    def __init__(self, method: str, plugin: Optional[str] = None) -> None:
        message = f"Unsupported HTTP method: {method}"
        if plugin:
            message = f"{message} (plugin {plugin})"
        super().__init__(message)
        self.method = method
        self.plugin = plugin


class HookExecutionError(PluginError):
    """
    A lifecycle hook raised.

    The original exception is kept as ``original`` and chained as the
    cause; its message is preserved in this error's message.
    """

    def __init__(self, plugin: str, hook: str, original: BaseException) -> None:
        super().__init__(f"Plugin {plugin} {hook} hook failed: {original}")
        self.plugin = plugin
        self.hook = hook
        self.original = original
