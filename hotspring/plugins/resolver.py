"""
Hotspring Dependency Resolver
=============================

Computes a plugin load order in which every dependency comes before the
plugins that depend on it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Mapping, Sequence, Set, Union

from hotspring.plugins.errors import CircularDependencyError

if TYPE_CHECKING:
    from hotspring.plugins.base import LoadedPlugin, PluginDescriptor


def _dependencies_of(entry: Any) -> Sequence[str]:
    """Declared dependency names of a descriptor or loaded plugin."""
    descriptor = getattr(entry, "descriptor", entry)
    return getattr(descriptor, "dependencies", None) or ()


class DependencyResolver:
    """
    Depth-first topological sort with cycle detection.

    Plugins are visited in registry iteration order and each plugin's
    dependencies in declaration order, so independent plugins keep their
    registration order.

    Example:
        order = DependencyResolver().resolve_order({
            "notifications": notifications,  # depends on "email"
            "email": email,
        })
        # ["email", "notifications"]
    """

    def resolve_order(
        self,
        registry: Mapping[str, Union["PluginDescriptor", "LoadedPlugin"]],
    ) -> List[str]:
        """
        Resolve the load order for ``registry``.

        Args:
            registry: Plugin name to descriptor (or loaded plugin)

        Returns:
            Every registered name, dependencies first

        Raises:
            CircularDependencyError: If the dependency graph has a cycle
        """
        order: List[str] = []
        visited: Set[str] = set()
        visiting: Set[str] = set()

        def visit(name: str) -> None:
            if name in visited:
                return

            if name in visiting:
                raise CircularDependencyError(name)

            entry = registry.get(name)
            if entry is None:
                # Unregistered names are rejected at registration time
                return

            visiting.add(name)

            for dependency in _dependencies_of(entry):
                visit(dependency)

            visiting.discard(name)
            visited.add(name)
            order.append(name)

        for name in registry:
            visit(name)

        return order


def resolve_order(
    registry: Mapping[str, Union["PluginDescriptor", "LoadedPlugin"]],
) -> List[str]:
    """Resolve the load order with a default resolver."""
    return DependencyResolver().resolve_order(registry)
