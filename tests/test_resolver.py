"""Tests for dependency ordering."""

import pytest

from hotspring.plugins import (
    CircularDependencyError,
    DependencyResolver,
    LoadedPlugin,
    create_plugin,
    resolve_order,
)


def descriptors(**deps):
    return {
        name: create_plugin(name, "1.0.0", dependencies=requires)
        for name, requires in deps.items()
    }


class TestResolveOrder:

    def test_chain_in_any_registry_order(self):
        registry = descriptors(c=["b"], a=[], b=["a"])

        assert resolve_order(registry) == ["a", "b", "c"]

    def test_independent_plugins_keep_registry_order(self):
        registry = descriptors(zeta=[], alpha=[], mid=[])

        assert resolve_order(registry) == ["zeta", "alpha", "mid"]

    def test_disconnected_plugins_all_included(self):
        registry = descriptors(api=["db"], db=[], metrics=[], audit=["metrics", "db"])

        order = resolve_order(registry)

        assert sorted(order) == ["api", "audit", "db", "metrics"]
        assert order.index("db") < order.index("api")
        assert order.index("metrics") < order.index("audit")
        assert order.index("db") < order.index("audit")

    def test_dependencies_visited_in_declaration_order(self):
        registry = descriptors(app=["second", "first"], first=[], second=[])

        assert resolve_order(registry) == ["second", "first", "app"]

    def test_two_node_cycle(self):
        registry = descriptors(x=["y"], y=["x"])

        with pytest.raises(CircularDependencyError) as exc_info:
            resolve_order(registry)

        assert exc_info.value.plugin == "x"
        assert "Circular dependency detected involving plugin: x" in str(exc_info.value)

    def test_self_cycle(self):
        with pytest.raises(CircularDependencyError):
            resolve_order(descriptors(loop=["loop"]))

    def test_unregistered_dependency_skipped(self):
        assert resolve_order(descriptors(a=["ghost"])) == ["a"]

    def test_accepts_loaded_plugins(self):
        registry = {
            name: LoadedPlugin(descriptor=d, config={})
            for name, d in descriptors(b=["a"], a=[]).items()
        }

        assert DependencyResolver().resolve_order(registry) == ["a", "b"]

    def test_empty_registry(self):
        assert resolve_order({}) == []
