"""Tests for lifecycle event hooks."""

import pytest

from hotspring.plugins.hooks import Hook, HookPriority, HookRegistry, invoke


class TestInvoke:

    @pytest.mark.asyncio
    async def test_sync_and_async(self):
        async def double(x):
            return x * 2

        assert await invoke(lambda x: x + 1, 1) == 2
        assert await invoke(double, 4) == 8


class TestHook:

    @pytest.mark.asyncio
    async def test_priority_order(self):
        hook = Hook("plugin.loaded")
        hook.add(lambda: "low", priority=HookPriority.LOW.value)
        hook.add(lambda: "first", priority=HookPriority.HIGHEST.value)
        hook.add(lambda: "normal")

        assert await hook.trigger() == ["first", "normal", "low"]

    @pytest.mark.asyncio
    async def test_once(self):
        hook = Hook("plugin.loaded")

        @hook.handler(once=True)
        def only_once():
            return "ran"

        assert await hook.trigger() == ["ran"]
        assert await hook.trigger() == []
        assert len(hook) == 0

    @pytest.mark.asyncio
    async def test_errors_collected(self):
        hook = Hook("plugin.failed")

        def broken():
            raise RuntimeError("listener")

        hook.add(broken)
        hook.add(lambda: "after")

        results = await hook.trigger()

        assert isinstance(results[0], RuntimeError)
        assert results[1] == "after"


class TestHookRegistry:

    @pytest.mark.asyncio
    async def test_on_off(self):
        registry = HookRegistry()

        def listener(name):
            return name

        registry.on("plugin.loaded", listener)

        assert registry.has("plugin.loaded")
        assert await registry.trigger("plugin.loaded", "email") == ["email"]
        assert registry.off("plugin.loaded", listener)
        assert await registry.trigger("plugin.loaded", "email") == []
        assert not registry.off("plugin.unknown", listener)
        assert await registry.trigger("plugin.unknown") == []
        assert registry.list_hooks() == ["plugin.loaded"]
