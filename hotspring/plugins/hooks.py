"""
Hotspring Plugin Hooks
======================

Lifecycle event hooks emitted by the plugin manager, plus the helper used
to call plugin hooks that may or may not be coroutines.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

HookCallback = Callable[..., Union[Any, Awaitable[Any]]]


async def invoke(callback: HookCallback, *args: Any, **kwargs: Any) -> Any:
    """
    Call ``callback`` and await the result if it is awaitable.

    Plugin authors may write lifecycle hooks as plain functions or as
    coroutine functions; both go through here.
    """
    result = callback(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


class HookPriority(Enum):
    """Hook execution priority."""

    HIGHEST = 0
    HIGH = 25
    NORMAL = 50
    LOW = 75
    LOWEST = 100


@dataclass
class HookHandler:
    """
    Registered hook handler.

    Attributes:
        callback: Handler function
        priority: Execution priority (lower runs first)
        once: Execute only once
    """

    callback: HookCallback
    priority: int = HookPriority.NORMAL.value
    once: bool = False
    _executed: bool = field(default=False, repr=False)

    async def execute(self, *args: Any, **kwargs: Any) -> Any:
        """Execute the handler."""
        if self.once and self._executed:
            return None

        self._executed = True
        return await invoke(self.callback, *args, **kwargs)


class Hook:
    """
    Named hook with prioritised handlers.

    Handler failures are collected into the result list instead of being
    raised, so one listener cannot break the caller.

    Example:
        loaded = Hook("plugin.loaded")

        @loaded.handler()
        async def announce(plugin):
            print(f"{plugin.name} is up")

        await loaded.trigger(plugin)
    """

    def __init__(self, name: str, description: str = ""):
        """
        Initialize hook.

        Args:
            name: Hook name
            description: Hook description
        """
        self.name = name
        self.description = description
        self._handlers: List[HookHandler] = []

    def add(
        self,
        callback: HookCallback,
        priority: int = HookPriority.NORMAL.value,
        once: bool = False,
    ) -> "Hook":
        """
        Add handler to hook.

        Returns:
            Self for chaining
        """
        self._handlers.append(HookHandler(callback=callback, priority=priority, once=once))
        self._handlers.sort(key=lambda h: h.priority)
        return self

    def handler(
        self,
        priority: int = HookPriority.NORMAL.value,
        once: bool = False,
    ) -> Callable[[HookCallback], HookCallback]:
        """Decorator to add handler."""
        def decorator(func: HookCallback) -> HookCallback:
            self.add(func, priority, once)
            return func
        return decorator

    def remove(self, callback: HookCallback) -> bool:
        """
        Remove handler from hook.

        Returns:
            True if removed
        """
        for handler in self._handlers:
            if handler.callback == callback:
                self._handlers.remove(handler)
                return True
        return False

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()

    async def trigger(self, *args: Any, **kwargs: Any) -> List[Any]:
        """
        Trigger hook and execute all handlers.

        Returns:
            Handler return values, or the exception a handler raised
        """
        results = []

        for handler in list(self._handlers):
            try:
                results.append(await handler.execute(*args, **kwargs))
            except Exception as e:
                results.append(e)

        self._handlers = [
            h for h in self._handlers
            if not (h.once and h._executed)
        ]

        return results

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"<Hook {self.name!r} handlers={len(self._handlers)}>"


class HookRegistry:
    """
    Registry for managing hooks.

    Example:
        registry = HookRegistry()
        registry.on(PluginEvents.LOADED, on_loaded)
        await registry.trigger(PluginEvents.LOADED, plugin)
    """

    def __init__(self):
        """Initialize registry."""
        self._hooks: Dict[str, Hook] = {}

    def register(self, name: str, description: str = "") -> Hook:
        """Register a new hook, or return the existing one."""
        if name not in self._hooks:
            self._hooks[name] = Hook(name, description)
        return self._hooks[name]

    def get(self, name: str) -> Optional[Hook]:
        """Get hook by name."""
        return self._hooks.get(name)

    def has(self, name: str) -> bool:
        """Check if hook exists."""
        return name in self._hooks

    def on(
        self,
        name: str,
        callback: HookCallback,
        priority: int = HookPriority.NORMAL.value,
        once: bool = False,
    ) -> None:
        """Add handler to hook, creating the hook if needed."""
        self.register(name).add(callback, priority, once)

    def off(self, name: str, callback: HookCallback) -> bool:
        """Remove handler from hook."""
        hook = self._hooks.get(name)
        if hook:
            return hook.remove(callback)
        return False

    async def trigger(self, name: str, *args: Any, **kwargs: Any) -> List[Any]:
        """Trigger hook by name; unknown hooks yield no results."""
        hook = self._hooks.get(name)
        if hook:
            return await hook.trigger(*args, **kwargs)
        return []

    def list_hooks(self) -> List[str]:
        """Get list of registered hook names."""
        return list(self._hooks.keys())


class PluginEvents:
    """Lifecycle event names emitted by the plugin manager."""

    LOADED = "plugin.loaded"
    FAILED = "plugin.failed"
    UNLOADED = "plugin.unloaded"
