"""
Hotspring Middleware Table
==========================

Ordered record of middleware mounted on an application, each scoped to a
path pattern. ``"*"`` covers every path.

Middleware follows the "onion" model: a handler receives the request and
a ``call_next`` coroutine and returns a response.

Example:
    async def timing(request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Elapsed"] = f"{time.perf_counter() - start:.3f}"
        return response

    stack = MiddlewareStack()
    stack.add(timing, path="/api/*")
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any, Callable, Iterator, List, Optional


@dataclass(frozen=True)
class MiddlewareEntry:
    """Middleware stack entry with metadata."""
    handler: Callable[..., Any]
    path: str = "*"
    name: Optional[str] = None

    def applies_to(self, path: str) -> bool:
        """Whether the entry's path pattern covers ``path``."""
        return self.path == "*" or fnmatchcase(path, self.path)


class MiddlewareStack:
    """
    Middleware entries in mount order.

    Entries are never re-sorted: the order they were mounted in is the
    order the HTTP layer should wrap them in.
    """

    def __init__(self) -> None:
        self._entries: List[MiddlewareEntry] = []

    def add(
        self,
        handler: Callable[..., Any],
        *,
        path: str = "*",
        name: Optional[str] = None,
    ) -> "MiddlewareStack":
        """
        Add middleware.

        Returns:
            Self for chaining
        """
        entry = MiddlewareEntry(
            handler=handler,
            path=path or "*",
            name=name or getattr(handler, "__name__", type(handler).__name__),
        )
        self._entries.append(entry)
        return self

    def remove(self, name: str) -> bool:
        """
        Remove the first middleware with ``name``.

        Returns:
            True if middleware was removed, False otherwise
        """
        for i, entry in enumerate(self._entries):
            if entry.name == name:
                del self._entries[i]
                return True
        return False

    def for_path(self, path: str) -> List[MiddlewareEntry]:
        """Entries whose pattern covers ``path``, in mount order."""
        return [entry for entry in self._entries if entry.applies_to(path)]

    @property
    def entries(self) -> List[MiddlewareEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MiddlewareEntry]:
        return iter(list(self._entries))
