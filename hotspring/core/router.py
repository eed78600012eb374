"""
Hotspring Route Table
=====================

Ordered record of the routes mounted on an application.

Matching and dispatching requests belongs to the HTTP layer the
application is embedded in. The table only keeps what was mounted, in
mount order, which is the precedence that layer should apply.

Example:
    router = Router()

    @router.get("/health")
    async def health(request):
        return Response("ok")

    router.add("POST", "/users", create_user)
    [r.path for r in router.routes("POST")]  # ["/users"]
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union


class HTTPMethod(str, Enum):
    """HTTP methods the route table accepts."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True)
class Route:
    """
    A mounted route.

    Attributes:
        method: HTTP method
        path: Path pattern as given at mount time
        handler: Request handler
        name: Optional route name
    """
    method: str
    path: str
    handler: Callable[..., Any]
    name: Optional[str] = None


class Router:
    """Route table indexed by method."""

    def __init__(self) -> None:
        self._routes: Dict[str, List[Route]] = {
            method.value: [] for method in HTTPMethod
        }
        self._named_routes: Dict[str, Route] = {}

    def add(
        self,
        method: Union[str, HTTPMethod],
        path: str,
        handler: Callable[..., Any],
        *,
        name: Optional[str] = None,
    ) -> Route:
        """
        Add a route.

        Mounting the same path twice keeps both entries.

        Raises:
            ValueError: If the method is not an HTTP method
        """
        method = HTTPMethod(str(getattr(method, "value", method)).upper())
        route = Route(method=method.value, path=path, handler=handler, name=name)

        self._routes[method.value].append(route)
        if name:
            self._named_routes[name] = route

        return route

    def route(
        self,
        path: str,
        methods: Optional[List[str]] = None,
        *,
        name: Optional[str] = None,
    ) -> Callable:
        """Decorator registering a handler for one or more methods."""
        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            for method in methods or ["GET"]:
                self.add(method, path, handler, name=name)
            return handler
        return decorator

    def get(self, path: str, **kwargs: Any) -> Callable:
        """Register a GET route."""
        return self.route(path, ["GET"], **kwargs)

    def post(self, path: str, **kwargs: Any) -> Callable:
        """Register a POST route."""
        return self.route(path, ["POST"], **kwargs)

    def put(self, path: str, **kwargs: Any) -> Callable:
        """Register a PUT route."""
        return self.route(path, ["PUT"], **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Callable:
        """Register a PATCH route."""
        return self.route(path, ["PATCH"], **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Callable:
        """Register a DELETE route."""
        return self.route(path, ["DELETE"], **kwargs)

    def named(self, name: str) -> Route:
        """
        Get a route by name.

        Raises:
            KeyError: If route name not found
        """
        if name not in self._named_routes:
            raise KeyError(f"Route '{name}' not found")
        return self._named_routes[name]

    def routes(self, method: Optional[str] = None) -> List[Route]:
        """Mounted routes, optionally for one method, in mount order."""
        if method is not None:
            return list(self._routes.get(method.upper(), []))
        return [route for routes in self._routes.values() for route in routes]

    def __len__(self) -> int:
        return sum(len(routes) for routes in self._routes.values())
