"""
Hotspring Core Module
=====================

The host side of plugin composition:
- Application: owns the plugin manager and drives startup/shutdown
- Router: table of mounted routes
- MiddlewareStack: table of mounted middleware
- Response: responses produced by framework-mounted handlers
- Config: layered configuration
"""

from hotspring.core.application import AppState, Application, create_app
from hotspring.core.config import Config
from hotspring.core.middleware import MiddlewareEntry, MiddlewareStack
from hotspring.core.response import Response
from hotspring.core.router import HTTPMethod, Route, Router

__all__ = [
    "Application",
    "AppState",
    "create_app",
    "Config",
    "Router",
    "Route",
    "HTTPMethod",
    "MiddlewareStack",
    "MiddlewareEntry",
    "Response",
]
