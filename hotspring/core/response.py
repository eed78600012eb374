"""
Hotspring Response Objects
==========================

Minimal response values returned by handlers the framework itself mounts,
such as plugin asset interceptors. Serving them is up to the HTTP layer
the host is embedded in.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, Optional


class Response:
    """
    Plain HTTP response.

    Example:
        return Response("Hello", status_code=200)
        return Response.not_found()
    """

    media_type: str = "text/plain"
    charset: str = "utf-8"

    def __init__(
        self,
        content: Any = None,
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
        media_type: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.headers: Dict[str, str] = dict(headers or {})

        if media_type:
            self.media_type = media_type

        self.body = self.render(content)

        if "content-type" not in {k.lower() for k in self.headers}:
            content_type = self.media_type
            if self.charset and content_type.startswith("text/"):
                content_type += f"; charset={self.charset}"
            self.headers["Content-Type"] = content_type

        self.headers["Content-Length"] = str(len(self.body))

    def render(self, content: Any) -> bytes:
        """Encode content as the response body."""
        if content is None:
            return b""
        if isinstance(content, bytes):
            return content
        return str(content).encode(self.charset)

    @property
    def text(self) -> str:
        return self.body.decode(self.charset)

    @classmethod
    def error(cls, status_code: int, message: Optional[str] = None) -> "Response":
        """Response with the standard reason phrase as body."""
        return cls(message or HTTPStatus(status_code).phrase, status_code=status_code)

    @classmethod
    def not_found(cls) -> "Response":
        """404 Not Found."""
        return cls.error(404)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.status_code}>"

