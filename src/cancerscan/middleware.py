"""ASGI middleware bounding request body size on upload routes."""
from __future__ import annotations

from typing import Iterable, Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .errors import PayloadTooLargeError
from .handlers import fail_response


def _declared_length(scope: Scope) -> Optional[int]:
    for key, value in scope.get("headers", []):
        if key == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


class PayloadLimitMiddleware:
    """Reject bodies larger than ``max_bytes`` on the given paths.

    A declared ``Content-Length`` over the limit is answered straight away.
    Otherwise the body is counted as it streams in and ``PayloadTooLargeError``
    is raised to the route reading it once the limit is crossed.
    """

    def __init__(self, app: ASGIApp, max_bytes: int, paths: Iterable[str] = ("/predict",)) -> None:
        self.app = app
        self.max_bytes = max_bytes
        self.paths = frozenset(paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] not in self.paths:
            await self.app(scope, receive, send)
            return

        declared = _declared_length(scope)
        if declared is not None and declared > self.max_bytes:
            response = fail_response(413, PayloadTooLargeError(self.max_bytes).message)
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise PayloadTooLargeError(self.max_bytes)
            return message

        await self.app(scope, limited_receive, send)
