"""
Security Middleware
===================

Security response headers and request body size enforcement for the HTTP API.
"""

from typing import Dict, List, MutableMapping

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.models.schemas import ErrorResponse

# No Content-Security-Policy or Cross-Origin-Embedder-Policy.
SECURITY_HEADERS: Dict[str, str] = {
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


def apply_security_headers(headers: MutableMapping[str, str]) -> None:
    """Set security headers the route has not already set."""
    for name, value in SECURITY_HEADERS.items():
        if name not in headers:
            headers[name] = value


def body_too_large(request: Request, max_body_size: int) -> bool:
    """Check the declared request body size against the limit."""
    content_length = request.headers.get("content-length")
    if content_length is None:
        return False
    try:
        return int(content_length) > max_body_size
    except ValueError:
        return False


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than the configured maximum.

    A declared Content-Length is checked before the application runs. Bodies
    sent without one (chunked transfer) are read and counted first, then
    replayed to the application.
    """

    def __init__(self, app: ASGIApp, max_body_size: int) -> None:
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        if body_too_large(request, self.max_body_size):
            await self._reject(request)(scope, receive, send)
            return
        if "content-length" in request.headers:
            await self.app(scope, receive, send)
            return

        buffered: List[Message] = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_size:
                await self._reject(request)(scope, receive, send)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    def _reject(self, request: Request) -> JSONResponse:
        error = ErrorResponse(
            error="Request entity too large",
            message=f"Maximum request body size is {self.max_body_size} bytes",
            request_id=getattr(request.state, "request_id", None),
        )
        return JSONResponse(
            status_code=413, content=error.model_dump(mode="json", exclude_none=True)
        )
