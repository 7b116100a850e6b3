# pixelbridge_project/core/middleware.py
import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

RATE_LIMITED_PATH_PREFIX = "/webhook"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def is_rate_limited_path(path: str) -> bool:
    return path == RATE_LIMITED_PATH_PREFIX or path.startswith(RATE_LIMITED_PATH_PREFIX + "/")


async def rate_limit_middleware(request: Request, call_next):
    """Rejects callers over their window quota before the request reaches any route."""
    if not is_rate_limited_path(request.url.path):
        return await call_next(request)

    limiter = request.app.state.rate_limiter
    ip = client_ip(request)
    decision = limiter.hit(ip)
    headers = {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(math.ceil(decision.reset_after)),
    }

    if not decision.allowed:
        logger.warning(f"Rate limit exceeded for {ip} on {request.method} {request.url.path}")
        window_minutes = math.ceil(limiter.window_seconds / 60)
        headers["Retry-After"] = str(math.ceil(decision.reset_after))
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={
                "success": False,
                "error": f"Too many requests. Try again in {window_minutes} minutes.",
                "code": "RATE_LIMITED",
            },
            headers=headers,
        )

    response = await call_next(request)
    response.headers.update(headers)
    return response


class BodySizeLimitMiddleware:
    """
    Rejects request bodies larger than `max_bytes` with a 413.

    The declared Content-Length is checked up front; the bytes actually received are
    counted as well, so chunked uploads without a Content-Length are capped too. The
    buffered body is then replayed to the application.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            await self._reject(scope, receive, send)
            return

        chunks = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.max_bytes:
                await self._reject(scope, receive, send)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        body = b"".join(chunks)
        replayed = False

        async def replay_receive() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={
                "success": False,
                "error": f"Request body exceeds {self.max_bytes} bytes",
                "code": "PAYLOAD_TOO_LARGE",
            },
        )
        await response(scope, receive, send)


async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


def register_middleware(app: FastAPI, max_body_bytes: int) -> None:
    # The last middleware registered runs first: security headers, then the rate
    # limiter, then the body size guard. Oversized requests still count against
    # the caller's window.
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=max_body_bytes)
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(security_headers_middleware)
