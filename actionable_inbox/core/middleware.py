import logging
import math
import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
BODY_TOO_LARGE_MESSAGE = "Request entity too large"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window limiter keyed by client address.

    Each address gets `max_requests` per `window_seconds`; the window starts
    with the address's first request and resets once it has elapsed.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def _hit(self, key: str) -> Tuple[int, float]:
        """Count one request for `key`; returns (count in window, seconds until reset)."""
        now = self.clock()
        with self._lock:
            started, count = self._hits.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._hits[key] = (started, count)
            # Drop expired windows so idle addresses don't accumulate.
            if len(self._hits) > 10000:
                self._hits = {
                    k: v for k, v in self._hits.items()
                    if now - v[0] < self.window_seconds
                }
        return count, self.window_seconds - (now - started)

    async def dispatch(self, request: Request, call_next):
        key = request.client.host if request.client else "unknown"
        count, reset_in = self._hit(key)
        remaining = max(self.max_requests - count, 0)
        headers = {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(math.ceil(reset_in)),
        }

        if count > self.max_requests:
            logger.warning("Rate limit exceeded for %s on %s %s", key, request.method, request.url.path)
            headers["Retry-After"] = str(math.ceil(reset_in))
            return JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE}, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response


class BodySizeLimitMiddleware:
    """
    Caps request bodies at `max_bytes`.

    A declared Content-Length over the cap is refused up front; otherwise
    the bytes are counted as they arrive, so chunked uploads are capped too.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = 10 * 1024 * 1024):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                response = JSONResponse(status_code=400, content={"error": "Invalid Content-Length header"})
                await response(scope, receive, send)
                return
            if declared > self.max_bytes:
                await self._too_large(scope, receive, send)
                return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # Surfaces through the app's HTTPException handler.
                    raise HTTPException(status_code=413, detail=BODY_TOO_LARGE_MESSAGE)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except HTTPException as exc:
            if exc.status_code != 413 or response_started:
                raise
            await self._too_large(scope, receive, send)

    async def _too_large(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.warning("Rejected request body over %d bytes on %s", self.max_bytes, scope.get("path"))
        response = JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE_MESSAGE})
        await response(scope, receive, send)


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
