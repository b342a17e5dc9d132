"""Per-client rate limiting middleware."""

import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from guruji.core.logging import setup_logger
from guruji.schemas.chat import ErrorCode

logger = setup_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


@dataclass
class Window:
    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """Counts requests per client key in fixed time windows."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Window] = {}

    def hit(self, key: str) -> tuple[bool, int, float]:
        """
        Record one request for a client.

        Returns:
            Tuple of (allowed, remaining requests, seconds until the window resets)
        """
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            self._purge(now)
            window = Window(started_at=now)
            self._windows[key] = window

        window.count += 1
        reset_in = self.window_seconds - (now - window.started_at)
        remaining = max(self.max_requests - window.count, 0)
        return window.count <= self.max_requests, remaining, reset_in

    def _purge(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware rejecting clients that exceed the request budget on /api/ routes."""

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int,
        window_minutes: int,
        prefix: str = "/api/",
        excluded_paths: Optional[Iterable[str]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.prefix = prefix
        self.excluded_paths = set(excluded_paths or ())
        self.limiter = FixedWindowRateLimiter(
            max_requests=max_requests, window_seconds=window_minutes * 60, clock=clock
        )

    async def dispatch(self, request: Request, call_next):
        """Count the request and reject it once the window budget is spent."""
        path = request.url.path
        if not path.startswith(self.prefix) or path in self.excluded_paths:
            return await call_next(request)

        client_key = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = self.limiter.hit(client_key)
        headers = {
            "RateLimit-Limit": str(self.limiter.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(math.ceil(reset_in)),
        }

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_key} on {path}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "error": RATE_LIMIT_MESSAGE,
                    "code": ErrorCode.RATE_LIMIT_EXCEEDED.value,
                },
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
