"""Per-client sliding-window rate limiting."""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from identity_server.core.config import RateLimitSettings
from identity_server.core.exceptions import RateLimited

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per ``window_seconds`` for each key."""

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._max = max_requests
        self._window = window_seconds
        self._clock = clock
        self._key_to_times: dict[str, deque[float]] = {}
        self._next_sweep = clock() + window_seconds

    def allow(self, key: str) -> bool:
        now = self._clock()
        cutoff = now - self._window
        if now >= self._next_sweep:
            self._sweep(cutoff)
            self._next_sweep = now + self._window

        times = self._key_to_times.get(key, deque())
        while times and times[0] <= cutoff:
            times.popleft()
        if len(times) >= self._max:
            return False
        times.append(now)
        self._key_to_times[key] = times
        return True

    def tracked_keys(self) -> list[str]:
        return list(self._key_to_times)

    def _sweep(self, cutoff: float) -> None:
        idle = [key for key, times in self._key_to_times.items() if not times or times[-1] <= cutoff]
        for key in idle:
            del self._key_to_times[key]

    def reset(self) -> None:
        self._key_to_times.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """General ceiling on the API prefix, a stricter one on the auth routes."""

    def __init__(self, app, settings: RateLimitSettings, api_prefix: str = "/api") -> None:
        super().__init__(app)
        self._api_prefix = api_prefix
        self._auth_prefix = f"{api_prefix}/auth"
        self._general = SlidingWindowRateLimiter(settings.max_requests, settings.window_seconds)
        self._auth = SlidingWindowRateLimiter(settings.auth_max_requests, settings.window_seconds)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not path.startswith(self._api_prefix):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        limiter = self._auth if path.startswith(self._auth_prefix) else self._general
        if not limiter.allow(client):
            logger.warning("Rate limit exceeded for %s on %s", client, path)
            error = RateLimited()
            return JSONResponse(
                status_code=error.status_code,
                content={"success": False, "message": error.message, "error": error.to_dict()},
            )
        return await call_next(request)


__all__ = ["SlidingWindowRateLimiter", "RateLimitMiddleware"]
