"""In-memory fixed-window rate limiting, exposed as FastAPI dependencies."""
import math
import time
from collections.abc import Callable

from fastapi import Request

from zabaan.core.errors import RateLimitError


class FixedWindowLimiter:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}

    def check(self, key: str, max_requests: int, window_seconds: float) -> tuple[bool, int]:
        """Count one request for ``key``; returns (allowed, seconds until the window resets)."""
        now = self._clock()
        count, reset_at = self._windows.get(key, (0, 0.0))
        if now >= reset_at:
            count, reset_at = 0, now + window_seconds
        retry_after = max(1, math.ceil(reset_at - now))
        if count >= max_requests:
            return False, retry_after
        self._windows[key] = (count + 1, reset_at)
        self._evict(now)
        return True, retry_after

    def _evict(self, now: float) -> None:
        if len(self._windows) < 10_000:
            return
        for key in [k for k, (_, reset_at) in self._windows.items() if reset_at <= now]:
            del self._windows[key]

    def reset(self) -> None:
        self._windows.clear()


limiter = FixedWindowLimiter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def rate_limit(name: str, max_requests: int, window_seconds: int):
    """Dependency limiting ``name`` to ``max_requests`` per window for each client IP."""

    async def dependency(request: Request) -> None:
        allowed, retry_after = limiter.check(f"{name}:{client_ip(request)}", max_requests, window_seconds)
        if not allowed:
            raise RateLimitError(retry_after=retry_after)

    return dependency


# Per-route limits
LEADERBOARD_LIMIT = rate_limit("leaderboard", 60, 60)
CHECKOUT_LIMIT = rate_limit("checkout", 3, 300)
MODULE_ACCESS_LIMIT = rate_limit("module-access", 30, 60)
USER_STATS_LIMIT = rate_limit("user-stats", 10, 60)
PREMIUM_CHECK_LIMIT = rate_limit("check-premium", 20, 60)
