"""Rate limiting middleware for the API.

This module provides a fixed-window request counter keyed by client and
path, plus the Starlette middleware that turns its decisions into HTTP
responses. The limiter is an explicitly owned store: callers construct it,
inject a clock, and hand it to the middleware.
"""

import asyncio
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from nanjil.app.core.logging import get_log_context, get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]

DEFAULT_MESSAGE = "Too many requests"
UNKNOWN_CLIENT = "unknown"


def wall_clock_ms() -> float:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time() * 1000


@dataclass
class RateLimitEntry:
    """Counter state for one client/path key within its current window."""
    count: int
    reset_time: float


@dataclass
class RateLimitResult:
    """Result of a rate limit check.

    reset_time is expressed in the limiter clock's unit (milliseconds).
    retry_after is in whole seconds and only set on rejection.
    """
    allowed: bool
    limit: int
    remaining: int
    reset_time: float
    retry_after: Optional[int] = None
    message: Optional[str] = None


class FixedWindowRateLimiter:
    """In-memory fixed-window rate limiter.

    Each key gets a window of ``window_ms`` starting at its first request.
    Expired entries are reset lazily on the next request for the same key;
    ``sweep`` removes them eagerly. A threading lock serializes access, so
    the same sequence of calls produces the same decisions whether the host
    runs handlers on one event loop or on several threads.

    Memory:
    - Unbounded by default, one entry per distinct (client, path) pair
    - With ``max_entries`` set, expired entries are swept first and then the
      least recently used live entries are evicted
    """

    def __init__(
        self,
        window_ms: int,
        max_requests: int,
        message: str = DEFAULT_MESSAGE,
        clock: Optional[Clock] = None,
        max_entries: Optional[int] = None,
        lock: Optional[threading.Lock] = None,
    ):
        """Initialize rate limiter.

        Args:
            window_ms: Window length in milliseconds
            max_requests: Maximum requests allowed per key per window
            message: Message carried by rejections
            clock: Callable returning the current time in milliseconds
            max_entries: Optional bound on the number of stored keys
            lock: Guard for the store (a fresh threading.Lock by default)
        """
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.window_ms = window_ms
        self.max_requests = max_requests
        self.message = message or DEFAULT_MESSAGE
        self._clock = clock or wall_clock_ms
        self._max_entries = max_entries
        self._store: OrderedDict[str, RateLimitEntry] = OrderedDict()
        self._lock = lock or threading.Lock()

    @staticmethod
    def make_key(client_id: str, path: str) -> str:
        return f"{client_id}:{path}"

    def __len__(self) -> int:
        return len(self._store)

    def get_entry(self, client_id: str, path: str) -> Optional[RateLimitEntry]:
        """Return the stored entry for a key, expired or not."""
        with self._lock:
            return self._store.get(self.make_key(client_id, path))

    def check(self, client_id: str, path: str, now: Optional[float] = None) -> RateLimitResult:
        """Count a request and decide whether it is allowed.

        The store is updated on every allowed call. Rejections leave the
        entry untouched.
        """
        key = self.make_key(client_id, path)
        with self._lock:
            if now is None:
                now = self._clock()

            entry = self._store.get(key)

            if entry is None or now > entry.reset_time:
                if entry is None:
                    self._make_room(now)
                entry = RateLimitEntry(count=1, reset_time=now + self.window_ms)
                self._store[key] = entry
                self._store.move_to_end(key)
                return self._allowed(entry)

            self._store.move_to_end(key)

            if entry.count < self.max_requests:
                entry.count += 1
                return self._allowed(entry)

            return RateLimitResult(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                reset_time=entry.reset_time,
                retry_after=max(1, math.ceil((entry.reset_time - now) / 1000)),
                message=self.message,
            )

    def sweep(self, now: Optional[float] = None) -> int:
        """Remove entries whose window has passed.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._sweep_locked(self._clock() if now is None else now)

    def reset(self) -> None:
        """Drop all stored entries."""
        with self._lock:
            self._store.clear()

    def _allowed(self, entry: RateLimitEntry) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - entry.count),
            reset_time=entry.reset_time,
        )

    def _sweep_locked(self, now: float) -> int:
        expired = [key for key, entry in self._store.items() if now > entry.reset_time]
        for key in expired:
            del self._store[key]
        return len(expired)

    def _make_room(self, now: float) -> None:
        """Enforce max_entries before a new key is inserted."""
        if self._max_entries is None or len(self._store) < self._max_entries:
            return
        self._sweep_locked(now)
        while len(self._store) >= self._max_entries:
            evicted, _ = self._store.popitem(last=False)
            logger.debug(f"Evicted rate limit entry {evicted} to stay under max_entries")


async def run_periodic_sweep(limiter: FixedWindowRateLimiter, interval_seconds: float) -> None:
    """Sweep expired entries every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = limiter.sweep()
        if removed:
            logger.debug(
                f"Rate limit sweep removed {removed} expired entries",
                extra={"remaining_entries": len(limiter)},
            )


def get_client_id(request: Request) -> str:
    """Best-effort client identifier for rate limiting.

    Uses X-Forwarded-For, then X-Real-IP. Clients sending neither share the
    "unknown" bucket.
    """
    return (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or UNKNOWN_CLIENT
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce rate limits on requests.

    Limits are applied per client identifier and request path. Only paths
    under one of ``path_prefixes`` are counted.
    """

    def __init__(
        self,
        app,
        limiter: FixedWindowRateLimiter,
        path_prefixes: Sequence[str] = ("/api",),
    ):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefixes = tuple(path_prefixes)

    def _is_limited(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.path_prefixes)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request with rate limiting."""
        path = request.url.path
        if not self._is_limited(path):
            return await call_next(request)

        client_id = get_client_id(request)
        result = self.limiter.check(client_id, path)
        reset_seconds = str(math.ceil(result.reset_time / 1000))

        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded on {path}",
                extra=get_log_context(
                    request_id=getattr(request.state, "request_id", None),
                    client_id=client_id,
                ),
            )
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": {
                        "code": "RATE_LIMIT_EXCEEDED",
                        "message": result.message,
                    },
                },
                headers={
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset_seconds,
                    "Retry-After": str(result.retry_after),
                },
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = reset_seconds

        return response
