# clientdb/middleware.py
"""
Cross-cutting HTTP concerns: security headers and per-IP rate limiting.
"""

import math
import threading
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Optional, Tuple

from fastapi import Request

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def content_security_policy(asset_host: str) -> str:
    directives = {
        "default-src": ["'self'"],
        "style-src": ["'self'", "'unsafe-inline'", asset_host],
        "script-src": ["'self'", "'unsafe-inline'"],
        "font-src": ["'self'", asset_host],
        "img-src": ["'self'", "data:", "https:"],
        "connect-src": ["'self'", asset_host],
        "object-src": ["'none'"],
        "base-uri": ["'self'"],
        "frame-ancestors": ["'self'"],
    }
    return "; ".join(f"{name} {' '.join(values)}" for name, values in directives.items())


def security_headers(asset_host: str) -> Dict[str, str]:
    return {
        "Content-Security-Policy": content_security_policy(asset_host),
        "Cross-Origin-Opener-Policy": "same-origin",
        "Cross-Origin-Resource-Policy": "same-origin",
        "Referrer-Policy": "no-referrer",
        "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
        "X-Content-Type-Options": "nosniff",
        "X-DNS-Prefetch-Control": "off",
        "X-Frame-Options": "SAMEORIGIN",
    }


class SecurityHeadersMiddleware:
    """Adds the security header set to every HTTP response"""

    def __init__(self, asset_host: str):
        self.headers = security_headers(asset_host)

    async def __call__(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response


class SlidingWindowRateLimiter:
    """
    Per-key sliding window limiter.

    Each key keeps the timestamps of its accepted hits; hits older than the
    window are purged before every check. Rejected hits are not recorded.
    Once per window, keys whose hits have all expired are dropped.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def hit(self, key: str) -> Tuple[bool, int, Optional[int]]:
        """
        Record a hit for key.

        Returns:
            (allowed, remaining, retry_after_seconds); retry_after is None when allowed
        """
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            dq = self._hits[key]
            # purge
            while dq and dq[0] <= now - self.window_seconds:
                dq.popleft()

            if len(dq) >= self.max_requests:
                retry_after = max(1, math.ceil(dq[0] + self.window_seconds - now))
                return False, 0, retry_after

            dq.append(now)
            return True, self.max_requests - len(dq), None

    def _sweep(self, now: float) -> None:
        cutoff = now - self.window_seconds
        stale = [key for key, dq in self._hits.items() if not dq or dq[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


class RateLimitExceeded(Exception):
    def __init__(self, retry_after: int, limit: int):
        self.retry_after = retry_after
        self.limit = limit
        super().__init__(RATE_LIMIT_MESSAGE)


def client_ip(request: Request) -> str:
    return request.client.host if request and request.client else "unknown"
