"""
Rate Limiting
=============

Per-client request throttling for the HTTP API using a sliding window.
Clients are keyed by their remote address.
"""

import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional


@dataclass
class RateLimitDecision:
    """Outcome of counting one request against a client's window."""
    allowed: bool
    limit: int
    remaining: int
    reset_after: float

    def headers(self) -> Dict[str, str]:
        """Standard RateLimit-* response headers."""
        headers = {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(math.ceil(self.reset_after)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(math.ceil(self.reset_after))
        return headers


class SlidingWindowRateLimiter:
    """
    In-memory sliding window limiter.

    Each client may make ``max_requests`` requests within any
    ``window_seconds`` span. Rejected requests are not counted.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._requests: Dict[str, Deque[float]] = {}
        self._last_sweep = self._clock()

    def _clean_window(self, window: Deque[float], now: float) -> None:
        """Remove entries older than the window."""
        cutoff = now - self.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()

    def _sweep(self, now: float) -> None:
        """Drop clients whose requests have all aged out."""
        if now - self._last_sweep < self.window_seconds:
            return
        for client_id in list(self._requests):
            window = self._requests[client_id]
            self._clean_window(window, now)
            if not window:
                del self._requests[client_id]
        self._last_sweep = now

    def hit(self, client_id: str) -> RateLimitDecision:
        """
        Count a request for ``client_id``.

        Args:
            client_id: Client key, usually the remote address

        Returns:
            Whether the request is allowed, with header values
        """
        now = self._clock()
        self._sweep(now)

        window = self._requests.setdefault(client_id, deque())
        self._clean_window(window, now)

        allowed = len(window) < self.max_requests
        if allowed:
            window.append(now)

        reset_after = (window[0] + self.window_seconds - now) if window else self.window_seconds
        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(self.max_requests - len(window), 0),
            reset_after=max(reset_after, 0.0),
        )

    def reset(self, client_id: Optional[str] = None) -> None:
        """Forget one client's history, or everyone's."""
        if client_id is None:
            self._requests.clear()
        else:
            self._requests.pop(client_id, None)

    @property
    def tracked_clients(self) -> int:
        return len(self._requests)
