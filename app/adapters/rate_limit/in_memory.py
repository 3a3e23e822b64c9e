"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: prune + conditional append happens under one lock.
- Keys are never evicted; the ledger grows with the number of distinct
  clients seen during the process lifetime.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


def epoch_millis() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping a list of accepted timestamps per key.

    The window is recomputed relative to ``now`` on every call, so there is
    no burst at bucket boundaries as with fixed windows.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_ms: int,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of accepted requests per window.
            window_ms: Size of the sliding window in milliseconds.
            clock: Time source returning epoch milliseconds.

        Raises:
            ValueError: If limit or window_ms are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._limit = limit
        self._window_ms = window_ms
        self._clock = clock
        self._lock = threading.RLock()
        self._ledger: dict[str, list[int]] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def _prune(self, key: str, now: int) -> list[int]:
        """Drop timestamps that fell out of the window and store the rest."""
        timestamps = [t for t in self._ledger.get(key, []) if now - t < self._window_ms]
        self._ledger[key] = timestamps
        return timestamps

    def _reset_at(self, timestamps: list[int], now: int) -> int:
        oldest = timestamps[0] if timestamps else now
        return int(math.ceil((oldest + self._window_ms) / 1000))

    def check_and_record(self, key: str, now: int | None = None) -> RateLimitResult:
        """Check the key's usage in the window and record the request if allowed.

        A denied request is not recorded, but the pruned sequence is still
        stored so expired entries don't linger.

        Args:
            key: Unique identifier for rate limiting (e.g., client address).
            now: Current time in epoch milliseconds (defaults to the clock).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        if now is None:
            now = self._clock()

        with self._lock:
            timestamps = self._prune(key, now)

            if len(timestamps) >= self._limit:
                wait_ms = max(0, timestamps[0] + self._window_ms - now)
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    reset_at=self._reset_at(timestamps, now),
                    retry_after_seconds=int(math.ceil(wait_ms / 1000)),
                )

            timestamps.append(now)
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - len(timestamps),
                reset_at=self._reset_at(timestamps, now),
                retry_after_seconds=None,
            )

    def usage(self, key: str) -> int:
        """Return how many timestamps are currently stored for ``key``."""
        with self._lock:
            return len(self._ledger.get(key, []))
