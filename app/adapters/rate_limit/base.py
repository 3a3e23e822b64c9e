"""Rate limiter interfaces.

The API depends on this abstraction (not the concrete implementation) so the
per-process ledger can be swapped for a shared store (e.g., Redis) without
touching call sites.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a check-and-record operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max accepted requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the oldest counted request expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check_and_record(self, key: str, now: int | None = None) -> RateLimitResult:
        """Decide whether ``key`` may proceed and record the attempt if so.

        Args:
            key: Unique identifier (e.g., client address).
            now: Current time in epoch milliseconds; the limiter's clock is
                used when omitted.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
