"""
Local rate-limit accounting for the GitHub REST API.

The tracker is advisory. GitHub stays authoritative and may reject a
request the tracker would allow (shared quota, clock drift); when that
happens ``record_rejection`` clamps the local budget to zero.
"""

import threading
import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone

from repolens.logging import get_logger
from repolens.types.rate_limit import RateLimitStatus
from repolens.types.results import RateLimitSnapshot

logger = get_logger("rate_limit")

UNAUTHENTICATED_LIMIT = 60
AUTHENTICATED_LIMIT = 5000
WINDOW_SECONDS = 3600.0


def _header_int(headers: Mapping[str, str], name: str) -> int | None:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


class RateLimitTracker:
    """Tracks the request budget of the current rate-limit window."""

    def __init__(
        self,
        limit: int = UNAUTHENTICATED_LIMIT,
        authenticated: bool = False,
        window: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the tracker.

        Args:
            limit: Requests allowed per window
            authenticated: Whether requests carry a GitHub token
            window: Window length in seconds when GitHub reports no reset time
            clock: Source of the current time in epoch seconds
        """
        self.limit = limit
        self.authenticated = authenticated
        self.window = window
        self._clock = clock
        self.used = 0
        self.reset = clock() + window
        self._lock = threading.RLock()

    @classmethod
    def for_token(
        cls, token: str | None, clock: Callable[[], float] = time.time
    ) -> "RateLimitTracker":
        """Create a tracker with GitHub's default limit for the auth mode."""
        if token:
            return cls(limit=AUTHENTICATED_LIMIT, authenticated=True, clock=clock)
        return cls(limit=UNAUTHENTICATED_LIMIT, authenticated=False, clock=clock)

    def _roll_window(self, now: float) -> None:
        if now > self.reset:
            self.used = 0
            self.reset = now + self.window

    @property
    def remaining(self) -> int:
        with self._lock:
            self._roll_window(self._clock())
            return max(0, self.limit - self.used)

    def allow(self) -> bool:
        """Return True if the current window has budget left."""
        with self._lock:
            self._roll_window(self._clock())
            return self.used < self.limit

    def record(self, headers: Mapping[str, str]) -> None:
        """
        Account for one completed request.

        Uses ``X-RateLimit-*`` headers when GitHub sent them, otherwise
        counts the request locally.

        Args:
            headers: Response headers (case-insensitive mapping preferred)
        """
        remaining = _header_int(headers, "X-RateLimit-Remaining")
        limit = _header_int(headers, "X-RateLimit-Limit")
        reset = _header_int(headers, "X-RateLimit-Reset")

        with self._lock:
            self._roll_window(self._clock())
            if limit is not None and limit > 0:
                self.limit = limit
            if remaining is not None:
                self.used = max(0, self.limit - remaining)
            else:
                self.used += 1
            if reset is not None:
                self.reset = float(reset)

    def record_rejection(self, headers: Mapping[str, str]) -> None:
        """
        Clamp the budget to zero after GitHub rejected a request.

        Adopts the upstream reset time from ``X-RateLimit-Reset`` or
        ``Retry-After`` when available.
        """
        reset = _header_int(headers, "X-RateLimit-Reset")
        retry_after = _header_int(headers, "Retry-After")
        limit = _header_int(headers, "X-RateLimit-Limit")

        with self._lock:
            now = self._clock()
            if limit is not None and limit > 0:
                self.limit = limit
            self.used = self.limit
            if reset is not None:
                self.reset = float(reset)
            elif retry_after is not None:
                self.reset = now + retry_after
            elif now > self.reset:
                self.reset = now + self.window
        logger.warning(
            f"GitHub rejected a request for rate limiting; budget exhausted until "
            f"{datetime.fromtimestamp(self.reset, tz=timezone.utc).isoformat()}"
        )

    def adopt(self, status: RateLimitStatus) -> None:
        """Replace local state with a status read from GitHub."""
        with self._lock:
            self.limit = status.limit
            self.used = max(0, status.limit - status.remaining)
            self.reset = float(status.reset)

    def status(self) -> RateLimitStatus:
        """Return the current budget for display."""
        with self._lock:
            self._roll_window(self._clock())
            return RateLimitStatus(
                limit=self.limit,
                remaining=max(0, self.limit - self.used),
                reset=int(self.reset),
            )

    def snapshot(self) -> RateLimitSnapshot:
        """Return the budget in the shape attached to errors."""
        status = self.status()
        return RateLimitSnapshot(
            authenticated=self.authenticated,
            limit=status.limit,
            remaining=status.remaining,
            reset=status.reset_date,
        )
