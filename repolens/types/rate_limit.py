"""Rate-limit data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class RateLimitStatus:
    """Budget of the current rate-limit window."""

    limit: int
    remaining: int
    reset: int  # epoch seconds

    @property
    def used(self) -> int:
        return self.limit - self.remaining

    @property
    def reset_date(self) -> datetime:
        return datetime.fromtimestamp(self.reset, tz=timezone.utc)

    @property
    def percentage_used(self) -> str:
        if self.limit <= 0:
            return "0.00"
        return f"{self.used / self.limit * 100:.2f}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "limit": self.limit,
            "remaining": self.remaining,
            "reset": self.reset,
            "reset_date": self.reset_date.isoformat().replace("+00:00", "Z"),
            "used": self.used,
            "percentage_used": self.percentage_used,
        }
