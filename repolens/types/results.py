"""Closed error and result types.

Every failure surfaced by the fetch pipeline is one of the ``ErrorKind``
values below, carried in an ``ErrorInfo`` together with actionable
suggestions and a snapshot of the rate-limit budget.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of pipeline failures."""

    VALIDATION_ERROR = "validation_error"
    USER_NOT_FOUND = "user_not_found"
    RATE_LIMIT = "rate_limit"
    FORBIDDEN = "forbidden"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"
    API_ERROR = "api_error"
    NO_REPOS = "no_repos"


@dataclass(frozen=True)
class RateLimitSnapshot:
    """Rate-limit budget at the moment an error was classified."""

    authenticated: bool
    limit: int
    remaining: int
    reset: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "authenticated": self.authenticated,
            "limit": self.limit,
            "remaining": self.remaining,
            "reset": self.reset.isoformat() if self.reset else None,
        }


@dataclass(frozen=True)
class ErrorInfo:
    """Stable, serializable description of a failure."""

    kind: ErrorKind
    message: str
    suggestions: tuple[str, ...] = ()
    rate_limit: RateLimitSnapshot | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "message": self.message,
            "suggestions": list(self.suggestions),
            "rateLimit": self.rate_limit.to_dict() if self.rate_limit else None,
        }


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Either a value or an ``ErrorInfo``, never both."""

    value: T | None = None
    error: ErrorInfo | None = None
    notices: tuple[ErrorInfo, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls, value: T, notices: tuple[ErrorInfo, ...] = ()
    ) -> "FetchResult[T]":
        return cls(value=value, notices=notices)

    @classmethod
    def failure(cls, error: ErrorInfo) -> "FetchResult[T]":
        return cls(error=error)
