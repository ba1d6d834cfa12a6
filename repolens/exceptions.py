"""RepoLens exception classes."""

from repolens.types.results import ErrorInfo, ErrorKind, RateLimitSnapshot

RATE_LIMIT_SUGGESTIONS = (
    "Wait 15-60 minutes before trying again",
    "Try a different user or come back later",
)
TOKEN_SUGGESTION = (
    "Configure GITHUB_TOKEN for higher rate limits (5,000/hour vs 60/hour)"
)


class RepoLensError(Exception):
    """Base exception for all RepoLens errors."""

    kind: ErrorKind = ErrorKind.SERVER_ERROR
    status_code: int = 500

    def __init__(
        self,
        message: str,
        suggestions: tuple[str, ...] | list[str] = (),
        rate_limit: RateLimitSnapshot | None = None,
        upstream_status: int | None = None,
    ) -> None:
        self.message = message
        self.suggestions = tuple(suggestions)
        self.rate_limit = rate_limit
        self.upstream_status = upstream_status
        super().__init__(f"[{self.kind.value}] {message}")

    @property
    def code(self) -> str:
        return self.kind.value

    def to_error_info(self) -> ErrorInfo:
        """Convert to the closed, serializable error shape."""
        return ErrorInfo(
            kind=self.kind,
            message=self.message,
            suggestions=self.suggestions,
            rate_limit=self.rate_limit,
        )


class ConfigurationError(RepoLensError):
    """Raised when configuration is invalid or missing."""

    kind = ErrorKind.SERVER_ERROR


class ValidationError(RepoLensError):
    """Raised on malformed input, before any network access."""

    kind = ErrorKind.VALIDATION_ERROR
    status_code = 400


class UserNotFoundError(RepoLensError):
    """Raised when GitHub reports the user does not exist."""

    kind = ErrorKind.USER_NOT_FOUND
    status_code = 404


class RateLimitedError(RepoLensError):
    """Raised when the local or upstream rate budget is exhausted."""

    kind = ErrorKind.RATE_LIMIT
    status_code = 403

    def __init__(
        self,
        message: str,
        suggestions: tuple[str, ...] | list[str] = (),
        rate_limit: RateLimitSnapshot | None = None,
        upstream_status: int | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message, suggestions, rate_limit, upstream_status)
        self.retry_after = retry_after


class ForbiddenError(RepoLensError):
    """Raised on a 403 that is not caused by rate limiting."""

    kind = ErrorKind.FORBIDDEN
    status_code = 403


class NetworkError(RepoLensError):
    """Raised when no response was received from GitHub."""

    kind = ErrorKind.NETWORK_ERROR
    status_code = 503


class ServerError(RepoLensError):
    """Raised on upstream 5xx or unexpected failures."""

    kind = ErrorKind.SERVER_ERROR
    status_code = 500


class APIError(RepoLensError):
    """Raised on any other upstream 4xx."""

    kind = ErrorKind.API_ERROR
    status_code = 502


def rate_limit_suggestions(authenticated: bool) -> tuple[str, ...]:
    """Suggestions shown when the rate budget is exhausted."""
    if authenticated:
        return RATE_LIMIT_SUGGESTIONS
    return (TOKEN_SUGGESTION, *RATE_LIMIT_SUGGESTIONS)


def user_not_found_suggestions() -> tuple[str, ...]:
    return (
        "Double-check the username spelling",
        "Make sure the user has public repositories",
    )


def network_error_suggestions() -> tuple[str, ...]:
    return (
        "Check your network connection",
        "GitHub may be temporarily unavailable; try again shortly",
    )


def no_repos_error_info(username: str) -> ErrorInfo:
    """Empty-result notice for a user without public repositories."""
    return ErrorInfo(
        kind=ErrorKind.NO_REPOS,
        message=f"No public repositories found for '{username}'",
        suggestions=(
            "The user may not have published any public repositories yet",
            "Try another username",
        ),
    )
