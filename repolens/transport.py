"""
Async HTTP Transport for the GitHub REST API.

Handles HTTP communication with rate-limit admission, bounded retries for
transient failures, and classification of error responses into typed
exceptions, using an httpx async client.
"""

import asyncio
import random
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import httpx

from repolens._version import __version__
from repolens.exceptions import (
    APIError,
    ForbiddenError,
    NetworkError,
    RateLimitedError,
    RepoLensError,
    ServerError,
    UserNotFoundError,
    network_error_suggestions,
    rate_limit_suggestions,
    user_not_found_suggestions,
)
from repolens.logging import get_logger, log_http_request, log_http_response
from repolens.rate_limit import RateLimitTracker

logger = get_logger("http")


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 2
    initial_backoff: float = 0.5
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [500, 502, 503, 504])
    max_backoff: float = 8.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


class GitHubTransport:
    """
    Async HTTP transport layer for GitHub.

    Handles:
    - Rate-limit admission before every request (no request is sent when
      the local budget is exhausted)
    - Rate-limit accounting from every response's headers
    - Exponential backoff with jitter for 5xx and connection failures
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        tracker: RateLimitTracker,
        base_url: str = "https://api.github.com",
        token: str | None = None,
        timeout: float = 10.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            tracker: Rate-limit tracker consulted and updated on every request
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: GitHub token sent as a Bearer credential (optional)
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            http_transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.tracker = tracker
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self.authenticated = bool(token)
        self.request_count = 0

        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": f"repolens/{__version__}",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=http_transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "GitHubTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        admit: bool = True,
    ) -> Any:
        """
        Make a GET request with rate-limit admission and automatic retry.

        Args:
            path: API path (e.g., "/users/octocat/repos")
            params: Query parameters
            admit: Consult the rate-limit tracker first. Disable only for
                endpoints GitHub does not count against the quota.

        Returns:
            Parsed JSON response

        Raises:
            RepoLensError: On rate limiting, network failure or API errors
        """
        async def make_request() -> httpx.Response:
            log_http_request("GET", path, dict(self._client.headers), params)
            self.request_count += 1
            return await self._client.request("GET", path, params=params)

        return await self._execute_with_retry(make_request, admit)

    async def _execute_with_retry(
        self,
        request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]],
        admit: bool = True,
    ) -> Any:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Async function that makes the HTTP request
            admit: Consult the rate-limit tracker before each attempt

        Returns:
            Parsed JSON response

        Raises:
            RepoLensError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            if admit and not self.tracker.allow():
                raise self._local_rate_limit_error()

            started = time.perf_counter()
            try:
                response = await request_fn()
            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise NetworkError(
                        "GitHub API is not responding",
                        network_error_suggestions(),
                        self.tracker.snapshot(),
                    ) from e

                last_error = e
                logger.warning(f"Request failed ({e!r}), retrying (attempt {attempt + 1})")
                await asyncio.sleep(self._get_backoff_time(attempt))
                continue

            elapsed_ms = (time.perf_counter() - started) * 1000
            log_http_response(
                response.status_code,
                str(response.request.url),
                response.headers.get("X-RateLimit-Remaining"),
                elapsed_ms,
            )
            self.tracker.record(response.headers)

            if response.status_code < 400:
                try:
                    return response.json()
                except ValueError as e:
                    raise ServerError(
                        "GitHub returned a malformed JSON body",
                        rate_limit=self.tracker.snapshot(),
                        upstream_status=response.status_code,
                    ) from e

            # Parse error response
            error = self._parse_error_response(response)

            # Check if we should retry
            if not self._should_retry(response.status_code, attempt):
                raise error

            last_error = error
            logger.warning(
                f"GitHub responded {response.status_code}, retrying (attempt {attempt + 1})"
            )
            await asyncio.sleep(self._get_backoff_time(attempt))

        # Should not reach here, but just in case
        if isinstance(last_error, RepoLensError):
            raise last_error
        raise ServerError("Request failed with no error details")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(self, attempt: int) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Time to wait in seconds
        """
        base_wait = self.retry_config.initial_backoff * (
            self.retry_config.backoff_factor ** attempt
        )

        # Apply jitter (±jitter%)
        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        # Cap at max_backoff
        return min(wait_time, self.retry_config.max_backoff)

    def _local_rate_limit_error(self) -> RateLimitedError:
        snapshot = self.tracker.snapshot()
        return RateLimitedError(
            "GitHub API rate limit exceeded. Please try again later.",
            rate_limit_suggestions(self.authenticated),
            snapshot,
        )

    def _is_rate_limited(self, response: httpx.Response, message: str) -> bool:
        if response.status_code == 429:
            return True
        if response.status_code != 403:
            return False
        return (
            response.headers.get("X-RateLimit-Remaining") == "0"
            or "Retry-After" in response.headers
            or "rate limit" in message.lower()
        )

    def _parse_error_response(self, response: httpx.Response) -> RepoLensError:
        """
        Parse an error response into a typed exception.

        Rate-limit rejections also clamp the tracker's budget.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate RepoLensError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        status_code = response.status_code
        message = data.get("message") or f"GitHub API Error {status_code}"

        if self._is_rate_limited(response, message):
            self.tracker.record_rejection(response.headers)
            retry_after = response.headers.get("Retry-After")
            return RateLimitedError(
                "GitHub API rate limit exceeded. Please try again later.",
                rate_limit_suggestions(self.authenticated),
                self.tracker.snapshot(),
                upstream_status=status_code,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        snapshot = self.tracker.snapshot()
        if status_code == 403:
            return ForbiddenError(
                "Access forbidden. The user or repositories may be private.",
                rate_limit=snapshot,
                upstream_status=status_code,
            )
        elif status_code == 404:
            return UserNotFoundError(
                message, user_not_found_suggestions(), snapshot, upstream_status=status_code
            )
        elif status_code >= 500:
            return ServerError(
                f"GitHub API Error {status_code}: {message}",
                ("Try again later",),
                snapshot,
                upstream_status=status_code,
            )
        else:
            return APIError(message, rate_limit=snapshot, upstream_status=status_code)
