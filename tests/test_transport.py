"""
Tests for the GitHub transport: retry behavior, rate-limit admission and
error classification.
"""

import asyncio
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from repolens.exceptions import (
    APIError,
    ForbiddenError,
    NetworkError,
    RateLimitedError,
    ServerError,
    TOKEN_SUGGESTION,
    UserNotFoundError,
)
from repolens.rate_limit import RateLimitTracker
from repolens.testing import FakeClock, FakeGitHub
from repolens.transport import GitHubTransport, RetryConfig

backoff_factor_strategy = st.floats(min_value=1.1, max_value=5.0)
attempt_strategy = st.integers(min_value=0, max_value=5)


def make_transport(
    github: FakeGitHub,
    clock: FakeClock,
    token: str | None = None,
    max_retries: int = 1,
) -> GitHubTransport:
    return GitHubTransport(
        tracker=RateLimitTracker.for_token(token, clock=clock),
        token=token,
        retry_config=RetryConfig(max_retries=max_retries, initial_backoff=0.0),
        http_transport=github.transport(),
    )


def run_get(transport: GitHubTransport, path: str, **kwargs: Any) -> Any:
    async def go() -> Any:
        async with transport:
            return await transport.get(path, **kwargs)

    return asyncio.run(go())


@given(backoff_factor=backoff_factor_strategy, attempt=attempt_strategy)
@settings(max_examples=100)
def test_exponential_backoff_timing(backoff_factor: float, attempt: int) -> None:
    """
    Exponential backoff timing

    The wait before retry N is initial_backoff * factor^N within the jitter
    range, capped at max_backoff.
    """
    config = RetryConfig(
        initial_backoff=1.0, backoff_factor=backoff_factor, jitter=0.1, max_backoff=1000.0
    )
    transport = GitHubTransport(tracker=RateLimitTracker(), retry_config=config)

    expected_base = backoff_factor ** attempt
    actual = transport._get_backoff_time(attempt)

    assert min(expected_base * 0.9, 1000.0) <= actual <= min(expected_base * 1.1, 1000.0)


@given(
    status_code=st.sampled_from([400, 401, 403, 404, 422, 429]),
    attempt=st.integers(min_value=0, max_value=2),
)
@settings(max_examples=100)
def test_no_retry_on_client_errors(status_code: int, attempt: int) -> None:
    """4xx responses are never retried."""
    transport = GitHubTransport(tracker=RateLimitTracker(), retry_config=RetryConfig(max_retries=3))
    assert not transport._should_retry(status_code, attempt)


@given(
    status_code=st.sampled_from([500, 502, 503, 504]),
    attempt=st.integers(min_value=0, max_value=2),
)
@settings(max_examples=100)
def test_retry_on_server_errors(status_code: int, attempt: int) -> None:
    """5xx responses are retried until max_retries is reached."""
    transport = GitHubTransport(tracker=RateLimitTracker(), retry_config=RetryConfig(max_retries=3))
    assert transport._should_retry(status_code, attempt)
    assert not transport._should_retry(status_code, 3)


class TestRequests:
    """Requests against the in-memory GitHub."""

    def test_sends_github_headers(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.add_user("octocat")
        transport = make_transport(fake_github, fake_clock, token="ghp_abcdefghijklmnopqrstuvwxyz")

        data = run_get(transport, "/users/octocat")

        assert data["login"] == "octocat"
        headers = fake_github.get_calls("/users/octocat")[0].headers
        assert headers["accept"] == "application/vnd.github+json"
        assert headers["user-agent"].startswith("repolens/")
        assert headers["authorization"] == "Bearer ghp_abcdefghijklmnopqrstuvwxyz"

    def test_no_authorization_without_token(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.add_user("octocat")
        run_get(make_transport(fake_github, fake_clock), "/users/octocat")

        assert "authorization" not in fake_github.get_calls()[0].headers

    def test_records_rate_headers(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.add_user("octocat")
        transport = make_transport(fake_github, fake_clock)

        run_get(transport, "/users/octocat")

        assert transport.tracker.used == 1
        assert transport.tracker.remaining == 59
        assert transport.request_count == 1


class TestRateLimitAdmission:
    """Local budget checks."""

    def test_exhausted_budget_fails_without_network(
        self, fake_github: FakeGitHub, fake_clock: FakeClock
    ) -> None:
        transport = make_transport(fake_github, fake_clock)
        transport.tracker.used = 60

        with pytest.raises(RateLimitedError) as exc_info:
            run_get(transport, "/users/octocat")

        assert fake_github.call_count() == 0
        assert TOKEN_SUGGESTION in exc_info.value.suggestions
        assert exc_info.value.rate_limit.remaining == 0

    def test_authenticated_suggestions_omit_token_hint(
        self, fake_github: FakeGitHub, fake_clock: FakeClock
    ) -> None:
        transport = make_transport(fake_github, fake_clock, token="ghp_abcdefghijklmnopqrstuvwxyz")
        transport.tracker.used = transport.tracker.limit

        with pytest.raises(RateLimitedError) as exc_info:
            run_get(transport, "/users/octocat")

        assert TOKEN_SUGGESTION not in exc_info.value.suggestions

    def test_admit_false_bypasses_budget(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        transport = make_transport(fake_github, fake_clock)
        transport.tracker.used = 60

        data = run_get(transport, "/rate_limit", admit=False)

        assert data["rate"]["limit"] == 60


class TestErrorClassification:
    """Mapping of upstream responses to exceptions."""

    def test_404_is_user_not_found(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        with pytest.raises(UserNotFoundError) as exc_info:
            run_get(make_transport(fake_github, fake_clock), "/users/ghost")
        assert exc_info.value.upstream_status == 404
        assert exc_info.value.status_code == 404

    def test_upstream_rate_limit_exhausts_tracker(
        self, fake_github: FakeGitHub, fake_clock: FakeClock
    ) -> None:
        fake_github.add_user("octocat")
        fake_github.exhaust_rate_limit()
        transport = make_transport(fake_github, fake_clock)

        with pytest.raises(RateLimitedError):
            run_get(transport, "/users/octocat")

        assert fake_github.call_count() == 1
        assert not transport.tracker.allow()

    def test_403_with_retry_after_is_rate_limit(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.fail("/users/octocat", 403, "You have exceeded a secondary rate limit",
                         headers={"Retry-After": "30"})

        with pytest.raises(RateLimitedError) as exc_info:
            run_get(make_transport(fake_github, fake_clock), "/users/octocat")

        assert exc_info.value.retry_after == 30

    def test_other_403_is_forbidden(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.fail("/users/octocat", 403, "Resource not accessible")
        transport = make_transport(fake_github, fake_clock)

        with pytest.raises(ForbiddenError):
            run_get(transport, "/users/octocat")
        assert transport.tracker.allow()

    def test_other_4xx_is_api_error(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.fail("/users/octocat", 422, "Validation Failed")

        with pytest.raises(APIError) as exc_info:
            run_get(make_transport(fake_github, fake_clock), "/users/octocat")

        assert exc_info.value.message == "Validation Failed"
        assert fake_github.call_count() == 1

    def test_transient_5xx_is_retried(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.add_user("octocat")
        fake_github.fail("/users/octocat", 502, times=1)

        data = run_get(make_transport(fake_github, fake_clock), "/users/octocat")

        assert data["login"] == "octocat"
        assert fake_github.call_count("/users/octocat") == 2

    def test_persistent_5xx_is_server_error(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.fail("/users/octocat", 503)

        with pytest.raises(ServerError):
            run_get(make_transport(fake_github, fake_clock, max_retries=2), "/users/octocat")

        assert fake_github.call_count("/users/octocat") == 3

    def test_connection_failure_is_network_error(self, fake_github: FakeGitHub, fake_clock: FakeClock) -> None:
        fake_github.fail_connection("/users/octocat")

        with pytest.raises(NetworkError) as exc_info:
            run_get(make_transport(fake_github, fake_clock), "/users/octocat")

        assert exc_info.value.status_code == 503
        assert fake_github.call_count("/users/octocat") == 2
