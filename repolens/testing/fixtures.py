"""
Pytest fixtures for RepoLens testing.

Provides a fake GitHub, a manual clock and a client wired to both.
"""

import asyncio
from collections.abc import Generator
from datetime import datetime, timezone
from typing import Any

import pytest

from repolens.client import RepoLensClient
from repolens.config import Settings
from repolens.normalize import parse_repository
from repolens.testing.mock import FakeClock, FakeGitHub
from repolens.testing.payloads import make_repo_payload
from repolens.transport import RetryConfig
from repolens.types.repos import Repository


# ============================================================================
# Fake GitHub Fixtures
# ============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def fake_github(fake_clock: FakeClock) -> FakeGitHub:
    """
    Provide an empty FakeGitHub whose reset times follow ``fake_clock``.

    Example:
        ```python
        def test_my_feature(fake_github):
            fake_github.add_repositories("octocat", [make_repo_payload(1, "a")])
            ...
            assert fake_github.was_called("/users/octocat/repos")
        ```
    """
    return FakeGitHub(clock=fake_clock)


@pytest.fixture
def octocat_github(fake_github: FakeGitHub) -> FakeGitHub:
    """Provide a FakeGitHub with ``octocat`` and three repositories."""
    fake_github.add_user("octocat", public_repos=3)
    fake_github.add_repositories(
        "octocat",
        [
            make_repo_payload(
                1, "hello-world", description="My first repository on GitHub",
                language="Ruby", stargazers_count=1500, forks_count=1200,
            ),
            make_repo_payload(
                3, "linguist", description="Language savant for source files",
                language="Ruby", topics=["language-detection", "syntax"],
                stargazers_count=12000, forks_count=4000,
            ),
            make_repo_payload(
                2, "spoon-knife", description="Repository for testing forks",
                language="HTML", stargazers_count=12, forks_count=140000,
            ),
        ],
    )
    return fake_github


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def repolens_settings() -> Settings:
    """Provide unauthenticated settings."""
    return Settings()


def build_client(
    github: FakeGitHub,
    clock: FakeClock,
    settings: Settings | None = None,
    **kwargs: Any,
) -> RepoLensClient:
    """Create a RepoLensClient served by a FakeGitHub, with instant retries."""
    kwargs.setdefault("retry_config", RetryConfig(max_retries=1, initial_backoff=0.0))
    return RepoLensClient(
        settings or Settings(),
        http_transport=github.transport(),
        clock=clock,
        **kwargs,
    )


@pytest.fixture
def repolens_client(
    octocat_github: FakeGitHub,
    fake_clock: FakeClock,
    repolens_settings: Settings,
) -> Generator[RepoLensClient, None, None]:
    """
    Provide a RepoLensClient served by ``octocat_github``.

    Example:
        ```python
        def test_fetch(repolens_client, octocat_github):
            result = asyncio.run(repolens_client.repos.fetch_all("octocat"))
            assert result.total == 3
        ```
    """
    client = build_client(octocat_github, fake_clock, repolens_settings)
    yield client
    asyncio.run(client.close())


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_repository() -> Repository:
    """Provide a sample Repository."""
    return create_mock_repository(
        1, "hello-world", description="My first repository", language="Python"
    )


@pytest.fixture
def sample_repositories() -> list[Repository]:
    """Provide a small mixed-language repository set."""
    return [
        create_mock_repository(
            1, "react-dashboard", description="Admin dashboard built with react",
            language="JavaScript", topics=["react", "dashboard"], stargazers_count=40,
        ),
        create_mock_repository(
            2, "vue-dashboard", description="Admin dashboard built with vue",
            language="JavaScript", topics=["vue", "dashboard"], stargazers_count=35,
        ),
        create_mock_repository(
            3, "neural-style", description="Neural style transfer in pytorch",
            language="Python", topics=["pytorch", "deep-learning"], stargazers_count=900,
        ),
        create_mock_repository(
            4, "dotfiles", description="Personal shell configuration",
            language="Shell", stargazers_count=2,
        ),
    ]


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_repository(
    repo_id: int = 1,
    name: str = "test-repo",
    owner: str = "octocat",
    **kwargs: Any,
) -> Repository:
    """
    Create a Repository with customizable fields.

    Args:
        repo_id: Repository ID
        name: Repository name
        owner: Owner login
        **kwargs: Raw GitHub fields to override (e.g. ``stargazers_count``)

    Returns:
        Repository object
    """
    return parse_repository(make_repo_payload(repo_id, name, owner, **kwargs))


def utc(year: int, month: int = 1, day: int = 1) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(year, month, day, tzinfo=timezone.utc)
