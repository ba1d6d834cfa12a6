"""
Pytest plugin for RepoLens testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["repolens.testing.conftest"]

Or import the fixtures directly:

    from repolens.testing.fixtures import fake_github, repolens_client
"""

# Re-export all fixtures for pytest auto-discovery
from repolens.testing.fixtures import (
    fake_clock,
    fake_github,
    octocat_github,
    repolens_client,
    sample_repositories,
    sample_repository,
    repolens_settings,
)

__all__ = [
    "fake_clock",
    "fake_github",
    "octocat_github",
    "repolens_client",
    "repolens_settings",
    "sample_repository",
    "sample_repositories",
]
