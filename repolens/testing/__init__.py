"""RepoLens testing utilities.

Provides an in-memory GitHub, a manual clock and fixtures for testing
applications that use RepoLens.
"""

from repolens.testing.fixtures import build_client, create_mock_repository
from repolens.testing.mock import FakeClock, FakeGitHub, MockCall, MockFailure
from repolens.testing.payloads import (
    make_contributor_payload,
    make_repo_payload,
    make_user_payload,
)

__all__ = [
    # Fakes
    "FakeGitHub",
    "FakeClock",
    "MockCall",
    "MockFailure",
    # Helper functions
    "build_client",
    "create_mock_repository",
    "make_repo_payload",
    "make_user_payload",
    "make_contributor_payload",
]
