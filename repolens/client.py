"""
RepoLens client.

Owns the shared cache, rate-limit tracker, HTTP transport and cache
sweeper, and wires them into every resource client.
"""

import time
from collections.abc import Callable
from typing import Any

import httpx

from repolens.cache import CacheSweeper, TTLCache
from repolens.clients import ContributorsClient, RateLimitClient, ReposClient, UsersClient
from repolens.config import Settings
from repolens.exceptions import ValidationError
from repolens.logging import get_logger
from repolens.rate_limit import RateLimitTracker
from repolens.similarity import RepositoryRanker, classify_expertise_areas
from repolens.transport import GitHubTransport, RetryConfig
from repolens.types.contributors import ContributorSummary
from repolens.types.similarity import RankedRepository
from repolens.validation import validate_contributor_order

logger = get_logger("client")


class RepoLensClient:
    """
    Async client for browsing and comparing a GitHub user's repositories.

    Example:
        ```python
        import asyncio
        from repolens import RepoLensClient

        async def main():
            async with RepoLensClient.from_env() as client:
                result = await client.repos.fetch_all("octocat")
                for repo in result.repositories:
                    print(repo.full_name, repo.stargazers_count)

        asyncio.run(main())
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Runtime settings (defaults to ``Settings()``)
            retry_config: Retry behavior (defaults to ``settings.max_retries`` retries)
            http_transport: Custom httpx transport (used by tests)
            clock: Time source for the cache and rate-limit tracker
        """
        self.settings = settings or Settings()
        self.clock = clock

        self.cache = TTLCache(default_ttl=self.settings.default_ttl, clock=clock)
        self.tracker = RateLimitTracker.for_token(self.settings.github_token, clock=clock)
        self.sweeper = CacheSweeper(self.cache, interval=self.settings.sweep_interval)

        self._transport = GitHubTransport(
            tracker=self.tracker,
            base_url=self.settings.base_url,
            token=self.settings.github_token,
            timeout=self.settings.timeout,
            retry_config=retry_config or RetryConfig(max_retries=self.settings.max_retries),
            http_transport=http_transport,
        )

        self.users = UsersClient(self._transport, self.cache, self.settings.profile_ttl)
        self.repos = ReposClient(
            self._transport,
            self.cache,
            self.users,
            repos_ttl=self.settings.repos_ttl,
            per_page=self.settings.per_page,
            max_pages=self.settings.max_pages,
        )
        self.contributors = ContributorsClient(
            self._transport, concurrency=self.settings.contributor_concurrency
        )
        self.rate_limit = RateLimitClient(self._transport)
        self.ranker = RepositoryRanker(
            self.cache,
            pair_ttl=self.settings.similarity_ttl,
            vector_ttl=self.settings.similarity_ttl,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "RepoLensClient":
        """
        Create a client from environment variables.

        See ``Settings.from_env`` for the variables read.

        Raises:
            ConfigurationError: If an environment variable is malformed
        """
        return cls(settings=Settings.from_env(), **kwargs)

    @property
    def transport(self) -> GitHubTransport:
        return self._transport

    async def start(self) -> None:
        """Start the periodic cache sweep. Requires a running event loop."""
        self.sweeper.start()
        logger.info(
            f"RepoLens client started ({'authenticated' if self.settings.authenticated else 'unauthenticated'}, "
            f"limit {self.tracker.limit}/hour)"
        )

    async def close(self) -> None:
        """Stop the cache sweep and close the HTTP client."""
        await self.sweeper.stop()
        await self._transport.close()

    async def __aenter__(self) -> "RepoLensClient":
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def similar_repositories(
        self, username: str, repo_name: str, limit: int = 5
    ) -> list[RankedRepository]:
        """
        Rank a user's other repositories by similarity to one of them.

        Args:
            username: GitHub username
            repo_name: Name of the subject repository (case-insensitive)
            limit: Maximum number of results

        Raises:
            ValidationError: If the user has no public repository with that name
            RepoLensError: If the repositories cannot be fetched
        """
        result = await self.repos.fetch_all(username)
        wanted = repo_name.lower()
        for repository in result.repositories:
            if repository.name.lower() == wanted:
                return self.ranker.rank_similar(repository, result.repositories, limit)
        raise ValidationError(
            f"Repository '{repo_name}' not found among {username}'s public repositories",
            ("Check the repository name against the user's public repositories",),
        )

    async def expertise_areas(self, username: str, top_n: int = 5) -> list[str]:
        """Most frequent project-type labels across a user's repositories."""
        result = await self.repos.fetch_all(username)
        return classify_expertise_areas(result.repositories, top_n)

    async def top_contributors(
        self, username: str, limit: int = 12, order: str = "contributions"
    ) -> list[ContributorSummary]:
        """
        Contributors aggregated across a user's collaborative repositories.

        ``order`` is "contributions" (most first) or "recent" (latest
        activity first).
        """
        validate_contributor_order(order)
        result = await self.repos.fetch_all(username)
        return await self.contributors.top_contributors(
            username, result.repositories, limit=limit, order=order
        )
