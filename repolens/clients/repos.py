"""Repositories resource client: the paginated, cache-aside fetcher."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from repolens.clients.base import capture
from repolens.exceptions import APIError, no_repos_error_info
from repolens.logging import get_logger
from repolens.normalize import MalformedRecordError, parse_repository
from repolens.types.repos import Repository, RepositoryList, isoformat_z
from repolens.types.results import FetchResult
from repolens.validation import validate_sort, validate_username

if TYPE_CHECKING:
    from repolens.cache import TTLCache
    from repolens.clients.users import UsersClient
    from repolens.transport import GitHubTransport

logger = get_logger("repos")

REPOS_TTL = 600.0
MAX_PAGES = 10  # hard cap: 1000 repositories at 100 per page
MAX_PER_PAGE = 100


def repos_cache_key(username: str, sort: str) -> str:
    return f"user:{username.lower()}:repos:{sort}"


def newest_first(repositories: list[Repository]) -> list[Repository]:
    """Sort by creation date, newest first. Stable for equal dates."""
    return sorted(repositories, key=lambda repo: repo.created_at, reverse=True)


class ReposClient:
    """Client for fetching all public repositories of a user."""

    def __init__(
        self,
        transport: "GitHubTransport",
        cache: "TTLCache",
        users: "UsersClient",
        repos_ttl: float = REPOS_TTL,
        per_page: int = MAX_PER_PAGE,
        max_pages: int = MAX_PAGES,
    ) -> None:
        """
        Initialize the repos client.

        Args:
            transport: HTTP transport for making requests
            cache: Shared TTL cache
            users: Users client used for the existence check
            repos_ttl: Seconds an aggregated result stays cached
            per_page: Default page size (1-100)
            max_pages: Default page cap (at most 10)
        """
        self.transport = transport
        self.cache = cache
        self.users = users
        self.repos_ttl = repos_ttl
        self.per_page = per_page
        self.max_pages = max_pages

    async def fetch_all(
        self,
        username: str,
        sort: str = "created",
        per_page: int | None = None,
        max_pages: int | None = None,
    ) -> RepositoryList:
        """
        Fetch every public repository of a user.

        The cache is consulted first, keyed by username and sort mode. On a
        miss the user's existence is checked, then pages are requested until
        a short page or the page cap. A failing page aborts the whole fetch
        and nothing is cached.

        Args:
            username: GitHub username
            sort: GitHub sort mode ("created", "updated", "pushed", "full_name")
            per_page: Page size, clamped to 1-100
            max_pages: Page cap, clamped to 1-10

        Returns:
            RepositoryList sorted newest-created first

        Raises:
            ValidationError: On a malformed username or sort mode
            UserNotFoundError: If the user does not exist
            RateLimitedError: If the rate budget is exhausted
            RepoLensError: On any other page failure
        """
        validate_username(username)
        validate_sort(sort)
        per_page = min(max(per_page or self.per_page, 1), MAX_PER_PAGE)
        max_pages = min(max(max_pages or self.max_pages, 1), MAX_PAGES)

        key = repos_cache_key(username, sort)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Cache hit for {username}")
            return replace(cached, cached=True)

        logger.info(f"Fetching repositories for {username} from GitHub API")
        await self.users.exists(username)

        collected: list[Repository] = []
        seen_ids: set[int] = set()
        page = 1
        while page <= max_pages:
            records = await self._fetch_page(username, sort, per_page, page)
            for record in records:
                try:
                    repo = parse_repository(record)
                except MalformedRecordError as e:
                    logger.warning(f"Skipping malformed repository record for {username}: {e}")
                    continue
                if repo.id in seen_ids:
                    continue
                seen_ids.add(repo.id)
                collected.append(repo)

            if len(records) < per_page:
                break
            page += 1

        repositories = tuple(newest_first(collected))
        result = RepositoryList(
            repositories=repositories,
            total=len(repositories),
            timestamp=isoformat_z(datetime.now(timezone.utc)),
        )
        self.cache.set(key, result, self.repos_ttl)
        logger.info(f"Successfully fetched {result.total} repositories for {username}")
        return result

    async def _fetch_page(
        self, username: str, sort: str, per_page: int, page: int
    ) -> list:
        data = await self.transport.get(
            f"/users/{username}/repos",
            params={
                "type": "public",
                "sort": sort,
                "direction": "desc",
                "per_page": per_page,
                "page": page,
            },
        )
        if not isinstance(data, list):
            raise APIError(
                f"Unexpected response for page {page} of {username}'s repositories"
            )
        return data

    async def try_fetch_all(
        self,
        username: str,
        sort: str = "created",
        per_page: int | None = None,
        max_pages: int | None = None,
    ) -> FetchResult[RepositoryList]:
        """
        Like ``fetch_all`` but returns a ``FetchResult`` instead of raising.

        A successful fetch with zero repositories carries a ``no_repos``
        notice.
        """
        result = await capture(self.fetch_all(username, sort, per_page, max_pages))
        if result.ok and result.value is not None and result.value.is_empty:
            return FetchResult.success(result.value, (no_repos_error_info(username),))
        return result
