"""Contributors resource client.

Looks up contributors of a user's most collaborative repositories. Lookups
run concurrently under a semaphore, and each one degrades to an empty list
on failure so a single private or rate-limited repository cannot blank
out the aggregate.
"""

import asyncio
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from repolens.exceptions import RepoLensError
from repolens.logging import get_logger
from repolens.normalize import MalformedRecordError, parse_contributor
from repolens.types.contributors import (
    ContributedRepository,
    Contributor,
    ContributorSummary,
)
from repolens.types.repos import Repository
from repolens.validation import validate_contributor_order, validate_username

if TYPE_CHECKING:
    from repolens.transport import GitHubTransport

logger = get_logger("contributors")

RECENT_ACTIVITY_WINDOW = timedelta(days=30)
RECENT_ACTIVITY_BONUS = 10


def select_collaborative_repositories(
    repositories: Iterable[Repository],
    limit: int = 8,
    now: datetime | None = None,
) -> list[Repository]:
    """
    Pick the repositories most likely to have outside contributors.

    Forks and empty repositories are skipped, as are repositories with
    neither stars nor forks. The rest are ordered by stars + forks, plus a
    bonus for activity in the last 30 days.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - RECENT_ACTIVITY_WINDOW

    def activity(repo: Repository) -> int:
        bonus = RECENT_ACTIVITY_BONUS if repo.updated_at > cutoff else 0
        return repo.stargazers_count + repo.forks_count + bonus

    candidates = [
        repo
        for repo in repositories
        if not repo.fork
        and repo.size > 0
        and (repo.stargazers_count > 0 or repo.forks_count > 0)
    ]
    return sorted(candidates, key=activity, reverse=True)[:limit]


def aggregate_contributors(
    contributors: Iterable[Contributor],
    limit: int = 12,
    order: str = "contributions",
) -> list[ContributorSummary]:
    """
    Merge per-repository rows by login.

    ``order="contributions"`` puts the most contributions first;
    ``order="recent"`` puts the most recently active contributors first.
    Ties fall back to the login.
    """
    validate_contributor_order(order)
    by_login: dict[str, ContributorSummary] = {}
    for row in contributors:
        contributed = ContributedRepository(
            name=row.repository,
            url=row.repository_url,
            contributions=row.contributions,
            stars=row.repository_stars,
            language=row.repository_language,
        )
        summary = by_login.get(row.login)
        if summary is None:
            by_login[row.login] = ContributorSummary(
                login=row.login,
                avatar_url=row.avatar_url,
                html_url=row.html_url,
                total_contributions=row.contributions,
                last_seen=row.last_contribution_date,
                repositories=[contributed],
            )
            continue
        summary.total_contributions += row.contributions
        summary.last_seen = max(summary.last_seen, row.last_contribution_date)
        summary.repositories.append(contributed)

    for summary in by_login.values():
        summary.repositories.sort(key=lambda repo: (-repo.contributions, repo.name))

    ranked = sorted(by_login.values(), key=lambda summary: summary.login.lower())
    if order == "recent":
        ranked.sort(key=lambda summary: summary.last_seen, reverse=True)
    else:
        ranked.sort(key=lambda summary: summary.total_contributions, reverse=True)
    return ranked[:limit]


class ContributorsClient:
    """Client for contributor enrichment."""

    def __init__(self, transport: "GitHubTransport", concurrency: int = 4) -> None:
        """
        Initialize the contributors client.

        Args:
            transport: HTTP transport for making requests
            concurrency: Maximum number of lookups in flight
        """
        self.transport = transport
        self.concurrency = concurrency

    async def for_repository(
        self, owner: str, repository: Repository, per_repo: int = 5
    ) -> list[Contributor]:
        """
        Fetch the top contributors of one repository, excluding the owner.

        Raises:
            RepoLensError: On any API failure
        """
        data = await self.transport.get(
            f"/repos/{owner}/{repository.name}/contributors",
            params={"per_page": 10},
        )
        if not isinstance(data, list):
            return []

        rows: list[Contributor] = []
        for record in data:
            try:
                row = parse_contributor(record, repository)
            except MalformedRecordError as e:
                logger.debug(f"Skipping contributor record of {repository.full_name}: {e}")
                continue
            if row.login.lower() == owner.lower():
                continue
            rows.append(row)
        return rows[:per_repo]

    async def top_contributors(
        self,
        owner: str,
        repositories: Iterable[Repository],
        per_repo: int = 5,
        limit: int = 12,
        max_repositories: int = 8,
        order: str = "contributions",
    ) -> list[ContributorSummary]:
        """
        Aggregate contributors across a user's collaborative repositories.

        Args:
            owner: Repository owner (excluded from the result)
            repositories: The owner's repositories
            per_repo: Contributors kept per repository
            limit: Contributors returned
            max_repositories: Repositories looked up
            order: "contributions" or "recent"

        Returns:
            Contributors in the requested order, ties broken by login
        """
        validate_username(owner)
        validate_contributor_order(order)
        selected = select_collaborative_repositories(repositories, max_repositories)
        if not selected:
            return []

        semaphore = asyncio.Semaphore(self.concurrency)

        async def lookup(repository: Repository) -> list[Contributor]:
            async with semaphore:
                try:
                    return await self.for_repository(owner, repository, per_repo)
                except RepoLensError as e:
                    logger.warning(
                        f"Contributors of {repository.full_name} unavailable "
                        f"({e.kind.value}): {e.message}"
                    )
                    return []

        results = await asyncio.gather(*(lookup(repo) for repo in selected))
        rows = [row for result in results for row in result]
        return aggregate_contributors(rows, limit, order)
