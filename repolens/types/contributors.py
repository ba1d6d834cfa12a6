"""Contributor-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from repolens.types.repos import isoformat_z


@dataclass(frozen=True)
class Contributor:
    """A contributor row for a single repository."""

    login: str
    contributions: int
    avatar_url: str | None
    html_url: str | None
    repository: str
    repository_url: str
    repository_stars: int
    repository_language: str | None
    last_contribution_date: datetime


@dataclass(frozen=True)
class ContributedRepository:
    """A repository a contributor worked on."""

    name: str
    url: str
    contributions: int
    stars: int
    language: str | None


@dataclass
class ContributorSummary:
    """A contributor aggregated across several repositories."""

    login: str
    avatar_url: str | None
    html_url: str | None
    total_contributions: int
    last_seen: datetime
    repositories: list[ContributedRepository] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "login": self.login,
            "avatar_url": self.avatar_url,
            "html_url": self.html_url,
            "total_contributions": self.total_contributions,
            "last_seen": isoformat_z(self.last_seen),
            "repositories": [
                {
                    "name": repo.name,
                    "url": repo.url,
                    "contributions": repo.contributions,
                    "stars": repo.stars,
                    "language": repo.language,
                }
                for repo in self.repositories
            ],
        }
