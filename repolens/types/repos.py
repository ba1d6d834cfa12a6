"""Repository-related data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def isoformat_z(value: datetime | None) -> str | None:
    """Format an aware datetime the way GitHub does (``...Z``)."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class License:
    """Repository license summary."""

    key: str | None
    name: str | None
    spdx_id: str | None


@dataclass(frozen=True)
class Repository:
    """A normalized, immutable GitHub repository."""

    id: int
    name: str
    full_name: str
    html_url: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    homepage: str | None = None
    topics: tuple[str, ...] = ()
    language: str | None = None
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    pushed_at: datetime | None = None
    fork: bool = False
    archived: bool = False
    disabled: bool = False
    private: bool = False
    size: int = 0
    default_branch: str | None = None
    license: License | None = None

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "full_name": self.full_name,
            "description": self.description,
            "html_url": self.html_url,
            "homepage": self.homepage,
            "created_at": isoformat_z(self.created_at),
            "updated_at": isoformat_z(self.updated_at),
            "pushed_at": isoformat_z(self.pushed_at),
            "stargazers_count": self.stargazers_count,
            "watchers_count": self.watchers_count,
            "forks_count": self.forks_count,
            "language": self.language,
            "topics": list(self.topics),
            "fork": self.fork,
            "archived": self.archived,
            "disabled": self.disabled,
            "private": self.private,
            "size": self.size,
            "default_branch": self.default_branch,
            "open_issues_count": self.open_issues_count,
            "license": (
                {
                    "key": self.license.key,
                    "name": self.license.name,
                    "spdx_id": self.license.spdx_id,
                }
                if self.license
                else None
            ),
        }


@dataclass(frozen=True)
class RepositoryList:
    """Aggregated result of a paginated repository fetch."""

    repositories: tuple[Repository, ...]
    total: int
    timestamp: str
    cached: bool = False

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [repo.to_dict() for repo in self.repositories],
            "total": self.total,
            "cached": self.cached,
            "timestamp": self.timestamp,
        }
