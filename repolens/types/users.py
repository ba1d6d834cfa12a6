"""User-related data models."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from repolens.types.repos import isoformat_z


@dataclass(frozen=True)
class Profile:
    """Public GitHub user profile."""

    login: str
    id: int
    html_url: str
    avatar_url: str | None = None
    name: str | None = None
    bio: str | None = None
    company: str | None = None
    location: str | None = None
    email: str | None = None
    blog: str | None = None
    twitter_username: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    public_repos: int = 0
    public_gists: int = 0
    followers: int = 0
    following: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = isoformat_z(self.created_at)
        data["updated_at"] = isoformat_z(self.updated_at)
        return data
