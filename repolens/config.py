"""RepoLens configuration."""

import os
from dataclasses import dataclass

from repolens.exceptions import ConfigurationError
from repolens.rate_limit import AUTHENTICATED_LIMIT, UNAUTHENTICATED_LIMIT

DEFAULT_BASE_URL = "https://api.github.com"


def _env_number(name: str, default: float, cast: type = float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: {raw!r} is not a number") from e
    if value <= 0:
        raise ConfigurationError(f"Invalid {name}: must be positive, got {raw!r}")
    return value


@dataclass
class Settings:
    """Runtime settings for the fetch pipeline and similarity caches."""

    github_token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    repos_ttl: float = 600.0
    profile_ttl: float = 3600.0
    default_ttl: float = 300.0
    similarity_ttl: float = 300.0
    sweep_interval: float = 300.0
    max_pages: int = 10
    per_page: int = 100
    contributor_concurrency: int = 4
    max_retries: int = 2

    def __post_init__(self) -> None:
        if not 1 <= self.per_page <= 100:
            raise ConfigurationError(
                f"per_page must be between 1 and 100, got {self.per_page}"
            )
        if self.max_pages < 1:
            raise ConfigurationError(f"max_pages must be positive, got {self.max_pages}")
        if self.contributor_concurrency < 1:
            raise ConfigurationError(
                "contributor_concurrency must be positive, "
                f"got {self.contributor_concurrency}"
            )
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries cannot be negative, got {self.max_retries}"
            )

    @property
    def authenticated(self) -> bool:
        return bool(self.github_token)

    @property
    def rate_limit(self) -> int:
        return AUTHENTICATED_LIMIT if self.authenticated else UNAUTHENTICATED_LIMIT

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Create settings from environment variables.

        Environment variables:
            GITHUB_TOKEN: Token forwarded to GitHub (optional)
            REPOLENS_BASE_URL: GitHub API base URL (default: https://api.github.com)
            REPOLENS_TIMEOUT: Per-request timeout in seconds (default: 10)
            REPOLENS_REPOS_TTL: Repository list TTL in seconds (default: 600)
            REPOLENS_PROFILE_TTL: Profile TTL in seconds (default: 3600)
            REPOLENS_SWEEP_INTERVAL: Cache sweep interval in seconds (default: 300)
            REPOLENS_MAX_PAGES: Page cap per repository fetch (default: 10)
            REPOLENS_CONTRIBUTOR_CONCURRENCY: Parallel contributor lookups (default: 4)

        Raises:
            ConfigurationError: If a numeric variable is malformed
        """
        return cls(
            github_token=os.environ.get("GITHUB_TOKEN") or None,
            base_url=os.environ.get("REPOLENS_BASE_URL", DEFAULT_BASE_URL),
            timeout=_env_number("REPOLENS_TIMEOUT", 10.0),
            repos_ttl=_env_number("REPOLENS_REPOS_TTL", 600.0),
            profile_ttl=_env_number("REPOLENS_PROFILE_TTL", 3600.0),
            sweep_interval=_env_number("REPOLENS_SWEEP_INTERVAL", 300.0),
            max_pages=int(_env_number("REPOLENS_MAX_PAGES", 10, int)),
            contributor_concurrency=int(
                _env_number("REPOLENS_CONTRIBUTOR_CONCURRENCY", 4, int)
            ),
        )
