"""RepoLens - GitHub repository browsing, caching and similarity."""

from repolens._version import __version__
from repolens.cache import CacheSweeper, TTLCache
from repolens.client import RepoLensClient
from repolens.config import Settings
from repolens.exceptions import (
    APIError,
    ConfigurationError,
    ForbiddenError,
    NetworkError,
    RateLimitedError,
    RepoLensError,
    ServerError,
    UserNotFoundError,
    ValidationError,
)
from repolens.logging import configure_logging, get_logger
from repolens.rate_limit import RateLimitTracker
from repolens.similarity import RepositoryRanker, TfIdfEngine, classify_expertise_areas
from repolens.transport import GitHubTransport, RetryConfig
from repolens.types import ErrorInfo, ErrorKind, FetchResult, Repository, RepositoryList

__all__ = [
    "__version__",
    # Main Client
    "RepoLensClient",
    "Settings",
    # Caching and rate limits
    "TTLCache",
    "CacheSweeper",
    "RateLimitTracker",
    # Similarity
    "TfIdfEngine",
    "RepositoryRanker",
    "classify_expertise_areas",
    # Types
    "Repository",
    "RepositoryList",
    "ErrorKind",
    "ErrorInfo",
    "FetchResult",
    # Exceptions
    "RepoLensError",
    "ConfigurationError",
    "ValidationError",
    "UserNotFoundError",
    "RateLimitedError",
    "ForbiddenError",
    "NetworkError",
    "ServerError",
    "APIError",
    # Transport
    "GitHubTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
