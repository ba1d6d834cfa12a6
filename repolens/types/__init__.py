"""RepoLens type definitions.

This module exports all data model types used by the package.
"""

from repolens.types.contributors import (
    ContributedRepository,
    Contributor,
    ContributorSummary,
)
from repolens.types.rate_limit import RateLimitStatus
from repolens.types.repos import License, Repository, RepositoryList
from repolens.types.results import (
    ErrorInfo,
    ErrorKind,
    FetchResult,
    RateLimitSnapshot,
)
from repolens.types.similarity import RankedRepository, SimilarityScore
from repolens.types.users import Profile

__all__ = [
    # Repository types
    "License",
    "Repository",
    "RepositoryList",
    # User types
    "Profile",
    # Contributor types
    "Contributor",
    "ContributedRepository",
    "ContributorSummary",
    # Rate limit types
    "RateLimitStatus",
    # Similarity types
    "SimilarityScore",
    "RankedRepository",
    # Result types
    "ErrorKind",
    "ErrorInfo",
    "FetchResult",
    "RateLimitSnapshot",
]
