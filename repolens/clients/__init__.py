"""RepoLens resource clients."""

from repolens.clients.contributors import ContributorsClient
from repolens.clients.rate_limit import RateLimitClient
from repolens.clients.repos import ReposClient
from repolens.clients.users import UsersClient

__all__ = [
    "UsersClient",
    "ReposClient",
    "ContributorsClient",
    "RateLimitClient",
]
