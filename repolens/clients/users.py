"""Users resource client."""

from typing import TYPE_CHECKING, Any

from repolens.clients.base import capture
from repolens.exceptions import ServerError, UserNotFoundError, user_not_found_suggestions
from repolens.logging import get_logger
from repolens.normalize import MalformedRecordError, parse_profile
from repolens.types.results import FetchResult
from repolens.types.users import Profile
from repolens.validation import validate_username

if TYPE_CHECKING:
    from repolens.cache import TTLCache
    from repolens.transport import GitHubTransport

logger = get_logger("users")

PROFILE_TTL = 3600.0


def profile_cache_key(username: str) -> str:
    return f"user:{username.lower()}:profile"


class UsersClient:
    """Client for user profile lookups."""

    def __init__(
        self,
        transport: "GitHubTransport",
        cache: "TTLCache",
        profile_ttl: float = PROFILE_TTL,
    ) -> None:
        """
        Initialize the users client.

        Args:
            transport: HTTP transport for making requests
            cache: Shared TTL cache
            profile_ttl: Seconds a fetched profile stays cached
        """
        self.transport = transport
        self.cache = cache
        self.profile_ttl = profile_ttl

    async def _fetch_profile(self, username: str) -> Any:
        try:
            return await self.transport.get(f"/users/{username}")
        except UserNotFoundError as e:
            raise UserNotFoundError(
                f"User '{username}' not found on GitHub",
                user_not_found_suggestions(),
                e.rate_limit,
                upstream_status=e.upstream_status,
            ) from e

    async def exists(self, username: str) -> None:
        """
        Check that a user exists, bypassing the cache.

        The check always reaches GitHub; the profile it returns is stored
        in the profile cache so a later ``get`` costs no request.

        Args:
            username: GitHub username

        Raises:
            UserNotFoundError: If GitHub answers 404
            RepoLensError: On any other failure
        """
        validate_username(username)
        data = await self._fetch_profile(username)
        try:
            profile = parse_profile(data)
        except MalformedRecordError as e:
            logger.debug(f"Not caching malformed profile of {username}: {e}")
            return
        self.cache.set(profile_cache_key(username), profile, self.profile_ttl)

    async def get(self, username: str) -> tuple[Profile, bool]:
        """
        Get a user's public profile.

        Args:
            username: GitHub username

        Returns:
            Tuple of (profile, cached) where cached tells whether the
            profile came from the cache
        """
        validate_username(username)
        key = profile_cache_key(username)
        cached = self.cache.get(key)
        if cached is not None:
            return cached, True

        logger.info(f"Fetching profile for {username} from GitHub API")
        data = await self._fetch_profile(username)
        try:
            profile = parse_profile(data)
        except MalformedRecordError as e:
            raise ServerError(f"GitHub returned a malformed profile: {e}") from e

        self.cache.set(key, profile, self.profile_ttl)
        return profile, False

    async def try_get(self, username: str) -> FetchResult[tuple[Profile, bool]]:
        """Like ``get`` but returns a ``FetchResult`` instead of raising."""
        return await capture(self.get(username))
