"""Rate-limit resource client."""

from typing import TYPE_CHECKING

from repolens.clients.base import capture
from repolens.exceptions import ServerError
from repolens.normalize import MalformedRecordError, parse_rate_limit
from repolens.types.rate_limit import RateLimitStatus
from repolens.types.results import FetchResult

if TYPE_CHECKING:
    from repolens.transport import GitHubTransport


class RateLimitClient:
    """Client for GitHub's ``/rate_limit`` resource."""

    def __init__(self, transport: "GitHubTransport") -> None:
        """
        Initialize the rate-limit client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    async def get(self) -> RateLimitStatus:
        """
        Read the current core rate limit from GitHub.

        The result also replaces the transport tracker's local state.

        Returns:
            RateLimitStatus for the core API
        """
        data = await self.transport.get("/rate_limit", admit=False)
        try:
            status = parse_rate_limit(data)
        except MalformedRecordError as e:
            raise ServerError(f"GitHub returned a malformed rate limit: {e}") from e
        self.transport.tracker.adopt(status)
        return status

    async def try_get(self) -> FetchResult[RateLimitStatus]:
        """Like ``get`` but returns a ``FetchResult`` instead of raising."""
        return await capture(self.get())
