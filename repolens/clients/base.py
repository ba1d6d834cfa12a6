"""Shared helpers for resource clients."""

from collections.abc import Awaitable
from typing import TypeVar

from repolens.exceptions import RepoLensError
from repolens.logging import get_logger
from repolens.types.results import ErrorInfo, ErrorKind, FetchResult

T = TypeVar("T")

logger = get_logger()


async def capture(awaitable: Awaitable[T]) -> FetchResult[T]:
    """
    Await a client call and fold its outcome into a ``FetchResult``.

    Classified errors keep their kind; anything else is logged with its
    traceback and reported as ``server_error``.
    """
    try:
        value = await awaitable
    except RepoLensError as e:
        return FetchResult.failure(e.to_error_info())
    except Exception:
        logger.exception("Unexpected error while talking to GitHub")
        return FetchResult.failure(
            ErrorInfo(
                kind=ErrorKind.SERVER_ERROR,
                message="Internal server error",
                suggestions=("Try again later",),
            )
        )
    return FetchResult.success(value)
