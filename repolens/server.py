"""
RepoLens HTTP proxy.

A FastAPI app that forwards repository and profile lookups to GitHub
through a shared ``RepoLensClient``, so every browser shares one cache and
one rate-limit budget.
"""

import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from repolens._version import __version__
from repolens.client import RepoLensClient
from repolens.config import Settings
from repolens.logging import configure_logging, get_logger
from repolens.types.repos import isoformat_z
from repolens.types.results import ErrorInfo, ErrorKind

logger = get_logger("server")

DEFAULT_PORT = 5001

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

STATUS_BY_KIND = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.RATE_LIMIT: 403,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NETWORK_ERROR: 503,
    ErrorKind.SERVER_ERROR: 500,
    ErrorKind.API_ERROR: 502,
}


def _now() -> str:
    return isoformat_z(datetime.now(timezone.utc))


def error_response(client: RepoLensClient, error: ErrorInfo) -> JSONResponse:
    """Render an ``ErrorInfo`` with its HTTP status and the current budget."""
    body = error.to_dict()
    if body["rateLimit"] is None:
        body["rateLimit"] = client.tracker.snapshot().to_dict()
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(error.kind, 500),
        content={"success": False, **body},
    )


def create_app(
    settings: Settings | None = None,
    client: RepoLensClient | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Runtime settings (ignored when ``client`` is given)
        client: Pre-built client, e.g. one backed by a fake GitHub in tests

    Returns:
        Configured FastAPI app. The lifespan starts the client's cache
        sweeper and closes the client on shutdown.
    """
    if client is None:
        client = RepoLensClient(settings or Settings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await client.start()
        yield
        await client.close()

    app = FastAPI(title="RepoLens API", version=__version__, lifespan=lifespan)
    app.state.client = client
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=DEFAULT_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())[1:])
            details.append(f"{field}: {error.get('msg', 'invalid value')}")
        return error_response(
            client,
            ErrorInfo(
                kind=ErrorKind.VALIDATION_ERROR,
                message="Invalid request parameters",
                suggestions=tuple(details),
            ),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return error_response(
            client,
            ErrorInfo(
                kind=ErrorKind.SERVER_ERROR,
                message="Internal server error",
                suggestions=("Try again later",),
            ),
        )

    @app.get("/api/health")
    async def health() -> dict[str, Any]:
        return {
            "success": True,
            "message": "RepoLens API is running",
            "timestamp": _now(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "cache": client.cache.stats().to_dict(),
        }

    @app.get("/api/rate-limit")
    async def rate_limit():
        result = await client.rate_limit.try_get()
        if not result.ok:
            return error_response(client, result.error)
        return {"success": True, "data": result.value.to_dict()}

    @app.get("/api/users/{username}/repos")
    async def user_repos(
        username: str,
        sort: str = Query("created"),
        per_page: int = Query(100, ge=1, le=100),
    ):
        result = await client.repos.try_fetch_all(username, sort=sort, per_page=per_page)
        if not result.ok:
            return error_response(client, result.error)

        body: dict[str, Any] = {"success": True, **result.value.to_dict()}
        for notice in result.notices:
            body["notice"] = {
                "type": notice.kind.value,
                "message": notice.message,
                "suggestions": list(notice.suggestions),
            }
        return body

    @app.get("/api/users/{username}")
    async def user_profile(username: str):
        result = await client.users.try_get(username)
        if not result.ok:
            return error_response(client, result.error)
        profile, cached = result.value
        return {"success": True, "data": profile.to_dict(), "cached": cached}

    @app.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def api_not_found(request: Request, path: str):
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "message": "API endpoint not found",
                "path": request.url.path,
            },
        )

    return app


def main() -> None:
    """Run the proxy with uvicorn on ``PORT`` (default 5001)."""
    configure_logging()
    settings = Settings.from_env()
    port = int(os.environ.get("PORT", DEFAULT_PORT))
    if settings.authenticated:
        logger.info("GitHub token configured - rate limit: 5,000 requests/hour")
    else:
        logger.warning("No GitHub token configured - rate limit: 60 requests/hour")
    uvicorn.run(create_app(settings), host=os.environ.get("HOST", "0.0.0.0"), port=port)


if __name__ == "__main__":
    main()
