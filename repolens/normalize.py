"""
Conversion of raw GitHub payloads into strict value types.

Required fields that are missing or malformed reject the record
(``MalformedRecordError``). Optional fields that fail their expected shape
are coalesced to a neutral value instead of being passed through.
"""

from datetime import datetime, timezone
from typing import Any

from repolens.types.contributors import Contributor
from repolens.types.rate_limit import RateLimitStatus
from repolens.types.repos import License, Repository
from repolens.types.users import Profile


class MalformedRecordError(ValueError):
    """Raised when an upstream record cannot be normalized."""


def parse_timestamp(value: Any, field_name: str) -> datetime:
    """
    Parse an ISO-8601 instant into an aware UTC datetime.

    Raises:
        MalformedRecordError: If the value is not a valid ISO instant
    """
    if not isinstance(value, str) or not value:
        raise MalformedRecordError(f"{field_name} is missing")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise MalformedRecordError(f"{field_name} is not an ISO instant: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _optional_timestamp(value: Any, field_name: str) -> datetime | None:
    if value is None:
        return None
    return parse_timestamp(value, field_name)


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


def _flag(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _required_text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedRecordError(f"{key} is missing")
    return value


def _required_id(data: dict[str, Any]) -> int:
    value = data.get("id")
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRecordError("id is missing")
    return value


def _topics(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    # dict.fromkeys keeps first-seen order while dropping duplicates
    return tuple(dict.fromkeys(t for t in value if isinstance(t, str) and t))


def _license(value: Any) -> License | None:
    if not isinstance(value, dict):
        return None
    return License(
        key=_text(value.get("key")),
        name=_text(value.get("name")),
        spdx_id=_text(value.get("spdx_id")),
    )


def parse_repository(data: Any) -> Repository:
    """
    Normalize one entry of ``GET /users/{username}/repos``.

    Raises:
        MalformedRecordError: If a required field is missing or malformed
    """
    if not isinstance(data, dict):
        raise MalformedRecordError("repository payload is not an object")

    name = _required_text(data, "name")
    full_name = _text(data.get("full_name"))
    if not full_name:
        owner = data.get("owner") if isinstance(data.get("owner"), dict) else {}
        login = _text(owner.get("login"))
        if not login:
            raise MalformedRecordError("full_name is missing")
        full_name = f"{login}/{name}"

    return Repository(
        id=_required_id(data),
        name=name,
        full_name=full_name,
        html_url=_text(data.get("html_url")) or f"https://github.com/{full_name}",
        created_at=parse_timestamp(data.get("created_at"), "created_at"),
        updated_at=parse_timestamp(data.get("updated_at"), "updated_at"),
        pushed_at=_optional_timestamp(data.get("pushed_at"), "pushed_at"),
        description=_text(data.get("description")),
        homepage=_text(data.get("homepage")) or None,
        topics=_topics(data.get("topics")),
        language=_text(data.get("language")),
        stargazers_count=_count(data.get("stargazers_count")),
        watchers_count=_count(data.get("watchers_count")),
        forks_count=_count(data.get("forks_count")),
        open_issues_count=_count(data.get("open_issues_count")),
        fork=_flag(data.get("fork")),
        archived=_flag(data.get("archived")),
        disabled=_flag(data.get("disabled")),
        private=_flag(data.get("private")),
        size=_count(data.get("size")),
        default_branch=_text(data.get("default_branch")),
        license=_license(data.get("license")),
    )


def parse_profile(data: Any) -> Profile:
    """
    Normalize the payload of ``GET /users/{username}``.

    Raises:
        MalformedRecordError: If login or id is missing
    """
    if not isinstance(data, dict):
        raise MalformedRecordError("profile payload is not an object")

    login = _required_text(data, "login")
    return Profile(
        login=login,
        id=_required_id(data),
        html_url=_text(data.get("html_url")) or f"https://github.com/{login}",
        avatar_url=_text(data.get("avatar_url")),
        name=_text(data.get("name")),
        bio=_text(data.get("bio")),
        company=_text(data.get("company")),
        location=_text(data.get("location")),
        email=_text(data.get("email")),
        blog=_text(data.get("blog")),
        twitter_username=_text(data.get("twitter_username")),
        created_at=_optional_timestamp(data.get("created_at"), "created_at"),
        updated_at=_optional_timestamp(data.get("updated_at"), "updated_at"),
        public_repos=_count(data.get("public_repos")),
        public_gists=_count(data.get("public_gists")),
        followers=_count(data.get("followers")),
        following=_count(data.get("following")),
    )


def parse_contributor(data: Any, repository: Repository) -> Contributor:
    """
    Normalize one entry of ``GET /repos/{owner}/{repo}/contributors``.

    Raises:
        MalformedRecordError: If login is missing
    """
    if not isinstance(data, dict):
        raise MalformedRecordError("contributor payload is not an object")

    return Contributor(
        login=_required_text(data, "login"),
        contributions=_count(data.get("contributions")),
        avatar_url=_text(data.get("avatar_url")),
        html_url=_text(data.get("html_url")),
        repository=repository.name,
        repository_url=repository.html_url,
        repository_stars=repository.stargazers_count,
        repository_language=repository.language,
        last_contribution_date=repository.updated_at,
    )


def parse_rate_limit(data: Any) -> RateLimitStatus:
    """
    Normalize the ``rate`` object of ``GET /rate_limit``.

    Raises:
        MalformedRecordError: If the payload lacks a usable ``rate`` object
    """
    rate = data.get("rate") if isinstance(data, dict) else None
    if not isinstance(rate, dict):
        raise MalformedRecordError("rate_limit payload has no rate object")

    limit = rate.get("limit")
    remaining = rate.get("remaining")
    reset = rate.get("reset")
    for key, value in (("limit", limit), ("remaining", remaining), ("reset", reset)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedRecordError(f"rate.{key} is missing")
    return RateLimitStatus(limit=limit, remaining=remaining, reset=reset)
