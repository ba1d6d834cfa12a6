"""Input validation performed before any cache or network access."""

import re

from repolens.exceptions import ValidationError

USERNAME_RE = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]{0,38})$")

SORT_MODES = ("created", "updated", "pushed", "full_name")
CONTRIBUTOR_ORDERS = ("contributions", "recent")

_USERNAME_SUGGESTIONS = (
    "GitHub usernames are 1-39 characters long",
    "Use only letters, digits and hyphens, not starting with a hyphen",
)


def validate_username(username: object) -> str:
    """
    Validate a GitHub username.

    Args:
        username: Candidate username

    Returns:
        The username unchanged

    Raises:
        ValidationError: If the username is empty or malformed
    """
    if not isinstance(username, str) or not username:
        raise ValidationError(
            "Username is required and must be a string", _USERNAME_SUGGESTIONS
        )
    if not USERNAME_RE.fullmatch(username):
        raise ValidationError("Invalid username format", _USERNAME_SUGGESTIONS)
    return username


def validate_sort(sort: str) -> str:
    """Validate a repository sort mode accepted by GitHub."""
    if sort not in SORT_MODES:
        raise ValidationError(
            f"Invalid sort mode '{sort}'",
            (f"Use one of: {', '.join(SORT_MODES)}",),
        )
    return sort


def validate_contributor_order(order: str) -> str:
    """Validate a contributor ordering ("contributions" or "recent")."""
    if order not in CONTRIBUTOR_ORDERS:
        raise ValidationError(
            f"Invalid contributor order '{order}'",
            (f"Use one of: {', '.join(CONTRIBUTOR_ORDERS)}",),
        )
    return order
