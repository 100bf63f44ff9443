"""
Username helpers for consistent storage keys.

GitHub logins are case-insensitive, so every lookup and every stored profile
uses the lowercased form. Validation mirrors GitHub's own rules: alphanumerics
and single hyphens, no leading or trailing hyphen, at most 39 characters.
"""
import re

from profile_analyzer.core.exceptions import ValidationError

MAX_USERNAME_LENGTH = 39

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9]([a-zA-Z0-9]|-(?!-))*[a-zA-Z0-9]$|^[a-zA-Z0-9]$")


def normalize_username(username: str) -> str:
    """
    Normalize a GitHub username to its storage key.

    Examples:
        >>> normalize_username("  Octocat ")
        'octocat'
    """
    return username.strip().lower()


def validate_username(username: str | None) -> str:
    """
    Check a username against GitHub's login rules and return it normalized.

    Raises:
        ValidationError: If the username is missing or malformed.
    """
    if username is None or not username.strip():
        raise ValidationError("Username is required")

    candidate = username.strip()
    if len(candidate) > MAX_USERNAME_LENGTH or not USERNAME_PATTERN.match(candidate):
        raise ValidationError("Invalid GitHub username format")

    return normalize_username(candidate)
