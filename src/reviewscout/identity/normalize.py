"""Normalization helpers for contributor identifying fields."""

import re

# Platform usernames: 1-39 chars, alphanumerics, single interior hyphens
_PLATFORM_LOGIN = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9]|-(?=[a-zA-Z0-9])){0,38}$")
_NOREPLY_EMAIL = re.compile(
    r"^(?:\d+\+)?(?P<login>[^@+]+)@users\.noreply\.github\.com$", re.IGNORECASE
)
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Reduce a display name to lowercase alphanumerics.

    "Jane Q. Doe" -> "janeqdoe"
    """
    cleaned = _NON_ALNUM.sub("", name).lower().strip()
    return _WHITESPACE.sub("", cleaned)


def is_valid_platform_login(login: str | None) -> bool:
    """Check whether a login is a well-formed platform username."""
    return bool(login) and _PLATFORM_LOGIN.match(login) is not None


def is_noreply_email(email: str | None) -> bool:
    """Check whether an email is a platform-generated no-reply address."""
    return bool(email) and _NOREPLY_EMAIL.match(email.strip()) is not None


def login_from_noreply_email(email: str | None) -> str | None:
    """Extract the platform login embedded in a no-reply address.

    "12345+octocat@users.noreply.github.com" -> "octocat"
    """
    if not email:
        return None
    match = _NOREPLY_EMAIL.match(email.strip())
    return match.group("login") if match else None
