"""Tests for identity normalization helpers."""

import pytest

from reviewscout.identity.normalize import (
    is_noreply_email,
    is_valid_platform_login,
    login_from_noreply_email,
    normalize_name,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Jane Q. Doe", "janeqdoe"),
        ("  Bob  Smith ", "bobsmith"),
        ("o'brien-smith", "obriensmith"),
        ("", ""),
    ],
)
def test_normalize_name(raw: str, expected: str):
    """Names reduce to lowercase alphanumerics."""
    assert normalize_name(raw) == expected


@pytest.mark.parametrize(
    "login",
    ["a", "octocat", "bob-99", "a-b-c", "x" * 39],
)
def test_valid_platform_logins(login: str):
    """Alphanumerics with single interior hyphens, up to 39 chars."""
    assert is_valid_platform_login(login)


@pytest.mark.parametrize(
    "login",
    ["", None, "-bob", "bob-", "bob--99", "bob smith", "bob_99", "x" * 40],
)
def test_invalid_platform_logins(login: str | None):
    """Leading/trailing/double hyphens, spaces and overlong logins fail."""
    assert not is_valid_platform_login(login)


class TestNoreplyEmail:
    """Tests for platform no-reply addresses."""

    def test_plain_noreply(self):
        """Handle-only form is recognized."""
        assert is_noreply_email("octocat@users.noreply.github.com")

    def test_numbered_noreply(self):
        """ID-prefixed form is recognized, case-insensitively."""
        assert is_noreply_email("123+Octocat@Users.NoReply.GitHub.com")

    def test_regular_email(self):
        """Ordinary addresses are not no-reply."""
        assert not is_noreply_email("octocat@github.com")
        assert not is_noreply_email(None)

    def test_login_extracted(self):
        """The embedded handle is returned."""
        assert (
            login_from_noreply_email("12345+octocat@users.noreply.github.com")
            == "octocat"
        )
        assert login_from_noreply_email("octocat@users.noreply.github.com") == "octocat"

    def test_login_not_extracted_from_regular_email(self):
        """Ordinary addresses yield no login."""
        assert login_from_noreply_email("octocat@example.com") is None
        assert login_from_noreply_email(None) is None
