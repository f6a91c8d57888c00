"""Contributor model for commit authors and reviewers."""

from pydantic import Field, field_validator

from reviewscout.models.base import BaseRecord


class Contributor(BaseRecord):
    """A person who authored commits or reviews.

    The same human may appear under several Contributor rows until
    identity resolution merges them into one canonical identity.
    """

    id: int | None = Field(default=None, description="Store-assigned identifier")
    login: str = Field(
        min_length=1,
        max_length=255,
        description="External platform handle (may be a synthesized placeholder)",
    )
    canonical_name: str = Field(
        description="Normalized display name (lowercase alphanumerics)",
    )
    email: str | None = Field(
        default=None,
        description="Email address, possibly a platform no-reply placeholder",
    )
    is_primary: bool = Field(
        default=True,
        description="False once recorded as the duplicate of another contributor",
    )

    @field_validator("email")
    @classmethod
    def empty_email_is_none(cls, v: str | None) -> str | None:
        """Treat blank emails as absent."""
        if v is None or not v.strip():
            return None
        return v.strip()
