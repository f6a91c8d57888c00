"""File model with rename-stable identity."""

from pydantic import Field

from reviewscout.models.base import BaseRecord


class File(BaseRecord):
    """A tracked file.

    ``canonical_path`` is assigned once and never changes; renames only
    move ``current_path``.
    """

    id: int | None = Field(default=None, description="Store-assigned identifier")
    canonical_path: str = Field(min_length=1, description="Stable identity path")
    current_path: str = Field(min_length=1, description="Latest known path")
