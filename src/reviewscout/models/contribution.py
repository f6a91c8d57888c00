"""Contribution fact records linking contributors to files."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from reviewscout.models.base import BaseRecord


class ActivityType(str, Enum):
    """Kind of activity a contribution records."""

    COMMIT = "commit"
    REVIEW = "review"


class Contribution(BaseRecord):
    """One commit or review touching one file.

    ``activity_id`` (commit hash or review/PR identifier) deduplicates
    re-ingested facts. Only ``contributor_id`` is ever rewritten, and only
    by identity merges.
    """

    id: int | None = Field(default=None, description="Store-assigned identifier")
    contributor_id: int = Field(description="Owning contributor")
    file_id: int = Field(description="File touched")
    activity_type: ActivityType = Field(description="commit or review")
    activity_id: str = Field(min_length=1, description="Commit hash or review ID")
    contribution_date: datetime = Field(description="When the activity happened")
    lines_modified: int | None = Field(
        default=None, ge=0, description="Lines changed, when known"
    )


class ContributionFact(BaseRecord):
    """A contribution joined to its contributor and file identity."""

    contributor_id: int
    login: str
    canonical_name: str
    file_id: int
    path: str = Field(description="Current path of the file")
    activity_type: ActivityType
    contribution_date: datetime
    lines_modified: int | None = None
