"""Recommendation schemas.

Defines the aggregate statistics read from contribution history and the
scored records handed to the presentation layer.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field


class ActivityStats(BaseModel):
    """Count, active days and latest timestamp for one activity type."""

    count: int = 0
    days: set[date] = Field(default_factory=set)
    last: datetime | None = None

    def add(self, when: datetime) -> None:
        """Fold one activity into the statistics."""
        self.count += 1
        self.days.add(when.date())
        if self.last is None or when > self.last:
            self.last = when


class DeveloperFileStats(BaseModel):
    """One contributor's history on one file."""

    contributor_id: int
    login: str
    canonical_name: str
    path: str
    reviews: ActivityStats = Field(default_factory=ActivityStats)
    commits: ActivityStats = Field(default_factory=ActivityStats)


class FileActivity(BaseModel):
    """Historical activity on one changed file, in total and per contributor."""

    path: str
    reviews: ActivityStats = Field(default_factory=ActivityStats)
    commits: ActivityStats = Field(default_factory=ActivityStats)
    developers: dict[int, DeveloperFileStats] = Field(default_factory=dict)

    @property
    def developer_count(self) -> int:
        return len(self.developers)


class WindowActivity(BaseModel):
    """Project-wide activity inside the trailing window ``[since, until]``."""

    since: datetime
    until: datetime
    counts: dict[int, int] = Field(
        default_factory=dict, description="Activity count per contributor"
    )
    active_months: dict[int, set[str]] = Field(
        default_factory=dict, description="Distinct YYYY-MM months per contributor"
    )
    total: int = 0


class FileScoreBreakdown(BaseModel):
    """The five cHRev components of one candidate on one file."""

    path: str
    review_share: float = Field(ge=0.0, le=1.0)
    work_day_overlap: float = Field(ge=0.0, le=1.0)
    review_recency: float = Field(ge=0.0, le=1.0)
    commit_share: float = Field(ge=0.0, le=1.0)
    commit_recency: float = Field(ge=0.0, le=1.0)

    @computed_field
    @property
    def file_score(self) -> float:
        """Sum of the five components, in [0, 5]."""
        return (
            self.review_share
            + self.work_day_overlap
            + self.review_recency
            + self.commit_share
            + self.commit_recency
        )


class ReviewerScore(BaseModel):
    """Output record for a cHRev-ranked candidate."""

    contributor_id: int
    login: str
    canonical_name: str
    score: float = Field(ge=0.0, description="Normalized developer score in [0, 1]")
    per_file: list[FileScoreBreakdown] = Field(default_factory=list)


class TurnoverWeights(BaseModel):
    """Tunable weights of the retention and turnover composites."""

    c1_turn: float = Field(default=1.0, ge=0.0)
    c2_turn: float = Field(default=1.0, ge=0.0)
    c1_ret: float = Field(default=1.0, ge=0.0)
    c2_ret: float = Field(default=1.0, ge=0.0)


class TurnoverScore(BaseModel):
    """Output record for a turnover-ranked candidate."""

    contributor_id: int
    login: str
    canonical_name: str
    score: float = Field(description="Turnover composite")
    knowledge: float = Field(ge=0.0, le=1.0)
    learn_factor: float = Field(ge=0.0, le=1.0)
    consistency: float = Field(ge=0.0, le=1.0)
    contribution_share: float = Field(ge=0.0, le=1.0)
    retention: float
    per_file: list[str] = Field(
        default_factory=list, description="Changed files the candidate knows"
    )


class WhoDoWeights(BaseModel):
    """Weights of the WhoDo expertise terms and of its load penalty."""

    c1_file_commits: float = Field(default=1.0, ge=0.0)
    c2_dir_commits: float = Field(default=1.0, ge=0.0)
    c3_file_reviews: float = Field(default=1.0, ge=0.0)
    c4_dir_reviews: float = Field(default=1.0, ge=0.0)
    theta: float = Field(default=0.5, ge=0.0, description="Load sensitivity")


class WhoDoScore(BaseModel):
    """Output record for a WhoDo-ranked candidate."""

    contributor_id: int
    login: str
    canonical_name: str
    score: float = Field(ge=0.0, description="raw_score / load")
    raw_score: float = Field(ge=0.0)
    load: float = Field(ge=1.0, description="exp(theta * open_reviews)")
    open_reviews: int = Field(ge=0)
    file_commits: float = Field(ge=0.0)
    dir_commits: float = Field(ge=0.0)
    file_reviews: float = Field(ge=0.0)
    dir_reviews: float = Field(ge=0.0)


class WorkloadStats(BaseModel):
    """Review load of one candidate over the workload window."""

    contributor_id: int
    login: str
    reviews: int = Field(ge=0)
    workload_share: float = Field(description="Percentage of all reviews")
    percentile_rank: float = Field(
        ge=0.0, le=1.0, description="Fraction of peers with strictly fewer reviews"
    )
    relative_to_mean: float = Field(description="(reviews - mean) / mean")
    lines_reviewed: int = Field(
        default=0, ge=0, description="Lines modified by the reviewed changes"
    )


class WorkloadReport(BaseModel):
    """Workload distribution across all candidates."""

    stats: list[WorkloadStats] = Field(default_factory=list)
    total_reviews: int = 0
    mean_reviews: float = 0.0
    total_lines_reviewed: int = 0
    gini: float = Field(default=0.0, ge=0.0, le=1.0)


class FileRisk(str, Enum):
    """Knowledge concentration of a changed file."""

    ABANDONED = "abandoned"
    HOARDED = "hoarded"
    SHARED = "shared"


class FileRiskReport(BaseModel):
    """Knowledge concentration of one changed file."""

    path: str
    developer_count: int = Field(ge=0)
    risk: FileRisk
    owner: str | None = Field(default=None, description="Sole contributor, if hoarded")
