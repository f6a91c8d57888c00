"""Identity resolution schemas.

Defines data models for merge rules, merge decisions, the persisted
duplicate audit trail and batch outcomes.
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from reviewscout.models.contributor import Contributor


class MergePriority(str, Enum):
    """How a duplicate pairing was established."""

    MANUAL = "manual"
    AUTO_HIGH = "auto-high"
    AUTO_MEDIUM = "auto-medium"

    @property
    def rank(self) -> int:
        """Precedence of this priority (higher wins)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    MergePriority.MANUAL: 3,
    MergePriority.AUTO_HIGH: 2,
    MergePriority.AUTO_MEDIUM: 1,
}


class MergeRule(BaseModel):
    """Statically configured manual merge override.

    Names a primary contributor by login and lists the alternate logins,
    emails and canonical names known to belong to the same person.
    Accepts both the short keys and the legacy ``primary_github_login`` /
    ``merge_*`` keys.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    primary_login: str = Field(
        min_length=1,
        validation_alias=AliasChoices("primary_login", "primary_github_login"),
        description="Login of the contributor that survives the merge",
    )
    logins: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("logins", "merge_logins"),
    )
    emails: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("emails", "merge_emails"),
    )
    names: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("names", "merge_names"),
    )
    canonical_name: str | None = Field(
        default=None, description="Preferred canonical name for the primary"
    )
    email: str | None = Field(
        default=None, description="Preferred email for the primary"
    )

    def matches(self, contributor: Contributor) -> bool:
        """Check whether a contributor is named by this rule.

        Comparison is case-insensitive equality on login, email and
        canonical name.
        """
        login = contributor.login.lower()
        if any(login == alt.lower() for alt in self.logins):
            return True
        if contributor.email:
            email = contributor.email.lower()
            if any(email == alt.lower() for alt in self.emails):
                return True
        name = contributor.canonical_name.lower()
        return any(name == alt.lower() for alt in self.names)


class MergeDecision(BaseModel):
    """A decision that ``duplicate`` is the same person as ``primary``."""

    primary_id: int
    primary_login: str
    duplicate_id: int
    duplicate_login: str
    duplicate_email: str | None = None
    duplicate_canonical_name: str
    similarity: float = Field(ge=0.0, le=1.0)
    priority: MergePriority
    notes: str = ""

    @classmethod
    def between(
        cls,
        primary: Contributor,
        duplicate: Contributor,
        similarity: float,
        priority: MergePriority,
        notes: str = "",
    ) -> "MergeDecision":
        """Build a decision from the two contributor records."""
        return cls(
            primary_id=primary.id,
            primary_login=primary.login,
            duplicate_id=duplicate.id,
            duplicate_login=duplicate.login,
            duplicate_email=duplicate.email,
            duplicate_canonical_name=duplicate.canonical_name,
            similarity=similarity,
            priority=priority,
            notes=notes,
        )


class DuplicateRecord(BaseModel):
    """Persisted merge edge, kept as an audit trail.

    Never deleted; only flagged ``is_merged`` once executed.
    """

    id: int
    primary_contributor_id: int
    login: str = Field(description="Duplicate's login at detection time")
    email: str | None = None
    canonical_name: str
    similarity_score: float = Field(ge=0.0, le=1.0)
    merge_priority: MergePriority
    is_merged: bool = False
    notes: str | None = None


class MergeStatus(str, Enum):
    """Outcome of executing a single merge."""

    MERGED = "merged"
    SKIPPED = "skipped"
    FAILED = "failed"


class MergeOutcome(BaseModel):
    """Result of executing one duplicate record."""

    record_id: int
    login: str
    status: MergeStatus
    contributions_moved: int = 0
    detail: str | None = None


class MergeReport(BaseModel):
    """Aggregate outcome of a merge batch."""

    outcomes: list[MergeOutcome] = Field(default_factory=list)

    @property
    def merged(self) -> int:
        return sum(1 for o in self.outcomes if o.status == MergeStatus.MERGED)

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.status == MergeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == MergeStatus.FAILED)

    @property
    def succeeded(self) -> bool:
        """True when no merge in the batch failed."""
        return self.failed == 0


class DetectionReport(BaseModel):
    """Aggregate outcome of a detection pass."""

    manual_decisions: list[MergeDecision] = Field(default_factory=list)
    automatic_decisions: list[MergeDecision] = Field(default_factory=list)
    skipped_rules: list[str] = Field(
        default_factory=list,
        description="Primary logins of rules whose primary was not found",
    )
    recorded: int = 0
    failed: int = 0

    @property
    def decisions(self) -> list[MergeDecision]:
        """All decisions, manual first."""
        return [*self.manual_decisions, *self.automatic_decisions]
