"""Domain models for the contribution history."""

from reviewscout.models.contribution import (
    ActivityType,
    Contribution,
    ContributionFact,
)
from reviewscout.models.contributor import Contributor
from reviewscout.models.file import File

__all__ = [
    "ActivityType",
    "Contribution",
    "ContributionFact",
    "Contributor",
    "File",
]
