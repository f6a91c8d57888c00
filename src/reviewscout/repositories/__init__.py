"""Repository layer for data persistence.

Provides repository classes for persisting contributors, files,
contributions and the duplicate audit trail. Repositories encapsulate
data access logic and receive their database client explicitly.
"""

from reviewscout.repositories.batch import BatchResult, chunked
from reviewscout.repositories.contribution_repo import ContributionRepository
from reviewscout.repositories.contributor_repo import ContributorRepository
from reviewscout.repositories.duplicate_repo import DuplicateRepository

__all__ = [
    "BatchResult",
    "ContributionRepository",
    "ContributorRepository",
    "DuplicateRepository",
    "chunked",
]
