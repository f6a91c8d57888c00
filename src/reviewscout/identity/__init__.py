"""Identity resolution for contributor records.

Pure detection logic is exported here. The store-backed
``resolver.IdentityResolver`` and ``merger.MergeExecutor`` are imported
from their modules directly.
"""

from reviewscout.identity.detector import (
    DuplicateDetector,
    GroupingStrategy,
    PairwiseSweep,
    apply_manual_rules,
)
from reviewscout.identity.normalize import (
    is_noreply_email,
    is_valid_platform_login,
    login_from_noreply_email,
    normalize_name,
)
from reviewscout.identity.primary import choose_primary, primary_score
from reviewscout.identity.rules import load_merge_rules, parse_merge_rules
from reviewscout.identity.schemas import (
    DetectionReport,
    DuplicateRecord,
    MergeDecision,
    MergeOutcome,
    MergePriority,
    MergeReport,
    MergeRule,
    MergeStatus,
)
from reviewscout.identity.similarity import (
    cross_field_similarity,
    edit_distance,
    similarity,
)

__all__ = [
    "DetectionReport",
    "DuplicateDetector",
    "DuplicateRecord",
    "GroupingStrategy",
    "MergeDecision",
    "MergeOutcome",
    "MergePriority",
    "MergeReport",
    "MergeRule",
    "MergeStatus",
    "PairwiseSweep",
    "apply_manual_rules",
    "choose_primary",
    "cross_field_similarity",
    "edit_distance",
    "is_noreply_email",
    "is_valid_platform_login",
    "load_merge_rules",
    "login_from_noreply_email",
    "normalize_name",
    "parse_merge_rules",
    "primary_score",
    "similarity",
]
