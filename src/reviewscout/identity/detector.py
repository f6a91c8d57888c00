"""Duplicate contributor detection.

Two sources of merge decisions:
1. Manual rules (configured up front, similarity 1.0, priority manual)
2. Automatic grouping on cross-field string similarity

Manual rules are always evaluated first; contributors they claim are
withheld from automatic grouping, and a rule primary that lands in an
automatic group is kept as that group's primary.
"""

from typing import Protocol

import structlog

from reviewscout.identity.primary import choose_primary
from reviewscout.identity.schemas import MergeDecision, MergePriority, MergeRule
from reviewscout.identity.similarity import cross_field_similarity
from reviewscout.models.contributor import Contributor

logger = structlog.get_logger()


def find_rule_primary(
    rule: MergeRule, contributors: list[Contributor]
) -> Contributor | None:
    """Find the contributor a rule names as primary (case-insensitive login)."""
    wanted = rule.primary_login.lower()
    for contributor in contributors:
        if contributor.login.lower() == wanted:
            return contributor
    return None


def apply_manual_rules(
    rules: list[MergeRule],
    contributors: list[Contributor],
) -> list[MergeDecision]:
    """Turn manual merge rules into merge decisions.

    A rule whose primary is absent is skipped and logged. Every other
    contributor matching one of the rule's alternate logins, emails or
    names becomes a duplicate of the primary. A contributor claimed by an
    earlier rule is not claimed again.

    Args:
        rules: Configured merge rules
        contributors: Current contributor set

    Returns:
        Manual merge decisions in rule order
    """
    decisions: list[MergeDecision] = []
    claimed: set[int] = set()

    for rule in rules:
        primary = find_rule_primary(rule, contributors)
        if primary is None:
            logger.warning(
                "merge rule primary not found", primary_login=rule.primary_login
            )
            continue

        matches = [
            c
            for c in contributors
            if c.id != primary.id and c.id not in claimed and rule.matches(c)
        ]
        if not matches:
            logger.info("merge rule matched nothing", primary_login=rule.primary_login)
            continue

        for duplicate in matches:
            claimed.add(duplicate.id)
            decisions.append(
                MergeDecision.between(
                    primary,
                    duplicate,
                    similarity=1.0,
                    priority=MergePriority.MANUAL,
                    notes=f"Manual merge rule for {rule.primary_login}",
                )
            )
        logger.info(
            "merge rule applied",
            primary_login=rule.primary_login,
            duplicates=[d.login for d in matches],
        )

    return decisions


class GroupingStrategy(Protocol):
    """Partitions contributors into groups of likely duplicates.

    Implementations may pre-filter candidate pairs (blocking) as long as
    the resulting groups are the ones the pairwise sweep would produce.
    """

    def group(
        self, contributors: list[Contributor], threshold: float
    ) -> list[list[Contributor]]:
        """Return groups of two or more similar contributors."""
        ...


class PairwiseSweep:
    """Single left-to-right sweep with a processed set.

    Each unprocessed contributor seeds a group and absorbs every later
    unprocessed contributor whose similarity to the seed reaches the
    threshold. Absorbed contributors are never reconsidered, so a pair
    found after one member joined an earlier group is not revisited.
    """

    def group(
        self, contributors: list[Contributor], threshold: float
    ) -> list[list[Contributor]]:
        groups: list[list[Contributor]] = []
        processed: set[int] = set()

        for i, seed in enumerate(contributors):
            if i in processed:
                continue
            processed.add(i)
            members = [seed]

            for j in range(i + 1, len(contributors)):
                if j in processed:
                    continue
                if cross_field_similarity(seed, contributors[j]) >= threshold:
                    members.append(contributors[j])
                    processed.add(j)

            if len(members) > 1:
                groups.append(members)

        return groups


class DuplicateDetector:
    """Detects duplicate contributors automatically.

    Groups currently-primary contributors by cross-field similarity,
    elects a primary per group and emits one decision per other member.
    """

    def __init__(
        self,
        medium_threshold: float = 0.80,
        high_threshold: float = 0.90,
        grouping: GroupingStrategy | None = None,
    ):
        """Initialize detector with similarity thresholds.

        Args:
            medium_threshold: Minimum similarity to group two contributors
            high_threshold: Similarity at or above which a decision is auto-high
            grouping: Grouping strategy (defaults to the pairwise sweep)
        """
        self._medium = medium_threshold
        self._high = high_threshold
        self._grouping = grouping or PairwiseSweep()

    def detect(
        self,
        contributors: list[Contributor],
        exclude_ids: set[int] | None = None,
        pinned_ids: set[int] | None = None,
    ) -> list[MergeDecision]:
        """Detect duplicate groups among primary contributors.

        A pinned contributor is never emitted as a duplicate. A group
        holding one is merged into it instead of the elected primary.

        Args:
            contributors: Contributor set (non-primary rows are ignored)
            exclude_ids: Contributors already claimed elsewhere (manual rules)
            pinned_ids: Contributors that must survive (manual rule primaries)

        Returns:
            Automatic merge decisions, priority auto-high or auto-medium
        """
        exclude_ids = exclude_ids or set()
        pinned_ids = pinned_ids or set()
        candidates = [
            c for c in contributors if c.is_primary and c.id not in exclude_ids
        ]
        logger.info("detecting automatic duplicates", candidates=len(candidates))

        decisions: list[MergeDecision] = []
        groups = self._grouping.group(candidates, self._medium)

        for group in groups:
            pinned = [c for c in group if c.id in pinned_ids]
            primary = pinned[0] if pinned else choose_primary(group)
            duplicates = [
                c for c in group if c.id != primary.id and c.id not in pinned_ids
            ]
            if not duplicates:
                continue
            logger.info(
                "duplicate group found",
                primary=primary.login,
                duplicates=[d.login for d in duplicates],
            )
            for duplicate in duplicates:
                score = cross_field_similarity(primary, duplicate)
                priority = (
                    MergePriority.AUTO_HIGH
                    if score >= self._high
                    else MergePriority.AUTO_MEDIUM
                )
                decisions.append(
                    MergeDecision.between(
                        primary,
                        duplicate,
                        similarity=score,
                        priority=priority,
                        notes=f"Auto-detected similarity: {score * 100:.1f}%",
                    )
                )

        logger.info(
            "automatic detection complete",
            groups=len(groups),
            decisions=len(decisions),
        )
        return decisions
