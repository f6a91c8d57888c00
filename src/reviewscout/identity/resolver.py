"""IdentityResolver orchestrates duplicate detection and merging.

Detection pipeline (in order):
1. Manual rules (recorded first, priority manual)
2. Rule profiles (preferred name/email applied to each rule's primary)
3. Automatic detection over the contributors manual rules left unclaimed,
   with every rule primary kept as the primary of its group

Merging is a separate step over the recorded duplicates, so automatic
findings can be reviewed before they are applied.
"""

import structlog

from reviewscout.errors import StoreError
from reviewscout.identity import detector as detection
from reviewscout.identity.detector import DuplicateDetector, find_rule_primary
from reviewscout.identity.merger import MergeExecutor
from reviewscout.identity.normalize import normalize_name
from reviewscout.identity.primary import choose_primary
from reviewscout.identity.schemas import (
    DetectionReport,
    DuplicateRecord,
    MergeDecision,
    MergeOutcome,
    MergePriority,
    MergeReport,
    MergeRule,
)
from reviewscout.models.contributor import Contributor
from reviewscout.repositories.contribution_repo import ContributionRepository
from reviewscout.repositories.contributor_repo import ContributorRepository
from reviewscout.repositories.duplicate_repo import DuplicateRepository

logger = structlog.get_logger()


class IdentityResolver:
    """Keeps the contributor namespace canonical.

    Owns all writes to contributors and the duplicate audit trail.
    """

    def __init__(
        self,
        contributor_repo: ContributorRepository,
        duplicate_repo: DuplicateRepository,
        contribution_repo: ContributionRepository,
        detector: DuplicateDetector | None = None,
        rules: list[MergeRule] | None = None,
    ):
        """Initialize resolver with its repositories and rule set.

        Args:
            contributor_repo: Contributor storage
            duplicate_repo: Duplicate audit trail storage
            contribution_repo: Contribution storage (rewritten on merge)
            detector: Automatic duplicate detector (default thresholds 0.80/0.90)
            rules: Manual merge rules, usually loaded from configuration
        """
        self._contributors = contributor_repo
        self._duplicates = duplicate_repo
        self._detector = detector or DuplicateDetector()
        self._rules = rules or []
        self._merger = MergeExecutor(contributor_repo, duplicate_repo, contribution_repo)

    @property
    def rules(self) -> list[MergeRule]:
        return self._rules

    def apply_manual_rules(
        self, contributors: list[Contributor]
    ) -> list[MergeDecision]:
        """Evaluate the configured rules against a contributor set."""
        return detection.apply_manual_rules(self._rules, contributors)

    def detect_automatic_duplicates(
        self,
        contributors: list[Contributor],
        exclude_ids: set[int] | None = None,
        pinned_ids: set[int] | None = None,
    ) -> list[MergeDecision]:
        """Group similar primary contributors into merge decisions."""
        return self._detector.detect(
            contributors, exclude_ids=exclude_ids, pinned_ids=pinned_ids
        )

    def choose_primary(self, group: list[Contributor]) -> Contributor:
        """Pick the surviving member of a duplicate group."""
        return choose_primary(group)

    async def run_detection(self) -> DetectionReport:
        """Run a full detection pass and record every decision.

        Manual decisions are recorded before automatic detection runs.
        A decision that fails to record is counted and skipped.

        Returns:
            DetectionReport with decisions and recording counts

        Raises:
            StoreError: If the contributor set cannot be loaded
        """
        contributors = await self._contributors.list_all()
        report = DetectionReport()

        report.skipped_rules = [
            rule.primary_login
            for rule in self._rules
            if find_rule_primary(rule, contributors) is None
        ]
        report.manual_decisions = self.apply_manual_rules(contributors)
        await self._record_all(report.manual_decisions, report)
        await self._apply_rule_profiles(contributors)

        claimed = {d.duplicate_id for d in report.manual_decisions}
        rule_primaries: set[int] = set()
        for rule in self._rules:
            primary = find_rule_primary(rule, contributors)
            if primary is not None:
                rule_primaries.add(primary.id)
        report.automatic_decisions = self.detect_automatic_duplicates(
            contributors, exclude_ids=claimed, pinned_ids=rule_primaries
        )
        await self._record_all(report.automatic_decisions, report)

        logger.info(
            "detection pass complete",
            manual=len(report.manual_decisions),
            automatic=len(report.automatic_decisions),
            skipped_rules=len(report.skipped_rules),
            recorded=report.recorded,
            failed=report.failed,
        )
        return report

    async def _record_all(
        self, decisions: list[MergeDecision], report: DetectionReport
    ) -> None:
        for decision in decisions:
            try:
                await self._duplicates.record(decision)
                report.recorded += 1
            except StoreError as e:
                logger.error(
                    "failed to record duplicate",
                    duplicate=decision.duplicate_login,
                    primary=decision.primary_login,
                    error=str(e),
                )
                report.failed += 1

    async def _apply_rule_profiles(self, contributors: list[Contributor]) -> None:
        """Push each rule's preferred name and email onto its primary."""
        for rule in self._rules:
            if rule.canonical_name is None and rule.email is None:
                continue
            primary = find_rule_primary(rule, contributors)
            if primary is None:
                continue
            canonical = None
            if rule.canonical_name:
                canonical = normalize_name(rule.canonical_name) or None
            try:
                await self._contributors.update_profile(
                    primary.id, canonical_name=canonical, email=rule.email
                )
            except StoreError as e:
                logger.error(
                    "failed to update primary profile",
                    primary=primary.login,
                    error=str(e),
                )

    async def list_pending(
        self, priority: MergePriority | None = None
    ) -> list[DuplicateRecord]:
        """List recorded duplicates awaiting a merge."""
        return await self._duplicates.list_pending(priority)

    async def execute_merge(self, record: DuplicateRecord) -> MergeOutcome:
        """Merge one recorded duplicate into its primary."""
        return await self._merger.execute_merge(record)

    async def merge_pending(
        self,
        priority: MergePriority = MergePriority.MANUAL,
        merge_all: bool = False,
    ) -> MergeReport:
        """Merge pending duplicates one at a time.

        Args:
            priority: Which pending records to merge (default manual only)
            merge_all: Merge every pending record regardless of priority

        Returns:
            MergeReport with merged/skipped/failed counts

        Raises:
            StoreError: If the pending records cannot be loaded
        """
        records = await self._duplicates.list_pending(None if merge_all else priority)
        report = MergeReport()
        for record in records:
            report.outcomes.append(await self.execute_merge(record))

        logger.info(
            "merge batch complete",
            pending=len(records),
            merged=report.merged,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report
