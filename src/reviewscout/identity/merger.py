"""Execution of recorded duplicate merges.

A merge moves the duplicate's contributions and review comments onto the
primary, then flags the record merged and deletes the duplicate. Each
step is guarded by an existence check so re-running a merge is a no-op.
"""

import structlog

from reviewscout.errors import NotFoundError, StoreError
from reviewscout.identity.schemas import DuplicateRecord, MergeOutcome, MergeStatus
from reviewscout.models.contributor import Contributor
from reviewscout.repositories.contribution_repo import ContributionRepository
from reviewscout.repositories.contributor_repo import ContributorRepository
from reviewscout.repositories.duplicate_repo import DuplicateRepository

logger = structlog.get_logger()


class MergeExecutor:
    """Applies one DuplicateRecord at a time."""

    def __init__(
        self,
        contributor_repo: ContributorRepository,
        duplicate_repo: DuplicateRepository,
        contribution_repo: ContributionRepository,
    ):
        self._contributors = contributor_repo
        self._duplicates = duplicate_repo
        self._contributions = contribution_repo

    async def execute_merge(self, record: DuplicateRecord) -> MergeOutcome:
        """Merge a recorded duplicate into its primary.

        The record is re-read first, so a copy loaded before an earlier
        merge in the same batch sees the primary that merge re-pointed it
        to. Never raises for a single bad record: missing rows are
        reported as skipped and store failures as failed.

        Args:
            record: Duplicate record to apply

        Returns:
            MergeOutcome describing what happened
        """
        log = logger.bind(record_id=record.id, login=record.login)

        try:
            record = await self._duplicates.get(record.id) or record
            if record.is_merged:
                log.info("merge already applied")
                return self._skipped(record, "already merged")

            duplicate = await self._contributors.get_by_login(record.login)
            if duplicate is None:
                # Absorbed by an earlier or concurrent pass
                await self._duplicates.mark_merged(record.id)
                log.info("duplicate no longer exists")
                return self._skipped(record, "duplicate no longer exists")

            try:
                primary = await self._load_primary(record, duplicate)
            except NotFoundError as e:
                restored = await self._duplicates.release(
                    record.id, duplicate.id, record.login
                )
                log.warning("merge skipped", reason=str(e), restored=restored)
                return self._skipped(record, str(e))

            moved = await self._contributions.reassign(duplicate.id, primary.id)
            await self._duplicates.finalize_merge(record.id, duplicate.id, primary.id)
        except StoreError as e:
            log.error("merge failed", error=str(e))
            return MergeOutcome(
                record_id=record.id,
                login=record.login,
                status=MergeStatus.FAILED,
                detail=str(e),
            )

        log.info(
            "merge executed",
            duplicate_id=duplicate.id,
            primary_id=primary.id,
            contributions=moved,
        )
        return MergeOutcome(
            record_id=record.id,
            login=record.login,
            status=MergeStatus.MERGED,
            contributions_moved=moved,
        )

    async def _load_primary(
        self, record: DuplicateRecord, duplicate: Contributor
    ) -> Contributor:
        """Look up the record's primary.

        Raises:
            NotFoundError: If the primary is gone, or the login now
                resolves to the primary itself
        """
        primary = await self._contributors.get(record.primary_contributor_id)
        if primary is None:
            msg = f"Primary contributor {record.primary_contributor_id} not found"
            raise NotFoundError(msg)
        if primary.id == duplicate.id:
            msg = f"Login {record.login} now belongs to the primary"
            raise NotFoundError(msg)
        return primary

    @staticmethod
    def _skipped(record: DuplicateRecord, detail: str) -> MergeOutcome:
        return MergeOutcome(
            record_id=record.id,
            login=record.login,
            status=MergeStatus.SKIPPED,
            detail=detail,
        )
