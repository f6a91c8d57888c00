"""Tests for MergeExecutor."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from reviewscout.errors import StoreError
from reviewscout.identity.merger import MergeExecutor
from reviewscout.identity.schemas import (
    DuplicateRecord,
    MergeDecision,
    MergePriority,
    MergeStatus,
)
from reviewscout.models.contribution import ActivityType
from reviewscout.models.contributor import Contributor
from reviewscout.repositories.contribution_repo import ContributionRepository
from reviewscout.repositories.contributor_repo import ContributorRepository
from reviewscout.repositories.duplicate_repo import DuplicateRepository

T = datetime(2024, 3, 1, tzinfo=UTC)


@pytest.fixture
def executor(
    contributor_repo: ContributorRepository,
    duplicate_repo: DuplicateRepository,
    contribution_repo: ContributionRepository,
) -> MergeExecutor:
    """MergeExecutor over real repositories."""
    return MergeExecutor(contributor_repo, duplicate_repo, contribution_repo)


@pytest.fixture
async def recorded(duplicate_repo: DuplicateRepository, add_contributor, add_activity):
    """A primary, a duplicate with history, and the record linking them."""
    primary = await add_contributor("alice", "alice", "alice@x.com")
    duplicate = await add_contributor("alice2", "alice", None)
    await add_activity(duplicate, "a.py", ActivityType.COMMIT, T)
    await add_activity(duplicate, "a.py", ActivityType.REVIEW, T)
    record = await duplicate_repo.record(
        MergeDecision.between(primary, duplicate, 1.0, MergePriority.MANUAL)
    )
    return primary, duplicate, record


@pytest.mark.asyncio
async def test_merge_moves_history_and_deletes_duplicate(
    executor: MergeExecutor,
    contributor_repo: ContributorRepository,
    contribution_repo: ContributionRepository,
    duplicate_repo: DuplicateRepository,
    recorded,
):
    """A merge reassigns contributions, flags the record and drops the duplicate."""
    primary, duplicate, record = recorded

    outcome = await executor.execute_merge(record)

    assert outcome.status == MergeStatus.MERGED
    assert outcome.contributions_moved == 2
    assert await contribution_repo.count_for(primary.id) == 2
    assert await contributor_repo.get(duplicate.id) is None
    assert (await duplicate_repo.get(record.id)).is_merged is True


@pytest.mark.asyncio
async def test_merge_twice_is_noop(
    executor: MergeExecutor,
    contributor_repo: ContributorRepository,
    contribution_repo: ContributionRepository,
    duplicate_repo: DuplicateRepository,
    recorded,
):
    """Re-running a merge leaves contributors and ownership unchanged."""
    primary, _, record = recorded
    await executor.execute_merge(record)
    count_after_first = await contributor_repo.count()
    owned_after_first = await contribution_repo.count_for(primary.id)

    # Stale copy of the record, as a concurrent pass would hold it
    again = await executor.execute_merge(record)
    fresh = await executor.execute_merge(await duplicate_repo.get(record.id))

    assert again.status == MergeStatus.SKIPPED
    assert fresh.status == MergeStatus.SKIPPED
    assert await contributor_repo.count() == count_after_first
    assert await contribution_repo.count_for(primary.id) == owned_after_first


@pytest.mark.asyncio
async def test_missing_primary_releases_duplicate(
    executor: MergeExecutor,
    contributor_repo: ContributorRepository,
    contribution_repo: ContributionRepository,
    duplicate_repo: DuplicateRepository,
    recorded,
):
    """A vanished primary closes the record and frees the duplicate."""
    primary, duplicate, record = recorded
    await contributor_repo.delete(primary.id)

    outcome = await executor.execute_merge(record)

    assert outcome.status == MergeStatus.SKIPPED
    assert await contribution_repo.count_for(duplicate.id) == 2
    assert (await duplicate_repo.get(record.id)).is_merged is True
    assert (await contributor_repo.get(duplicate.id)).is_primary is True
    assert await duplicate_repo.list_pending() == []


@pytest.mark.asyncio
async def test_store_error_reported_as_failed():
    """A store failure marks the outcome failed instead of raising."""
    contributors = MagicMock(spec=ContributorRepository)
    contributors.get_by_login = AsyncMock(
        return_value=Contributor(id=2, login="alice2", canonical_name="alice")
    )
    contributors.get = AsyncMock(
        return_value=Contributor(id=1, login="alice", canonical_name="alice")
    )
    duplicates = MagicMock(spec=DuplicateRepository)
    contributions = MagicMock(spec=ContributionRepository)
    contributions.reassign = AsyncMock(side_effect=StoreError("locked"))
    executor = MergeExecutor(contributors, duplicates, contributions)
    record = DuplicateRecord(
        id=10,
        primary_contributor_id=1,
        login="alice2",
        canonical_name="alice",
        similarity_score=1.0,
        merge_priority=MergePriority.MANUAL,
    )
    duplicates.get = AsyncMock(return_value=record)

    outcome = await executor.execute_merge(record)

    assert outcome.status == MergeStatus.FAILED
    assert "locked" in outcome.detail


@pytest.mark.asyncio
async def test_chained_merge_follows_surviving_primary(
    executor: MergeExecutor,
    contributor_repo: ContributorRepository,
    contribution_repo: ContributionRepository,
    duplicate_repo: DuplicateRepository,
    add_contributor,
    add_activity,
):
    """b -> a then a -> c: merging a first carries b's record over to c."""
    a = await add_contributor("a", "a")
    b = await add_contributor("b", "b")
    c = await add_contributor("c", "c")
    await add_activity(b, "b.py", ActivityType.COMMIT, T)
    b_to_a = await duplicate_repo.record(
        MergeDecision.between(a, b, 0.85, MergePriority.AUTO_MEDIUM)
    )
    a_to_c = await duplicate_repo.record(
        MergeDecision.between(c, a, 0.95, MergePriority.AUTO_HIGH)
    )

    first = await executor.execute_merge(a_to_c)
    # Copy loaded before the first merge still names a as primary
    second = await executor.execute_merge(b_to_a)

    assert first.status == MergeStatus.MERGED
    assert second.status == MergeStatus.MERGED
    assert await contributor_repo.count() == 1
    assert await contribution_repo.count_for(c.id) == 1
    assert (await duplicate_repo.get(b_to_a.id)).primary_contributor_id == c.id
    assert await duplicate_repo.list_pending() == []


@pytest.mark.asyncio
async def test_chain_with_existing_survivor_record(
    executor: MergeExecutor,
    contributor_repo: ContributorRepository,
    duplicate_repo: DuplicateRepository,
    add_contributor,
):
    """A record the survivor already holds absorbs the stale one."""
    a = await add_contributor("a", "a")
    b = await add_contributor("b", "b")
    c = await add_contributor("c", "c")
    b_to_a = await duplicate_repo.record(
        MergeDecision.between(a, b, 0.85, MergePriority.AUTO_MEDIUM)
    )
    b_to_c = await duplicate_repo.record(
        MergeDecision.between(c, b, 0.84, MergePriority.AUTO_MEDIUM)
    )
    a_to_c = await duplicate_repo.record(
        MergeDecision.between(c, a, 0.95, MergePriority.AUTO_HIGH)
    )

    await executor.execute_merge(a_to_c)
    stale = await executor.execute_merge(b_to_a)
    final = await executor.execute_merge(b_to_c)

    assert stale.status == MergeStatus.SKIPPED
    assert final.status == MergeStatus.MERGED
    assert await contributor_repo.get(b.id) is None
    assert [x.login for x in await contributor_repo.list_all()] == ["c"]
