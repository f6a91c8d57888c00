"""Tests for ContributionRepository."""

from datetime import UTC, datetime

import pytest

from reviewscout.db.turso import TursoClient
from reviewscout.models.contribution import ActivityType, Contribution
from reviewscout.models.file import File
from reviewscout.repositories.contribution_repo import ContributionRepository

T = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_initialize_creates_tables(db_client: TursoClient):
    """Initialize should create files, contributions and review_comments."""
    repo = ContributionRepository(db_client)
    await repo.initialize()

    result = await db_client.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    names = {row[0] for row in result.rows}
    assert {"files", "contributions", "review_comments"} <= names


@pytest.mark.asyncio
async def test_upsert_files_keeps_canonical_path(
    contribution_repo: ContributionRepository,
):
    """Re-upserting a file only moves its current path."""
    await contribution_repo.upsert_files([File(canonical_path="a.py", current_path="a.py")])
    first = await contribution_repo.get_file("a.py")

    result = await contribution_repo.upsert_files(
        [File(canonical_path="a.py", current_path="src/a.py")]
    )
    moved = await contribution_repo.get_file("a.py")

    assert result.succeeded == 1
    assert moved.id == first.id
    assert moved.current_path == "src/a.py"


@pytest.mark.asyncio
async def test_insert_contributions_is_idempotent(
    contribution_repo: ContributionRepository, add_contributor
):
    """Re-ingesting the same facts does not duplicate them."""
    dev = await add_contributor("alice")
    await contribution_repo.upsert_files([File(canonical_path="a.py", current_path="a.py")])
    file = await contribution_repo.get_file("a.py")
    facts = [
        Contribution(
            contributor_id=dev.id,
            file_id=file.id,
            activity_type=ActivityType.COMMIT,
            activity_id=f"sha{i}",
            contribution_date=T,
        )
        for i in range(5)
    ]

    await contribution_repo.insert_contributions(facts, batch_size=2)
    result = await contribution_repo.insert_contributions(facts, batch_size=2)

    assert result.succeeded == 5
    assert await contribution_repo.count_for(dev.id) == 5


@pytest.mark.asyncio
async def test_fetch_facts_filters_paths_and_types(
    contribution_repo: ContributionRepository, add_contributor, add_activity
):
    """Facts are filtered by current path and activity type."""
    dev = await add_contributor("alice")
    await add_activity(dev, "a.py", ActivityType.COMMIT, T)
    await add_activity(dev, "a.py", ActivityType.REVIEW, T)
    await add_activity(dev, "b.py", ActivityType.REVIEW, T)

    facts = await contribution_repo.fetch_facts(["a.py"], [ActivityType.REVIEW])

    assert len(facts) == 1
    assert facts[0].path == "a.py"
    assert facts[0].login == "alice"
    assert facts[0].activity_type == ActivityType.REVIEW
    assert facts[0].contribution_date == T
    assert facts[0].lines_modified is None
    assert await contribution_repo.fetch_facts([], None) == []


@pytest.mark.asyncio
async def test_fetch_facts_carries_line_counts(
    contribution_repo: ContributionRepository, add_contributor, add_activity
):
    """Stored line counts come back on the joined facts."""
    dev = await add_contributor("alice")
    await add_activity(dev, "a.py", ActivityType.REVIEW, T, lines=17)

    facts = await contribution_repo.fetch_facts(["a.py"])

    assert [f.lines_modified for f in facts] == [17]


@pytest.mark.asyncio
async def test_fetch_facts_time_bounds(
    contribution_repo: ContributionRepository, add_contributor, add_activity
):
    """before is exclusive; since and until are inclusive."""
    dev = await add_contributor("alice")
    await add_activity(dev, "a.py", ActivityType.COMMIT, datetime(2024, 5, 1, tzinfo=UTC))
    await add_activity(dev, "a.py", ActivityType.COMMIT, T)

    before = await contribution_repo.fetch_facts(["a.py"], before=T)
    window = await contribution_repo.fetch_facts(
        None, since=datetime(2024, 5, 1, tzinfo=UTC), until=T
    )

    assert [f.contribution_date for f in before] == [datetime(2024, 5, 1, tzinfo=UTC)]
    assert len(window) == 2


@pytest.mark.asyncio
async def test_reassign_moves_history(
    contribution_repo: ContributionRepository, add_contributor, add_activity
):
    """Reassignment moves contributions and review comments."""
    primary = await add_contributor("alice")
    duplicate = await add_contributor("alice2")
    await add_activity(duplicate, "a.py", ActivityType.COMMIT, T)
    await add_activity(duplicate, "b.py", ActivityType.REVIEW, T)
    await contribution_repo.add_review_comment(duplicate.id, 7, "c-1", T)

    moved = await contribution_repo.reassign(duplicate.id, primary.id)

    assert moved == 2
    assert await contribution_repo.count_for(duplicate.id) == 0
    assert await contribution_repo.count_for(primary.id) == 2
    assert await contribution_repo.count_review_comments_for(primary.id) == 1


@pytest.mark.asyncio
async def test_reassign_collapses_shared_facts(
    contribution_repo: ContributionRepository, add_contributor
):
    """A fact both identities recorded survives once, on the primary."""
    primary = await add_contributor("alice")
    duplicate = await add_contributor("alice2")
    await contribution_repo.upsert_files([File(canonical_path="a.py", current_path="a.py")])
    file = await contribution_repo.get_file("a.py")
    shared = {
        "file_id": file.id,
        "activity_type": ActivityType.COMMIT,
        "activity_id": "sha1",
        "contribution_date": T,
    }
    await contribution_repo.insert_contributions(
        [
            Contribution(contributor_id=primary.id, **shared),
            Contribution(contributor_id=duplicate.id, **shared),
        ]
    )

    await contribution_repo.reassign(duplicate.id, primary.id)

    assert await contribution_repo.count_for(primary.id) == 1
    assert await contribution_repo.count_for(duplicate.id) == 0


@pytest.mark.asyncio
async def test_fetch_facts_direct_children_of_directories(
    contribution_repo: ContributionRepository, add_contributor, add_activity
):
    """Directory filters match files directly inside, not nested or siblings."""
    dev = await add_contributor("alice")
    for path in ("src/a.py", "src/b.py", "src/deep/c.py", "srcx/d.py", "top.py"):
        await add_activity(dev, path, ActivityType.COMMIT, T)

    facts = await contribution_repo.fetch_facts(directories=["src"])
    both = await contribution_repo.fetch_facts(
        ["src/a.py"], directories=["src", "src/deep"]
    )

    assert sorted(f.path for f in facts) == ["src/a.py", "src/b.py"]
    assert [f.path for f in both] == ["src/a.py"]
    assert await contribution_repo.fetch_facts(directories=[]) == []


@pytest.mark.asyncio
async def test_open_review_counts_distinct_pull_requests(
    contribution_repo: ContributionRepository, add_contributor
):
    """Comments count once per pull request, inside the window only."""
    alice = await add_contributor("alice")
    bob = await add_contributor("bob")
    since = datetime(2024, 5, 1, tzinfo=UTC)
    await contribution_repo.add_review_comment(alice.id, 1, "c-1", T)
    await contribution_repo.add_review_comment(alice.id, 1, "c-2", T)
    await contribution_repo.add_review_comment(alice.id, 2, "c-3", since)
    await contribution_repo.add_review_comment(alice.id, 9, "c-4", T)
    await contribution_repo.add_review_comment(bob.id, 3, "c-5", datetime(2024, 1, 1, tzinfo=UTC))

    counts = await contribution_repo.open_review_counts(since, T, exclude_pr=9)

    assert counts == {alice.id: 2}
    assert (await contribution_repo.open_review_counts(since, T))[alice.id] == 3
