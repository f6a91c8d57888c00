"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator
from datetime import datetime
from pathlib import Path

import pytest

from reviewscout.db.turso import TursoClient
from reviewscout.models.contribution import ActivityType, Contribution
from reviewscout.models.contributor import Contributor
from reviewscout.models.file import File
from reviewscout.repositories.contribution_repo import ContributionRepository
from reviewscout.repositories.contributor_repo import ContributorRepository
from reviewscout.repositories.duplicate_repo import DuplicateRepository


@pytest.fixture
async def db_client(tmp_path: Path) -> AsyncIterator[TursoClient]:
    """Create a temp file database client for testing."""
    db_path = tmp_path / "test_reviewscout.db"
    client = TursoClient(url=f"file:{db_path}")
    await client.connect()
    yield client
    await client.close()


@pytest.fixture
async def contributor_repo(db_client: TursoClient) -> ContributorRepository:
    """ContributorRepository with initialized table."""
    repo = ContributorRepository(db_client)
    await repo.initialize()
    return repo


@pytest.fixture
async def duplicate_repo(
    db_client: TursoClient, contributor_repo: ContributorRepository
) -> DuplicateRepository:
    """DuplicateRepository with initialized table."""
    repo = DuplicateRepository(db_client)
    await repo.initialize()
    return repo


@pytest.fixture
async def contribution_repo(db_client: TursoClient) -> ContributionRepository:
    """ContributionRepository with initialized tables."""
    repo = ContributionRepository(db_client)
    await repo.initialize()
    return repo


@pytest.fixture
def add_contributor(contributor_repo: ContributorRepository):
    """Factory that stores a contributor and returns it with its id."""

    async def _add(
        login: str, name: str | None = None, email: str | None = None
    ) -> Contributor:
        return await contributor_repo.upsert(
            Contributor(login=login, canonical_name=name or login, email=email)
        )

    return _add


@pytest.fixture
def add_activity(contribution_repo: ContributionRepository):
    """Factory that stores one contribution on a path.

    The file is created on first use; activity ids are generated.
    """
    counter = {"n": 0}

    async def _add(
        contributor: Contributor,
        path: str,
        activity_type: ActivityType,
        when: datetime,
        lines: int | None = None,
    ) -> None:
        await contribution_repo.upsert_files(
            [File(canonical_path=path, current_path=path)]
        )
        file = await contribution_repo.get_file(path)
        counter["n"] += 1
        await contribution_repo.insert_contributions(
            [
                Contribution(
                    contributor_id=contributor.id,
                    file_id=file.id,
                    activity_type=activity_type,
                    activity_id=f"act-{counter['n']}",
                    contribution_date=when,
                    lines_modified=lines,
                )
            ]
        )

    return _add
