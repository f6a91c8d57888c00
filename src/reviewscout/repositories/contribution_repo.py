"""Repository for files, contributions and review comments.

Contributions are append-mostly; only ``contributor_id`` is rewritten,
and only when an identity merge reassigns a duplicate's history.
"""

import logging
from datetime import datetime

from reviewscout.db.timestamps import parse_timestamp, to_db_timestamp
from reviewscout.db.turso import TursoClient
from reviewscout.errors import StoreError
from reviewscout.models.contribution import (
    ActivityType,
    Contribution,
    ContributionFact,
)
from reviewscout.models.file import File
from reviewscout.repositories.batch import BatchResult, chunked

logger = logging.getLogger(__name__)

_FILE_UPSERT_SQL = """
    INSERT INTO files (canonical_path, current_path)
    VALUES (?, ?)
    ON CONFLICT(canonical_path) DO UPDATE SET
        current_path = excluded.current_path
"""

_CONTRIBUTION_INSERT_SQL = """
    INSERT OR IGNORE INTO contributions
        (contributor_id, file_id, activity_type, activity_id,
         contribution_date, lines_modified)
    VALUES (?, ?, ?, ?, ?, ?)
"""


def _contribution_params(contribution: Contribution) -> list:
    return [
        contribution.contributor_id,
        contribution.file_id,
        contribution.activity_type.value,
        contribution.activity_id,
        to_db_timestamp(contribution.contribution_date),
        contribution.lines_modified,
    ]


class ContributionRepository:
    """Repository for contribution history.

    Read by the aggregator; written by bulk loads and identity merges.
    """

    def __init__(self, db_client: TursoClient):
        """Initialize repository with database client.

        Args:
            db_client: TursoClient instance for database operations
        """
        self._db = db_client

    async def initialize(self) -> None:
        """Create files, contributions and review_comments tables if not exist."""
        await self._db.execute_batch(
            [
                """
            CREATE TABLE IF NOT EXISTS files (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                canonical_path TEXT NOT NULL UNIQUE,
                current_path TEXT NOT NULL
            )
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_files_current_path
            ON files(current_path)
            """,
                """
            CREATE TABLE IF NOT EXISTS contributions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                contributor_id INTEGER NOT NULL,
                file_id INTEGER NOT NULL,
                activity_type TEXT NOT NULL,
                activity_id TEXT NOT NULL,
                contribution_date TEXT NOT NULL,
                lines_modified INTEGER,
                UNIQUE(contributor_id, file_id, activity_type, activity_id)
            )
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_contributions_file
            ON contributions(file_id, activity_type, contribution_date)
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_contributions_contributor
            ON contributions(contributor_id)
            """,
                """
            CREATE TABLE IF NOT EXISTS review_comments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                contributor_id INTEGER NOT NULL,
                pr_number INTEGER NOT NULL,
                comment_id TEXT NOT NULL UNIQUE,
                created_date TEXT NOT NULL
            )
            """,
            ]
        )

    async def upsert_files(
        self, files: list[File], batch_size: int = 100
    ) -> BatchResult:
        """Upsert files keyed by canonical path, in bounded chunks.

        An existing file keeps its canonical path; only the current path
        is refreshed.
        """
        result = BatchResult()
        for chunk in chunked(files, batch_size):
            try:
                await self._db.execute_batch(
                    [
                        (_FILE_UPSERT_SQL, [f.canonical_path, f.current_path])
                        for f in chunk
                    ]
                )
                result.succeeded += len(chunk)
            except StoreError as e:
                logger.error(f"File batch of {len(chunk)} failed: {e}")
                result.failed += len(chunk)
                result.errors.append(str(e))
        logger.info(f"Upserted files: {result.succeeded} ok, {result.failed} failed")
        return result

    async def get_file(self, canonical_path: str) -> File | None:
        """Get a file by its canonical path."""
        result = await self._db.execute(
            "SELECT id, canonical_path, current_path FROM files WHERE canonical_path = ?",
            [canonical_path],
        )
        if result.rows:
            row = result.rows[0]
            return File(id=row[0], canonical_path=row[1], current_path=row[2])
        return None

    async def insert_contributions(
        self,
        contributions: list[Contribution],
        batch_size: int = 500,
    ) -> BatchResult:
        """Insert contributions in bounded chunks.

        Re-ingested facts (same contributor, file, type and activity id)
        are ignored, so re-running a load is safe.
        """
        result = BatchResult()
        for chunk in chunked(contributions, batch_size):
            try:
                await self._db.execute_batch(
                    [(_CONTRIBUTION_INSERT_SQL, _contribution_params(c)) for c in chunk]
                )
                result.succeeded += len(chunk)
            except StoreError as e:
                logger.error(f"Contribution batch of {len(chunk)} failed: {e}")
                result.failed += len(chunk)
                result.errors.append(str(e))
        logger.info(
            f"Inserted contributions: {result.succeeded} ok, {result.failed} failed"
        )
        return result

    async def add_review_comment(
        self,
        contributor_id: int,
        pr_number: int,
        comment_id: str,
        created_date: datetime,
    ) -> None:
        """Record a review comment (ignored if the comment id exists)."""
        await self._db.execute(
            """
            INSERT OR IGNORE INTO review_comments
                (contributor_id, pr_number, comment_id, created_date)
            VALUES (?, ?, ?, ?)
            """,
            [contributor_id, pr_number, comment_id, to_db_timestamp(created_date)],
        )

    async def fetch_facts(
        self,
        paths: list[str] | None = None,
        activity_types: list[ActivityType] | None = None,
        *,
        directories: list[str] | None = None,
        before: datetime | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ContributionFact]:
        """Read contributions joined to contributor and file identity.

        Facts must match every filter given.

        Args:
            paths: Current file paths to include (None means every file)
            activity_types: Activity types to include (None means all)
            directories: Directories whose direct children to include
            before: Exclusive upper bound on contribution date
            since: Inclusive lower bound on contribution date
            until: Inclusive upper bound on contribution date

        Returns:
            Matching facts ordered by date, then id
        """
        clauses: list[str] = []
        params: list = []

        if paths is not None:
            if not paths:
                return []
            clauses.append(f"f.current_path IN ({', '.join('?' for _ in paths)})")
            params.extend(paths)
        if directories is not None:
            if not directories:
                return []
            children = []
            for directory in directories:
                prefix = f"{directory}/"
                children.append(
                    "(substr(f.current_path, 1, ?) = ?"
                    " AND instr(substr(f.current_path, ?), '/') = 0)"
                )
                params.extend([len(prefix), prefix, len(prefix) + 1])
            clauses.append(f"({' OR '.join(children)})")
        if activity_types:
            clauses.append(
                f"c.activity_type IN ({', '.join('?' for _ in activity_types)})"
            )
            params.extend(t.value for t in activity_types)
        if before is not None:
            clauses.append("c.contribution_date < ?")
            params.append(to_db_timestamp(before))
        if since is not None:
            clauses.append("c.contribution_date >= ?")
            params.append(to_db_timestamp(since))
        if until is not None:
            clauses.append("c.contribution_date <= ?")
            params.append(to_db_timestamp(until))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        result = await self._db.execute(
            f"""
            SELECT c.contributor_id, p.login, p.canonical_name,
                   c.file_id, f.current_path, c.activity_type,
                   c.contribution_date, c.lines_modified
            FROM contributions c
            JOIN contributors p ON p.id = c.contributor_id
            JOIN files f ON f.id = c.file_id
            {where}
            ORDER BY c.contribution_date, c.id
            """,
            params,
        )
        return [
            ContributionFact(
                contributor_id=row[0],
                login=row[1],
                canonical_name=row[2],
                file_id=row[3],
                path=row[4],
                activity_type=ActivityType(row[5]),
                contribution_date=parse_timestamp(row[6]),
                lines_modified=row[7],
            )
            for row in result.rows
        ]

    async def open_review_counts(
        self,
        since: datetime,
        until: datetime,
        exclude_pr: int | None = None,
    ) -> dict[int, int]:
        """Distinct pull requests each contributor commented on in a window.

        Args:
            since: Inclusive lower bound on comment date
            until: Inclusive upper bound on comment date
            exclude_pr: Pull request left out of the count

        Returns:
            Count per contributor id; contributors without comments are absent
        """
        sql = """
            SELECT contributor_id, COUNT(DISTINCT pr_number)
            FROM review_comments
            WHERE created_date >= ? AND created_date <= ?
        """
        params: list = [to_db_timestamp(since), to_db_timestamp(until)]
        if exclude_pr is not None:
            sql += " AND pr_number != ?"
            params.append(exclude_pr)
        result = await self._db.execute(f"{sql} GROUP BY contributor_id", params)
        return {row[0]: row[1] for row in result.rows}

    async def reassign(self, from_contributor_id: int, to_contributor_id: int) -> int:
        """Move every contribution and review comment to another contributor.

        Facts the target already owns (same file, type and activity id)
        collapse into the target's copy. All writes share one transaction.

        Returns:
            Number of contributions that changed owner
        """
        results = await self._db.execute_batch(
            [
                (
                    """
                    UPDATE OR IGNORE contributions SET contributor_id = ?
                    WHERE contributor_id = ?
                    """,
                    [to_contributor_id, from_contributor_id],
                ),
                (
                    "DELETE FROM contributions WHERE contributor_id = ?",
                    [from_contributor_id],
                ),
                (
                    "UPDATE review_comments SET contributor_id = ? WHERE contributor_id = ?",
                    [to_contributor_id, from_contributor_id],
                ),
            ]
        )
        return results[0].rows_affected

    async def count_for(self, contributor_id: int) -> int:
        """Count contributions owned by a contributor."""
        result = await self._db.execute(
            "SELECT COUNT(*) FROM contributions WHERE contributor_id = ?",
            [contributor_id],
        )
        return result.rows[0][0]

    async def count_review_comments_for(self, contributor_id: int) -> int:
        """Count review comments owned by a contributor."""
        result = await self._db.execute(
            "SELECT COUNT(*) FROM review_comments WHERE contributor_id = ?",
            [contributor_id],
        )
        return result.rows[0][0]
