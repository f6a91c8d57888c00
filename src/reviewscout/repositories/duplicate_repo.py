"""Repository for the duplicate contributor audit trail.

Records are upserted on (primary_contributor_id, login) and never
deleted; executed merges only flip ``is_merged``.
"""

import logging

from reviewscout.db.turso import TursoClient
from reviewscout.identity.schemas import DuplicateRecord, MergeDecision, MergePriority

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, primary_contributor_id, login, email, canonical_name,
    similarity_score, merge_priority, is_merged, notes
"""


def _row_to_record(row) -> DuplicateRecord:
    return DuplicateRecord(
        id=row[0],
        primary_contributor_id=row[1],
        login=row[2],
        email=row[3],
        canonical_name=row[4],
        similarity_score=row[5],
        merge_priority=MergePriority(row[6]),
        is_merged=bool(row[7]),
        notes=row[8],
    )


class DuplicateRepository:
    """Repository for duplicate contributor records."""

    def __init__(self, db_client: TursoClient):
        """Initialize repository with database client.

        Args:
            db_client: TursoClient instance for database operations
        """
        self._db = db_client

    async def initialize(self) -> None:
        """Create duplicate_contributors table if not exists."""
        await self._db.execute_batch(
            [
                """
            CREATE TABLE IF NOT EXISTS duplicate_contributors (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                primary_contributor_id INTEGER NOT NULL,
                login TEXT NOT NULL,
                email TEXT,
                canonical_name TEXT NOT NULL,
                similarity_score REAL NOT NULL,
                merge_priority TEXT NOT NULL,
                is_merged INTEGER NOT NULL DEFAULT 0,
                notes TEXT,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(primary_contributor_id, login)
            )
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_duplicates_pending
            ON duplicate_contributors(is_merged, merge_priority)
            """,
            ]
        )

    async def record(self, decision: MergeDecision) -> DuplicateRecord:
        """Record a merge decision (upsert).

        Re-recording the same pair refreshes the snapshot and score. A
        manual priority is never downgraded. The duplicate contributor
        stops being primary so later automatic passes skip it.

        Args:
            decision: Decision to persist

        Returns:
            The stored record
        """
        await self._db.execute_batch(
            [
                (
                    """
                INSERT INTO duplicate_contributors
                    (primary_contributor_id, login, email, canonical_name,
                     similarity_score, merge_priority, is_merged, notes)
                VALUES (?, ?, ?, ?, ?, ?, 0, ?)
                ON CONFLICT(primary_contributor_id, login)
                DO UPDATE SET
                    email = excluded.email,
                    canonical_name = excluded.canonical_name,
                    similarity_score = excluded.similarity_score,
                    merge_priority = CASE
                        WHEN duplicate_contributors.merge_priority = 'manual'
                        THEN 'manual'
                        ELSE excluded.merge_priority
                    END,
                    notes = excluded.notes
                """,
                    [
                        decision.primary_id,
                        decision.duplicate_login,
                        decision.duplicate_email,
                        decision.duplicate_canonical_name,
                        decision.similarity,
                        decision.priority.value,
                        decision.notes,
                    ],
                ),
                (
                    "UPDATE contributors SET is_primary = 0 WHERE id = ?",
                    [decision.duplicate_id],
                ),
            ]
        )
        result = await self._db.execute(
            f"""
            SELECT {_COLUMNS} FROM duplicate_contributors
            WHERE primary_contributor_id = ? AND login = ?
            """,
            [decision.primary_id, decision.duplicate_login],
        )
        record = _row_to_record(result.rows[0])
        logger.info(
            f"Recorded duplicate: {record.login} -> primary ID "
            f"{record.primary_contributor_id} ({record.merge_priority.value}, "
            f"{record.similarity_score * 100:.1f}%)"
        )
        return record

    async def get(self, record_id: int) -> DuplicateRecord | None:
        """Get a duplicate record by id."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM duplicate_contributors WHERE id = ?",
            [record_id],
        )
        if result.rows:
            return _row_to_record(result.rows[0])
        return None

    async def list_pending(
        self, priority: MergePriority | None = None
    ) -> list[DuplicateRecord]:
        """List unmerged records, most similar first.

        Args:
            priority: Optional filter on merge priority

        Returns:
            Pending duplicate records
        """
        if priority is not None:
            result = await self._db.execute(
                f"""
                SELECT {_COLUMNS} FROM duplicate_contributors
                WHERE is_merged = 0 AND merge_priority = ?
                ORDER BY similarity_score DESC, id
                """,
                [priority.value],
            )
        else:
            result = await self._db.execute(
                f"""
                SELECT {_COLUMNS} FROM duplicate_contributors
                WHERE is_merged = 0
                ORDER BY similarity_score DESC, id
                """
            )
        return [_row_to_record(row) for row in result.rows]

    async def list_all(self) -> list[DuplicateRecord]:
        """List every record, merged or not, in id order."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM duplicate_contributors ORDER BY id"
        )
        return [_row_to_record(row) for row in result.rows]

    async def mark_merged(self, record_id: int) -> bool:
        """Flag a record as merged without touching contributors.

        Returns:
            True if the flag changed
        """
        result = await self._db.execute(
            """
            UPDATE duplicate_contributors SET is_merged = 1
            WHERE id = ? AND is_merged = 0
            """,
            [record_id],
        )
        return result.rows_affected > 0

    async def finalize_merge(
        self, record_id: int, duplicate_id: int, primary_id: int
    ) -> None:
        """Flag a record merged and delete its duplicate contributor.

        Pending records that name the deleted contributor as their primary
        are re-pointed at the surviving primary. A record the survivor
        already holds for the same login is left in place. All writes
        happen in one transaction.
        """
        await self._db.execute_batch(
            [
                (
                    "UPDATE duplicate_contributors SET is_merged = 1 WHERE id = ?",
                    [record_id],
                ),
                (
                    """
                    UPDATE OR IGNORE duplicate_contributors
                    SET primary_contributor_id = ?
                    WHERE primary_contributor_id = ? AND is_merged = 0
                    """,
                    [primary_id, duplicate_id],
                ),
                ("DELETE FROM contributors WHERE id = ?", [duplicate_id]),
            ]
        )

    async def release(self, record_id: int, duplicate_id: int, login: str) -> bool:
        """Close a record whose primary no longer exists.

        The record is flagged merged with a note. Its duplicate becomes a
        primary contributor again unless another pending record still
        claims its login, so the next detection pass can regroup it.

        Returns:
            True if the duplicate was restored as a primary contributor
        """
        results = await self._db.execute_batch(
            [
                (
                    """
                    UPDATE duplicate_contributors
                    SET is_merged = 1,
                        notes = 'Released: primary contributor no longer exists'
                    WHERE id = ?
                    """,
                    [record_id],
                ),
                (
                    """
                    UPDATE contributors SET is_primary = 1
                    WHERE id = ? AND NOT EXISTS (
                        SELECT 1 FROM duplicate_contributors
                        WHERE login = ? AND is_merged = 0
                    )
                    """,
                    [duplicate_id, login],
                ),
            ]
        )
        restored = results[1].rows_affected > 0
        logger.info(
            f"Released duplicate record {record_id} ({login}), "
            f"restored as primary: {restored}"
        )
        return restored
