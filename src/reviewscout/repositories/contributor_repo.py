"""Repository for contributor identities.

Logins are unique among stored contributors; lookups on login, email
and canonical name are case-insensitive.
"""

import logging

from reviewscout.db.turso import TursoClient
from reviewscout.errors import StoreError
from reviewscout.identity.normalize import normalize_name
from reviewscout.models.contributor import Contributor
from reviewscout.repositories.batch import BatchResult, chunked

logger = logging.getLogger(__name__)

_COLUMNS = "id, login, canonical_name, email, is_primary"

_UPSERT_SQL = """
    INSERT INTO contributors (login, canonical_name, email, is_primary)
    VALUES (?, ?, ?, ?)
    ON CONFLICT(login) DO UPDATE SET
        canonical_name = excluded.canonical_name,
        email = COALESCE(excluded.email, contributors.email)
"""


def _row_to_contributor(row) -> Contributor:
    return Contributor(
        id=row[0],
        login=row[1],
        canonical_name=row[2],
        email=row[3],
        is_primary=bool(row[4]),
    )


def _upsert_params(contributor: Contributor) -> list:
    canonical = normalize_name(contributor.canonical_name) or normalize_name(
        contributor.login
    )
    return [
        contributor.login,
        canonical,
        contributor.email,
        int(contributor.is_primary),
    ]


class ContributorRepository:
    """Repository for contributor rows.

    Owned for writes by identity resolution; read by recommendation.
    """

    def __init__(self, db_client: TursoClient):
        """Initialize repository with database client.

        Args:
            db_client: TursoClient instance for database operations
        """
        self._db = db_client

    async def initialize(self) -> None:
        """Create contributors table if not exists."""
        await self._db.execute_batch(
            [
                """
            CREATE TABLE IF NOT EXISTS contributors (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                login TEXT NOT NULL UNIQUE,
                canonical_name TEXT NOT NULL,
                email TEXT,
                is_primary INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_contributors_email
            ON contributors(email)
            """,
            ]
        )

    async def upsert(self, contributor: Contributor) -> Contributor:
        """Insert a contributor, or refresh the existing row with its login.

        Returns:
            The stored contributor with its id
        """
        await self._db.execute(_UPSERT_SQL, _upsert_params(contributor))
        stored = await self.get_by_login(contributor.login)
        if stored is None:
            msg = f"Contributor {contributor.login} missing after upsert"
            raise StoreError(msg)
        return stored

    async def upsert_many(
        self,
        contributors: list[Contributor],
        batch_size: int = 50,
    ) -> BatchResult:
        """Upsert contributors in bounded chunks.

        A failing chunk is counted and skipped; later chunks still run.
        """
        result = BatchResult()
        for chunk in chunked(contributors, batch_size):
            try:
                await self._db.execute_batch(
                    [(_UPSERT_SQL, _upsert_params(c)) for c in chunk]
                )
                result.succeeded += len(chunk)
            except StoreError as e:
                logger.error(f"Contributor batch of {len(chunk)} failed: {e}")
                result.failed += len(chunk)
                result.errors.append(str(e))
        logger.info(
            f"Upserted contributors: {result.succeeded} ok, {result.failed} failed"
        )
        return result

    async def get(self, contributor_id: int) -> Contributor | None:
        """Get a contributor by id."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM contributors WHERE id = ?",
            [contributor_id],
        )
        if result.rows:
            return _row_to_contributor(result.rows[0])
        return None

    async def get_by_login(self, login: str) -> Contributor | None:
        """Get a contributor by login (case-insensitive)."""
        result = await self._db.execute(
            f"""
            SELECT {_COLUMNS} FROM contributors
            WHERE lower(login) = lower(?)
            ORDER BY id
            LIMIT 1
            """,
            [login],
        )
        if result.rows:
            return _row_to_contributor(result.rows[0])
        return None

    async def find(
        self,
        login: str | None = None,
        email: str | None = None,
        canonical_name: str | None = None,
    ) -> list[Contributor]:
        """Find contributors matching any of the given fields.

        All comparisons are case-insensitive equality. With no fields,
        returns an empty list.
        """
        clauses: list[str] = []
        params: list[str] = []
        if login:
            clauses.append("lower(login) = lower(?)")
            params.append(login)
        if email:
            clauses.append("lower(email) = lower(?)")
            params.append(email)
        if canonical_name:
            clauses.append("lower(canonical_name) = lower(?)")
            params.append(canonical_name)
        if not clauses:
            return []

        result = await self._db.execute(
            f"""
            SELECT {_COLUMNS} FROM contributors
            WHERE {" OR ".join(clauses)}
            ORDER BY id
            """,
            params,
        )
        return [_row_to_contributor(row) for row in result.rows]

    async def list_all(self) -> list[Contributor]:
        """List every contributor in id order."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM contributors ORDER BY id"
        )
        return [_row_to_contributor(row) for row in result.rows]

    async def list_primary(self) -> list[Contributor]:
        """List contributors not yet recorded as someone's duplicate."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM contributors WHERE is_primary = 1 ORDER BY id"
        )
        return [_row_to_contributor(row) for row in result.rows]

    async def update_profile(
        self,
        contributor_id: int,
        canonical_name: str | None = None,
        email: str | None = None,
    ) -> bool:
        """Overwrite the canonical name and/or email of a contributor.

        Returns:
            True if a row was updated
        """
        if canonical_name is None and email is None:
            return False
        result = await self._db.execute(
            """
            UPDATE contributors
            SET canonical_name = COALESCE(?, canonical_name),
                email = COALESCE(?, email)
            WHERE id = ?
            """,
            [canonical_name, email, contributor_id],
        )
        return result.rows_affected > 0

    async def delete(self, contributor_id: int) -> bool:
        """Delete a contributor.

        Returns:
            True if a contributor was deleted, False if not found
        """
        result = await self._db.execute(
            "DELETE FROM contributors WHERE id = ?",
            [contributor_id],
        )
        return result.rows_affected > 0

    async def count(self) -> int:
        """Count stored contributors."""
        result = await self._db.execute("SELECT COUNT(*) FROM contributors")
        return result.rows[0][0]
