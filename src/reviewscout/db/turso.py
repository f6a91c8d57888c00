"""Turso/libSQL database client wrapper."""

import logging
from typing import Any

from libsql_client import Client, LibsqlError, ResultSet, create_client

from reviewscout.errors import StoreError

logger = logging.getLogger(__name__)

Statement = str | tuple[str, list[Any]]


class TursoClient:
    """Wrapper for Turso/libSQL async client.

    Supports both cloud Turso (with auth token) and local SQLite files.
    Driver failures surface as StoreError.
    """

    def __init__(
        self,
        url: str | None = None,
        auth_token: str | None = None,
    ):
        """Initialize client with connection parameters.

        Args:
            url: Database URL. Defaults to a local file.
            auth_token: Auth token for Turso cloud.
        """
        self.url = url or "file:reviewscout.db"
        self.auth_token = auth_token
        self._client: Client | None = None

    async def connect(self) -> None:
        """Establish database connection."""
        if self._client is not None:
            return

        if self.auth_token and self.url.startswith("libsql://"):
            # Cloud Turso
            self._client = create_client(
                url=self.url,
                auth_token=self.auth_token,
            )
        else:
            # Local file database
            self._client = create_client(url=self.url)

        logger.info(f"Connected to database: {self.url}")

    async def execute(
        self,
        sql: str,
        params: list[Any] | None = None,
    ) -> ResultSet:
        """Execute a SQL statement.

        Args:
            sql: SQL query with ? placeholders
            params: Query parameters

        Returns:
            ResultSet with rows and metadata

        Raises:
            StoreError: If the statement fails
        """
        if not self._client:
            msg = "Not connected. Call connect() first."
            raise RuntimeError(msg)
        try:
            return await self._client.execute(sql, params or [])
        except LibsqlError as e:
            raise StoreError(f"Query failed: {e}") from e

    async def execute_batch(self, statements: list[Statement]) -> list[ResultSet]:
        """Execute multiple SQL statements in a single transaction.

        Either every statement is applied or none is.

        Args:
            statements: SQL strings or (sql, params) tuples

        Returns:
            One ResultSet per statement

        Raises:
            StoreError: If any statement fails
        """
        if not self._client:
            msg = "Not connected. Call connect() first."
            raise RuntimeError(msg)
        try:
            return await self._client.batch(statements)
        except LibsqlError as e:
            raise StoreError(f"Batch failed: {e}") from e

    async def close(self) -> None:
        """Close the database connection."""
        if self._client:
            await self._client.close()
            self._client = None
            logger.info("Database connection closed")

    async def is_healthy(self) -> bool:
        """Check if database connection is healthy."""
        try:
            if not self._client:
                return False
            result = await self._client.execute("SELECT 1")
            return len(result.rows) == 1
        except Exception:
            return False
