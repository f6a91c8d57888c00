"""Database access layer."""

from reviewscout.db.timestamps import parse_timestamp, to_db_timestamp
from reviewscout.db.turso import TursoClient

__all__ = ["TursoClient", "parse_timestamp", "to_db_timestamp"]
