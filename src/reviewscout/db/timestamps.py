"""Timestamp encoding for the store.

Timestamps are persisted as fixed-width UTC strings so that SQL range
predicates can compare them lexically.
"""

from datetime import UTC, datetime

_DB_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def to_db_timestamp(value: datetime) -> str:
    """Encode a datetime as a fixed-width UTC string.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(_DB_FORMAT)


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse a stored or user-supplied timestamp into an aware UTC datetime.

    Raises:
        ValueError: If the value is not an ISO-8601 timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
