"""
Date/time helpers shared by the domain and storage layers.

Everything inside the core is compared as timezone-aware UTC. Naive values
(SQLite, legacy rows without offset) are assumed to already be UTC.
"""
from datetime import date, datetime, time, timezone


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value) -> datetime | None:
    """
    Parse an ISO string / date / datetime into aware UTC datetime.

    Returns None for empty or unparseable input.

    Example:
        >>> parse_timestamp("2024-01-31")
        datetime.datetime(2024, 1, 31, 0, 0, tzinfo=datetime.timezone.utc)
        >>> parse_timestamp("2024-01-31T10:00:00Z").hour
        10
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(raw))
        except ValueError:
            return None
    return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
