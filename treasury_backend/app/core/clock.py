"""
Time helpers.

Timestamps are handled as naive UTC throughout the ledger: PostgreSQL hands
back aware values for timestamptz columns while SQLite hands back naive ones,
so everything is normalized before comparison.
"""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalize an aware or naive datetime to naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def as_date(value) -> date:
    """Calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return as_naive_utc(value).date()
    return value
