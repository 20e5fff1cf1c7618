"""Datetime helpers: everything stored or compared is timezone-aware UTC."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (never datetime.utcnow())."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a value read from the database to aware UTC.

    Naive values are taken to be UTC already; aware ones are converted.
    """
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def format_datetime(dt: datetime | str | None, fmt: str) -> str:
    """Format a booking time for a workflow context.

    None becomes "" and strings pass through untouched. No timezone
    conversion happens: the wall-clock time the booking was stored with is
    what the booker saw.
    """
    if dt is None:
        return ""
    if isinstance(dt, str):
        return dt
    return dt.strftime(fmt)
