"""UTC datetime utilities."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def hours_from(start: datetime, hours: int) -> datetime:
    return start + timedelta(hours=hours)


def isoformat_or_none(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None
