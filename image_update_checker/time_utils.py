"""
Shared datetime helpers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional


def ensure_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp and normalize it to UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an HTTP date header such as ``Last-Modified``.

    Registries are inconsistent here, so ISO 8601 values are accepted too.
    """
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return parse_timestamp(value)
    if parsed is None:
        return parse_timestamp(value)
    return ensure_utc(parsed)


def within_window(released_at: datetime, days: int, now: datetime) -> bool:
    """True if ``released_at`` is less than ``days`` days before ``now``."""
    return ensure_utc(now) - ensure_utc(released_at) < timedelta(days=days)
