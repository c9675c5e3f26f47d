"""
Datetime helpers shared by the models, the lifecycle engine and the
aggregation reporters. All timestamps are UTC.
"""

import re
import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def generate_uuid() -> str:
    """Generate a UUID4 string"""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    SQLite hands back naive values for timezone-aware columns; everything
    this application writes is UTC, so the interpretation is lossless.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_utc_day(day: date) -> datetime:
    """Midnight UTC at the start of ``day``"""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def parse_date_only(value: Optional[str]) -> Optional[date]:
    """
    Parse a strict ``YYYY-MM-DD`` string.

    Returns None for missing or malformed input so callers can fall back
    to their default window.
    """
    if not value:
        return None
    v = value.strip()
    if not _DATE_ONLY.match(v):
        return None
    try:
        return date.fromisoformat(v)
    except ValueError:
        return None


def ms_between(start: datetime, end: datetime) -> int:
    """Signed difference ``end - start`` in whole milliseconds"""
    delta: timedelta = as_utc(end) - as_utc(start)
    return delta // timedelta(milliseconds=1)
