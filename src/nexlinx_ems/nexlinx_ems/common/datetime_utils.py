from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator

from ..core.constants import BIOTIME_TIME_FORMAT


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_punch_time(value) -> datetime:
    """Parse a BioTime punch_time.

    BioTime answers with 'YYYY-MM-DD HH:MM:SS'; some deployments return ISO
    strings with a 'T' separator or a timezone suffix. The result is always
    naive local time.
    """

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid punch_time: {value!r}")

    text = value.strip()
    try:
        return datetime.strptime(text, BIOTIME_TIME_FORMAT)
    except ValueError:
        pass

    if text.endswith("Z"):
        text = text[:-1]
    return datetime.fromisoformat(text).replace(tzinfo=None)


def format_biotime(value: datetime) -> str:
    return value.strftime(BIOTIME_TIME_FORMAT)


def daterange(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end (negative when end is earlier)."""
    seconds = (end - start).total_seconds()
    if seconds >= 0:
        return int(seconds // 60)
    return -int(-seconds // 60)


def format_hours(minutes: int) -> str:
    minutes = max(int(minutes), 0)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
