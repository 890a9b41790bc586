from __future__ import annotations

import re
from datetime import date, datetime

_HHMM = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_hhmm(value: str) -> int:
    """Parse 'HH:MM' into minutes since midnight. Raises ValueError on bad input."""
    match = _HHMM.match((value or "").strip())
    if not match:
        raise ValueError(f"Invalid time format (HH:MM): {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_iso_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValueError(f"Invalid date format (YYYY-MM-DD): {value!r}") from e


def coerce_minute_of_day(value: int | str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid time: {value!r}")
    if isinstance(value, int):
        if 0 <= value < 24 * 60:
            return value
        raise ValueError(f"Minute of day out of range: {value}")
    return parse_hhmm(value)


def combine(day: date, minute_of_day: int) -> datetime:
    return datetime(day.year, day.month, day.day, minute_of_day // 60, minute_of_day % 60)
