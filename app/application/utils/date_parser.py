from __future__ import annotations

import re
from datetime import date, timedelta

# Coarse defaults for vague times of day, in minutes since midnight.
VAGUE_TIME_DEFAULTS = {
    "morning": 9 * 60,
    "afternoon": 14 * 60,
    "evening": 17 * 60,
}

DAY_NAMES = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

MONTH_NAMES = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}

_ISO_DATE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
_DAY_MONTH = re.compile(r"\b(\d{1,2})[/.](\d{1,2})(?:[/.](\d{2,4}))?\b")
_CLOCK = re.compile(r"\b(\d{1,2}):(\d{2})\s*(am|pm)?\b")
_HOUR_AMPM = re.compile(r"\b(\d{1,2})\s*(am|pm)\b")


def parse_date_preference(text: str, reference_date: date) -> date | None:
    """Parse a date mention relative to reference_date. Returns None if nothing recognisable."""
    normalized = text.lower().strip()

    iso = _ISO_DATE.search(normalized)
    if iso:
        try:
            return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
        except ValueError:
            pass

    if "day after tomorrow" in normalized:
        return reference_date + timedelta(days=2)
    if "tomorrow" in normalized:
        return reference_date + timedelta(days=1)
    if "today" in normalized or "tonight" in normalized:
        return reference_date

    for day_name, day_num in DAY_NAMES.items():
        if re.search(rf"\b{day_name}\b", normalized):
            days_ahead = (day_num - reference_date.weekday()) % 7 or 7
            if re.search(rf"\bnext\s+week\b", normalized):
                days_ahead += 7
            return reference_date + timedelta(days=days_ahead)

    for month_name, month_num in MONTH_NAMES.items():
        day_match = re.search(
            rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+(?:of\s+)?{month_name}\b|\b{month_name}\s+(\d{{1,2}})(?:st|nd|rd|th)?\b",
            normalized,
        )
        if day_match:
            day = int(day_match.group(1) or day_match.group(2))
            return _roll_forward(reference_date, month_num, day)

    # Salon customers write day first: 15/01 or 15.01.2025
    numeric = _DAY_MONTH.search(normalized)
    if numeric:
        day = int(numeric.group(1))
        month = int(numeric.group(2))
        if numeric.group(3):
            year = int(numeric.group(3))
            if year < 100:
                year += 2000
            try:
                return date(year, month, day)
            except ValueError:
                return None
        return _roll_forward(reference_date, month, day)

    return None


def parse_time_preference(text: str) -> int | None:
    """Parse an explicit clock time ('14:30', '2pm', '9:30 am') into minutes since midnight."""
    normalized = text.lower().strip()

    match = _CLOCK.search(normalized)
    if match:
        return _to_minutes(int(match.group(1)), int(match.group(2)), match.group(3))

    match = _HOUR_AMPM.search(normalized)
    if match:
        return _to_minutes(int(match.group(1)), 0, match.group(2))

    return None


def map_vague_time(text: str) -> int | None:
    normalized = text.lower()
    for word, minutes in VAGUE_TIME_DEFAULTS.items():
        if word in normalized:
            return minutes
    return None


def _to_minutes(hour: int, minute: int, am_pm: str | None) -> int | None:
    if am_pm == "pm" and hour != 12:
        hour += 12
    elif am_pm == "am" and hour == 12:
        hour = 0
    if 0 <= hour <= 23 and 0 <= minute <= 59:
        return hour * 60 + minute
    return None


def _roll_forward(reference_date: date, month: int, day: int) -> date | None:
    year = reference_date.year
    if month < reference_date.month or (month == reference_date.month and day < reference_date.day):
        year += 1
    try:
        return date(year, month, day)
    except ValueError:
        return None
