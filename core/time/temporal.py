"""
EventDesk Core Time - Schedule Field Validation
=================================================
Pure functions for the textual date and time fields of an Event.

Formats:
    date  YYYY-MM-DD   year 1900..2100, month 1..12, day 1..31
    time  HH:MM        24-hour, hour 0..23, minute 0..59

Day-of-month is range checked only. No month-length or leap-year
validation is performed, so '2025-02-31' is accepted.
"""

from __future__ import annotations

from core.errors import ValidationError

MIN_YEAR = 1900
MAX_YEAR = 2100


def _digits(text: str) -> bool:
    return text.isascii() and text.isdigit()


def is_valid_date(value: str) -> bool:
    """Check a YYYY-MM-DD date string."""
    if not isinstance(value, str) or len(value) != 10:
        return False
    if value[4] != "-" or value[7] != "-":
        return False
    year, month, day = value[0:4], value[5:7], value[8:10]
    if not (_digits(year) and _digits(month) and _digits(day)):
        return False
    if not MIN_YEAR <= int(year) <= MAX_YEAR:
        return False
    if not 1 <= int(month) <= 12:
        return False
    return 1 <= int(day) <= 31


def is_valid_time(value: str) -> bool:
    """Check an HH:MM 24-hour time string."""
    if not isinstance(value, str) or len(value) != 5:
        return False
    if value[2] != ":":
        return False
    hour, minute = value[0:2], value[3:5]
    if not (_digits(hour) and _digits(minute)):
        return False
    return 0 <= int(hour) <= 23 and 0 <= int(minute) <= 59


def require_valid_date(value: str) -> str:
    if not is_valid_date(value):
        raise ValidationError(
            "date", value, "expected YYYY-MM-DD with year 1900-2100."
        )
    return value


def require_valid_time(value: str) -> str:
    if not is_valid_time(value):
        raise ValidationError("time", value, "expected 24-hour HH:MM.")
    return value
