"""Arithmetic on HH:MM time strings.

Times of day and durations share one representation. Durations may be
negative (leading "-") and may exceed 24 hours, e.g. "-01:30" or "160:00".
"""

from __future__ import annotations

import re

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_time(value: object) -> bool:
    """Return True if value is a 24-hour HH:MM time of day."""
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def is_negative(value: str) -> bool:
    return value.startswith("-")


def hour_min_to_hour_formatted(hours: int, minutes: int) -> str:
    """Format hours and minutes as zero-padded HH:MM."""
    return f"{hours:02d}:{minutes:02d}"


def hour_to_minutes(value: str) -> int:
    """Convert a (possibly negative) HH:MM string to signed minutes."""
    negative = is_negative(value)
    hours, minutes = value.lstrip("-").split(":")
    total = int(hours) * 60 + int(minutes)
    return -total if negative else total


def minutes_to_hour_formatted(minutes: int) -> str:
    sign = "-" if minutes < 0 else ""
    hours, mins = divmod(abs(minutes), 60)
    return sign + hour_min_to_hour_formatted(hours, mins)


def sum_time(a: str, b: str) -> str:
    return minutes_to_hour_formatted(hour_to_minutes(a) + hour_to_minutes(b))


def subtract_time(a: str, b: str) -> str:
    """Return b - a."""
    return minutes_to_hour_formatted(hour_to_minutes(b) - hour_to_minutes(a))


def multiply_time(value: str, factor: int) -> str:
    return minutes_to_hour_formatted(hour_to_minutes(value) * factor)
