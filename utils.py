"""Date helpers for the calendar."""

from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta

from models import Preferences

DAY_ABBRS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def get_month_length(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def get_date_str(d: date) -> str:
    """Key used for waivers, e.g. '2026-10-19'."""
    return d.isoformat()


def get_month_label(year: int, month: int) -> str:
    return date(year, month, 1).strftime("%B %Y")


def show_day(year: int, month: int, day: int, prefs: Preferences) -> bool:
    """Return True if the date is a working day according to preferences."""
    return prefs.working_days[date(year, month, day).weekday()]


def next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def prev_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def get_holidays(year: int, country: str, subdiv: str | None = None) -> dict[date, str]:
    """Get public holidays for a country (and optional subdivision) in a year."""
    import holidays
    country_holidays = holidays.country_holidays(country, subdiv=subdiv, years=year)
    return {d: name for d, name in country_holidays.items()}


def get_holidays_in_range(
    start: date, end: date, prefs: Preferences
) -> dict[date, str]:
    """Get holidays that fall on working days in a date range."""
    found = get_holidays(start.year, prefs.holiday_country, prefs.holiday_subdiv)
    if start.year != end.year:
        found.update(get_holidays(end.year, prefs.holiday_country, prefs.holiday_subdiv))

    in_range = {}
    current = start
    while current <= end:
        if current in found and show_day(current.year, current.month, current.day, prefs):
            in_range[current] = found[current]
        current += timedelta(days=1)
    return in_range
