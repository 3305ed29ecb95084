"""Tests for utils.py - date helpers."""

from datetime import date

from models import Preferences
from utils import (
    get_date_str,
    get_holidays_in_range,
    get_month_label,
    get_month_length,
    next_month,
    prev_month,
    show_day,
)


class TestMonthHelpers:
    """Tests for month helpers."""

    def test_month_length(self):
        assert get_month_length(2026, 1) == 31
        assert get_month_length(2026, 2) == 28
        assert get_month_length(2024, 2) == 29
        assert get_month_length(2026, 4) == 30

    def test_month_label(self):
        assert get_month_label(2026, 10) == "October 2026"

    def test_next_month_wraps_year(self):
        assert next_month(2025, 12) == (2026, 1)
        assert next_month(2026, 5) == (2026, 6)

    def test_prev_month_wraps_year(self):
        assert prev_month(2026, 1) == (2025, 12)
        assert prev_month(2026, 6) == (2026, 5)

    def test_date_str_is_iso(self):
        assert get_date_str(date(2026, 3, 5)) == "2026-03-05"


class TestShowDay:
    """Tests for the working-day predicate."""

    def test_default_weekdays(self):
        prefs = Preferences()
        assert show_day(2026, 10, 5, prefs)  # Monday
        assert show_day(2026, 10, 9, prefs)  # Friday
        assert not show_day(2026, 10, 10, prefs)  # Saturday
        assert not show_day(2026, 10, 11, prefs)  # Sunday

    def test_custom_working_days(self):
        prefs = Preferences(working_days=(False, True, True, True, True, True, False))
        assert not show_day(2026, 10, 5, prefs)  # Monday
        assert show_day(2026, 10, 10, prefs)  # Saturday


class TestHolidays:
    """Tests for holiday lookups."""

    def test_holidays_on_working_days_only(self):
        """Christmas 2027 is a Saturday, so only the substitute days remain."""
        prefs = Preferences(holiday_country="GB", holiday_subdiv="ENG")
        found = get_holidays_in_range(date(2027, 12, 20), date(2027, 12, 31), prefs)

        assert date(2027, 12, 25) not in found
        assert all(d.weekday() < 5 for d in found)

    def test_new_year(self):
        prefs = Preferences(holiday_country="GB", holiday_subdiv="ENG")
        found = get_holidays_in_range(date(2026, 1, 1), date(2026, 1, 31), prefs)

        assert date(2026, 1, 1) in found
        assert found[date(2026, 1, 1)]
