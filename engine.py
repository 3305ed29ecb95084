"""Day and month bookkeeping over the day and waiver stores."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from models import DayField, DayTotals, MonthTotals, Preferences, TodaySummary
from storage import DayStore, WaiverStore
from time_math import (
    hour_to_minutes,
    multiply_time,
    subtract_time,
    sum_time,
    validate_time,
)
from utils import get_month_length, show_day

logger = logging.getLogger(__name__)

LATEST_LEAVE_BY = hour_to_minutes("23:59")
UNRESOLVED_LEAVE_BY = "--:--"

ShowDay = Callable[[int, int, int, Preferences], bool]


def has_input_error(
    day_begin: str | None,
    lunch_begin: str | None,
    lunch_end: str | None,
    day_end: str | None,
) -> bool:
    """True if an entered time is not after the entered time preceding it.

    Missing or malformed values are skipped, not treated as errors.
    """
    entered = [v for v in (day_begin, lunch_begin, lunch_end, day_end) if validate_time(v)]
    return any(earlier >= later for earlier, later in zip(entered, entered[1:]))


def compute_day_totals(
    day_begin: str | None,
    lunch_begin: str | None,
    lunch_end: str | None,
    day_end: str | None,
) -> DayTotals:
    """Derive lunch and day totals from the four raw times of a day."""
    lunch_total = None
    if validate_time(lunch_begin) and validate_time(lunch_end) and lunch_end > lunch_begin:
        lunch_total = subtract_time(lunch_begin, lunch_end)

    day_total = None
    if validate_time(day_begin) and validate_time(day_end) and day_end > day_begin:
        day_total = subtract_time(day_begin, day_end)
        # Only deduct a lunch that sits inside the working day
        if lunch_total and lunch_begin > day_begin and day_end > lunch_end:
            day_total = subtract_time(lunch_total, day_total)

    return DayTotals(
        lunch_total=lunch_total,
        day_total=day_total,
        has_error=has_input_error(day_begin, lunch_begin, lunch_end, day_end),
    )


class DayEngine:
    """Recomputes a day's totals and writes them through to the day store."""

    def __init__(
        self,
        day_store: DayStore,
        waiver_store: WaiverStore,
        on_error_toggled: Callable[[date, bool], None] | None = None,
    ):
        self.day_store = day_store
        self.waiver_store = waiver_store
        self.on_error_toggled = on_error_toggled

    def update_day(self, d: date) -> DayTotals:
        waiver = self.waiver_store.get(d)
        if waiver is not None:
            totals = DayTotals(
                lunch_total=self.day_store.get(d, DayField.LUNCH_TOTAL),
                day_total=waiver.hours,
                has_error=False,
            )
        else:
            totals = compute_day_totals(*self.day_store.get_raw_fields(d))
            self._write_total(d, DayField.LUNCH_TOTAL, totals.lunch_total)
            self._write_total(d, DayField.DAY_TOTAL, totals.day_total)

        if self.on_error_toggled is not None:
            self.on_error_toggled(d, totals.has_error)
        return totals

    def has_error(self, d: date) -> bool:
        if self.waiver_store.get(d) is not None:
            return False
        return has_input_error(*self.day_store.get_raw_fields(d))

    def _write_total(self, d: date, day_field: DayField, value: str | None) -> None:
        if value:
            self.day_store.set(d, day_field, value)
        elif self.day_store.get(d, day_field) is not None:
            self.day_store.remove(d, day_field)


class MonthEngine:
    """Month aggregates and today's leave-by projection."""

    def __init__(
        self,
        day_store: DayStore,
        waiver_store: WaiverStore,
        preferences: Preferences,
        show_day: ShowDay = show_day,
    ):
        self.day_store = day_store
        self.waiver_store = waiver_store
        self.preferences = preferences
        self._show_day = show_day

    def is_working_day(self, d: date) -> bool:
        return self._show_day(d.year, d.month, d.day, self.preferences)

    def day_total(self, d: date) -> str | None:
        """A waiver's hours if the day is waived, else the stored day total."""
        waiver = self.waiver_store.get(d)
        if waiver is not None:
            return waiver.hours
        return self.day_store.get(d, DayField.DAY_TOTAL)

    def _working_days(self, year: int, month: int) -> list[date]:
        return [
            date(year, month, day)
            for day in range(1, get_month_length(year, month) + 1)
            if self._show_day(year, month, day, self.preferences)
        ]

    def month_totals(self, year: int, month: int, today: date) -> MonthTotals:
        """Month sum and working-day count up to (excluding) today, plus balance."""
        month_total = "00:00"
        working_days = 0
        is_current_month = (year, month) == (today.year, today.month)
        for d in self._working_days(year, month):
            # Today is still being worked
            if is_current_month and d >= today:
                break
            total = self.day_total(d)
            if total and _is_duration(total):
                month_total = sum_time(month_total, total)
            working_days += 1

        return MonthTotals(
            month_total=month_total,
            working_days=working_days,
            balance=self.balance(year, month, today),
            balance_day=self.balance_row_position(year, month, today),
        )

    def balance(self, year: int, month: int, today: date) -> str:
        """Worked minus target hours over the days that have a recorded total.

        Stops before today, or after today when count-today is set.
        """
        worked = "00:00"
        days_to_compute = 0
        is_current_month = (year, month) == (today.year, today.month)
        for d in self._working_days(year, month):
            if is_current_month and (
                d > today or (d == today and not self.preferences.count_today)
            ):
                break
            total = self.day_total(d)
            if total and _is_duration(total):
                worked = sum_time(worked, total)
                days_to_compute += 1

        to_work = multiply_time(self.preferences.hours_per_day, -days_to_compute)
        return sum_time(to_work, worked)

    def balance_row_position(self, year: int, month: int, today: date) -> int:
        """Last working day before today in the current month, else the month's last day."""
        if (year, month) != (today.year, today.month):
            return get_month_length(year, month)

        position = 0
        for d in self._working_days(year, month):
            if d >= today:
                break
            position = d.day
        return position

    def today_summary(self, year: int, month: int, today: date) -> TodaySummary | None:
        """Leave-by or finished-day balance for today.

        None when the displayed month is not today's, today is not a working
        day, or today is waived.
        """
        if (
            (year, month) != (today.year, today.month)
            or not self.is_working_day(today)
            or self.waiver_store.get(today) is not None
        ):
            return None

        day_begin, lunch_begin, lunch_end, day_end = self.day_store.get_raw_fields(today)
        summary = TodaySummary(leave_by=self.leave_by(today))

        if None not in (day_begin, lunch_begin, lunch_end, day_end):
            day_total = self.day_store.get(today, DayField.DAY_TOTAL)
            if day_total:
                summary.finished = True
                summary.day_balance = subtract_time(self.preferences.hours_per_day, day_total)
        return summary

    def leave_by(self, today: date) -> str:
        day_begin = self.day_store.get(today, DayField.DAY_BEGIN)
        if not validate_time(day_begin):
            return ""

        leave_by = sum_time(day_begin, self.preferences.hours_per_day)
        lunch_total = self.day_store.get(today, DayField.LUNCH_TOTAL)
        if lunch_total:
            leave_by = sum_time(leave_by, lunch_total)

        if hour_to_minutes(leave_by) > LATEST_LEAVE_BY:
            return UNRESOLVED_LEAVE_BY
        return leave_by


def _is_duration(value: str) -> bool:
    try:
        hour_to_minutes(value)
    except ValueError:
        logger.warning("Ignoring malformed total %r", value)
        return False
    return True
