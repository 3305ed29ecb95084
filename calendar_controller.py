"""Month view state, navigation, punch and field edits."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from engine import DayEngine, MonthEngine, ShowDay
from models import (
    DayField,
    DayRow,
    DayTotals,
    MonthTotals,
    Preferences,
    RAW_FIELDS,
    TodaySummary,
)
from storage import DayStore, WaiverStore
from time_math import hour_min_to_hour_formatted, validate_time
from utils import (
    DAY_ABBRS,
    get_month_label,
    get_month_length,
    next_month,
    prev_month,
    show_day,
)

logger = logging.getLogger(__name__)


class CalendarListener:
    """Receives calendar events. Override the hooks you need."""

    def calendar_redrawn(self) -> None:
        pass

    def day_updated(self, day: date, totals: DayTotals) -> None:
        pass

    def day_error_toggled(self, day: date, has_error: bool) -> None:
        pass

    def punch_availability_changed(self, available: bool) -> None:
        pass

    def waiver_requested(self, day: date) -> None:
        pass


class CalendarController:
    """Holds the displayed year/month and drives the engines.

    "Today" is read from the clock on every call, so a view left open past
    midnight picks up the new day on the next redraw.
    """

    def __init__(
        self,
        day_store: DayStore,
        waiver_store: WaiverStore,
        preferences: Preferences,
        listener: CalendarListener | None = None,
        show_day: ShowDay = show_day,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.day_store = day_store
        self.waiver_store = waiver_store
        self.listener = listener or CalendarListener()
        self._clock = clock
        self._show_day = show_day
        self.preferences = preferences
        self.day_engine = DayEngine(
            day_store, waiver_store, on_error_toggled=self.listener.day_error_toggled
        )
        self.month_engine = MonthEngine(day_store, waiver_store, preferences, show_day)
        self._punch_available: bool | None = None

        today = self.today()
        self.year = today.year
        self.month = today.month

    def today(self) -> date:
        return self._clock().date()

    # --- Navigation ---

    def next_month(self) -> None:
        self.year, self.month = next_month(self.year, self.month)
        self.redraw()

    def prev_month(self) -> None:
        self.year, self.month = prev_month(self.year, self.month)
        self.redraw()

    def go_to_today(self) -> None:
        today = self.today()
        self.year, self.month = today.year, today.month
        self.redraw()

    def is_current_month(self) -> bool:
        today = self.today()
        return (self.year, self.month) == (today.year, today.month)

    def redraw(self) -> None:
        logger.debug("Redrawing %04d-%02d", self.year, self.month)
        self.listener.calendar_redrawn()
        self._update_punch_availability()

    def reload(self) -> None:
        """Re-read both stores from persistence, e.g. after a waiver edit."""
        self.day_store.load()
        self.waiver_store.load()
        self.redraw()

    def update_preferences(self, preferences: Preferences) -> None:
        self.preferences = preferences
        self.month_engine.preferences = preferences
        self.redraw()

    # --- Getters for rendering ---

    def month_label(self) -> str:
        return get_month_label(self.year, self.month)

    def is_working_day(self, d: date) -> bool:
        return self._show_day(d.year, d.month, d.day, self.preferences)

    def day_rows(self) -> list[DayRow]:
        """Rows of the displayed month. Non-working days are left out when hidden."""
        today = self.today()
        rows = []
        for day in range(1, get_month_length(self.year, self.month) + 1):
            d = date(self.year, self.month, day)
            working = self.is_working_day(d)
            if not working and self.preferences.hide_non_working_days:
                continue

            row = DayRow(
                date=d,
                weekday=DAY_ABBRS[d.weekday()],
                is_today=d == today,
                is_working_day=working,
            )
            if working:
                row.waiver = self.waiver_store.get(d)
                row.values = self.day_store.get_day(d)
                if row.waiver is not None:
                    row.values[DayField.DAY_TOTAL] = row.waiver.hours
                else:
                    row.has_error = self.day_engine.has_error(d)
            rows.append(row)
        return rows

    def month_totals(self) -> MonthTotals:
        return self.month_engine.month_totals(self.year, self.month, self.today())

    def today_summary(self) -> TodaySummary | None:
        return self.month_engine.today_summary(self.year, self.month, self.today())

    def punch_available(self) -> bool:
        today = self.today()
        if not self.is_current_month() or not self.is_working_day(today):
            return False
        if today in self.waiver_store:
            return False
        return any(self.day_store.get(today, f) is None for f in RAW_FIELDS)

    def _update_punch_availability(self) -> None:
        available = self.punch_available()
        if available != self._punch_available:
            self._punch_available = available
            self.listener.punch_availability_changed(available)

    # --- Edits ---

    def punch(self) -> DayField | None:
        """Stamp the current time into today's earliest empty field.

        Returns the field filled, or None when there was nothing to punch.
        """
        now = self._clock()
        today = now.date()
        if not self.is_current_month() or not self.is_working_day(today):
            return None
        if today in self.waiver_store:
            return None

        for day_field in RAW_FIELDS:
            if self.day_store.get(today, day_field) is None:
                break
        else:
            return None

        value = hour_min_to_hour_formatted(now.hour, now.minute)
        logger.info("Punched %s at %s on %s", day_field.value, value, today)
        self.update_field(today, day_field, value)
        return day_field

    def update_field(self, d: date, day_field: DayField, value: str) -> DayTotals | None:
        """Apply an edit of one raw field and recompute the day.

        A malformed value clears whatever valid value was stored before.
        """
        if day_field.is_total:
            logger.warning("Refusing to edit derived field %s on %s", day_field.value, d)
            return None

        old_value = self.day_store.get(d, day_field)
        if validate_time(value):
            self.day_store.set(d, day_field, value)
        elif old_value is not None:
            self.day_store.remove(d, day_field)

        totals = self.day_engine.update_day(d)
        self.listener.day_updated(d, totals)
        self._update_punch_availability()
        return totals

    def request_waiver(self, d: date) -> None:
        self.listener.waiver_requested(d)
