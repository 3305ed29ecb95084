from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from time_math import is_negative


class DayField(str, Enum):
    DAY_BEGIN = "day-begin"
    LUNCH_BEGIN = "lunch-begin"
    LUNCH_END = "lunch-end"
    DAY_END = "day-end"
    LUNCH_TOTAL = "lunch-total"
    DAY_TOTAL = "day-total"

    @property
    def is_total(self) -> bool:
        return self.value.endswith("-total")


# Canonical order of the user-entered fields within a day
RAW_FIELDS = (
    DayField.DAY_BEGIN,
    DayField.LUNCH_BEGIN,
    DayField.LUNCH_END,
    DayField.DAY_END,
)


@dataclass(frozen=True)
class DayKey:
    """Address of one stored time value. Month is 1-12."""

    year: int
    month: int
    day: int
    field: DayField

    @classmethod
    def from_date(cls, d: date, day_field: DayField) -> DayKey:
        return cls(d.year, d.month, d.day, day_field)

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)

    def to_store_key(self) -> str:
        """Persisted form "<year>-<month0>-<day>-<field>", month 0-based."""
        return f"{self.year}-{self.month - 1}-{self.day}-{self.field.value}"

    @classmethod
    def from_store_key(cls, key: str) -> DayKey | None:
        """Parse a persisted key. Returns None if the key is malformed."""
        parts = key.split("-", 3)
        if len(parts) != 4:
            return None
        try:
            year, month0, day = int(parts[0]), int(parts[1]), int(parts[2])
            day_field = DayField(parts[3])
            date(year, month0 + 1, day)
        except ValueError:
            return None
        return cls(year, month0 + 1, day, day_field)


@dataclass(frozen=True)
class Waiver:
    hours: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"hours": self.hours, "reason": self.reason}


WEEKDAY_PREFERENCE_KEYS = (
    "working-days-monday",
    "working-days-tuesday",
    "working-days-wednesday",
    "working-days-thursday",
    "working-days-friday",
    "working-days-saturday",
    "working-days-sunday",
)


@dataclass(frozen=True)
class Preferences:
    hours_per_day: str = "08:00"
    hide_non_working_days: bool = False
    count_today: bool = False
    # Indexed by date.weekday(), Monday first
    working_days: tuple[bool, ...] = (True, True, True, True, True, False, False)
    holiday_country: str = "GB"
    holiday_subdiv: str | None = "ENG"


@dataclass
class DayTotals:
    lunch_total: str | None = None
    day_total: str | None = None
    has_error: bool = False


@dataclass
class MonthTotals:
    month_total: str = "00:00"
    working_days: int = 0
    balance: str = "00:00"
    # Day of month after which the balance row is shown, 0 if none
    balance_day: int = 0

    @property
    def balance_is_negative(self) -> bool:
        return is_negative(self.balance)


@dataclass
class TodaySummary:
    """What to show under today's row: leave-by time or the finished balance."""

    leave_by: str = ""
    finished: bool = False
    day_balance: str | None = None

    @property
    def day_balance_is_negative(self) -> bool:
        return bool(self.day_balance) and is_negative(self.day_balance)


@dataclass
class DayRow:
    date: date
    weekday: str
    is_today: bool = False
    is_working_day: bool = True
    waiver: Waiver | None = None
    values: dict[DayField, str] = field(default_factory=dict)
    has_error: bool = False

    def value(self, day_field: DayField) -> str:
        return self.values.get(day_field, "")
