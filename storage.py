from __future__ import annotations

import json
import logging
import os
import sqlite3
from calendar import monthrange
from collections.abc import Iterator
from datetime import date
from pathlib import Path
from typing import Any

from models import (
    DayField,
    DayKey,
    Preferences,
    RAW_FIELDS,
    WEEKDAY_PREFERENCE_KEYS,
    Waiver,
)
from time_math import validate_time
from utils import get_date_str, get_holidays_in_range

logger = logging.getLogger(__name__)

ENTRIES_TABLE = "entries"
WAIVERS_TABLE = "waived_workdays"


def _get_db_path() -> Path:
    """Get database path from environment variable or default location."""
    if env_path := os.environ.get("TIMETOLEAVE_DB"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "time_to_leave.db"


DB_PATH = _get_db_path()


def get_connection() -> sqlite3.Connection:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create tables if they don't exist."""
    conn = get_connection()
    conn.executescript(f"""
        CREATE TABLE IF NOT EXISTS {ENTRIES_TABLE} (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS {WAIVERS_TABLE} (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
    """)
    conn.commit()
    conn.close()


class SqliteKeyValueMap:
    """Persistent key -> JSON value map backed by one sqlite table."""

    def __init__(self, table: str):
        if table not in (ENTRIES_TABLE, WAIVERS_TABLE):
            raise ValueError(f"Unknown table: {table}")
        self.table = table

    def get(self, key: str) -> Any:
        conn = get_connection()
        row = conn.execute(
            f"SELECT value FROM {self.table} WHERE key = ?", (key,)
        ).fetchone()
        conn.close()
        return json.loads(row["value"]) if row else None

    def set(self, key: str, value: Any) -> None:
        conn = get_connection()
        conn.execute(
            f"INSERT OR REPLACE INTO {self.table} (key, value) VALUES (?, ?)",
            (key, json.dumps(value)),
        )
        conn.commit()
        conn.close()

    def delete(self, key: str) -> None:
        conn = get_connection()
        conn.execute(f"DELETE FROM {self.table} WHERE key = ?", (key,))
        conn.commit()
        conn.close()

    def entries(self) -> Iterator[tuple[str, Any]]:
        conn = get_connection()
        rows = conn.execute(f"SELECT key, value FROM {self.table} ORDER BY key").fetchall()
        conn.close()
        for row in rows:
            try:
                yield row["key"], json.loads(row["value"])
            except json.JSONDecodeError:
                logger.warning("Skipping unreadable value for %s in %s", row["key"], self.table)


class DayStore:
    """Time values per day and field, cached in memory and written through.

    The cache is filled once from the persistent map; every mutation updates
    the cache and then the persistent map before returning.
    """

    def __init__(self, persistent: SqliteKeyValueMap | None = None):
        self.persistent = persistent or SqliteKeyValueMap(ENTRIES_TABLE)
        self._cache: dict[DayKey, str] = {}
        self.load()

    def load(self) -> None:
        self._cache = {}
        for store_key, value in self.persistent.entries():
            key = DayKey.from_store_key(store_key)
            if key is None or not isinstance(value, str):
                logger.warning("Skipping malformed entry %r", store_key)
                continue
            self._cache[key] = value
        logger.debug("Loaded %d day entries", len(self._cache))

    def get(self, d: date, day_field: DayField) -> str | None:
        return self._cache.get(DayKey.from_date(d, day_field))

    def set(self, d: date, day_field: DayField, value: str) -> None:
        key = DayKey.from_date(d, day_field)
        self._cache[key] = value
        self.persistent.set(key.to_store_key(), value)

    def remove(self, d: date, day_field: DayField) -> None:
        key = DayKey.from_date(d, day_field)
        self._cache.pop(key, None)
        self.persistent.delete(key.to_store_key())

    def get_day(self, d: date) -> dict[DayField, str]:
        """All stored fields of a day."""
        values = {}
        for day_field in DayField:
            value = self.get(d, day_field)
            if value is not None:
                values[day_field] = value
        return values

    def get_raw_fields(self, d: date) -> tuple[str | None, ...]:
        """(day-begin, lunch-begin, lunch-end, day-end) for a day."""
        return tuple(self.get(d, day_field) for day_field in RAW_FIELDS)

    def items(self) -> list[tuple[DayKey, str]]:
        return sorted(
            self._cache.items(),
            key=lambda item: (item[0].year, item[0].month, item[0].day, item[0].field.value),
        )

    def __len__(self) -> int:
        return len(self._cache)


class WaiverStore:
    """Waivers per date, cached in memory and written through.

    The calendar core only reads waivers; set/remove exist for the waiver
    editor and the holiday import.
    """

    def __init__(self, persistent: SqliteKeyValueMap | None = None):
        self.persistent = persistent or SqliteKeyValueMap(WAIVERS_TABLE)
        self._cache: dict[date, Waiver] = {}
        self.load()

    def load(self) -> None:
        self._cache = {}
        for date_str, value in self.persistent.entries():
            try:
                d = date.fromisoformat(date_str)
                waiver = Waiver(hours=value["hours"], reason=value.get("reason", ""))
            except (ValueError, TypeError, KeyError, AttributeError):
                logger.warning("Skipping malformed waiver %r", date_str)
                continue
            self._cache[d] = waiver
        logger.debug("Loaded %d waivers", len(self._cache))

    def get(self, d: date) -> Waiver | None:
        return self._cache.get(d)

    def set(self, d: date, waiver: Waiver) -> None:
        self._cache[d] = waiver
        self.persistent.set(get_date_str(d), waiver.to_dict())

    def remove(self, d: date) -> None:
        self._cache.pop(d, None)
        self.persistent.delete(get_date_str(d))

    def items(self) -> list[tuple[date, Waiver]]:
        return sorted(self._cache.items())

    def __contains__(self, d: date) -> bool:
        return d in self._cache

    def __len__(self) -> int:
        return len(self._cache)


def _parse_bool(value: str, default: bool) -> bool:
    if value in ("true", "false"):
        return value == "true"
    return default


def get_preferences() -> Preferences:
    """Load preferences from the database, falling back to defaults."""
    conn = get_connection()
    rows = conn.execute("SELECT key, value FROM config").fetchall()
    conn.close()

    defaults = Preferences()
    values = {row["key"]: row["value"] for row in rows}

    hours_per_day = values.get("hours-per-day", defaults.hours_per_day)
    if not validate_time(hours_per_day):
        logger.warning("Ignoring invalid hours-per-day %r", hours_per_day)
        hours_per_day = defaults.hours_per_day

    working_days = tuple(
        _parse_bool(values.get(key, ""), default)
        for key, default in zip(WEEKDAY_PREFERENCE_KEYS, defaults.working_days)
    )

    return Preferences(
        hours_per_day=hours_per_day,
        hide_non_working_days=_parse_bool(
            values.get("hide-non-working-days", ""), defaults.hide_non_working_days
        ),
        count_today=_parse_bool(values.get("count-today", ""), defaults.count_today),
        working_days=working_days,
        holiday_country=values.get("holiday-country") or defaults.holiday_country,
        holiday_subdiv=values.get("holiday-subdiv", defaults.holiday_subdiv) or None,
    )


def save_preferences(prefs: Preferences):
    """Save preferences to the database."""
    values = {
        "hours-per-day": prefs.hours_per_day,
        "hide-non-working-days": "true" if prefs.hide_non_working_days else "false",
        "count-today": "true" if prefs.count_today else "false",
        "holiday-country": prefs.holiday_country,
        "holiday-subdiv": prefs.holiday_subdiv or "",
    }
    for key, working in zip(WEEKDAY_PREFERENCE_KEYS, prefs.working_days):
        values[key] = "true" if working else "false"

    conn = get_connection()
    for key, value in values.items():
        conn.execute("INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)", (key, value))
    conn.commit()
    conn.close()


def import_holidays_as_waivers(
    waiver_store: WaiverStore, year: int, prefs: Preferences, month: int | None = None
) -> int:
    """Add a waiver for each public holiday on a working day. Returns count created.

    Dates that already carry a waiver are left alone.
    """
    if month is None:
        start, end = date(year, 1, 1), date(year, 12, 31)
    else:
        start = date(year, month, 1)
        end = date(year, month, monthrange(year, month)[1])

    count = 0
    for holiday_date, holiday_name in get_holidays_in_range(start, end, prefs).items():
        if holiday_date in waiver_store:
            continue
        waiver_store.set(holiday_date, Waiver(hours=prefs.hours_per_day, reason=holiday_name))
        count += 1

    logger.info("Imported %d holiday waivers for %s", count, year if month is None else f"{year}-{month:02d}")
    return count
