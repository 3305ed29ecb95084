"""Shared fixtures for tests."""

from __future__ import annotations

import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Generator

import pytest

# Set up test database before importing storage
_test_db_fd, _test_db_path = tempfile.mkstemp(suffix=".db")
os.environ["TIMETOLEAVE_DB"] = _test_db_path


@pytest.fixture(scope="session", autouse=True)
def setup_test_db() -> Generator[Path, None, None]:
    """Set up a test database for the entire test session."""
    import storage

    # Reinitialise storage module with test db path
    storage.DB_PATH = Path(_test_db_path)
    storage.init_db()

    yield Path(_test_db_path)

    # Cleanup
    os.close(_test_db_fd)
    os.unlink(_test_db_path)


@pytest.fixture
def clean_db(setup_test_db: Path) -> Generator[None, None, None]:
    """Clean database tables before each test."""
    import storage

    storage.DB_PATH = setup_test_db
    conn = storage.get_connection()
    conn.execute(f"DELETE FROM {storage.ENTRIES_TABLE}")
    conn.execute(f"DELETE FROM {storage.WAIVERS_TABLE}")
    conn.execute("DELETE FROM config")
    conn.commit()
    conn.close()

    yield


@pytest.fixture
def day_store(clean_db):
    """An empty DayStore on the test database."""
    from storage import DayStore

    return DayStore()


@pytest.fixture
def waiver_store(clean_db):
    """An empty WaiverStore on the test database."""
    from storage import WaiverStore

    return WaiverStore()


@pytest.fixture
def preferences():
    """Default preferences: 8 hours, Monday to Friday."""
    from models import Preferences

    return Preferences(hours_per_day="08:00")


class FixedClock:
    """Callable clock whose time can be moved by tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    # Wednesday 14 October 2026, 09:00
    return FixedClock(datetime(2026, 10, 14, 9, 0))


@pytest.fixture
def listener():
    """A CalendarListener that records every event."""
    from calendar_controller import CalendarListener

    class RecordingListener(CalendarListener):
        def __init__(self):
            self.events: list[tuple] = []

        def calendar_redrawn(self) -> None:
            self.events.append(("redrawn",))

        def day_updated(self, day, totals) -> None:
            self.events.append(("day_updated", day, totals))

        def day_error_toggled(self, day, has_error) -> None:
            self.events.append(("error", day, has_error))

        def punch_availability_changed(self, available) -> None:
            self.events.append(("punch", available))

        def waiver_requested(self, day) -> None:
            self.events.append(("waiver", day))

        def of(self, kind: str) -> list[tuple]:
            return [e for e in self.events if e[0] == kind]

    return RecordingListener()


@pytest.fixture
def controller(day_store, waiver_store, preferences, listener, clock):
    """A CalendarController on empty stores, showing October 2026."""
    from calendar_controller import CalendarController

    return CalendarController(
        day_store, waiver_store, preferences, listener=listener, clock=clock
    )


@pytest.fixture
def sample_day() -> date:
    # Monday
    return date(2026, 10, 5)
