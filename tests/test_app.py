"""Tests for the app module."""

from __future__ import annotations

import logging
from datetime import date
from unittest.mock import MagicMock, patch

from models import DayField, DayRow, MonthTotals, Waiver


def plain(cells) -> list[str]:
    return [cell.plain for cell in cells]


class TestTimeToLeaveApp:
    """Tests for TimeToLeaveApp outside of a running event loop."""

    def test_builds_controller(self, clean_db):
        from app import TimeToLeaveApp

        with patch.object(TimeToLeaveApp, 'run'):
            app = TimeToLeaveApp()

            assert app.controller.listener is app
            assert app.controller.month == date.today().month
            assert app._punch_available is False

    def test_listener_hooks_before_mount(self, clean_db):
        """Hooks fired before the widgets exist only record state."""
        from app import TimeToLeaveApp

        with patch.object(TimeToLeaveApp, 'run'):
            app = TimeToLeaveApp()
            app.refresh_bindings = MagicMock()

            app.calendar_redrawn()
            app.day_updated(date(2026, 10, 5), None)
            app.punch_availability_changed(True)

            assert app._punch_available is True
            app.refresh_bindings.assert_not_called()

    def test_check_action_gates_punch(self, clean_db):
        from app import TimeToLeaveApp

        with patch.object(TimeToLeaveApp, 'run'):
            app = TimeToLeaveApp()

            assert app.check_action("punch", ()) is False
            app.punch_availability_changed(True)
            assert app.check_action("punch", ()) is True
            assert app.check_action("edit_day", ()) is True

    def test_day_edit_applies_changes(self, clean_db):
        from app import TimeToLeaveApp

        with patch.object(TimeToLeaveApp, 'run'):
            app = TimeToLeaveApp()
            d = date(2026, 10, 5)

            app._on_day_edited(d, {DayField.DAY_BEGIN: "09:00", DayField.DAY_END: "17:00"})

            assert app.controller.day_store.get(d, DayField.DAY_TOTAL) == "08:00"

    def test_day_edit_cancelled(self, clean_db):
        from app import TimeToLeaveApp

        with patch.object(TimeToLeaveApp, 'run'):
            app = TimeToLeaveApp()
            app._on_day_edited(date(2026, 10, 5), None)

            assert len(app.controller.day_store) == 0

    def test_removing_waiver_recomputes_totals(self, clean_db):
        from app import TimeToLeaveApp

        with patch.object(TimeToLeaveApp, 'run'):
            app = TimeToLeaveApp()
            app.notify = MagicMock()
            d = date(2026, 10, 5)
            app.controller.waiver_store.set(d, Waiver("08:00", "Holiday"))
            app.controller.day_store.set(d, DayField.DAY_BEGIN, "09:00")
            app.controller.day_store.set(d, DayField.DAY_END, "16:00")

            app._on_waiver_edited(d, ("remove", None))

            assert d not in app.controller.waiver_store
            assert app.controller.day_store.get(d, DayField.DAY_TOTAL) == "07:00"

    def test_unsupported_holiday_country_notifies(self, clean_db):
        from app import TimeToLeaveApp
        from models import Preferences

        with patch.object(TimeToLeaveApp, 'run'):
            app = TimeToLeaveApp()
            app.notify = MagicMock()
            app.push_screen = MagicMock()
            app.controller.preferences = Preferences(holiday_country="XX", holiday_subdiv=None)

            app.action_import_holidays()
            do_import = app.push_screen.call_args[0][1]
            do_import(True)

            assert app.notify.call_args.kwargs["severity"] == "error"
            assert len(app.controller.waiver_store) == 0

    def test_preferences_saved(self, clean_db):
        import storage
        from app import TimeToLeaveApp
        from models import Preferences

        with patch.object(TimeToLeaveApp, 'run'):
            app = TimeToLeaveApp()
            app.notify = MagicMock()
            prefs = Preferences(hours_per_day="07:00")

            app._on_preferences_saved(prefs)

            assert app.controller.preferences == prefs
            assert storage.get_preferences().hours_per_day == "07:00"


class TestFormatRow:
    """Tests for the table cell formatting."""

    def test_working_day(self):
        from app import format_row

        row = DayRow(
            date=date(2026, 10, 5),
            weekday="Mon",
            values={
                DayField.DAY_BEGIN: "09:00",
                DayField.LUNCH_BEGIN: "12:00",
                DayField.LUNCH_END: "12:30",
                DayField.DAY_END: "17:30",
                DayField.LUNCH_TOTAL: "00:30",
                DayField.DAY_TOTAL: "08:00",
            },
        )
        assert plain(format_row(row)) == [
            "Mon", "5", "09:00", "12:00", "00:30", "12:30", "17:30", "08:00",
        ]

    def test_non_working_day_blank(self):
        from app import format_row

        row = DayRow(date=date(2026, 10, 3), weekday="Sat", is_working_day=False)
        cells = format_row(row)

        assert plain(cells) == ["Sat", "3", "", "", "", "", "", ""]
        assert "dim" in str(cells[0].spans[0].style)

    def test_waived_day(self):
        from app import format_row

        row = DayRow(
            date=date(2026, 10, 5),
            weekday="Mon",
            waiver=Waiver("08:00", "Holiday"),
            values={DayField.DAY_TOTAL: "08:00"},
        )
        cells = plain(format_row(row))

        assert cells[2] == "Waived: Holiday"
        assert cells[-1] == "08:00"
        assert len(cells) == 8

    def test_error_day_red(self):
        from app import format_row

        row = DayRow(date=date(2026, 10, 5), weekday="Mon", has_error=True)
        cells = format_row(row)
        assert cells[0].style == "red"

    def test_balance_row(self):
        from app import format_balance_row

        cells = format_balance_row(
            MonthTotals(month_total="40:00", working_days=5, balance="-01:30", balance_day=9)
        )
        assert plain(cells) == [
            "On", "9", "Work days", "5", "Month sum", "40:00", "Balance", "-01:30",
        ]
        assert cells[-1].style == "bold red"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_no_env_no_handlers(self, monkeypatch):
        from app import configure_logging

        monkeypatch.delenv("TIMETOLEAVE_LOG", raising=False)
        with patch.object(logging, "basicConfig") as basic_config:
            configure_logging()
        basic_config.assert_not_called()

    def test_log_file_from_env(self, monkeypatch, tmp_path):
        from app import configure_logging

        log_path = tmp_path / "ttl.log"
        monkeypatch.setenv("TIMETOLEAVE_LOG", str(log_path))
        monkeypatch.setenv("TIMETOLEAVE_LOG_LEVEL", "debug")
        with patch.object(logging, "basicConfig") as basic_config:
            configure_logging()

        kwargs = basic_config.call_args.kwargs
        assert kwargs["filename"] == str(log_path)
        assert kwargs["level"] == "DEBUG"


class TestMain:
    """Tests for the command line entry point."""

    def test_db_info(self, clean_db, capsys, monkeypatch):
        import storage
        from app import TimeToLeaveApp, main

        monkeypatch.setattr("sys.argv", ["app.py", "--db-info"])
        with patch.object(TimeToLeaveApp, 'run') as run:
            main()

        out = capsys.readouterr().out
        assert f"Database: {storage.DB_PATH}" in out
        run.assert_not_called()
