#!/usr/bin/env python3
"""Time to Leave TUI application."""

from __future__ import annotations

import logging
import os
from datetime import date

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.coordinate import Coordinate
from textual.widgets import DataTable, Footer
from textual.widgets.data_table import RowDoesNotExist
from rich.text import Text

import storage
from calendar_controller import CalendarController, CalendarListener
from models import DayField, DayRow, DayTotals, MonthTotals, Preferences, Waiver
from screens import ConfirmScreen, EditDayScreen, PreferencesScreen, WaiverScreen
from widgets import MonthHeader, MonthSummary, TodaySummaryBar

logger = logging.getLogger(__name__)

# Column order of the month table
TABLE_FIELDS = [
    DayField.DAY_BEGIN,
    DayField.LUNCH_BEGIN,
    DayField.LUNCH_TOTAL,
    DayField.LUNCH_END,
    DayField.DAY_END,
    DayField.DAY_TOTAL,
]

BALANCE_ROW_KEY = "balance"


class CalendarDataTable(DataTable):
    """DataTable that hands left/right to the app for month navigation."""

    def on_key(self, event) -> None:
        if event.key == "left":
            self.app.action_prev_month()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()
        elif event.key == "right":
            self.app.action_next_month()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()


def format_row(row: DayRow) -> list:
    """Cells of one day row. Waived days show the reason across the time columns."""
    style = "bold" if row.is_today else ""
    if row.has_error:
        style = "bold red" if row.is_today else "red"

    cells: list = [
        Text(row.weekday, style=style),
        Text(str(row.date.day), style=style),
    ]
    if not row.is_working_day:
        cells.extend(Text("") for _ in TABLE_FIELDS)
        cells[0].stylize("dim")
        cells[1].stylize("dim")
    elif row.waiver is not None:
        cells.append(Text(f"Waived: {row.waiver.reason}"[:26], style="italic"))
        cells.extend(Text("") for _ in TABLE_FIELDS[1:-1])
        cells.append(Text(row.value(DayField.DAY_TOTAL), style="italic"))
    else:
        cells.extend(Text(row.value(f), style=style) for f in TABLE_FIELDS)
    return cells


def format_balance_row(totals: MonthTotals) -> list:
    balance_style = "bold red" if totals.balance_is_negative else "bold green"
    return [
        Text("On", style="dim"),
        Text(str(totals.balance_day), style="dim"),
        Text("Work days", style="dim"),
        Text(str(totals.working_days)),
        Text("Month sum", style="dim"),
        Text(totals.month_total),
        Text("Balance", style="dim"),
        Text(totals.balance, style=balance_style),
    ]


class TimeToLeaveApp(App, CalendarListener):
    """Month calendar of clock-in, lunch and clock-out times."""

    CSS = """
    Screen {
        background: $surface;
    }

    #month-header {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
        text-style: bold;
    }

    #month-table {
        height: 1fr;
        margin: 1 2;
    }

    #month-summary, #today-summary {
        height: auto;
        padding: 0 2;
        color: $text;
    }

    DataTable {
        height: 100%;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("p", "punch", "Punch"),
        Binding("t", "goto_today", "Today"),
        Binding("[", "prev_month", "Prev", show=False),
        Binding("]", "next_month", "Next", show=False),
        Binding("e", "edit_day", "Edit"),
        Binding("w", "waiver", "Waiver"),
        Binding("h", "import_holidays", "Holidays"),
        Binding("comma", "preferences", "Prefs"),
        Binding("r", "reload", "Reload", show=False),
    ]

    def __init__(self):
        super().__init__()
        storage.init_db()
        self.controller = CalendarController(
            storage.DayStore(),
            storage.WaiverStore(),
            storage.get_preferences(),
            listener=self,
        )
        self._punch_available = False
        # Listener hooks fire only once the widgets exist
        self._view_ready = False

    def compose(self) -> ComposeResult:
        yield MonthHeader(id="month-header")
        yield Container(CalendarDataTable(id="month-table"), id="month-table-container")
        yield TodaySummaryBar(id="today-summary")
        yield MonthSummary(id="month-summary")
        yield Footer()

    def on_mount(self):
        table = self.query_one("#month-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Day", width=4)
        table.add_column("", width=3)
        table.add_column("Start", width=9)
        table.add_column("Lunch", width=9)
        table.add_column("Lunch Σ", width=9)
        table.add_column("Back", width=9)
        table.add_column("End", width=9)
        table.add_column("Total", width=8)
        self._view_ready = True
        self.controller.redraw()
        self._select_date(self.controller.today())
        table.focus()

    # --- CalendarListener ---

    def calendar_redrawn(self) -> None:
        if not self._view_ready:
            return
        self._refresh_table()
        self._refresh_summaries()

    def day_updated(self, day: date, totals: DayTotals) -> None:
        if not self._view_ready:
            return
        self._refresh_table()
        self._refresh_summaries()
        self._select_date(day)

    def day_error_toggled(self, day: date, has_error: bool) -> None:
        if has_error:
            logger.debug("Times out of order on %s", day)

    def punch_availability_changed(self, available: bool) -> None:
        self._punch_available = available
        if self._view_ready:
            self.refresh_bindings()
            self._refresh_header()

    def waiver_requested(self, day: date) -> None:
        self.push_screen(
            WaiverScreen(
                day,
                self.controller.waiver_store.get(day),
                self.controller.preferences.hours_per_day,
            ),
            lambda result: self._on_waiver_edited(day, result),
        )

    # --- Rendering ---

    def _refresh_header(self) -> None:
        header = self.query_one("#month-header", MonthHeader)
        header.update_display(self.controller.month_label(), self._punch_available)

    def _refresh_table(self) -> None:
        table = self.query_one("#month-table", DataTable)
        table.clear()
        totals = self.controller.month_totals()
        for row in self.controller.day_rows():
            table.add_row(*format_row(row), key=row.date.isoformat())
            if row.date.day == totals.balance_day:
                table.add_row(*format_balance_row(totals), key=BALANCE_ROW_KEY)
        # Balance day may be a hidden non-working day
        if BALANCE_ROW_KEY not in table.rows and totals.balance_day:
            table.add_row(*format_balance_row(totals), key=BALANCE_ROW_KEY)
        self._refresh_header()

    def _refresh_summaries(self) -> None:
        self.query_one("#month-summary", MonthSummary).update_display(
            self.controller.month_totals()
        )
        self.query_one("#today-summary", TodaySummaryBar).update_display(
            self.controller.today_summary()
        )

    def _select_date(self, target: date) -> None:
        """Move cursor to the row for a specific date, if it is shown."""
        if not self._view_ready:
            return
        table = self.query_one("#month-table", DataTable)
        try:
            row_idx = table.get_row_index(target.isoformat())
        except RowDoesNotExist:
            return
        table.move_cursor(row=row_idx)

    def _get_selected_date(self) -> date | None:
        """Get the currently selected date from the table."""
        table = self.query_one("#month-table", DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        if row_key and row_key.value != BALANCE_ROW_KEY:
            return date.fromisoformat(str(row_key.value))
        return None

    # --- Actions ---

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action == "punch":
            return self._punch_available
        return True

    def action_prev_month(self):
        self.controller.prev_month()

    def action_next_month(self):
        self.controller.next_month()

    def action_goto_today(self):
        self.controller.go_to_today()
        self._select_date(self.controller.today())

    def action_reload(self):
        self.controller.reload()

    def action_punch(self):
        filled = self.controller.punch()
        if filled is None:
            self.notify("Nothing to punch", severity="warning")
        else:
            value = self.controller.day_store.get(self.controller.today(), filled)
            self.notify(f"Punched {filled.value} at {value}")

    def action_edit_day(self):
        selected = self._get_selected_date()
        if selected is None:
            return
        if not self.controller.is_working_day(selected):
            self.notify("Not a working day", severity="warning")
            return
        if selected in self.controller.waiver_store:
            self.controller.request_waiver(selected)
            return
        values = self.controller.day_store.get_day(selected)
        self.push_screen(
            EditDayScreen(selected, values),
            lambda changes: self._on_day_edited(selected, changes),
        )

    def _on_day_edited(self, day: date, changes: dict[DayField, str] | None) -> None:
        if not changes:
            return
        for day_field, value in changes.items():
            self.controller.update_field(day, day_field, value)

    def action_waiver(self):
        selected = self._get_selected_date()
        if selected is not None:
            self.controller.request_waiver(selected)

    def _on_waiver_edited(self, day: date, result: tuple[str, Waiver | None] | None) -> None:
        if result is None:
            return
        action, waiver = result
        if action == "save" and waiver is not None:
            self.controller.waiver_store.set(day, waiver)
            self.notify(f"Waived {day.strftime('%b %d')}: {waiver.reason}")
        elif action == "remove":
            self.controller.waiver_store.remove(day)
            # Totals are not stored while a day is waived
            self.controller.day_engine.update_day(day)
            self.notify(f"Removed waiver for {day.strftime('%b %d')}")
        self.controller.redraw()
        self._select_date(day)

    def action_import_holidays(self):
        year = self.controller.year
        prefs = self.controller.preferences

        def do_import(confirmed: bool | None) -> None:
            if not confirmed:
                return
            try:
                count = storage.import_holidays_as_waivers(
                    self.controller.waiver_store, year, prefs
                )
            except NotImplementedError:
                logger.warning("No holiday calendar for %s", prefs.holiday_country)
                self.notify(
                    f"No holidays available for {prefs.holiday_country}", severity="error"
                )
                return
            self.controller.redraw()
            self.notify(f"Added {count} holiday waivers" if count else "No new holidays to add")

        self.push_screen(
            ConfirmScreen(f"Add {prefs.holiday_country} holidays of {year} as waivers?"),
            do_import,
        )

    def action_preferences(self):
        self.push_screen(PreferencesScreen(self.controller.preferences), self._on_preferences_saved)

    def _on_preferences_saved(self, prefs: Preferences | None) -> None:
        if prefs is None:
            return
        storage.save_preferences(prefs)
        self.controller.update_preferences(prefs)
        self.notify("Preferences saved")


def configure_logging() -> None:
    """Log to the file named by TIMETOLEAVE_LOG, if any. The TUI owns the terminal."""
    log_path = os.environ.get("TIMETOLEAVE_LOG")
    if not log_path:
        return
    logging.basicConfig(
        filename=log_path,
        level=os.environ.get("TIMETOLEAVE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    import sys
    if len(sys.argv) > 1 and sys.argv[1] == "--db-info":
        from datetime import datetime
        db_path = storage.DB_PATH
        print(f"Database: {db_path}")
        if db_path.exists():
            mtime = datetime.fromtimestamp(db_path.stat().st_mtime)
            size = db_path.stat().st_size
            print(f"Modified: {mtime.strftime('%Y-%m-%d %H:%M:%S')}")
            print(f"Size: {size:,} bytes")
        else:
            print("Status: Does not exist (will be created on first run)")
        return

    configure_logging()
    app = TimeToLeaveApp()
    app.run()


if __name__ == "__main__":
    main()
