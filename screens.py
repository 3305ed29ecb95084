"""Modal screens for the calendar application."""

from __future__ import annotations

from datetime import date

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Checkbox, Input, Label
from textual.screen import ModalScreen

from models import DayField, Preferences, RAW_FIELDS, Waiver
from time_math import validate_time
from utils import DAY_ABBRS


class ConfirmScreen(ModalScreen[bool]):
    """Simple confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    #confirm-buttons Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.message)
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes (Y)", variant="warning", id="yes")
                yield Button("No (N)", variant="default", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


FIELD_LABELS = {
    DayField.DAY_BEGIN: "Day Start",
    DayField.LUNCH_BEGIN: "Lunch Start",
    DayField.LUNCH_END: "Lunch End",
    DayField.DAY_END: "Day End",
}


class EditDayScreen(ModalScreen[dict[DayField, str] | None]):
    """Modal screen for editing a day's four times.

    Dismisses with the changed fields only. An emptied field maps to "" so
    the caller clears it.
    """

    CSS = """
    EditDayScreen {
        align: center middle;
    }

    #edit-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #edit-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .field-group {
        width: 1fr;
        height: auto;
        margin: 0 1 0 0;
    }

    .field-group:last-of-type {
        margin-right: 0;
    }

    .field-label {
        height: 1;
        margin-bottom: 0;
        color: $text-muted;
    }

    .field-row {
        width: 100%;
        height: auto;
        margin-bottom: 1;
    }

    .field-row Input {
        width: 100%;
    }

    #edit-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #edit-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    # Field order for Enter key navigation
    FIELD_ORDER = [f.value for f in RAW_FIELDS]

    def __init__(self, day: date, values: dict[DayField, str]):
        super().__init__()
        self.day = day
        self.values = values

    def compose(self) -> ComposeResult:
        with Vertical(id="edit-dialog"):
            yield Label(
                f"Edit {DAY_ABBRS[self.day.weekday()]} {self.day.strftime('%b %d, %Y')}",
                id="edit-title"
            )
            with Horizontal(classes="field-row"):
                for day_field in RAW_FIELDS:
                    with Vertical(classes="field-group"):
                        yield Label(f"{FIELD_LABELS[day_field]} (HH:MM)", classes="field-label")
                        yield Input(
                            value=self.values.get(day_field, ""),
                            placeholder="--:--",
                            id=day_field.value,
                            max_length=5,
                        )

            with Horizontal(id="edit-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        """Focus the first field on mount."""
        self.query_one(f"#{self.FIELD_ORDER[0]}", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Move to next field on Enter, or save if on last field."""
        current_id = event.input.id
        if current_id in self.FIELD_ORDER:
            current_idx = self.FIELD_ORDER.index(current_id)
            if current_idx < len(self.FIELD_ORDER) - 1:
                next_id = self.FIELD_ORDER[current_idx + 1]
                self.query_one(f"#{next_id}", Input).focus()
            else:
                self._save_day()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save_day()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def collect_changes(self, entered: dict[DayField, str]) -> dict[DayField, str] | None:
        """Return the changed fields, or None if an entered time is malformed."""
        changes = {}
        for day_field, value in entered.items():
            value = value.strip()
            if value and not validate_time(value):
                return None
            if value != self.values.get(day_field, ""):
                changes[day_field] = value
        return changes

    def _save_day(self) -> None:
        entered = {f: self.query_one(f"#{f.value}", Input).value for f in RAW_FIELDS}
        changes = self.collect_changes(entered)
        if changes is None:
            self.app.notify("Times must be HH:MM, e.g. 09:00", severity="error")
            return
        self.dismiss(changes)


class WaiverScreen(ModalScreen[tuple[str, Waiver | None] | None]):
    """Modal screen for adding, changing or removing a day's waiver.

    Dismisses with ("save", waiver), ("remove", None) or None on cancel.
    """

    CSS = """
    WaiverScreen {
        align: center middle;
    }

    #waiver-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #waiver-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .field-group {
        width: 100%;
        height: auto;
        margin-bottom: 1;
    }

    .field-label {
        height: 1;
        margin-bottom: 0;
        color: $text-muted;
    }

    .field-group Input {
        width: 100%;
    }

    #waiver-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #waiver-buttons Button {
        width: auto;
        min-width: 10;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, day: date, waiver: Waiver | None, default_hours: str):
        super().__init__()
        self.day = day
        self.waiver = waiver
        self.default_hours = default_hours

    def compose(self) -> ComposeResult:
        with Vertical(id="waiver-dialog"):
            yield Label(f"Waiver for {self.day.strftime('%a %b %d, %Y')}", id="waiver-title")

            with Vertical(classes="field-group"):
                yield Label("Hours (HH:MM)", classes="field-label")
                yield Input(
                    value=self.waiver.hours if self.waiver else self.default_hours,
                    placeholder=self.default_hours,
                    id="waiver-hours",
                    max_length=5,
                )

            with Vertical(classes="field-group"):
                yield Label("Reason", classes="field-label")
                yield Input(
                    value=self.waiver.reason if self.waiver else "",
                    placeholder="Holiday, leave, ...",
                    id="waiver-reason",
                )

            with Horizontal(id="waiver-buttons"):
                yield Button("Save", variant="primary", id="save")
                if self.waiver:
                    yield Button("Remove", variant="warning", id="remove")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#waiver-reason", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "waiver-hours":
            self.query_one("#waiver-reason", Input).focus()
        elif event.input.id == "waiver-reason":
            self._save_waiver()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "remove":
            self.dismiss(("remove", None))
        elif event.button.id == "save":
            self._save_waiver()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save_waiver(self) -> None:
        hours = self.query_one("#waiver-hours", Input).value.strip()
        reason = self.query_one("#waiver-reason", Input).value.strip()

        if not validate_time(hours):
            self.app.notify("Hours must be HH:MM, e.g. 08:00", severity="error")
            return

        if not reason:
            self.app.notify("Reason is required", severity="error")
            return

        self.dismiss(("save", Waiver(hours=hours, reason=reason)))


class PreferencesScreen(ModalScreen[Preferences | None]):
    """Modal screen for editing preferences."""

    CSS = """
    PreferencesScreen {
        align: center middle;
    }

    #prefs-dialog {
        width: 64;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #prefs-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .field-row {
        width: 100%;
        height: auto;
        margin-bottom: 1;
    }

    .field-label {
        height: 1;
        color: $text-muted;
    }

    #prefs-weekdays Checkbox {
        width: auto;
    }

    #prefs-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #prefs-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, preferences: Preferences):
        super().__init__()
        self.preferences = preferences

    def compose(self) -> ComposeResult:
        prefs = self.preferences
        with Vertical(id="prefs-dialog"):
            yield Label("Preferences", id="prefs-title")

            with Horizontal(classes="field-row"):
                with Vertical():
                    yield Label("Hours per day (HH:MM)", classes="field-label")
                    yield Input(value=prefs.hours_per_day, id="prefs-hours", max_length=5)
                with Vertical():
                    yield Label("Holiday country / region", classes="field-label")
                    with Horizontal():
                        yield Input(value=prefs.holiday_country, id="prefs-country", max_length=3)
                        yield Input(value=prefs.holiday_subdiv or "", id="prefs-subdiv", max_length=6)

            yield Label("Working days", classes="field-label")
            with Horizontal(classes="field-row", id="prefs-weekdays"):
                for idx, abbr in enumerate(DAY_ABBRS):
                    yield Checkbox(abbr, value=prefs.working_days[idx], id=f"prefs-day-{idx}")

            yield Checkbox(
                "Hide non-working days", value=prefs.hide_non_working_days, id="prefs-hide"
            )
            yield Checkbox(
                "Count today in the balance", value=prefs.count_today, id="prefs-count-today"
            )

            with Horizontal(id="prefs-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save_preferences()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save_preferences(self) -> None:
        hours = self.query_one("#prefs-hours", Input).value.strip()
        if not validate_time(hours):
            self.app.notify("Hours per day must be HH:MM, e.g. 08:00", severity="error")
            return

        country = self.query_one("#prefs-country", Input).value.strip().upper()
        if not country:
            self.app.notify("Holiday country is required", severity="error")
            return

        working_days = tuple(
            self.query_one(f"#prefs-day-{idx}", Checkbox).value for idx in range(7)
        )
        self.dismiss(Preferences(
            hours_per_day=hours,
            hide_non_working_days=self.query_one("#prefs-hide", Checkbox).value,
            count_today=self.query_one("#prefs-count-today", Checkbox).value,
            working_days=working_days,
            holiday_country=country,
            holiday_subdiv=self.query_one("#prefs-subdiv", Input).value.strip().upper() or None,
        ))
