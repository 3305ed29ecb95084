"""Custom widgets for the calendar application."""

from __future__ import annotations

from textual.widgets import Static
from rich.text import Text

from models import MonthTotals, TodaySummary


class MonthHeader(Static):
    """Shows month name on left and month navigation on right."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.label = ""
        self.left_arrow_pos = 0
        self.right_arrow_pos = 0
        self.today_pos = 0

    def update_display(self, label: str, punch_available: bool):
        self.label = label
        nav = "◄ ► [today]"

        # Align navigation to end at column 74 (matching table right edge)
        target_end_col = 74
        nav_start = max(target_end_col - len(nav), len(label) + 2)

        # Store positions for click detection
        self.left_arrow_pos = nav_start
        self.right_arrow_pos = nav_start + 2
        self.today_pos = nav_start + 4

        text = Text()
        text.append(label, style="bold")
        text.append(" " * (nav_start - len(label)))
        text.append(nav, style="bold")
        if not punch_available:
            text.append("  (punch off)", style="dim")

        self.update(text)

    def on_click(self, event) -> None:
        """Handle clicks on the arrows for month navigation."""
        click_col = event.x

        if self.left_arrow_pos <= click_col < self.left_arrow_pos + 2:
            self.app.action_prev_month()  # type: ignore[attr-defined]
        elif self.right_arrow_pos <= click_col < self.right_arrow_pos + 2:
            self.app.action_next_month()  # type: ignore[attr-defined]
        elif self.today_pos <= click_col < self.today_pos + 7:
            self.app.action_goto_today()  # type: ignore[attr-defined]


class MonthSummary(Static):
    """Working days, month sum and balance."""

    def update_display(self, totals: MonthTotals):
        text = Text()
        text.append(f"On day {totals.balance_day:>2}    ", style="dim" if not totals.balance_day else "")
        text.append(f"Working days {totals.working_days:>3}    ")
        text.append(f"Month sum {totals.month_total:>7}    ")
        text.append("Balance ")
        text.append(
            f"{totals.balance:>7}",
            style="bold red" if totals.balance_is_negative else "bold green",
        )
        self.update(text)


class TodaySummaryBar(Static):
    """Leave-by projection for today, or the day balance once finished."""

    def update_display(self, summary: TodaySummary | None):
        if summary is None:
            self.update("")
            return

        text = Text()
        if summary.finished:
            text.append("All done for today. Balance of the day: ")
            text.append(
                summary.day_balance or "",
                style="bold red" if summary.day_balance_is_negative else "bold green",
            )
        else:
            text.append("Based on the time you arrived today, you should leave by ")
            text.append(summary.leave_by, style="bold")
        self.update(text)
