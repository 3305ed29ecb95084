#!/usr/bin/env python3
"""Export and import calendar data: JSON round trip and .xlsx timesheets."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, time
from pathlib import Path

from openpyxl import load_workbook

import storage
from engine import DayEngine
from models import DayField, DayKey, RAW_FIELDS, Waiver
from storage import DayStore, WaiverStore
from time_math import validate_time
from utils import get_date_str

logger = logging.getLogger(__name__)

# Header text (lower case) -> field, for spreadsheet imports
XLSX_COLUMNS = {
    "day start": DayField.DAY_BEGIN,
    "lunch start": DayField.LUNCH_BEGIN,
    "lunch end": DayField.LUNCH_END,
    "day end": DayField.DAY_END,
}


def export_to_json(path: Path, day_store: DayStore, waiver_store: WaiverStore) -> None:
    """Write every stored entry and waiver to a JSON file."""
    data = {
        "entries": {key.to_store_key(): value for key, value in day_store.items()},
        "waivers": {get_date_str(d): w.to_dict() for d, w in waiver_store.items()},
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    logger.info("Exported %d entries and %d waivers to %s", len(day_store), len(waiver_store), path)


def import_from_json(
    path: Path, day_store: DayStore, waiver_store: WaiverStore
) -> tuple[int, int]:
    """Import entries and waivers exported by export_to_json.

    Only raw fields are taken from the file; totals are recomputed for every
    imported day. Returns (entries imported, waivers imported).
    """
    with open(path) as f:
        data = json.load(f)

    touched: set[date] = set()
    entries = 0
    for store_key, value in data.get("entries", {}).items():
        key = DayKey.from_store_key(store_key)
        if key is None or key.field.is_total:
            continue
        if not validate_time(value):
            logger.warning("Skipping invalid time %r for %s", value, store_key)
            continue
        day_store.set(key.date, key.field, value)
        touched.add(key.date)
        entries += 1

    waivers = 0
    for date_str, value in data.get("waivers", {}).items():
        try:
            d = date.fromisoformat(date_str)
            waiver = Waiver(hours=value["hours"], reason=value.get("reason", ""))
        except (ValueError, TypeError, KeyError, AttributeError):
            logger.warning("Skipping malformed waiver %r", date_str)
            continue
        if not validate_time(waiver.hours):
            logger.warning("Skipping waiver %s with invalid hours %r", date_str, waiver.hours)
            continue
        waiver_store.set(d, waiver)
        waivers += 1

    engine = DayEngine(day_store, waiver_store)
    for d in sorted(touched):
        engine.update_day(d)

    logger.info("Imported %d entries and %d waivers from %s", entries, waivers, path)
    return entries, waivers


def parse_cell_time(val: object) -> str | None:
    """Parse a spreadsheet cell holding a time, e.g. time(9, 15) or '09:15:00'."""
    if val is None:
        return None
    if isinstance(val, datetime):
        val = val.time()
    if isinstance(val, time):
        return val.strftime("%H:%M")

    text = str(val).strip()
    if len(text) >= 8 and text[2] == ":" and text[5] == ":":
        text = text[:5]
    elif len(text) == 4 and text[1] == ":":
        text = "0" + text
    return text if validate_time(text) else None


def parse_cell_date(val: object) -> date | None:
    """Parse a spreadsheet cell holding a date."""
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if not val:
        return None
    try:
        return date.fromisoformat(str(val).split(" ")[0])
    except ValueError:
        return None


def import_from_xlsx(
    path: Path, day_store: DayStore, waiver_store: WaiverStore, sheet: str | None = None
) -> int:
    """Import day times from a worksheet with Date / Day Start / ... / Day End headers.

    Returns the number of days imported.
    """
    wb = load_workbook(path, data_only=True, read_only=True)
    ws = wb[sheet] if sheet else wb.active

    rows = ws.iter_rows(values_only=True)
    header = next(rows, None)
    if header is None or all(title is None for title in header):
        wb.close()
        return 0

    columns: dict[DayField, int] = {}
    date_col = None
    for idx, title in enumerate(header):
        name = str(title).strip().lower() if title is not None else ""
        if name == "date":
            date_col = idx
        elif name in XLSX_COLUMNS:
            columns[XLSX_COLUMNS[name]] = idx

    if date_col is None or not columns:
        wb.close()
        raise ValueError(f"{path}: expected a Date column and at least one time column")

    engine = DayEngine(day_store, waiver_store)
    days = 0
    for row in rows:
        d = parse_cell_date(row[date_col] if date_col < len(row) else None)
        if d is None:
            continue

        imported = False
        for day_field in RAW_FIELDS:
            idx = columns.get(day_field)
            if idx is None or idx >= len(row):
                continue
            value = parse_cell_time(row[idx])
            if value is not None:
                day_store.set(d, day_field, value)
                imported = True

        if imported:
            engine.update_day(d)
            days += 1

    wb.close()
    logger.info("Imported %d days from %s", days, path)
    return days


USAGE = "usage: import_data.py export|import|import-xlsx PATH"


def main(argv: list[str] | None = None) -> int:
    import sys
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2:
        print(USAGE)
        return 2

    command, path = args[0], Path(args[1])
    storage.init_db()
    day_store = DayStore()
    waiver_store = WaiverStore()

    try:
        if command == "export":
            export_to_json(path, day_store, waiver_store)
            print(f"Exported {len(day_store)} entries and {len(waiver_store)} waivers to {path}")
        elif command == "import":
            entries, waivers = import_from_json(path, day_store, waiver_store)
            print(f"Imported {entries} entries and {waivers} waivers")
        elif command == "import-xlsx":
            days = import_from_xlsx(path, day_store, waiver_store)
            print(f"Imported {days} days")
        else:
            print(USAGE)
            return 2
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
