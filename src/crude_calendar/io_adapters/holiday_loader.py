from __future__ import annotations

from datetime import date
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from crude_calendar.model.calendar import HolidayTable

BUNDLED_HOLIDAYS = "nymex_holidays.yaml"


def _as_date(v: Any, where: str) -> date:
    # yaml.safe_load turns unquoted 2026-01-01 into a date already
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v).strip())
    except ValueError:
        raise ValueError(f"{where}: invalid date {v!r} (expected YYYY-MM-DD)") from None


def _as_year(v: Any) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        raise ValueError(f"holidays.years: invalid year key {v!r}") from None


def parse_holiday_table(data: Any) -> HolidayTable:
    """Build a HolidayTable from an already-parsed YAML document."""
    if not isinstance(data, dict):
        raise ValueError("Invalid holidays YAML: expected a mapping")

    years_raw = data.get("years") or {}
    if not isinstance(years_raw, dict):
        raise ValueError("holidays.years must be a mapping")

    entries: dict[date, str] = {}
    years: set[int] = set()
    for year_key, block in years_raw.items():
        year = _as_year(year_key)
        years.add(year)
        if block is None:
            continue
        if not isinstance(block, dict):
            raise ValueError(f"holidays.years.{year} must be a mapping of date -> name")
        for day_raw, name in block.items():
            day = _as_date(day_raw, f"holidays.years.{year}")
            if day.year != year:
                raise ValueError(f"holidays.years.{year}: {day.isoformat()} belongs to {day.year}")
            entries[day] = str(name or "").strip() or "Holiday"

    return HolidayTable(entries=entries, years=frozenset(years))


def load_holiday_table(path: Path) -> HolidayTable:
    """
    Load a holidays YAML file:

        years:
          2026:
            "2026-01-01": "New Year's Day"
    """
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    return parse_holiday_table(data)


def load_default_holiday_table() -> HolidayTable:
    """The NYMEX table shipped with the package."""
    text = (resources.files("crude_calendar") / "data" / BUNDLED_HOLIDAYS).read_text(encoding="utf-8")
    return parse_holiday_table(yaml.safe_load(text))
