from __future__ import annotations

import calendar
from datetime import date, timedelta

MIN_YEAR = 1900
MAX_YEAR = 9998  # delivery Dec 9998 still has a valid anchor and trade window


def validate_year(year: int) -> int:
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValueError(f"Year must be an integer, got {year!r}")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"Year {year} out of range [{MIN_YEAR}, {MAX_YEAR}]")
    return year


def validate_year_month(year: int, month: int) -> tuple[int, int]:
    validate_year(year)
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValueError(f"Month must be an integer in 1..12, got {month!r}")
    return year, month


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by `delta` months, rolling the year on wrap."""
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of the month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def parse_month(text: str) -> tuple[int, int]:
    """Parse "YYYY-MM" into a validated (year, month)."""
    try:
        y_str, m_str = text.strip().split("-")
        year, month = int(y_str), int(m_str)
    except ValueError:
        raise ValueError(f"Invalid month {text!r}; expected YYYY-MM") from None
    return validate_year_month(year, month)


def date_range(start: date, end: date) -> list[date]:
    """Inclusive list of calendar days from start to end."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]
