from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from ..model.calendar import HolidayTable

log = logging.getLogger(__name__)

FORWARD = 1
BACKWARD = -1


class BusinessCalendar:
    """
    Weekend/holiday predicates and business-day stepping over an injected
    HolidayTable. A year the table does not cover is treated as having no
    holidays; that degradation is logged once per year.
    """

    def __init__(self, holidays: HolidayTable) -> None:
        self.holidays = holidays
        self._warned_years: set[int] = set()

    def is_weekend(self, day: date) -> bool:
        return day.weekday() >= 5  # Sat=5, Sun=6

    def is_holiday(self, day: date) -> bool:
        if not self.holidays.covers(day.year):
            self._warn_missing_year(day.year)
            return False
        return day in self.holidays

    def holiday_name(self, day: date) -> str | None:
        return self.holidays.name_for(day)

    def is_business_day(self, day: date) -> bool:
        return not self.is_weekend(day) and not self.is_holiday(day)

    def step_business_days(self, day: date, n: int, direction: int) -> date:
        """
        Walk one calendar day at a time in `direction` and return the n-th
        business day landed on. The start day itself never counts.
        """
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        if direction not in (FORWARD, BACKWARD):
            raise ValueError(f"direction must be +1 or -1, got {direction}")

        step = timedelta(days=direction)
        current = day
        landed = 0
        while landed < n:
            current = current + step
            if self.is_business_day(current):
                landed += 1
        return current

    def add_business_days(self, day: date, n: int) -> date:
        return self.step_business_days(day, n, FORWARD)

    def subtract_business_days(self, day: date, n: int) -> date:
        return self.step_business_days(day, n, BACKWARD)

    def missing_years(self, years: Iterable[int]) -> list[int]:
        """Years the holiday table has no entry for (operators should extend it)."""
        return sorted({y for y in years if not self.holidays.covers(y)})

    def _warn_missing_year(self, year: int) -> None:
        if year in self._warned_years:
            return
        self._warned_years.add(year)
        log.warning(
            "holiday_table_missing_year",
            extra={"year": year, "known_years": sorted(self.holidays.years)},
        )
