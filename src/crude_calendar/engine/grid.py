from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

from ..model.calendar import CalendarDay, Contract, MonthGrid
from ..utils.dates import date_range, month_bounds, validate_year_month
from .business import BusinessCalendar
from .contracts import ContractDateCalculator

DAYS_PER_WEEK = 7


def _grid_bounds(year: int, month: int) -> tuple[date, date]:
    """Sunday on/before the 1st through Saturday on/after the last day."""
    first, last = month_bounds(year, month)
    # weekday(): Mon=0 .. Sun=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)
    return start, end


class CalendarGridBuilder:
    def __init__(self, calendar: BusinessCalendar, calculator: ContractDateCalculator | None = None) -> None:
        self.calendar = calendar
        self.calculator = calculator or ContractDateCalculator(calendar)

    def build_day(self, day: date, month: int, contracts: Sequence[Contract]) -> CalendarDay:
        ltd_for: str | None = None
        fnd_for: str | None = None
        active: list[str] = []
        starts: list[str] = []
        ends: list[str] = []

        for c in contracts:
            code = c.code
            if c.last_trading_day == day:
                ltd_for = code
            if c.first_notice_day == day:
                fnd_for = code
            if c.in_trade_period(day):
                active.append(code)
            if c.trade_period_start == day:
                starts.append(code)
            if c.trade_period_end == day:
                ends.append(code)

        is_holiday = self.calendar.is_holiday(day)
        return CalendarDay(
            day=day,
            in_month=day.month == month,
            is_weekend=self.calendar.is_weekend(day),
            is_holiday=is_holiday,
            holiday_name=self.calendar.holiday_name(day) if is_holiday else None,
            last_trading_day_for=ltd_for,
            first_notice_day_for=fnd_for,
            active_trade_periods=tuple(active),
            trade_period_starts=tuple(starts),
            trade_period_ends=tuple(ends),
        )

    def build_month(self, year: int, month: int, contracts: Sequence[Contract]) -> MonthGrid:
        validate_year_month(year, month)
        start, end = _grid_bounds(year, month)
        days = [self.build_day(d, month, contracts) for d in date_range(start, end)]
        weeks = tuple(tuple(days[i : i + DAYS_PER_WEEK]) for i in range(0, len(days), DAYS_PER_WEEK))
        return MonthGrid(
            year=year,
            month=month,
            weeks=weeks,
            missing_holiday_years=tuple(self.calendar.missing_years({start.year, end.year})),
        )

    def build_year(self, year: int, contracts: Sequence[Contract] | None = None) -> list[MonthGrid]:
        if contracts is None:
            contracts = self.calculator.compute_year_contracts(year)
        return [self.build_month(year, m, contracts) for m in range(1, 13)]
