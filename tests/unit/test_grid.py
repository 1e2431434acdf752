from __future__ import annotations

from datetime import date

import pytest

from crude_calendar.engine.business import BusinessCalendar
from crude_calendar.engine.contracts import ContractDateCalculator
from crude_calendar.engine.grid import CalendarGridBuilder
from crude_calendar.model.calendar import CalendarDay, MonthGrid
from crude_calendar.utils.dates import month_bounds


@pytest.fixture
def builder(nymex: BusinessCalendar, calc: ContractDateCalculator) -> CalendarGridBuilder:
    return CalendarGridBuilder(nymex, calc)


def _cell(grid: MonthGrid, day: date) -> CalendarDay:
    return next(d for d in grid.days() if d.day == day)


def test_february_2026_is_exactly_four_weeks(builder: CalendarGridBuilder) -> None:
    grid = builder.build_month(2026, 2, [])
    assert len(grid.weeks) == 4
    assert grid.weeks[0][0].day == date(2026, 2, 1)
    assert grid.weeks[-1][-1].day == date(2026, 2, 28)
    assert all(d.in_month for d in grid.days())


def test_grid_pads_to_whole_weeks(builder: CalendarGridBuilder) -> None:
    grid = builder.build_month(2026, 3, [])
    assert len(grid.weeks) == 5
    assert grid.weeks[-1][-1].day == date(2026, 4, 4)
    assert not grid.weeks[-1][-1].in_month

    jan = builder.build_month(2026, 1, [])
    assert jan.weeks[0][0].day == date(2025, 12, 28)
    assert jan.missing_holiday_years == (2025,)


@pytest.mark.parametrize("year", [2026, 2027])
def test_every_month_covers_all_days_sunday_first(builder: CalendarGridBuilder, year: int) -> None:
    for month in range(1, 13):
        grid = builder.build_month(year, month, [])
        assert all(len(week) == 7 for week in grid.weeks)
        assert all(week[0].day.weekday() == 6 for week in grid.weeks)  # Sunday
        days = {d.day for d in grid.days()}
        first, last = month_bounds(year, month)
        assert all(date(year, month, n) in days for n in range(1, last.day + 1))


def test_february_2026_annotations(builder: CalendarGridBuilder, calc: ContractDateCalculator) -> None:
    grid = builder.build_month(2026, 2, calc.compute_year_contracts(2026))

    assert _cell(grid, date(2026, 2, 20)).last_trading_day_for == "CLH26"
    assert _cell(grid, date(2026, 2, 23)).first_notice_day_for == "CLH26"

    presidents = _cell(grid, date(2026, 2, 16))
    assert presidents.is_holiday and presidents.holiday_name == "Presidents Day"
    assert presidents.active_trade_periods == ("CLH26",)

    end = _cell(grid, date(2026, 2, 25))
    assert end.trade_period_ends == ("CLH26",)
    assert end.active_trade_periods == ("CLH26",)
    assert end.trade_period_boundaries == ("CLH26",)

    start = _cell(grid, date(2026, 2, 26))
    assert start.trade_period_starts == ("CLJ26",)
    assert start.active_trade_periods == ("CLJ26",)

    sat = _cell(grid, date(2026, 2, 21))
    assert sat.is_weekend and not sat.is_holiday and sat.holiday_name is None


def test_annotations_accumulate_on_one_day(builder: CalendarGridBuilder, calc: ContractDateCalculator) -> None:
    grid = builder.build_month(2026, 12, calc.compute_year_contracts(2026))

    christmas = _cell(grid, date(2026, 12, 25))
    assert christmas.is_holiday and christmas.holiday_name == "Christmas"
    assert christmas.trade_period_ends == ("CLF27",)
    assert christmas.active_trade_periods == ("CLF27",)

    assert _cell(grid, date(2026, 12, 21)).last_trading_day_for == "CLF27"
    assert _cell(grid, date(2026, 12, 26)).trade_period_starts == ("CLG27",)


def test_build_year_defaults_to_year_contracts(builder: CalendarGridBuilder) -> None:
    grids = builder.build_year(2026)
    assert [g.month for g in grids] == list(range(1, 13))
    jan = grids[0]
    assert _cell(jan, date(2026, 1, 20)).last_trading_day_for == "CLG26"
    assert _cell(jan, date(2026, 1, 21)).first_notice_day_for == "CLG26"


def test_invalid_month(builder: CalendarGridBuilder) -> None:
    with pytest.raises(ValueError):
        builder.build_month(2026, 13, [])
