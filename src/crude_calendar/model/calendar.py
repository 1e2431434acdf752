from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType

from ..utils.market import contract_code, month_code_for


@dataclass(frozen=True)
class Holiday:
    day: date
    name: str


@dataclass(frozen=True)
class HolidayTable:
    """
    Exchange trading-halt dates keyed by civil date.

    `years` lists every year the table is maintained for; a covered year may
    legitimately have no entries. To extend, append the newly published year
    to the holidays YAML (or merge a second table with `merged`).
    """

    entries: Mapping[date, str] = field(default_factory=dict)
    years: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        frozen = MappingProxyType(dict(sorted(self.entries.items())))
        object.__setattr__(self, "entries", frozen)
        object.__setattr__(self, "years", frozenset(self.years) | {d.year for d in frozen})

    def __contains__(self, day: object) -> bool:
        return day in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Holiday]:
        for d, name in self.entries.items():
            yield Holiday(day=d, name=name)

    def covers(self, year: int) -> bool:
        return year in self.years

    def name_for(self, day: date) -> str | None:
        return self.entries.get(day)

    def for_year(self, year: int) -> list[Holiday]:
        return [h for h in self if h.day.year == year]

    def merged(self, other: HolidayTable) -> HolidayTable:
        """New table where every year `other` covers is taken from `other` whole."""
        kept = {d: name for d, name in self.entries.items() if d.year not in other.years}
        return HolidayTable(entries={**kept, **other.entries}, years=self.years | other.years)


class ContractStatus(str, Enum):
    EXPIRED = "expired"
    ACTIVE = "active"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class Contract:
    """One futures delivery month with its derived key dates."""

    product: str  # e.g., "CL"
    delivery_year: int
    delivery_month: int  # 1-12
    last_trading_day: date
    first_notice_day: date
    trade_period_start: date  # 26th of M-2
    trade_period_end: date  # 25th of M-1, the LTD anchor

    @property
    def month_code(self) -> str:
        return month_code_for(self.delivery_month)

    @property
    def code(self) -> str:
        return contract_code(self.product, self.delivery_year, self.delivery_month)

    def in_trade_period(self, day: date) -> bool:
        return self.trade_period_start <= day <= self.trade_period_end


@dataclass(frozen=True)
class CalendarDay:
    """One grid cell; every annotation is kept, none suppress another."""

    day: date
    in_month: bool
    is_weekend: bool
    is_holiday: bool
    holiday_name: str | None = None
    last_trading_day_for: str | None = None
    first_notice_day_for: str | None = None
    active_trade_periods: tuple[str, ...] = ()
    trade_period_starts: tuple[str, ...] = ()
    trade_period_ends: tuple[str, ...] = ()

    @property
    def trade_period_boundaries(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(self.trade_period_starts + self.trade_period_ends))


@dataclass(frozen=True)
class MonthGrid:
    year: int
    month: int
    weeks: tuple[tuple[CalendarDay, ...], ...]
    missing_holiday_years: tuple[int, ...] = ()

    def days(self) -> list[CalendarDay]:
        return [d for week in self.weeks for d in week]
