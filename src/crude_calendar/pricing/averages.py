from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from ..model.calendar import Contract
from ..utils.dates import date_range, month_bounds, validate_year_month

DEFAULT_LOOKBACK_DAYS = 10

# one price per day: lower rank wins, unknown sources rank last
SOURCE_PRIORITY = ("NYMEX", "NYMEX_EIA", "CHART_EXPORT", "INVESTING_COM", "EIA")


@dataclass(frozen=True)
class PriceObservation:
    day: date
    source: str  # e.g., "EIA", "NYMEX"
    price_type: str  # e.g., "spot", "futures"
    value: float | None
    unit: str = "USD/bbl"


@dataclass(frozen=True)
class MonthAverage:
    month: str  # "YYYY-MM"
    source: str | None
    value: float | None
    trading_days: int


@dataclass(frozen=True)
class WindowAverage:
    start: date
    end: date
    source: str | None
    value: float | None
    trading_days: int


@dataclass(frozen=True)
class FilledPrice:
    day: date
    value: float | None
    is_fill_forward: bool


@dataclass(frozen=True)
class AnnualStats:
    year: int
    avg_price: float
    min_price: float
    max_price: float
    trading_days: int
    percent_change: float | None  # vs previous year's average


def _rank(source: str) -> int:
    src = source.strip().upper()
    return SOURCE_PRIORITY.index(src) if src in SOURCE_PRIORITY else len(SOURCE_PRIORITY)


def _select(observations: Iterable[PriceObservation], source: str | None) -> list[PriceObservation]:
    if source is None:
        return list(observations)
    src = source.strip().upper()
    return [o for o in observations if o.source.strip().upper() == src]


def one_per_day(observations: Iterable[PriceObservation]) -> dict[date, PriceObservation]:
    """
    Collapse to a single observation per day: a present price beats a missing
    one, then SOURCE_PRIORITY decides; ties keep the first row seen.
    """
    best: dict[date, PriceObservation] = {}
    for o in observations:
        cur = best.get(o.day)
        if cur is None or (o.value is None, _rank(o.source)) < (cur.value is None, _rank(cur.source)):
            best[o.day] = o
    return dict(sorted(best.items()))


def _daily_prices(observations: Iterable[PriceObservation], source: str | None) -> dict[date, float | None]:
    return {d: o.value for d, o in one_per_day(_select(observations, source)).items()}


def _window_mean(prices: dict[date, float | None], start: date, end: date) -> tuple[float | None, int]:
    vals = [v for d, v in prices.items() if start <= d <= end and v is not None]
    if not vals:
        return None, 0
    return sum(vals) / len(vals), len(vals)


def calendar_month_average(
    observations: Iterable[PriceObservation],
    year: int,
    month: int,
    source: str | None = None,
) -> MonthAverage:
    """
    CMA: mean of the daily prices dated inside the month. Without a source,
    each day contributes one price picked by SOURCE_PRIORITY.
    trading_days counts the days that contributed.
    """
    validate_year_month(year, month)
    first, last = month_bounds(year, month)
    value, n = _window_mean(_daily_prices(observations, source), first, last)
    return MonthAverage(month=f"{year:04d}-{month:02d}", source=source, value=value, trading_days=n)


def trade_period_average(
    observations: Iterable[PriceObservation],
    contract: Contract,
    source: str | None = None,
) -> WindowAverage:
    """Mean price over a contract's trade period (26th of M-2 .. 25th of M-1)."""
    start, end = contract.trade_period_start, contract.trade_period_end
    value, n = _window_mean(_daily_prices(observations, source), start, end)
    return WindowAverage(start=start, end=end, source=source, value=value, trading_days=n)


def fill_forward(
    observations: Iterable[PriceObservation],
    start: date,
    end: date,
    source: str | None = None,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> list[FilledPrice]:
    """
    One entry per calendar day in [start, end]. A day with no observation
    (weekend, holiday, feed gap) carries the most recent price seen within
    `lookback_days` calendar days; beyond that it stays None.
    """
    if end < start:
        raise ValueError(f"end {end.isoformat()} is before start {start.isoformat()}")
    if lookback_days < 0:
        raise ValueError(f"lookback_days must be >= 0, got {lookback_days}")

    by_day = _daily_prices(observations, source)

    out: list[FilledPrice] = []
    for d in date_range(start, end):
        if d in by_day:
            out.append(FilledPrice(day=d, value=by_day[d], is_fill_forward=False))
            continue
        filled = FilledPrice(day=d, value=None, is_fill_forward=False)
        for back in range(1, lookback_days + 1):
            prev = d - timedelta(days=back)
            if prev in by_day:
                filled = FilledPrice(day=d, value=by_day[prev], is_fill_forward=True)
                break
        out.append(filled)
    return out


def historical_series(
    observations: Iterable[PriceObservation],
    start: date | None = None,
    end: date | None = None,
    source: str | None = None,
) -> list[tuple[date, float]]:
    """Ascending (day, price) pairs, one per day, prices rounded to cents."""
    out: list[tuple[date, float]] = []
    for d, v in _daily_prices(observations, source).items():
        if v is None or (start is not None and d < start) or (end is not None and d > end):
            continue
        out.append((d, round(v, 2)))
    return out


def annual_statistics(
    observations: Iterable[PriceObservation],
    source: str | None = None,
) -> list[AnnualStats]:
    """
    Per-year average/min/max over one price per day, with the year-over-year
    change of the average in percent. Values are rounded to 2 decimals.
    """
    by_year: dict[int, list[float]] = {}
    for d, v in _daily_prices(observations, source).items():
        if v is not None:
            by_year.setdefault(d.year, []).append(v)

    out: list[AnnualStats] = []
    prev_avg: float | None = None
    for year in sorted(by_year):
        vals = by_year[year]
        avg = sum(vals) / len(vals)
        change = None if not prev_avg else (avg - prev_avg) / prev_avg * 100
        out.append(
            AnnualStats(
                year=year,
                avg_price=round(avg, 2),
                min_price=round(min(vals), 2),
                max_price=round(max(vals), 2),
                trading_days=len(vals),
                percent_change=None if change is None else round(change, 2),
            )
        )
        prev_avg = avg
    return out
