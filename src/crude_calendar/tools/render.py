from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from ..engine.contracts import contract_status
from ..model.calendar import CalendarDay, Contract, MonthGrid
from ..pricing.averages import AnnualStats

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
DAY_NAMES = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")

# cell markers
MARK_LTD = "L"
MARK_FND = "N"
MARK_HOLIDAY = "H"
MARK_BOUNDARY = "B"
MARK_TRADE_PERIOD = "*"

LEGEND = (
    f"{MARK_LTD}=last trading day  {MARK_FND}=first notice day  {MARK_HOLIDAY}=holiday  "
    f"{MARK_BOUNDARY}=trade period start/end  {MARK_TRADE_PERIOD}=in trade period"
)


# ---------------------- JSON-ready dicts ----------------------


def contract_to_dict(contract: Contract, today: date | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {
        "code": contract.code,
        "product": contract.product,
        "delivery_year": contract.delivery_year,
        "delivery_month": contract.delivery_month,
        "month_code": contract.month_code,
        "last_trading_day": contract.last_trading_day.isoformat(),
        "first_notice_day": contract.first_notice_day.isoformat(),
        "trade_period_start": contract.trade_period_start.isoformat(),
        "trade_period_end": contract.trade_period_end.isoformat(),
    }
    if today is not None:
        out["status"] = contract_status(contract, today).value
    return out


def day_to_dict(day: CalendarDay) -> dict[str, Any]:
    return {
        "date": day.day.isoformat(),
        "in_month": day.in_month,
        "is_weekend": day.is_weekend,
        "is_holiday": day.is_holiday,
        "holiday_name": day.holiday_name,
        "last_trading_day_for": day.last_trading_day_for,
        "first_notice_day_for": day.first_notice_day_for,
        "active_trade_periods": list(day.active_trade_periods),
        "trade_period_starts": list(day.trade_period_starts),
        "trade_period_ends": list(day.trade_period_ends),
        "trade_period_boundaries": list(day.trade_period_boundaries),
    }


def grid_to_dict(grid: MonthGrid) -> dict[str, Any]:
    return {
        "year": grid.year,
        "month": grid.month,
        "missing_holiday_years": list(grid.missing_holiday_years),
        "weeks": [[day_to_dict(d) for d in week] for week in grid.weeks],
    }


# ---------------------- Markdown ----------------------


def _md_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    line1 = "| " + " | ".join(headers) + " |"
    line2 = "| " + " | ".join("---" for _ in headers) + " |"
    lines = [line1, line2]
    for row in rows:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)


def _fmt_day(d: date) -> str:
    return d.strftime("%a %Y-%m-%d")


def contracts_to_markdown(contracts: Sequence[Contract], today: date | None = None) -> str:
    headers = ["Contract", "Delivery", "Trade period", "LTD", "FND"]
    if today is not None:
        headers.append("Status")
    rows: list[list[str]] = []
    for c in contracts:
        row = [
            c.code,
            f"{MONTH_NAMES[c.delivery_month - 1]} {c.delivery_year}",
            f"{c.trade_period_start.isoformat()} .. {c.trade_period_end.isoformat()}",
            _fmt_day(c.last_trading_day),
            _fmt_day(c.first_notice_day),
        ]
        if today is not None:
            row.append(contract_status(c, today).value)
        rows.append(row)
    return _md_table(headers, rows)


def annual_to_markdown(stats: Iterable[AnnualStats]) -> str:
    rows = [
        [
            str(s.year),
            f"{s.avg_price:.2f}",
            f"{s.min_price:.2f}",
            f"{s.max_price:.2f}",
            str(s.trading_days),
            "" if s.percent_change is None else f"{s.percent_change:+.2f}%",
        ]
        for s in stats
    ]
    return _md_table(["Year", "Avg", "Min", "Max", "Days", "YoY"], rows)


def _cell(day: CalendarDay) -> str:
    if not day.in_month:
        return ""
    marks = ""
    if day.last_trading_day_for:
        marks += MARK_LTD
    if day.first_notice_day_for:
        marks += MARK_FND
    if day.is_holiday:
        marks += MARK_HOLIDAY
    if day.trade_period_boundaries:
        marks += MARK_BOUNDARY
    elif day.active_trade_periods:
        marks += MARK_TRADE_PERIOD
    return f"{day.day.day}{marks}"


def _events(grid: MonthGrid) -> list[str]:
    lines: list[str] = []
    for d in grid.days():
        if not d.in_month:
            continue
        tag = d.day.isoformat()
        if d.holiday_name:
            lines.append(f"- {tag} holiday: {d.holiday_name}")
        if d.last_trading_day_for:
            lines.append(f"- {tag} last trading day: {d.last_trading_day_for}")
        if d.first_notice_day_for:
            lines.append(f"- {tag} first notice day: {d.first_notice_day_for}")
        for code in d.trade_period_starts:
            lines.append(f"- {tag} trade period start: {code}")
        for code in d.trade_period_ends:
            lines.append(f"- {tag} trade period end: {code}")
    return lines


def grid_to_markdown(grid: MonthGrid) -> str:
    parts = [f"## {MONTH_NAMES[grid.month - 1]} {grid.year}", ""]
    parts.append(_md_table(DAY_NAMES, ([_cell(d) for d in week] for week in grid.weeks)))
    parts.append("")
    parts.append(LEGEND)
    events = _events(grid)
    if events:
        parts.append("")
        parts.extend(events)
    if grid.missing_holiday_years:
        years = ", ".join(str(y) for y in grid.missing_holiday_years)
        parts.append("")
        parts.append(f"_No holiday table for {years}; weekends only._")
    return "\n".join(parts)
