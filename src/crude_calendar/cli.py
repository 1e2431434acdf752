from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from . import __version__
from .config.loader import Config, load_config
from .engine.business import BusinessCalendar
from .engine.contracts import ContractDateCalculator
from .engine.grid import CalendarGridBuilder
from .io_adapters.holiday_loader import load_default_holiday_table, load_holiday_table
from .io_adapters.price_loader import load_prices
from .model.calendar import HolidayTable
from .pricing.averages import (
    annual_statistics,
    calendar_month_average,
    fill_forward,
    historical_series,
    trade_period_average,
)
from .tools import render
from .utils.dates import parse_month
from .utils.logging import get_logger


def _iso_date(s: str) -> date:
    return date.fromisoformat(s)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="crude-calendar", description="NYMEX WTI (CL) contract calendar")
    sub = p.add_subparsers(dest="cmd", required=False)

    # version
    sub.add_parser("version", help="print version")

    # doctor
    doctor = sub.add_parser("doctor", help="show resolved config and holiday table coverage")
    doctor.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")

    # holidays
    hol = sub.add_parser("holidays", help="list exchange holidays for a year")
    hol.add_argument("year", type=int, help="e.g. 2026")
    hol.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")
    hol.add_argument("--json", dest="as_json", action="store_true", help="Output JSON")

    # contracts
    con = sub.add_parser("contracts", help="LTD / FND / trade period per delivery month")
    con.add_argument("year", type=int, nargs="?", default=None, help="Delivery year (default: current year)")
    con.add_argument("--today", type=_iso_date, default=None, help="Reference date YYYY-MM-DD for status")
    con.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")
    con.add_argument("--json", dest="as_json", action="store_true", help="Output JSON")

    # front
    front = sub.add_parser("front", help="front-month contract still trading on a date")
    front.add_argument("--today", type=_iso_date, default=None, help="Reference date YYYY-MM-DD")
    front.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")
    front.add_argument("--json", dest="as_json", action="store_true", help="Output JSON")

    # grid
    grid = sub.add_parser("grid", help="annotated month grid(s) as Markdown or JSON")
    grid.add_argument("year", type=int, help="e.g. 2026")
    grid.add_argument("month", type=int, nargs="?", default=None, help="1-12 (default: all months)")
    grid.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")
    grid.add_argument("--json", dest="as_json", action="store_true", help="Output JSON")

    # cma
    cma = sub.add_parser("cma", help="calendar month average from a prices CSV")
    cma.add_argument("prices", type=Path, help="CSV with date,source,price_type,value")
    cma.add_argument("month", help="YYYY-MM")
    cma.add_argument("--source", default=None, help="Only this source, e.g. EIA")
    cma.add_argument("--contract", default=None, help="Also average over this contract's trade period, e.g. CLH26")
    cma.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")

    # fill
    fill = sub.add_parser("fill", help="daily prices with fill-forward over non-trading days")
    fill.add_argument("prices", type=Path, help="CSV with date,source,price_type,value")
    fill.add_argument("start", type=_iso_date, help="YYYY-MM-DD")
    fill.add_argument("end", type=_iso_date, help="YYYY-MM-DD")
    fill.add_argument("--source", default=None, help="Only this source, e.g. EIA")
    fill.add_argument("--lookback", type=int, default=10, help="Max calendar days to carry a price (default: 10)")
    fill.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")

    # annual
    annual = sub.add_parser("annual", help="per-year average/min/max and year-over-year change")
    annual.add_argument("prices", type=Path, help="CSV with date,source,price_type,value")
    annual.add_argument("--source", default=None, help="Only this source, e.g. EIA")
    annual.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")
    annual.add_argument("--json", dest="as_json", action="store_true", help="Output JSON")

    # history
    hist = sub.add_parser("history", help="one price per day, best source first")
    hist.add_argument("prices", type=Path, help="CSV with date,source,price_type,value")
    hist.add_argument("--start", type=_iso_date, default=None, help="YYYY-MM-DD")
    hist.add_argument("--end", type=_iso_date, default=None, help="YYYY-MM-DD")
    hist.add_argument("--source", default=None, help="Only this source, e.g. EIA")
    hist.add_argument("--config", type=Path, default=None, help="Optional YAML settings file")

    return p


def _holiday_table(cfg: Config) -> HolidayTable:
    # a configured file extends the bundled table; years it lists replace the bundled ones
    table = load_default_holiday_table()
    if cfg.holidays_file is not None:
        table = table.merged(load_holiday_table(cfg.holidays_file))
    return table


def _today(cfg: Config, override: date | None) -> date:
    if override is not None:
        return override
    return datetime.now(ZoneInfo(cfg.timezone)).date()


def _engine(cfg: Config) -> tuple[BusinessCalendar, ContractDateCalculator]:
    cal = BusinessCalendar(_holiday_table(cfg))
    return cal, ContractDateCalculator(cal, product=cfg.product)


def _logger(cfg: Config) -> logging.Logger:
    run_id = datetime.now().strftime("%Y%m%d-%H%M%S")
    return get_logger("crude_calendar", logs_root=cfg.logs_root, run_id=run_id)


def _cmd_doctor(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    log = _logger(cfg)
    table = _holiday_table(cfg)
    today = _today(cfg, None)
    missing = BusinessCalendar(table).missing_years([today.year, today.year + 1])

    print("env ok")
    print(f"config.holidays_file = {cfg.holidays_file or '(bundled NYMEX table)'}")
    print(f"config.logs_root     = {cfg.logs_root}")
    print(f"config.timezone      = {cfg.timezone}")
    print(f"config.product       = {cfg.product}")
    print(f"holiday years        = {', '.join(str(y) for y in sorted(table.years)) or '(none)'}")
    if missing:
        print(f"WARNING: no holiday table for {', '.join(str(y) for y in missing)}; extend the holidays YAML")

    log.info(
        "doctor_config",
        extra={
            "holidays_file": str(cfg.holidays_file) if cfg.holidays_file else None,
            "logs_root": str(cfg.logs_root),
            "timezone": cfg.timezone,
            "product": cfg.product,
            "holiday_years": sorted(table.years),
            "missing_holiday_years": missing,
        },
    )
    return 0


def _cmd_holidays(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    _logger(cfg)
    table = _holiday_table(cfg)
    rows = table.for_year(args.year)

    if args.as_json:
        payload = {
            "year": args.year,
            "known": table.covers(args.year),
            "holidays": [{"date": h.day.isoformat(), "name": h.name} for h in rows],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    if not table.covers(args.year):
        print(f"No holiday table for {args.year}.")
        return 0
    for h in rows:
        print(f"{h.day.isoformat()}  {h.day.strftime('%a')}  {h.name}")
    return 0


def _cmd_contracts(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    log = _logger(cfg)
    cal, calc = _engine(cfg)
    today = _today(cfg, args.today)
    year = args.year if args.year is not None else today.year

    contracts = calc.compute_year_contracts(year)
    missing = cal.missing_years({c.trade_period_start.year for c in contracts} | {year, year + 1})
    log.info("contracts_computed", extra={"year": year, "count": len(contracts), "missing_holiday_years": missing})

    if args.as_json:
        payload = {
            "year": year,
            "today": today.isoformat(),
            "missing_holiday_years": missing,
            "contracts": [render.contract_to_dict(c, today) for c in contracts],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print(f"# {cfg.product} contracts {year} (as of {today.isoformat()})")
    print()
    print(render.contracts_to_markdown(contracts, today))
    if missing:
        print()
        print(f"_No holiday table for {', '.join(str(y) for y in missing)}; weekends only._")
    return 0


def _cmd_front(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    _logger(cfg)
    _cal, calc = _engine(cfg)
    today = _today(cfg, args.today)
    contract = calc.front_month(today)

    if args.as_json:
        print(json.dumps(render.contract_to_dict(contract, today), ensure_ascii=False, indent=2))
    else:
        print(render.contracts_to_markdown([contract], today))
    return 0


def _cmd_grid(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    log = _logger(cfg)
    cal, calc = _engine(cfg)
    builder = CalendarGridBuilder(cal, calc)

    contracts = calc.compute_year_contracts(args.year)
    if args.month is None:
        grids = builder.build_year(args.year, contracts)
    else:
        grids = [builder.build_month(args.year, args.month, contracts)]
    log.info("grid_built", extra={"year": args.year, "month": args.month, "months": len(grids)})

    if args.as_json:
        data = [render.grid_to_dict(g) for g in grids]
        print(json.dumps(data[0] if args.month is not None else data, ensure_ascii=False, indent=2))
        return 0

    print("\n\n".join(render.grid_to_markdown(g) for g in grids))
    return 0


def _cmd_cma(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    log = _logger(cfg)
    year, month = parse_month(args.month)
    observations = load_prices(args.prices)

    avg = calendar_month_average(observations, year, month, source=args.source)
    log.info("cma_computed", extra={"month": avg.month, "source": avg.source, "trading_days": avg.trading_days})
    value = "n/a" if avg.value is None else f"{avg.value:.4f}"
    print(f"CMA {avg.month} [{avg.source or 'all sources'}] = {value} over {avg.trading_days} trading days")

    if args.contract:
        _cal, calc = _engine(cfg)
        contract = calc.find_contract(args.contract)
        tp = trade_period_average(observations, contract, source=args.source)
        tp_value = "n/a" if tp.value is None else f"{tp.value:.4f}"
        print(
            f"Trade period {contract.code} {tp.start.isoformat()}..{tp.end.isoformat()} = "
            f"{tp_value} over {tp.trading_days} trading days"
        )
    return 0


def _cmd_fill(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    _logger(cfg)
    observations = load_prices(args.prices)
    rows = fill_forward(observations, args.start, args.end, source=args.source, lookback_days=args.lookback)
    for r in rows:
        value = "" if r.value is None else f"{r.value:.4f}"
        flag = " (ff)" if r.is_fill_forward else ""
        print(f"{r.day.isoformat()}  {r.day.strftime('%a')}  {value}{flag}")
    return 0



def _cmd_annual(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    log = _logger(cfg)
    stats = annual_statistics(load_prices(args.prices), source=args.source)
    log.info("annual_statistics", extra={"source": args.source, "years": [s.year for s in stats]})

    if args.as_json:
        print(json.dumps([asdict(s) for s in stats], ensure_ascii=False, indent=2))
        return 0

    print(render.annual_to_markdown(stats))
    return 0


def _cmd_history(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    _logger(cfg)
    for d, value in historical_series(load_prices(args.prices), args.start, args.end, source=args.source):
        print(f"{d.isoformat()}  {value:.2f}")
    return 0


_HANDLERS = {
    "doctor": _cmd_doctor,
    "holidays": _cmd_holidays,
    "contracts": _cmd_contracts,
    "front": _cmd_front,
    "grid": _cmd_grid,
    "cma": _cmd_cma,
    "fill": _cmd_fill,
    "annual": _cmd_annual,
    "history": _cmd_history,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "version":
        print(__version__)
        return 0

    handler = _HANDLERS.get(args.cmd)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args)
    except (ValueError, OSError) as e:
        print(f"error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
