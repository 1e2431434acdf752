from __future__ import annotations

import json
from datetime import date

from crude_calendar.engine.business import BusinessCalendar
from crude_calendar.engine.contracts import ContractDateCalculator
from crude_calendar.engine.grid import CalendarGridBuilder
from crude_calendar.tools.render import (
    contract_to_dict,
    contracts_to_markdown,
    grid_to_dict,
    grid_to_markdown,
)


def test_contract_to_dict(calc: ContractDateCalculator) -> None:
    c = calc.compute_contract(2026, 3)
    assert contract_to_dict(c) == {
        "code": "CLH26",
        "product": "CL",
        "delivery_year": 2026,
        "delivery_month": 3,
        "month_code": "H",
        "last_trading_day": "2026-02-20",
        "first_notice_day": "2026-02-23",
        "trade_period_start": "2026-01-26",
        "trade_period_end": "2026-02-25",
    }
    assert contract_to_dict(c, date(2026, 3, 1))["status"] == "expired"


def test_contracts_to_markdown(calc: ContractDateCalculator) -> None:
    text = contracts_to_markdown([calc.compute_contract(2026, 3)], today=date(2026, 2, 10))
    lines = text.splitlines()
    assert lines[0] == "| Contract | Delivery | Trade period | LTD | FND | Status |"
    assert lines[2] == (
        "| CLH26 | March 2026 | 2026-01-26 .. 2026-02-25 | Fri 2026-02-20 | Mon 2026-02-23 | active |"
    )


def test_grid_to_markdown(nymex: BusinessCalendar, calc: ContractDateCalculator) -> None:
    grid = CalendarGridBuilder(nymex, calc).build_month(2026, 2, calc.compute_year_contracts(2026))
    text = grid_to_markdown(grid)
    assert text.startswith("## February 2026")
    assert "| Su | Mo | Tu | We | Th | Fr | Sa |" in text
    assert "| 20L* |" in text
    assert "| 23N* |" in text
    assert "| 16H* |" in text
    assert "| 25B |" in text
    assert "- 2026-02-16 holiday: Presidents Day" in text
    assert "- 2026-02-26 trade period start: CLJ26" in text
    assert "No holiday table" not in text


def test_grid_to_dict_is_json_ready(nymex: BusinessCalendar, calc: ContractDateCalculator) -> None:
    grid = CalendarGridBuilder(nymex, calc).build_month(2026, 1, calc.compute_year_contracts(2026))
    data = json.loads(json.dumps(grid_to_dict(grid)))
    assert data["missing_holiday_years"] == [2025]
    assert data["weeks"][0][0]["date"] == "2025-12-28"
    assert data["weeks"][0][0]["in_month"] is False
