from __future__ import annotations

from datetime import date, timedelta

import pytest

from crude_calendar.engine.business import BusinessCalendar
from crude_calendar.engine.contracts import ContractDateCalculator, contract_status
from crude_calendar.io_adapters.holiday_loader import load_default_holiday_table
from crude_calendar.model.calendar import ContractStatus


def test_march_2026_anchor_is_business_day(calc: ContractDateCalculator) -> None:
    c = calc.compute_contract(2026, 3)
    assert c.code == "CLH26"
    # Feb 25 2026 is a Wednesday -> 3 business days back
    assert c.last_trading_day == date(2026, 2, 20)
    assert c.first_notice_day == date(2026, 2, 23)
    assert c.trade_period_start == date(2026, 1, 26)
    assert c.trade_period_end == date(2026, 2, 25)


@pytest.mark.parametrize(
    ("year", "month", "ltd", "fnd"),
    [
        (2026, 2, date(2026, 1, 20), date(2026, 1, 21)),  # anchor Sun Jan 25
        (2026, 5, date(2026, 4, 21), date(2026, 4, 22)),  # anchor Sat Apr 25
        (2026, 11, date(2026, 10, 20), date(2026, 10, 21)),  # anchor Sun Oct 25
        (2026, 12, date(2026, 11, 20), date(2026, 11, 23)),  # anchor Wed Nov 25
        (2028, 1, date(2027, 12, 20), date(2027, 12, 21)),  # anchor Sat, skips Dec 24 holiday
    ],
)
def test_known_last_trading_days(calc: ContractDateCalculator, year: int, month: int, ltd: date, fnd: date) -> None:
    c = calc.compute_contract(year, month)
    assert c.last_trading_day == ltd
    assert c.first_notice_day == fnd


def test_january_rolls_back_to_previous_year(calc: ContractDateCalculator) -> None:
    c = calc.compute_contract(2027, 1)
    assert c.code == "CLF27"
    assert c.trade_period_end == date(2026, 12, 25)
    assert c.trade_period_start == date(2026, 11, 26)
    # Dec 25 2026 is a holiday -> 4 business days back
    assert c.last_trading_day == date(2026, 12, 21)
    assert c.first_notice_day == date(2026, 12, 22)


def test_unknown_holiday_year_uses_weekends_only(calc: ContractDateCalculator) -> None:
    # 2025 has no table, so Thu Dec 25 2025 counts as a business day
    c = calc.compute_contract(2026, 1)
    assert c.last_trading_day == date(2025, 12, 22)
    assert c.first_notice_day == date(2025, 12, 23)


def test_year_contracts_include_spillover(calc: ContractDateCalculator) -> None:
    contracts = calc.compute_year_contracts(2026)
    assert len(contracts) == 15
    assert [c.code for c in contracts[:12]] == [
        "CLF26",
        "CLG26",
        "CLH26",
        "CLJ26",
        "CLK26",
        "CLM26",
        "CLN26",
        "CLQ26",
        "CLU26",
        "CLV26",
        "CLX26",
        "CLZ26",
    ]
    assert [c.code for c in contracts[12:]] == ["CLF27", "CLG27", "CLH27"]


@pytest.mark.parametrize("year", [2025, 2026, 2027, 2028])
def test_contract_invariants(calc: ContractDateCalculator, nymex: BusinessCalendar, year: int) -> None:
    for c in calc.compute_year_contracts(year):
        ltd, fnd = c.last_trading_day, c.first_notice_day
        assert nymex.is_business_day(ltd), c.code
        assert nymex.is_business_day(fnd), c.code
        assert ltd < fnd
        between = ltd + timedelta(days=1)
        while between < fnd:
            assert not nymex.is_business_day(between), c.code
            between += timedelta(days=1)

        assert c.trade_period_start.day == 26
        assert c.trade_period_end.day == 25
        assert ltd <= c.trade_period_end

        anchor = c.trade_period_end
        back = 3 if nymex.is_business_day(anchor) else 4
        assert nymex.subtract_business_days(anchor, back) == ltd


def test_compute_is_idempotent(calc: ContractDateCalculator) -> None:
    other = ContractDateCalculator(BusinessCalendar(load_default_holiday_table()))
    assert calc.compute_contract(2026, 7) == other.compute_contract(2026, 7)
    assert calc.compute_contract(2026, 7) is calc.compute_contract(2026, 7)


@pytest.mark.parametrize(("year", "month"), [(2026, 0), (2026, 13), (1800, 5), (True, 5), (2026, "3")])
def test_invalid_year_month(calc: ContractDateCalculator, year, month) -> None:
    with pytest.raises(ValueError):
        calc.compute_contract(year, month)


def test_find_contract_by_code(calc: ContractDateCalculator) -> None:
    c = calc.find_contract("clh26")
    assert (c.delivery_year, c.delivery_month) == (2026, 3)
    with pytest.raises(ValueError):
        calc.find_contract("BZH26")
    with pytest.raises(ValueError):
        calc.find_contract("CLA26")


def test_front_month(calc: ContractDateCalculator) -> None:
    assert calc.front_month(date(2026, 10, 19)).code == "CLX26"
    assert calc.front_month(date(2026, 10, 20)).code == "CLX26"  # on LTD still trading
    assert calc.front_month(date(2026, 10, 21)).code == "CLZ26"


def test_contract_status(calc: ContractDateCalculator) -> None:
    c = calc.compute_contract(2026, 3)  # LTD Feb 20, trade period Jan 26..Feb 25
    assert contract_status(c, date(2026, 1, 10)) == ContractStatus.UPCOMING
    assert contract_status(c, date(2026, 2, 10)) == ContractStatus.ACTIVE
    # past LTD but still inside the trade period
    assert contract_status(c, date(2026, 2, 22)) == ContractStatus.ACTIVE
    assert contract_status(c, date(2026, 2, 26)) == ContractStatus.EXPIRED


def test_custom_product_root(nymex: BusinessCalendar) -> None:
    calc = ContractDateCalculator(nymex, product="mcl")
    assert calc.compute_contract(2026, 3).code == "MCLH26"
