from __future__ import annotations

import logging

import pytest

from crude_calendar.engine.business import BusinessCalendar
from crude_calendar.engine.contracts import ContractDateCalculator
from crude_calendar.io_adapters.holiday_loader import load_default_holiday_table


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    # keep CLI log files out of the working tree
    monkeypatch.setenv("CRUDE_LOGS_ROOT", str(tmp_path / "logs"))
    for var in ("CRUDE_HOLIDAYS_FILE", "CRUDE_TIMEZONE", "CRUDE_PRODUCT"):
        monkeypatch.delenv(var, raising=False)
    yield
    # get_logger binds handlers to this test's stderr capture and log dir
    logger = logging.getLogger("crude_calendar")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    if hasattr(logger, "_crude_configured"):
        del logger._crude_configured


@pytest.fixture
def nymex() -> BusinessCalendar:
    return BusinessCalendar(load_default_holiday_table())


@pytest.fixture
def calc(nymex: BusinessCalendar) -> ContractDateCalculator:
    return ContractDateCalculator(nymex)
