from __future__ import annotations

import itertools
import logging
from datetime import date

from ..model.calendar import Contract, ContractStatus
from ..utils.dates import shift_month, validate_year, validate_year_month
from ..utils.market import parse_contract_code
from .business import BusinessCalendar

log = logging.getLogger(__name__)

DEFAULT_PRODUCT = "CL"

LTD_ANCHOR_DAY = 25  # of the month preceding delivery
TRADE_PERIOD_START_DAY = 26  # of the month two before delivery

# business days back from the anchor
LTD_OFFSET_ANCHOR_OPEN = 3
LTD_OFFSET_ANCHOR_CLOSED = 4

# Jan..Mar of year+1: their trade periods and LTD/FND fall inside `year`
SPILLOVER_MONTHS = 3


class ContractDateCalculator:
    """
    NYMEX WTI (CL) key dates per delivery month:

      LTD   3 business days before the 25th of the preceding month, or 4 if the
            25th is not a business day.
      FND   first business day after LTD.
      trade period  26th of M-2 through the 25th of M-1 (calendar days).
    """

    def __init__(self, calendar: BusinessCalendar, product: str = DEFAULT_PRODUCT) -> None:
        self.calendar = calendar
        self.product = product.strip().upper()
        self._cache: dict[tuple[int, int], Contract] = {}

    def compute_contract(self, delivery_year: int, delivery_month: int) -> Contract:
        validate_year_month(delivery_year, delivery_month)
        key = (delivery_year, delivery_month)
        hit = self._cache.get(key)
        if hit is not None:
            return hit

        prec_year, prec_month = shift_month(delivery_year, delivery_month, -1)
        anchor = date(prec_year, prec_month, LTD_ANCHOR_DAY)

        back = LTD_OFFSET_ANCHOR_OPEN if self.calendar.is_business_day(anchor) else LTD_OFFSET_ANCHOR_CLOSED
        ltd = self.calendar.subtract_business_days(anchor, back)
        fnd = self.calendar.add_business_days(ltd, 1)

        start_year, start_month = shift_month(delivery_year, delivery_month, -2)
        contract = Contract(
            product=self.product,
            delivery_year=delivery_year,
            delivery_month=delivery_month,
            last_trading_day=ltd,
            first_notice_day=fnd,
            trade_period_start=date(start_year, start_month, TRADE_PERIOD_START_DAY),
            trade_period_end=anchor,
        )
        log.debug(
            "contract_computed",
            extra={"code": contract.code, "anchor": anchor, "back": back, "ltd": ltd, "fnd": fnd},
        )
        self._cache[key] = contract
        return contract

    def compute_year_contracts(self, year: int) -> list[Contract]:
        """All 12 delivery months of `year` plus the first months of year+1."""
        validate_year(year)
        validate_year(year + 1)
        out = [self.compute_contract(year, m) for m in range(1, 13)]
        out.extend(self.compute_contract(year + 1, m) for m in range(1, SPILLOVER_MONTHS + 1))
        return out

    def find_contract(self, code: str) -> Contract:
        """Resolve a ticker such as "CLH26" to its computed Contract."""
        product, year, month = parse_contract_code(code)
        if product != self.product:
            raise ValueError(f"Contract {code!r} is not a {self.product} contract")
        return self.compute_contract(year, month)

    def front_month(self, today: date) -> Contract:
        """First contract, in delivery order, still trading on `today`."""
        for offset in itertools.count():
            year, month = shift_month(today.year, today.month, offset)
            contract = self.compute_contract(year, month)
            if contract.last_trading_day >= today:
                return contract
        raise AssertionError("unreachable")


def contract_status(contract: Contract, today: date) -> ContractStatus:
    """
    active if today is inside the trade period (wins over expired),
    expired once today is past LTD, upcoming otherwise.
    """
    if contract.in_trade_period(today):
        return ContractStatus.ACTIVE
    if today > contract.last_trading_day:
        return ContractStatus.EXPIRED
    return ContractStatus.UPCOMING
