from __future__ import annotations

import re

# CME month codes
MONTH_CODE = {
    1: "F",  # Jan
    2: "G",  # Feb
    3: "H",  # Mar
    4: "J",  # Apr
    5: "K",  # May
    6: "M",  # Jun
    7: "N",  # Jul
    8: "Q",  # Aug
    9: "U",  # Sep
    10: "V",  # Oct
    11: "X",  # Nov
    12: "Z",  # Dec
}
CODE_MONTH = {v: k for k, v in MONTH_CODE.items()}

_CODE_RE = re.compile(r"^(?P<product>[A-Z0-9]+?)(?P<month>[FGHJKMNQUVXZ])(?P<yy>\d{2})$")


def month_code_for(month: int) -> str:
    """Map a calendar month (1-12) to the futures month letter."""
    try:
        return MONTH_CODE[month]
    except KeyError:
        raise ValueError(f"Unsupported month: {month}") from None


def two_digit_year(year: int) -> str:
    """Return YY (00-99)."""
    return f"{year % 100:02d}"


def contract_code(product: str, year: int, month: int) -> str:
    """Exchange-style ticker, e.g. CL + H + 26 -> CLH26."""
    return f"{product}{month_code_for(month)}{two_digit_year(year)}"


def parse_contract_code(code: str, century: int = 2000) -> tuple[str, int, int]:
    """
    Split a ticker like "CLH26" into (product, year, month).
    Two-digit years are placed in `century`.
    """
    m = _CODE_RE.match(code.strip().upper())
    if not m:
        raise ValueError(f"Invalid contract code: {code!r} (expected e.g. CLH26)")
    return m["product"], century + int(m["yy"]), CODE_MONTH[m["month"]]
