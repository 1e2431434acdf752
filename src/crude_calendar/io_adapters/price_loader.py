from __future__ import annotations

import csv
import re
from collections.abc import Iterable
from datetime import date
from pathlib import Path

from ..pricing.averages import PriceObservation

REQUIRED_COLUMNS = ("date", "source", "value")


def _norm_cols(cols: Iterable[str]) -> list[str]:
    out: list[str] = []
    for c in cols:
        c2 = re.sub(r"[^a-z0-9]+", "_", c.strip().lower()).strip("_")
        out.append(c2)
    return out


def _to_float(v: str, where: str) -> float | None:
    v = v.strip()
    if v == "":
        return None
    try:
        return float(v)
    except ValueError:
        raise ValueError(f"{where}: invalid price {v!r}") from None


def load_prices(path: Path) -> list[PriceObservation]:
    """
    Read daily prices from CSV with header date,source[,price_type],value[,unit].
    A blank value is a missing price (kept, so fill-forward can see the gap).
    """
    path = Path(path)
    out: list[PriceObservation] = []
    with path.open("r", encoding="utf-8", newline="") as fh:
        reader = csv.reader(fh)
        try:
            headers = _norm_cols(next(reader))
        except StopIteration:
            return out
        missing = [c for c in REQUIRED_COLUMNS if c not in headers]
        if missing:
            raise ValueError(f"{path.name}: missing column(s) {', '.join(missing)}")

        for lineno, raw in enumerate(reader, start=2):
            if not raw or not any(cell.strip() for cell in raw):
                continue
            # pad short rows
            if len(raw) < len(headers):
                raw = raw + [""] * (len(headers) - len(raw))
            rec = dict(zip(headers, raw, strict=False))
            where = f"{path.name}:{lineno}"
            try:
                day = date.fromisoformat(rec["date"].strip()[:10])
            except ValueError:
                raise ValueError(f"{where}: invalid date {rec['date']!r}") from None
            out.append(
                PriceObservation(
                    day=day,
                    source=rec["source"].strip().upper(),
                    price_type=(rec.get("price_type") or "spot").strip(),
                    value=_to_float(rec["value"], where),
                    unit=(rec.get("unit") or "USD/bbl").strip(),
                )
            )
    return out
