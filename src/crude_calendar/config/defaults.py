from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Defaults:
    holidays_file: str | None
    logs_root: str
    timezone: str
    product: str


DEFAULTS = Defaults(
    holidays_file=None,  # None -> bundled NYMEX table
    logs_root="logs",
    timezone="America/Chicago",  # resolves "today" for contract status
    product="CL",
)
