from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .defaults import DEFAULTS

_KEYS = ("holidays_file", "logs_root", "timezone", "product")
_ENV = {
    "holidays_file": "CRUDE_HOLIDAYS_FILE",
    "logs_root": "CRUDE_LOGS_ROOT",
    "timezone": "CRUDE_TIMEZONE",
    "product": "CRUDE_PRODUCT",
}


@dataclass(frozen=True)
class Config:
    holidays_file: Path | None
    logs_root: Path
    timezone: str
    product: str


def _req_path(base: dict[str, Any], key: str, default: str) -> Path:
    """Return a required Path, falling back to default if missing/empty."""
    val = base.get(key) or default
    return Path(val)


def _opt_path(base: dict[str, Any], key: str) -> Path | None:
    """Return an optional Path, or None if missing/empty."""
    val = base.get(key)
    return Path(val) if val else None


def _apply_yaml_overrides(base: dict[str, Any], yml: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k in _KEYS:
        if k in yml:
            out[k] = yml[k]
    return out


def _apply_env_overrides(base: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, env in _ENV.items():
        if v := os.getenv(env):
            out[k] = v
    return out


def load_config(yaml_path: Path | None = None) -> Config:
    # start from defaults as a dict
    base = {
        "holidays_file": DEFAULTS.holidays_file,
        "logs_root": DEFAULTS.logs_root,
        "timezone": DEFAULTS.timezone,
        "product": DEFAULTS.product,
    }

    # ENV overrides (middle precedence)
    base = _apply_env_overrides(base)

    # YAML overrides (highest precedence)
    if yaml_path:
        data = yaml.safe_load(Path(yaml_path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Config YAML must be a mapping at the top level.")
        base = _apply_yaml_overrides(base, data)

    product = str(base.get("product") or DEFAULTS.product).strip().upper()
    if not product.isalnum():
        raise ValueError(f"Config product must be alphanumeric, got {product!r}")

    timezone = str(base.get("timezone") or DEFAULTS.timezone).strip()
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Config timezone is not a known IANA zone: {timezone!r}") from e

    return Config(
        holidays_file=_opt_path(base, "holidays_file"),
        logs_root=_req_path(base, "logs_root", DEFAULTS.logs_root),
        timezone=timezone,
        product=product,
    )
