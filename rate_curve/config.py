"""
Pool configuration files.

A pool config is a YAML mapping:

    pool_id: susds-usds
    log_level: INFO          # optional
    curve:
      type: redemption_rate  # or constant_price
      params:
        ssr: "1000000001547125957863212448"
        chi: "1000000000000000000000000000"
        rho: 1700000000
        max_ssr: null        # optional

Rays may be written as ints or decimal strings. The curve is validated when
the config is built, so a config that loads is a config that prices.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .core.curve_dispatch import SwapCurve, build_calculator, parse_curve_type
from .errors import ConfigError, RateCurveError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class PoolConfig:
    """Runtime config for one pool."""

    pool_id: str
    curve: SwapCurve
    log_level: str = "WARNING"


def pool_config_from_mapping(obj: Mapping[str, Any]) -> PoolConfig:
    if not isinstance(obj, Mapping):
        raise ConfigError("config_not_mapping", None, "pool config must be a mapping")

    pool_id = obj.get("pool_id")
    if not isinstance(pool_id, str) or not pool_id.strip():
        raise ConfigError("pool_id", None, "pool_id must be a non-empty string")

    log_level = obj.get("log_level", "WARNING")
    if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
        raise ConfigError("log_level", None, f"log_level must be one of {', '.join(LOG_LEVELS)}")

    curve_obj = obj.get("curve")
    if not isinstance(curve_obj, Mapping):
        raise ConfigError("curve", None, "curve must be a mapping with 'type' and 'params'")
    params = curve_obj.get("params") or {}
    if not isinstance(params, Mapping):
        raise ConfigError("curve_params", None, "curve.params must be a mapping")

    try:
        curve_type = parse_curve_type(curve_obj.get("type"))
        curve = SwapCurve(curve_type, build_calculator(curve_type, params))
    except (RateCurveError, TypeError, ValueError) as exc:
        raise ConfigError("curve", None, str(exc)) from exc

    return PoolConfig(pool_id=pool_id.strip(), curve=curve, log_level=log_level.upper())


def load_pool_config(path: Union[str, Path]) -> PoolConfig:
    """Load and validate a YAML pool config."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError("config_unreadable", None, f"{p}: {exc}") from exc
    try:
        obj = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError("config_yaml", None, f"{p}: {exc}") from exc
    return pool_config_from_mapping(obj)
