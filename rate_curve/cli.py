"""
Operator CLI for redemption-rate pools.

    python -m rate_curve chi    --config pool.yaml --now 1735689600
    python -m rate_curve quote  --config pool.yaml --now 1735689600 --amount 1000000 --direction a-to-b
    python -m rate_curve update --config pool.yaml --now 1735689600 --ssr ... --chi ... --rho ...
    python -m rate_curve pack   --config pool.yaml

All commands print one JSON object on stdout. The clock is never read: `--now`
is always explicit so runs are reproducible.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .config import LOG_LEVELS, PoolConfig, load_pool_config
from .core.calculator import TradeDirection
from .core.compounding import chi_now
from .core.rate_update import RateUpdate, validate_rate_update
from .core.redemption_rate import RedemptionRateCurve
from .errors import ConfigError, RateCurveError
from .state.rate_state import state_to_dict
from .state.units import RAY

logger = logging.getLogger(__name__)


def format_ray(value: int) -> str:
    """Exact decimal rendering of a ray (27 fractional digits)."""
    return f"{value // RAY}.{value % RAY:027d}"


def _int_arg(text: str) -> int:
    digits = text.strip().replace("_", "")
    if not (digits.isascii() and digits.isdigit()):
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {text!r}")
    return int(digits)


def _direction_arg(text: str) -> TradeDirection:
    name = text.strip().upper().replace("-", "_")
    try:
        return TradeDirection[name]
    except KeyError as exc:
        raise argparse.ArgumentTypeError("direction must be a-to-b or b-to-a") from exc


def _rate_curve(cfg: PoolConfig) -> RedemptionRateCurve:
    calc = cfg.curve.calculator
    if not isinstance(calc, RedemptionRateCurve):
        raise ConfigError("not_redemption_rate_curve", None, f"pool {cfg.pool_id} is {cfg.curve.curve_type.name}")
    return calc


def _cmd_chi(cfg: PoolConfig, args: argparse.Namespace) -> Dict[str, Any]:
    state = _rate_curve(cfg).state
    value = chi_now(state, args.now)
    return {"pool_id": cfg.pool_id, "now": args.now, "chi_now": value, "rate": format_ray(value)}


def _cmd_quote(cfg: PoolConfig, args: argparse.Namespace) -> Dict[str, Any]:
    cfg.curve.validate(args.now)
    result = cfg.curve.swap_without_fees(args.amount, 0, 0, args.direction, args.now)
    out: Dict[str, Any] = {
        "pool_id": cfg.pool_id,
        "now": args.now,
        "direction": args.direction.value,
        "source_amount": args.amount,
    }
    if result is None:
        out["ok"] = False
        out["error"] = "zero_trade"
    else:
        out["ok"] = True
        out["source_amount_swapped"] = result.source_amount_swapped
        out["destination_amount_swapped"] = result.destination_amount_swapped
    return out


def _cmd_update(cfg: PoolConfig, args: argparse.Namespace) -> Dict[str, Any]:
    state = _rate_curve(cfg).state
    update = RateUpdate(new_ssr=args.ssr, new_chi=args.chi, new_rho=args.rho, observed_now=args.now)
    result = validate_rate_update(state, update)
    out: Dict[str, Any] = {"pool_id": cfg.pool_id, "accepted": result.accepted}
    if result.accepted and result.state is not None:
        out["state"] = state_to_dict(result.state)
    else:
        out["rejection"] = result.rejection
        out["error"] = str(result.error)
    return out


def _cmd_pack(cfg: PoolConfig, args: argparse.Namespace) -> Dict[str, Any]:
    packed = cfg.curve.pack()
    return {"pool_id": cfg.pool_id, "curve_type": cfg.curve.curve_type.name, "packed_hex": packed.hex()}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="rate_curve", description="Redemption-rate pool operator tool.")
    ap.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, default=None, help="Override the config's log level"
    )
    sub = ap.add_subparsers(dest="command", required=True)

    p_chi = sub.add_parser("chi", help="Compounded index at --now")
    p_chi.add_argument("--config", required=True)
    p_chi.add_argument("--now", type=_int_arg, required=True)
    p_chi.set_defaults(handler=_cmd_chi)

    p_quote = sub.add_parser("quote", help="Fee-less swap quote at --now")
    p_quote.add_argument("--config", required=True)
    p_quote.add_argument("--now", type=_int_arg, required=True)
    p_quote.add_argument("--amount", type=_int_arg, required=True)
    p_quote.add_argument("--direction", type=_direction_arg, default=TradeDirection.A_TO_B)
    p_quote.set_defaults(handler=_cmd_quote)

    p_update = sub.add_parser("update", help="Dry-run a rate update against the configured state")
    p_update.add_argument("--config", required=True)
    p_update.add_argument("--now", type=_int_arg, required=True)
    p_update.add_argument("--ssr", type=_int_arg, required=True)
    p_update.add_argument("--chi", type=_int_arg, required=True)
    p_update.add_argument("--rho", type=_int_arg, required=True)
    p_update.set_defaults(handler=_cmd_update)

    p_pack = sub.add_parser("pack", help="Hex of the packed curve record")
    p_pack.add_argument("--config", required=True)
    p_pack.set_defaults(handler=_cmd_pack)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_pool_config(args.config)
    except ConfigError as exc:
        print(json.dumps({"ok": False, "error": str(exc), "rule": exc.rule}), file=sys.stderr)
        return 2

    logging.basicConfig(level=(args.log_level or cfg.log_level).upper(), format="%(levelname)s %(name)s: %(message)s")
    logger.debug("loaded pool config %s (%s)", cfg.pool_id, cfg.curve.curve_type.name)

    try:
        out = args.handler(cfg, args)
    except RateCurveError as exc:
        print(json.dumps({"ok": False, "error": str(exc), "rule": exc.rule}), file=sys.stderr)
        return 2

    print(json.dumps(out, sort_keys=True))
    if args.command == "update" and not out["accepted"]:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
