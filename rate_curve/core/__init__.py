"""
Core curve algorithms
"""

from .ray_math import mul_div_ceil, mul_div_floor, rpow
from .compounding import chi_now
from .rate_update import (
    RateUpdate,
    RateUpdateResult,
    apply_rate_update,
    update_max_ssr,
    validate_rate_update,
)
from .calculator import (
    CurveCalculator,
    RoundDirection,
    SwapWithoutFeesResult,
    TradeDirection,
    TradingTokenResult,
)
from .constant_price import ConstantPriceCurve
from .redemption_rate import RedemptionRateCurve
from .curve_dispatch import SWAP_CURVE_LEN, CurveType, SwapCurve, build_calculator, parse_curve_type
from .permission import Permission
from .processor import process_max_ssr_update, process_rate_update

__all__ = [
    "rpow",
    "mul_div_floor",
    "mul_div_ceil",
    "chi_now",
    "RateUpdate",
    "RateUpdateResult",
    "validate_rate_update",
    "apply_rate_update",
    "update_max_ssr",
    "CurveCalculator",
    "RoundDirection",
    "SwapWithoutFeesResult",
    "TradeDirection",
    "TradingTokenResult",
    "ConstantPriceCurve",
    "RedemptionRateCurve",
    "SWAP_CURVE_LEN",
    "CurveType",
    "SwapCurve",
    "build_calculator",
    "parse_curve_type",
    "Permission",
    "process_rate_update",
    "process_max_ssr_update",
]
