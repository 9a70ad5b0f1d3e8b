"""
Curve dispatch for pool swap pricing.

A pool stores a `CurveType` tag next to the packed calculator parameters.
`SwapCurve` is the closed tagged variant over the supported calculators;
every operation is routed to the calculator, whose class must match the tag.

Packed layout: tag (u8) followed by the calculator record, zero-padded to the
widest calculator so every pool account has the same size.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Type

from ..errors import MalformedStateError
from ..state.rate_state import state_from_dict
from ..state.units import Amount, Timestamp, parse_int
from .calculator import (
    CurveCalculator,
    RoundDirection,
    SwapWithoutFeesResult,
    TradeDirection,
    TradingTokenResult,
)
from .constant_price import ConstantPriceCurve
from .redemption_rate import RedemptionRateCurve


class CurveType(IntEnum):
    """On-account curve tag. Values are persisted; never renumber."""
    CONSTANT_PRICE = 1
    REDEMPTION_RATE = 4


_CALCULATORS: Dict[CurveType, Type[CurveCalculator]] = {
    CurveType.CONSTANT_PRICE: ConstantPriceCurve,
    CurveType.REDEMPTION_RATE: RedemptionRateCurve,
}

CALCULATOR_LEN = max(cls.LEN for cls in _CALCULATORS.values())
SWAP_CURVE_LEN = 1 + CALCULATOR_LEN


def parse_curve_type(value: object) -> CurveType:
    """
    Normalize a curve tag given as a CurveType, an int, or a name.

    Names are case-insensitive and accept `-` for `_` ("redemption-rate").
    """
    if isinstance(value, CurveType):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return CurveType(value)
        except ValueError as exc:
            raise MalformedStateError("curve_type", value) from exc
    if isinstance(value, str) and value.strip():
        name = value.strip().upper().replace("-", "_")
        try:
            return CurveType[name]
        except KeyError as exc:
            raise MalformedStateError("curve_type", None, f"unsupported curve_type: {value!r}") from exc
    raise MalformedStateError("curve_type", None, f"unsupported curve_type: {value!r}")


def build_calculator(curve_type: CurveType, params: Mapping[str, Any]) -> CurveCalculator:
    """
    Build a calculator from plain parameters (config files, CLI).

    - CONSTANT_PRICE: {"token_b_price": <ray>}
    - REDEMPTION_RATE: {"ssr": <ray>, "chi": <ray>, "rho": <int>, "max_ssr": <ray|None>}
    """
    if curve_type == CurveType.CONSTANT_PRICE:
        if "token_b_price" not in params:
            raise MalformedStateError("token_b_price_missing")
        return ConstantPriceCurve(token_b_price=parse_int("token_b_price", params["token_b_price"]))
    if curve_type == CurveType.REDEMPTION_RATE:
        try:
            state = state_from_dict(params)
        except KeyError as exc:
            raise MalformedStateError(f"{exc.args[0]}_missing") from exc
        return RedemptionRateCurve(state)
    raise MalformedStateError("curve_type", int(curve_type))


@dataclass(frozen=True)
class SwapCurve:
    """Tagged curve variant stored on a pool."""

    curve_type: CurveType
    calculator: CurveCalculator

    def __post_init__(self) -> None:
        expected = _CALCULATORS.get(self.curve_type)
        if expected is None or not isinstance(self.calculator, expected):
            raise MalformedStateError(
                "calculator_mismatch",
                int(self.curve_type),
                f"{type(self.calculator).__name__} cannot back {self.curve_type.name}",
            )

    @classmethod
    def redemption_rate(cls, calculator: RedemptionRateCurve) -> "SwapCurve":
        return cls(CurveType.REDEMPTION_RATE, calculator)

    @classmethod
    def constant_price(cls, calculator: ConstantPriceCurve) -> "SwapCurve":
        return cls(CurveType.CONSTANT_PRICE, calculator)

    def with_calculator(self, calculator: CurveCalculator) -> "SwapCurve":
        """Return a new SwapCurve of the same type around `calculator`."""
        return SwapCurve(self.curve_type, calculator)

    def swap_without_fees(
        self,
        source_amount: Amount,
        swap_source_amount: Amount,
        swap_destination_amount: Amount,
        trade_direction: TradeDirection,
        timestamp: Timestamp,
    ) -> Optional[SwapWithoutFeesResult]:
        return self.calculator.swap_without_fees(
            source_amount, swap_source_amount, swap_destination_amount, trade_direction, timestamp
        )

    def pool_tokens_to_trading_tokens(
        self,
        pool_tokens: Amount,
        pool_token_supply: Amount,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        round_direction: RoundDirection,
        timestamp: Timestamp,
    ) -> Optional[TradingTokenResult]:
        return self.calculator.pool_tokens_to_trading_tokens(
            pool_tokens,
            pool_token_supply,
            swap_token_a_amount,
            swap_token_b_amount,
            round_direction,
            timestamp,
        )

    def deposit_single_token_type(
        self,
        source_amount: Amount,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        pool_supply: Amount,
        trade_direction: TradeDirection,
        timestamp: Timestamp,
    ) -> Optional[Amount]:
        return self.calculator.deposit_single_token_type(
            source_amount, swap_token_a_amount, swap_token_b_amount, pool_supply, trade_direction, timestamp
        )

    def withdraw_single_token_type_exact_out(
        self,
        source_amount: Amount,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        pool_supply: Amount,
        trade_direction: TradeDirection,
        round_direction: RoundDirection,
        timestamp: Timestamp,
    ) -> Optional[Amount]:
        return self.calculator.withdraw_single_token_type_exact_out(
            source_amount,
            swap_token_a_amount,
            swap_token_b_amount,
            pool_supply,
            trade_direction,
            round_direction,
            timestamp,
        )

    def validate(self, timestamp: Timestamp) -> None:
        self.calculator.validate(timestamp)

    def pack(self) -> bytes:
        body = self.calculator.pack()
        return bytes([int(self.curve_type)]) + body + b"\x00" * (CALCULATOR_LEN - len(body))

    @classmethod
    def unpack(cls, data: bytes) -> "SwapCurve":
        data = bytes(data)
        if len(data) != SWAP_CURVE_LEN:
            raise MalformedStateError("record_length", len(data), f"expected {SWAP_CURVE_LEN} bytes")
        curve_type = parse_curve_type(data[0])
        calc_cls = _CALCULATORS[curve_type]
        body, padding = data[1 : 1 + calc_cls.LEN], data[1 + calc_cls.LEN :]
        if any(padding):
            raise MalformedStateError("nonzero_padding", None)
        return cls(curve_type, calc_cls.unpack(body))
