"""
Shared curve calculator contract.

Every curve variant selectable through `SwapCurve` implements the same
operation set: swap conversion, pool-token/trading-token conversions,
single-sided deposit and withdraw conversions, validation, and fixed-width
pack/unpack.

Conventions:
- Token A is the underlying token, token B the yield-bearing wrapper.
- `token_b_price` is "token A per token B" scaled by RAY.
- `None` means "no trade possible" (zero output, empty pool); arithmetic that
  does not fit the working width raises CurveOverflowError instead.
- Amounts the pool pays out are floored; amounts it receives are taken as given.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

from ..errors import MalformedStateError
from ..state.units import RAY, Amount, Timestamp
from .ray_math import _require_nonneg, checked_add, checked_mul, mul_div_floor, narrow


class TradeDirection(Enum):
    """Which token enters the pool."""
    A_TO_B = "A_TO_B"
    B_TO_A = "B_TO_A"

    def opposite(self) -> "TradeDirection":
        return TradeDirection.B_TO_A if self is TradeDirection.A_TO_B else TradeDirection.A_TO_B


class RoundDirection(Enum):
    FLOOR = "FLOOR"
    CEILING = "CEILING"


@dataclass(frozen=True)
class SwapWithoutFeesResult:
    source_amount_swapped: Amount
    destination_amount_swapped: Amount


@dataclass(frozen=True)
class TradingTokenResult:
    token_a_amount: Amount
    token_b_amount: Amount


def require_amounts(**amounts: int) -> None:
    """Token amounts, reserves and supplies are unsigned."""
    for name, value in amounts.items():
        _require_nonneg(name, value)


def map_zero_to_none(value: int) -> Optional[int]:
    return None if value == 0 else value


def ceil_div(numerator: int, denominator: int) -> Optional[int]:
    if denominator == 0:
        return None
    return -(-numerator // denominator)


def floor_div(numerator: int, denominator: int) -> Optional[int]:
    if denominator == 0:
        return None
    return numerator // denominator


def swap_at_price(
    token_b_price: int,
    source_amount: Amount,
    trade_direction: TradeDirection,
) -> Optional[SwapWithoutFeesResult]:
    """
    Convert at a fixed ray price, flooring the amount paid out.

        A_TO_B: out = floor(source_amount * RAY / price)
        B_TO_A: out = floor(source_amount * price / RAY)

    The full `source_amount` is attributed to the pool. Returns None when
    either side rounds to zero.
    """
    if source_amount < 0:
        raise ValueError(f"source_amount must be non-negative: {source_amount}")
    if token_b_price <= 0:
        raise ValueError(f"token_b_price must be positive: {token_b_price}")
    if trade_direction is TradeDirection.A_TO_B:
        destination_amount = mul_div_floor(source_amount, RAY, token_b_price)
    else:
        destination_amount = mul_div_floor(source_amount, token_b_price, RAY)

    source_swapped = map_zero_to_none(narrow(source_amount, name="source_amount"))
    destination_swapped = map_zero_to_none(narrow(destination_amount, name="destination_amount"))
    if source_swapped is None or destination_swapped is None:
        return None
    return SwapWithoutFeesResult(
        source_amount_swapped=source_swapped,
        destination_amount_swapped=destination_swapped,
    )


def normalized_value_at_price(
    token_b_price: int,
    swap_token_a_amount: Amount,
    swap_token_b_amount: Amount,
) -> Amount:
    """
    Half of the pool value in token A: `(a + floor(b * price / RAY)) // 2`.

    The curve is additive (`a + b`), unlike the multiplicative invariants of
    other curves, hence the division by 2 to normalize across both sides.
    """
    require_amounts(swap_token_a_amount=swap_token_a_amount, swap_token_b_amount=swap_token_b_amount)
    b_value = mul_div_floor(swap_token_b_amount, token_b_price, RAY)
    return narrow(checked_add(swap_token_a_amount, b_value) // 2, name="normalized_value")


def trading_tokens_to_pool_tokens(
    token_b_price: int,
    source_amount: Amount,
    swap_token_a_amount: Amount,
    swap_token_b_amount: Amount,
    pool_supply: Amount,
    trade_direction: TradeDirection,
    round_direction: RoundDirection,
) -> Optional[Amount]:
    """
    Pool tokens equivalent to `source_amount` of one side.

    The pool is valued in token A:
        given_value = source_amount                       (A_TO_B)
                    = floor(source_amount * price / RAY)  (B_TO_A)
        total_value = swap_token_a_amount + floor(swap_token_b_amount * price / RAY)
        pool_tokens = pool_supply * given_value / total_value  (rounded per `round_direction`)

    Returns None when the pool holds no value.
    """
    require_amounts(
        source_amount=source_amount,
        swap_token_a_amount=swap_token_a_amount,
        swap_token_b_amount=swap_token_b_amount,
        pool_supply=pool_supply,
    )
    if trade_direction is TradeDirection.A_TO_B:
        given_value = source_amount
    else:
        given_value = mul_div_floor(source_amount, token_b_price, RAY)

    total_value = checked_add(mul_div_floor(swap_token_b_amount, token_b_price, RAY), swap_token_a_amount)
    numerator = checked_mul(pool_supply, given_value)

    if round_direction is RoundDirection.FLOOR:
        pool_tokens = floor_div(numerator, total_value)
    else:
        pool_tokens = ceil_div(numerator, total_value)
    if pool_tokens is None:
        return None
    return narrow(pool_tokens, name="pool_tokens")


class CurveCalculator(ABC):
    """Operation set every curve variant must provide."""

    LEN: ClassVar[int]

    @abstractmethod
    def swap_without_fees(
        self,
        source_amount: Amount,
        swap_source_amount: Amount,
        swap_destination_amount: Amount,
        trade_direction: TradeDirection,
        timestamp: Timestamp,
    ) -> Optional[SwapWithoutFeesResult]:
        """Convert `source_amount` into the other token, ignoring fees."""

    @abstractmethod
    def pool_tokens_to_trading_tokens(
        self,
        pool_tokens: Amount,
        pool_token_supply: Amount,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        round_direction: RoundDirection,
        timestamp: Timestamp,
    ) -> Optional[TradingTokenResult]:
        """Trading tokens backing `pool_tokens` out of `pool_token_supply`."""

    @abstractmethod
    def deposit_single_token_type(
        self,
        source_amount: Amount,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        pool_supply: Amount,
        trade_direction: TradeDirection,
        timestamp: Timestamp,
    ) -> Optional[Amount]:
        """Pool tokens minted for an exact single-sided deposit (floor)."""

    @abstractmethod
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
        """Pool tokens burned for an exact single-sided withdrawal."""

    @abstractmethod
    def normalized_value(
        self,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        timestamp: Timestamp,
    ) -> Amount:
        """Half of the pool's total value expressed in token A."""

    @abstractmethod
    def validate(self, timestamp: Timestamp) -> None:
        """Raise if the curve parameters are unusable at `timestamp`."""

    def validate_supply(self, token_a_amount: Amount, token_b_amount: Amount) -> None:
        """Initial supply check. Priced curves only need the token A side funded."""
        if token_a_amount == 0:
            raise MalformedStateError("empty_supply", token_a_amount)

    @abstractmethod
    def pack(self) -> bytes:
        """Fixed-width binary record of the curve parameters."""

    @classmethod
    @abstractmethod
    def unpack(cls, data: bytes) -> "CurveCalculator":
        """Inverse of `pack()`."""
