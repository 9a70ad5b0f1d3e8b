"""
Constant-price curve: token B always trades at a fixed price set at pool
creation.

`token_b_price` is the amount of token A for one token B, scaled by RAY.
Pricing uses the same conversion helpers as the redemption-rate curve, so the
two variants only differ in where the price comes from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from ..errors import MalformedStateError
from ..state.units import U128_MAX, Amount, Ray, Timestamp
from .calculator import (
    CurveCalculator,
    RoundDirection,
    SwapWithoutFeesResult,
    TradeDirection,
    TradingTokenResult,
    ceil_div,
    normalized_value_at_price,
    require_amounts,
    swap_at_price,
    trading_tokens_to_pool_tokens,
)
from .ray_math import checked_mul, narrow


@dataclass(frozen=True)
class ConstantPriceCurve(CurveCalculator):
    LEN: ClassVar[int] = 16

    token_b_price: Ray

    def __post_init__(self) -> None:
        if not isinstance(self.token_b_price, int) or isinstance(self.token_b_price, bool):
            raise TypeError("token_b_price must be an int")
        if not (0 < self.token_b_price <= U128_MAX):
            raise MalformedStateError("token_b_price_range", self.token_b_price)

    def swap_without_fees(
        self,
        source_amount: Amount,
        swap_source_amount: Amount,
        swap_destination_amount: Amount,
        trade_direction: TradeDirection,
        timestamp: Timestamp,
    ) -> Optional[SwapWithoutFeesResult]:
        return swap_at_price(self.token_b_price, source_amount, trade_direction)

    def pool_tokens_to_trading_tokens(
        self,
        pool_tokens: Amount,
        pool_token_supply: Amount,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        round_direction: RoundDirection,
        timestamp: Timestamp,
    ) -> Optional[TradingTokenResult]:
        """Proportional share of each reserve."""
        require_amounts(
            pool_tokens=pool_tokens,
            pool_token_supply=pool_token_supply,
            swap_token_a_amount=swap_token_a_amount,
            swap_token_b_amount=swap_token_b_amount,
        )
        if pool_token_supply == 0:
            return None
        a_share = checked_mul(pool_tokens, swap_token_a_amount)
        b_share = checked_mul(pool_tokens, swap_token_b_amount)
        if round_direction is RoundDirection.FLOOR:
            token_a_amount = a_share // pool_token_supply
            token_b_amount = b_share // pool_token_supply
        else:
            token_a_amount = ceil_div(a_share, pool_token_supply)
            token_b_amount = ceil_div(b_share, pool_token_supply)
        return TradingTokenResult(
            token_a_amount=narrow(token_a_amount, name="token_a_amount"),
            token_b_amount=narrow(token_b_amount, name="token_b_amount"),
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
        return trading_tokens_to_pool_tokens(
            self.token_b_price,
            source_amount,
            swap_token_a_amount,
            swap_token_b_amount,
            pool_supply,
            trade_direction,
            RoundDirection.FLOOR,
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
        return trading_tokens_to_pool_tokens(
            self.token_b_price,
            source_amount,
            swap_token_a_amount,
            swap_token_b_amount,
            pool_supply,
            trade_direction,
            round_direction,
        )

    def normalized_value(
        self,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        timestamp: Timestamp,
    ) -> Amount:
        return normalized_value_at_price(self.token_b_price, swap_token_a_amount, swap_token_b_amount)

    def validate(self, timestamp: Timestamp) -> None:
        if self.token_b_price == 0:
            raise MalformedStateError("zero_token_b_price", 0)

    def pack(self) -> bytes:
        return self.token_b_price.to_bytes(self.LEN, "little")

    @classmethod
    def unpack(cls, data: bytes) -> "ConstantPriceCurve":
        data = bytes(data)
        if len(data) != cls.LEN:
            raise MalformedStateError("record_length", len(data), f"expected {cls.LEN} bytes")
        return cls(token_b_price=int.from_bytes(data, "little"))
