"""
Redemption-rate curve: a constant-sum curve whose price drifts with a
compounding savings rate.

Token A is the underlying token and token B the yield-bearing wrapper. The
price of one B in A is the index `chi_now(state, timestamp)`, recomputed on
every call from the last checkpoint instead of being refreshed on-chain:

    A_TO_B: out = floor(amount_in * RAY / chi_now)
    B_TO_A: out = floor(amount_in * chi_now / RAY)

The rate parameters live in an immutable `RateState`; `set_rates` and
`with_max_ssr` return a new curve and leave this one untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from ..errors import MalformedStateError
from ..state.rate_state import (
    RATE_STATE_LEN,
    RateState,
    pack_rate_state,
    require_valid,
    unpack_rate_state,
)
from ..state.units import RAY, Amount, Ray, Timestamp
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
from .compounding import chi_now
from .rate_update import RateUpdate, apply_rate_update, update_max_ssr
from .ray_math import checked_mul, mul_div_ceil, mul_div_floor, narrow


@dataclass(frozen=True)
class RedemptionRateCurve(CurveCalculator):
    """Curve calculator priced by the compounded redemption rate."""

    LEN: ClassVar[int] = RATE_STATE_LEN

    state: RateState

    def __post_init__(self) -> None:
        if not isinstance(self.state, RateState):
            raise TypeError("state must be a RateState")
        require_valid(self.state)

    @classmethod
    def from_params(
        cls, *, ssr: Ray, chi: Ray, rho: Timestamp, max_ssr: Optional[Ray] = None
    ) -> "RedemptionRateCurve":
        return cls(RateState(ssr=ssr, chi=chi, rho=rho, max_ssr=max_ssr))

    def conversion_rate(self, timestamp: Timestamp) -> Ray:
        """Token A per token B at `timestamp`, as a ray."""
        return chi_now(self.state, timestamp)

    # -- rate updates -------------------------------------------------------

    def set_rates(self, *, ssr: Ray, chi: Ray, rho: Timestamp, now: Timestamp) -> "RedemptionRateCurve":
        """Validate a proposed rate tuple and return the curve that uses it."""
        new_state = apply_rate_update(
            self.state, RateUpdate(new_ssr=ssr, new_chi=chi, new_rho=rho, observed_now=now)
        )
        return RedemptionRateCurve(new_state)

    def with_max_ssr(self, max_ssr: Optional[Ray]) -> "RedemptionRateCurve":
        return RedemptionRateCurve(update_max_ssr(self.state, max_ssr))

    # -- calculator contract ------------------------------------------------

    def swap_without_fees(
        self,
        source_amount: Amount,
        swap_source_amount: Amount,
        swap_destination_amount: Amount,
        trade_direction: TradeDirection,
        timestamp: Timestamp,
    ) -> Optional[SwapWithoutFeesResult]:
        return swap_at_price(self.conversion_rate(timestamp), source_amount, trade_direction)

    def pool_tokens_to_trading_tokens(
        self,
        pool_tokens: Amount,
        pool_token_supply: Amount,
        swap_token_a_amount: Amount,
        swap_token_b_amount: Amount,
        round_direction: RoundDirection,
        timestamp: Timestamp,
    ) -> Optional[TradingTokenResult]:
        """
        Split the value of `pool_tokens` into token A and token B amounts.

        Each side is worth the pool tokens' share of the normalized value.
        Floor rounding is capped by the reserves; ceiling rounding is not.
        """
        require_amounts(
            pool_tokens=pool_tokens,
            pool_token_supply=pool_token_supply,
            swap_token_a_amount=swap_token_a_amount,
            swap_token_b_amount=swap_token_b_amount,
        )
        if pool_token_supply == 0:
            return None
        price = self.conversion_rate(timestamp)
        total_value = self.normalized_value(swap_token_a_amount, swap_token_b_amount, timestamp)
        share_value = checked_mul(pool_tokens, total_value)

        if round_direction is RoundDirection.FLOOR:
            token_a_amount = min(share_value // pool_token_supply, swap_token_a_amount)
            token_b_amount = min(
                mul_div_floor(share_value, RAY, price) // pool_token_supply,
                swap_token_b_amount,
            )
        else:
            token_a_amount = ceil_div(share_value, pool_token_supply)
            token_b_amount = ceil_div(mul_div_ceil(share_value, RAY, price), pool_token_supply)

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
            self.conversion_rate(timestamp),
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
            self.conversion_rate(timestamp),
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
        return normalized_value_at_price(
            self.conversion_rate(timestamp), swap_token_a_amount, swap_token_b_amount
        )

    def validate(self, timestamp: Timestamp) -> None:
        require_valid(self.state)
        if self.conversion_rate(timestamp) == 0:
            raise MalformedStateError("zero_conversion_rate", 0)

    def pack(self) -> bytes:
        return pack_rate_state(self.state)

    @classmethod
    def unpack(cls, data: bytes) -> "RedemptionRateCurve":
        return cls(unpack_rate_state(data))
