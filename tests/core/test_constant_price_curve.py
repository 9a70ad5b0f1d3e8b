"""Tests for rate_curve/core/constant_price.py."""

from __future__ import annotations

import pytest

from rate_curve.core.calculator import RoundDirection, TradeDirection, TradingTokenResult
from rate_curve.core.constant_price import ConstantPriceCurve
from rate_curve.errors import MalformedStateError
from rate_curve.state.units import RAY, U128_MAX


class TestConstantPriceCurve:
    def test_swap_both_directions(self):
        curve = ConstantPriceCurve(token_b_price=4 * RAY)
        a_to_b = curve.swap_without_fees(10, 0, 0, TradeDirection.A_TO_B, 0)
        b_to_a = curve.swap_without_fees(10, 0, 0, TradeDirection.B_TO_A, 0)
        assert a_to_b.destination_amount_swapped == 2
        assert b_to_a.destination_amount_swapped == 40

    def test_price_ignores_timestamp(self):
        curve = ConstantPriceCurve(token_b_price=3 * RAY)
        assert curve.swap_without_fees(9, 0, 0, TradeDirection.A_TO_B, 0) == curve.swap_without_fees(
            9, 0, 0, TradeDirection.A_TO_B, 2**40
        )

    def test_zero_output(self):
        curve = ConstantPriceCurve(token_b_price=4 * RAY)
        assert curve.swap_without_fees(3, 0, 0, TradeDirection.A_TO_B, 0) is None

    def test_pool_tokens_proportional(self):
        curve = ConstantPriceCurve(token_b_price=RAY)
        floor = curve.pool_tokens_to_trading_tokens(1, 3, 100, 200, RoundDirection.FLOOR, 0)
        ceil = curve.pool_tokens_to_trading_tokens(1, 3, 100, 200, RoundDirection.CEILING, 0)
        assert floor == TradingTokenResult(token_a_amount=33, token_b_amount=66)
        assert ceil == TradingTokenResult(token_a_amount=34, token_b_amount=67)
        assert curve.pool_tokens_to_trading_tokens(1, 0, 100, 200, RoundDirection.FLOOR, 0) is None

    def test_deposit_and_withdraw(self):
        curve = ConstantPriceCurve(token_b_price=RAY)
        assert curve.deposit_single_token_type(10, 100, 100, 200, TradeDirection.B_TO_A, 0) == 10
        assert (
            curve.withdraw_single_token_type_exact_out(
                1, 100, 200, 100, TradeDirection.A_TO_B, RoundDirection.CEILING, 0
            )
            == 1
        )

    def test_normalized_value(self):
        assert ConstantPriceCurve(token_b_price=2 * RAY).normalized_value(10, 5, 0) == 10

    def test_negative_amounts_rejected(self):
        curve = ConstantPriceCurve(token_b_price=RAY)
        with pytest.raises(ValueError):
            curve.deposit_single_token_type(-10, 100, 100, 200, TradeDirection.A_TO_B, 0)
        with pytest.raises(ValueError):
            curve.withdraw_single_token_type_exact_out(
                10, 100, 100, -200, TradeDirection.B_TO_A, RoundDirection.CEILING, 0
            )
        with pytest.raises(ValueError):
            curve.pool_tokens_to_trading_tokens(-1, 3, 100, 200, RoundDirection.FLOOR, 0)
        with pytest.raises(ValueError):
            curve.pool_tokens_to_trading_tokens(1, 3, 100, -200, RoundDirection.FLOOR, 0)

    @pytest.mark.parametrize("price", [0, U128_MAX + 1])
    def test_price_range(self, price):
        with pytest.raises(MalformedStateError):
            ConstantPriceCurve(token_b_price=price)

    def test_pack_round_trip(self):
        curve = ConstantPriceCurve(token_b_price=1_123_513 * RAY)
        data = curve.pack()
        assert len(data) == ConstantPriceCurve.LEN
        assert ConstantPriceCurve.unpack(data) == curve

    def test_unpack_wrong_length(self):
        with pytest.raises(MalformedStateError):
            ConstantPriceCurve.unpack(b"\x01" * 15)
