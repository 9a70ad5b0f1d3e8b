"""Tests for rate_curve/core/compounding.py: the index recomputed from its checkpoint."""

from __future__ import annotations

import hypothesis.strategies as st
import pytest
from hypothesis import given, settings

from rate_curve.core.compounding import accrue, chi_now
from rate_curve.core.ray_math import rpow
from rate_curve.errors import CurveOverflowError, InvalidTimestampError
from rate_curve.state.rate_state import RateState
from rate_curve.state.units import RAY, SECONDS_PER_YEAR, U128_MAX

FIVE_PCT_APY_SSR = 1_000_000_001_547_125_957_863_212_448
ONE_HUNDRED_PCT_APY_SSR = 1_000_000_021_979_553_151_239_153_020
T0 = 1_700_000_000

# Realistic savings rates grow the index by at least 1e12 ray units per second,
# far above the few units each floor step can lose.
ssrs = st.one_of(st.just(RAY), st.integers(min_value=RAY + 10**12, max_value=ONE_HUNDRED_PCT_APY_SSR))
chis = st.integers(min_value=RAY, max_value=10 * RAY)
elapsed = st.integers(min_value=0, max_value=10 * SECONDS_PER_YEAR)


class TestChiNowAtCheckpoint:
    @given(ssrs, chis, st.integers(min_value=0, max_value=2**40))
    def test_zero_elapsed_returns_chi(self, ssr, chi, rho):
        assert chi_now(RateState(ssr=ssr, chi=chi, rho=rho), rho) == chi

    def test_accrue_zero_elapsed(self):
        assert accrue(RAY, FIVE_PCT_APY_SSR, 0) == RAY

    def test_now_before_rho_rejected(self):
        state = RateState(ssr=FIVE_PCT_APY_SSR, chi=RAY, rho=T0)
        with pytest.raises(InvalidTimestampError) as exc:
            chi_now(state, T0 - 1)
        assert exc.value.rule == "now_before_rho"

    def test_state_untouched(self):
        state = RateState(ssr=FIVE_PCT_APY_SSR, chi=RAY, rho=T0)
        chi_now(state, T0 + SECONDS_PER_YEAR)
        assert state == RateState(ssr=FIVE_PCT_APY_SSR, chi=RAY, rho=T0)


class TestChiNowGrowth:
    def test_matches_formula(self):
        state = RateState(ssr=FIVE_PCT_APY_SSR, chi=RAY + RAY // 3, rho=T0)
        now = T0 + 86_400
        assert chi_now(state, now) == rpow(FIVE_PCT_APY_SSR, 86_400) * (RAY + RAY // 3) // RAY

    def test_flat_rate_keeps_chi(self):
        state = RateState(ssr=RAY, chi=RAY + 12345, rho=T0)
        assert chi_now(state, T0 + 10 * SECONDS_PER_YEAR) == RAY + 12345

    @settings(max_examples=200, deadline=None)
    @given(ssrs, chis, elapsed, elapsed)
    def test_monotonic_in_now(self, ssr, chi, dt1, dt2):
        state = RateState(ssr=ssr, chi=chi, rho=T0)
        t1, t2 = sorted((T0 + dt1, T0 + dt2))
        assert chi_now(state, t1) <= chi_now(state, t2)

    @settings(deadline=None)
    @given(ssrs, chis, elapsed)
    def test_never_below_checkpoint(self, ssr, chi, dt):
        assert chi_now(RateState(ssr=ssr, chi=chi, rho=T0), T0 + dt) >= chi

    def test_five_percent_one_year(self):
        state = RateState(ssr=FIVE_PCT_APY_SSR, chi=RAY, rho=T0)
        value = chi_now(state, T0 + SECONDS_PER_YEAR)
        assert abs(value - RAY * 105 // 100) < RAY // 10**6

    def test_ten_years_without_update(self):
        state = RateState(ssr=FIVE_PCT_APY_SSR, chi=RAY, rho=T0)
        five_years = chi_now(state, T0 + 5 * SECONDS_PER_YEAR)
        ten_years = chi_now(state, T0 + 3650 * 86_400)
        assert five_years < ten_years
        # 1.05 ** 10 = 1.628894626777...
        assert abs(ten_years - 1_628_894_626_777_441_406_250_000_000) < RAY // 10**5

    def test_compounded_index_wider_than_working_width(self):
        state = RateState(ssr=U128_MAX, chi=U128_MAX, rho=0)
        with pytest.raises(CurveOverflowError):
            chi_now(state, 3)
