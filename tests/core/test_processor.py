"""Tests for rate_curve/core/processor.py and the permission gate in front of it."""

from __future__ import annotations

import logging

import pytest

from rate_curve.core.compounding import chi_now
from rate_curve.core.constant_price import ConstantPriceCurve
from rate_curve.core.curve_dispatch import SwapCurve
from rate_curve.core.permission import Permission
from rate_curve.core.processor import process_max_ssr_update, process_rate_update
from rate_curve.core.redemption_rate import RedemptionRateCurve
from rate_curve.errors import (
    InvalidRateError,
    InvalidTimestampError,
    MalformedStateError,
    UnauthorizedUpdateError,
)
from rate_curve.state.units import RAY, SECONDS_PER_YEAR

FIVE_PCT_APY_SSR = 1_000_000_001_547_125_957_863_212_448
ONE_HUNDRED_PCT_APY_SSR = 1_000_000_021_979_553_151_239_153_020
T0 = 1_700_000_000
NOW = T0 + SECONDS_PER_YEAR
POOL = "susds-usds"
RELAYER = "relayer-1"


def rate_curve() -> SwapCurve:
    return SwapCurve.redemption_rate(RedemptionRateCurve.from_params(ssr=FIVE_PCT_APY_SSR, chi=RAY, rho=T0))


def updater(**kw) -> Permission:
    base = dict(pool_id=POOL, authority=RELAYER, can_update_parameters=True)
    base.update(kw)
    return Permission(**base)


def accrued_update(curve: SwapCurve, **kw) -> dict:
    base = dict(ssr=FIVE_PCT_APY_SSR, chi=chi_now(curve.calculator.state, NOW), rho=NOW, now=NOW)
    base.update(kw)
    return base


class TestProcessRateUpdate:
    def test_accepted(self, caplog):
        curve = rate_curve()
        with caplog.at_level(logging.INFO, logger="rate_curve.core.processor"):
            updated = process_rate_update(
                curve, pool_id=POOL, signer=RELAYER, permission=updater(), **accrued_update(curve)
            )
        assert updated.calculator.state.rho == NOW
        assert updated.curve_type == curve.curve_type
        assert curve.calculator.state.rho == T0
        assert "rates updated" in caplog.text

    def test_missing_update_permission(self):
        curve = rate_curve()
        with pytest.raises(UnauthorizedUpdateError) as exc:
            process_rate_update(
                curve,
                pool_id=POOL,
                signer=RELAYER,
                permission=updater(can_update_parameters=False),
                **accrued_update(curve),
            )
        assert exc.value.rule == "missing_update_parameters_permission"

    def test_wrong_pool(self):
        curve = rate_curve()
        with pytest.raises(UnauthorizedUpdateError) as exc:
            process_rate_update(
                curve, pool_id=POOL, signer=RELAYER, permission=updater(pool_id="other"), **accrued_update(curve)
            )
        assert exc.value.rule == "permission_pool_mismatch"

    def test_wrong_signer(self):
        curve = rate_curve()
        with pytest.raises(UnauthorizedUpdateError) as exc:
            process_rate_update(curve, pool_id=POOL, signer="mallory", permission=updater(), **accrued_update(curve))
        assert exc.value.rule == "permission_authority_mismatch"

    def test_gate_runs_before_validator(self):
        curve = rate_curve()
        with pytest.raises(UnauthorizedUpdateError):
            process_rate_update(
                curve,
                pool_id=POOL,
                signer=RELAYER,
                permission=updater(can_update_parameters=False),
                **accrued_update(curve, ssr=RAY - 1),
            )

    def test_validator_rejection_propagates(self):
        curve = rate_curve()
        with pytest.raises(InvalidTimestampError):
            process_rate_update(
                curve, pool_id=POOL, signer=RELAYER, permission=updater(), **accrued_update(curve, rho=NOW + 1)
            )

    def test_constant_price_pool(self):
        curve = SwapCurve.constant_price(ConstantPriceCurve(token_b_price=RAY))
        with pytest.raises(MalformedStateError):
            process_rate_update(
                curve, pool_id=POOL, signer=RELAYER, permission=updater(), ssr=RAY, chi=RAY, rho=NOW, now=NOW
            )


class TestProcessMaxSsrUpdate:
    def test_super_admin(self):
        curve = rate_curve()
        admin = updater(is_super_admin=True, can_update_parameters=False)
        updated = process_max_ssr_update(
            curve, pool_id=POOL, signer=RELAYER, permission=admin, max_ssr=ONE_HUNDRED_PCT_APY_SSR
        )
        assert updated.calculator.state.max_ssr == ONE_HUNDRED_PCT_APY_SSR

    def test_updater_is_not_admin(self):
        with pytest.raises(UnauthorizedUpdateError) as exc:
            process_max_ssr_update(
                rate_curve(), pool_id=POOL, signer=RELAYER, permission=updater(), max_ssr=ONE_HUNDRED_PCT_APY_SSR
            )
        assert exc.value.rule == "missing_super_admin_permission"

    def test_ceiling_below_ssr(self):
        admin = updater(is_super_admin=True)
        with pytest.raises(InvalidRateError):
            process_max_ssr_update(rate_curve(), pool_id=POOL, signer=RELAYER, permission=admin, max_ssr=RAY)
