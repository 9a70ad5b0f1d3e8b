"""
Rate update processing (imperative-shell side of the rate model).

The host hands over the pool's current `SwapCurve`, the signer's permission
record, the proposed rates and its own clock reading. Processing is:

1. the curve must be a redemption-rate curve;
2. the authority gate must pass;
3. the validator must accept the proposal;
4. a new `SwapCurve` is returned for the host to store in one write.

Nothing is mutated in place, so a rejected update leaves the stored curve
exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import MalformedStateError
from ..state.units import Ray, Timestamp
from .curve_dispatch import CurveType, SwapCurve
from .permission import (
    Permission,
    require_authority,
    validate_super_admin_permission,
    validate_update_params_permission,
)
from .redemption_rate import RedemptionRateCurve

logger = logging.getLogger(__name__)


def _redemption_rate_calculator(curve: SwapCurve) -> RedemptionRateCurve:
    if curve.curve_type != CurveType.REDEMPTION_RATE or not isinstance(curve.calculator, RedemptionRateCurve):
        raise MalformedStateError("not_redemption_rate_curve", int(curve.curve_type))
    return curve.calculator


def process_rate_update(
    curve: SwapCurve,
    *,
    pool_id: str,
    signer: str,
    permission: Permission,
    ssr: Ray,
    chi: Ray,
    rho: Timestamp,
    now: Timestamp,
) -> SwapCurve:
    """
    Apply a permissioned rate update and return the replacement curve.

    Raises:
        MalformedStateError: the pool does not use a redemption-rate curve.
        UnauthorizedUpdateError: the permission does not allow rate updates.
        InvalidTimestampError, InvalidRateError, NonIncreasingIndexError,
        CurveOverflowError: the validator rejected the proposal.
    """
    calculator = _redemption_rate_calculator(curve)
    require_authority(permission, pool_id=pool_id, signer=signer)
    validate_update_params_permission(permission)

    new_calculator = calculator.set_rates(ssr=ssr, chi=chi, rho=rho, now=now)
    logger.info(
        "pool %s rates updated by %s: ssr=%d chi=%d rho=%d",
        pool_id,
        signer,
        new_calculator.state.ssr,
        new_calculator.state.chi,
        new_calculator.state.rho,
    )
    return curve.with_calculator(new_calculator)


def process_max_ssr_update(
    curve: SwapCurve,
    *,
    pool_id: str,
    signer: str,
    permission: Permission,
    max_ssr: Optional[Ray],
) -> SwapCurve:
    """Administrative path for the `ssr` ceiling; requires super-admin."""
    calculator = _redemption_rate_calculator(curve)
    require_authority(permission, pool_id=pool_id, signer=signer)
    validate_super_admin_permission(permission)

    new_calculator = calculator.with_max_ssr(max_ssr)
    logger.info("pool %s max_ssr set to %s by %s", pool_id, max_ssr, signer)
    return curve.with_calculator(new_calculator)
