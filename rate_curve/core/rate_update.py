"""Rate update validation.

``validate_rate_update(state, update)`` decides whether a proposed
``(new_ssr, new_chi, new_rho)`` may replace the current ``RateState``. It is
all-or-nothing: either the result carries a brand new state, or it carries the
first violated rule and the caller keeps the old state untouched.

Rules, checked in order:

1. ``new_rho <= observed_now``                 (no future checkpoints)
2. ``new_rho >= state.rho``                    (checkpoints never move back)
3. ``new_ssr >= RAY``                          (no negative accrual)
4. ``new_ssr <= state.max_ssr`` when set
5. ``new_chi >= chi_now(state, new_rho)``      (accrued value is never erased)
6. ``new_chi <= rpow(max_ssr, new_rho - rho) * chi / RAY`` when ``max_ssr`` is set
7. new fields fit the persisted width

The validator is authority-agnostic; ``processor.py`` runs the permission gate
before calling it. ``max_ssr`` only changes through ``update_max_ssr``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from ..errors import (
    CurveOverflowError,
    InvalidRateError,
    InvalidTimestampError,
    NonIncreasingIndexError,
    RateCurveError,
)
from ..state.rate_state import RateState
from ..state.units import RAY, U128_MAX, Ray, Timestamp
from .compounding import accrue, chi_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateUpdate:
    """A proposed rate tuple plus the timestamp the host observed."""

    new_ssr: Ray
    new_chi: Ray
    new_rho: Timestamp
    observed_now: Timestamp

    def __post_init__(self) -> None:
        for name in ("new_ssr", "new_chi", "new_rho", "observed_now"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int")
            if value < 0:
                raise ValueError(f"{name} must be non-negative: {value}")


@dataclass(frozen=True)
class RateUpdateResult:
    """Result of a single validation attempt."""

    accepted: bool
    state: Optional[RateState] = None
    rejection: Optional[str] = None
    error: Optional[RateCurveError] = None


def _check(state: RateState, update: RateUpdate) -> Optional[RateCurveError]:
    """Return the first violated rule as an error, or None."""
    if update.new_rho > update.observed_now:
        return InvalidTimestampError("rho_in_future", update.new_rho, f"now={update.observed_now}")
    if update.new_rho < state.rho:
        return InvalidTimestampError("rho_backward", update.new_rho, f"rho={state.rho}")
    if update.new_ssr < RAY:
        return InvalidRateError("ssr_below_floor", update.new_ssr)
    if state.max_ssr is not None and update.new_ssr > state.max_ssr:
        return InvalidRateError("ssr_above_ceiling", update.new_ssr, f"max_ssr={state.max_ssr}")

    try:
        accrued = chi_now(state, update.new_rho)
        if update.new_chi < accrued:
            return NonIncreasingIndexError("chi_below_accrued", update.new_chi, f"accrued={accrued}")
        if state.max_ssr is not None:
            chi_max = accrue(state.chi, state.max_ssr, update.new_rho - state.rho)
            if update.new_chi > chi_max:
                return InvalidRateError("chi_above_ceiling", update.new_chi, f"chi_max={chi_max}")
    except CurveOverflowError as exc:
        return exc

    for name in ("new_ssr", "new_chi", "new_rho"):
        value = getattr(update, name)
        if value > U128_MAX:
            return CurveOverflowError(f"{name}_exceeds_u128", value)
    return None


def validate_rate_update(state: RateState, update: RateUpdate) -> RateUpdateResult:
    """
    Validate `update` against `state`.

    Returns ``RateUpdateResult`` with ``accepted=True`` and the replacement
    state on success, or ``accepted=False`` with the violated rule.
    """
    err = _check(state, update)
    if err is not None:
        logger.debug("rate update rejected: %s", err)
        return RateUpdateResult(accepted=False, rejection=err.rule, error=err)

    new_state = RateState(
        ssr=update.new_ssr,
        chi=update.new_chi,
        rho=update.new_rho,
        max_ssr=state.max_ssr,
    )
    logger.debug(
        "rate update accepted: ssr=%d chi=%d rho=%d", new_state.ssr, new_state.chi, new_state.rho
    )
    return RateUpdateResult(accepted=True, state=new_state)


def apply_rate_update(state: RateState, update: RateUpdate) -> RateState:
    """Like ``validate_rate_update()`` but returns the new state or raises.

    Raises:
        InvalidTimestampError: rule 1 or 2.
        InvalidRateError: rule 3, 4 or 6.
        NonIncreasingIndexError: rule 5.
        CurveOverflowError: compounding or a new field exceeds its width.
    """
    result = validate_rate_update(state, update)
    if result.error is not None:
        raise result.error
    return result.state  # type: ignore[return-value]


def update_max_ssr(state: RateState, new_max_ssr: Optional[Ray]) -> RateState:
    """
    Administrative path: replace (or clear) the `ssr` ceiling.

    A ceiling below RAY, below the current `ssr`, or wider than 128 bits is
    rejected with InvalidRateError.
    """
    if new_max_ssr is not None:
        if not isinstance(new_max_ssr, int) or isinstance(new_max_ssr, bool):
            raise TypeError("new_max_ssr must be an int or None")
        if new_max_ssr < RAY or new_max_ssr > U128_MAX:
            raise InvalidRateError("max_ssr_range", new_max_ssr)
        if new_max_ssr < state.ssr:
            raise InvalidRateError("max_ssr_below_ssr", new_max_ssr, f"ssr={state.ssr}")
    logger.debug("max_ssr changed: %s -> %s", state.max_ssr, new_max_ssr)
    return replace(state, max_ssr=new_max_ssr)
