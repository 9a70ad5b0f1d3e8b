"""
Compounding accessor for the redemption-rate index.

The index is never refreshed on-chain between updates; every pricing call
recomputes it from the last checkpoint:

    chi_now = floor(rpow(ssr, now - rho) * chi / RAY)

The elapsed time may be zero or span years; the only limit is the working
width of `rpow`.
"""

from __future__ import annotations

from ..errors import InvalidTimestampError
from ..state.rate_state import RateState
from ..state.units import RAY, Ray, Timestamp
from .ray_math import mul_div_floor, rpow


def accrue(chi: Ray, ssr: Ray, elapsed: int) -> Ray:
    """Compound `chi` at `ssr` per second for `elapsed` seconds (floor)."""
    if elapsed == 0:
        return chi
    return mul_div_floor(rpow(ssr, elapsed, RAY), chi, RAY)


def chi_now(state: RateState, now: Timestamp) -> Ray:
    """
    Return the index that applies at `now` without touching `state`.

    `now == state.rho` returns `state.chi` exactly.

    Raises:
        InvalidTimestampError: `now < state.rho` (the checkpoint is in the
            caller's future, which the update validator never allows).
        CurveOverflowError: the compounded index exceeds the working width.
    """
    if now < state.rho:
        raise InvalidTimestampError("now_before_rho", now, f"rho={state.rho}")
    return accrue(state.chi, state.ssr, now - state.rho)
