"""
State records for the redemption-rate curve engine
"""

from .rate_state import (
    RATE_STATE_LEN,
    RateState,
    check_invariants,
    pack_rate_state,
    require_valid,
    state_from_dict,
    state_to_dict,
    unpack_rate_state,
)
from .units import RAY, SECONDS_PER_YEAR, U128_MAX, U256_MAX

__all__ = [
    "RATE_STATE_LEN",
    "RateState",
    "check_invariants",
    "pack_rate_state",
    "require_valid",
    "state_from_dict",
    "state_to_dict",
    "unpack_rate_state",
    "RAY",
    "SECONDS_PER_YEAR",
    "U128_MAX",
    "U256_MAX",
]
