"""
Rate state for a redemption-rate pool.

`RateState` is the persisted `(ssr, chi, rho, max_ssr)` tuple. It is a frozen
dataclass: a successful update builds a new instance and the owner swaps the
whole record, so a half-applied update cannot exist.

Persisted layout (little-endian, fixed width, stable across versions):

    offset  size  field
    0       16    ssr             u128
    16      16    chi             u128
    32      16    rho             u128
    48      1     max_ssr_present u8 (0 or 1)
    49      16    max_ssr         u128 (all zero when absent)

Round-trip property (tested): `unpack_rate_state(pack_rate_state(s)) == s`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from ..errors import InvalidRateError, MalformedStateError
from .units import RAY, U128_MAX, Ray, Timestamp, parse_int


RATE_STATE_LEN = 65

_U128_LEN = 16
_SSR_OFFSET = 0
_CHI_OFFSET = 16
_RHO_OFFSET = 32
_FLAG_OFFSET = 48
_MAX_SSR_OFFSET = 49


@dataclass(frozen=True)
class RateState:
    """
    Redemption-rate parameters of one pool.

    Attributes:
        ssr: Per-second compounding rate (ray, >= RAY)
        chi: Accumulated index at checkpoint `rho` (ray, > 0)
        rho: Checkpoint timestamp in seconds
        max_ssr: Optional ceiling on `ssr` (ray); None disables the ceiling
    """

    ssr: Ray
    chi: Ray
    rho: Timestamp
    max_ssr: Optional[Ray] = None

    def __post_init__(self) -> None:
        for name in ("ssr", "chi", "rho"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int")
        if self.max_ssr is not None and (not isinstance(self.max_ssr, int) or isinstance(self.max_ssr, bool)):
            raise TypeError("max_ssr must be an int or None")


def check_invariants(state: RateState) -> List[str]:
    """
    Return the names of every invariant `state` violates (empty when valid).
    """
    violations: List[str] = []
    if not (RAY <= state.ssr <= U128_MAX):
        violations.append("ssr_range")
    if not (0 < state.chi <= U128_MAX):
        violations.append("chi_range")
    if not (0 <= state.rho <= U128_MAX):
        violations.append("rho_range")
    if state.max_ssr is not None:
        if not (RAY <= state.max_ssr <= U128_MAX):
            violations.append("max_ssr_range")
        elif state.ssr > state.max_ssr:
            violations.append("ssr_above_max_ssr")
    return violations


_RATE_VIOLATIONS = frozenset({"ssr_range", "ssr_above_max_ssr", "max_ssr_range"})


def require_valid(state: RateState) -> None:
    """
    Raise on the first invariant violation.

    Rate-domain violations raise InvalidRateError, structural ones
    MalformedStateError.
    """
    violations = check_invariants(state)
    if not violations:
        return
    first = violations[0]
    if first in _RATE_VIOLATIONS:
        raise InvalidRateError(first, state.ssr, ",".join(violations))
    raise MalformedStateError(first, None, ",".join(violations))


def pack_rate_state(state: RateState) -> bytes:
    """Serialize a valid RateState into its fixed-width record."""
    require_valid(state)
    present = state.max_ssr is not None
    return b"".join(
        (
            state.ssr.to_bytes(_U128_LEN, "little"),
            state.chi.to_bytes(_U128_LEN, "little"),
            state.rho.to_bytes(_U128_LEN, "little"),
            bytes([1 if present else 0]),
            (state.max_ssr if present else 0).to_bytes(_U128_LEN, "little"),
        )
    )


def _u128_at(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + _U128_LEN], "little")


def unpack_rate_state(data: bytes) -> RateState:
    """
    Deserialize a fixed-width record. Any structural or invariant failure
    raises MalformedStateError.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("data must be bytes-like")
    data = bytes(data)
    if len(data) != RATE_STATE_LEN:
        raise MalformedStateError("record_length", len(data), f"expected {RATE_STATE_LEN} bytes")

    flag = data[_FLAG_OFFSET]
    max_ssr_raw = _u128_at(data, _MAX_SSR_OFFSET)
    if flag == 0:
        if max_ssr_raw != 0:
            raise MalformedStateError("max_ssr_without_flag", max_ssr_raw)
        max_ssr: Optional[int] = None
    elif flag == 1:
        max_ssr = max_ssr_raw
    else:
        raise MalformedStateError("max_ssr_flag", flag)

    state = RateState(
        ssr=_u128_at(data, _SSR_OFFSET),
        chi=_u128_at(data, _CHI_OFFSET),
        rho=_u128_at(data, _RHO_OFFSET),
        max_ssr=max_ssr,
    )
    violations = check_invariants(state)
    if violations:
        raise MalformedStateError(violations[0], None, ",".join(violations))
    return state


def state_to_dict(state: RateState) -> dict[str, Optional[int]]:
    """Serialize a RateState to a plain dict (used by config and CLI output)."""
    return {
        "ssr": state.ssr,
        "chi": state.chi,
        "rho": state.rho,
        "max_ssr": state.max_ssr,
    }


def state_from_dict(d: Mapping[str, Any]) -> RateState:
    """Deserialize a dict to a RateState. Raises KeyError on missing fields."""
    max_ssr_raw = d.get("max_ssr")
    return RateState(
        ssr=parse_int("ssr", d["ssr"]),
        chi=parse_int("chi", d["chi"]),
        rho=parse_int("rho", d["rho"]),
        max_ssr=None if max_ssr_raw is None else parse_int("max_ssr", max_ssr_raw),
    )
