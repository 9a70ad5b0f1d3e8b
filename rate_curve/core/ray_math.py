"""
Fixed-point ray arithmetic.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Binary Exponentiation
- Rounding: every ray-by-ray product is floored (`//`) after the division by
  the unit, matching the remote accrual protocol the rate is mirrored from.
- Widths: Python ints never wrap, so each product is checked against the
  256-bit working width and each persisted result against 128 bits. Anything
  that does not fit raises CurveOverflowError; nothing saturates.
"""

from __future__ import annotations

from ..errors import CurveOverflowError
from ..state.units import RAY, U128_MAX, U256_MAX, Ray


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_nonneg(name: str, value: int) -> None:
    _require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


def checked_mul(a: int, b: int) -> int:
    """Product of two non-negative ints within the 256-bit working width."""
    product = a * b
    if product > U256_MAX:
        raise CurveOverflowError("mul_overflow", product.bit_length(), "product exceeds 256 bits")
    return product


def checked_add(a: int, b: int) -> int:
    total = a + b
    if total > U256_MAX:
        raise CurveOverflowError("add_overflow", total.bit_length(), "sum exceeds 256 bits")
    return total


def mul_div_floor(a: int, b: int, denominator: int) -> int:
    """
    Compute `floor(a * b / denominator)` with a widened, overflow-checked product.
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive: {denominator}")
    return checked_mul(a, b) // denominator


def mul_div_ceil(a: int, b: int, denominator: int) -> int:
    """
    Compute `ceil(a * b / denominator)` with a widened, overflow-checked product.
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive: {denominator}")
    return -(-checked_mul(a, b) // denominator)


def narrow(value: int, *, name: str = "value") -> int:
    """Narrow a working-width result to the persisted 128-bit width."""
    if value > U128_MAX:
        raise CurveOverflowError(f"{name}_exceeds_u128", value)
    return value


def rpow(base: Ray, exponent: int, unit: int = RAY) -> Ray:
    """
    Raise the ray `base` to an integer power, returning a ray.

    Computes `floor(base_real ** exponent * unit)` without ever leaving integer
    arithmetic:
        rpow(x, 0) == unit        (including x == 0)
        rpow(0, n) == 0           for n > 0

    Each squaring and each accumulation step is `floor(a * b / unit)`.

    Raises:
        CurveOverflowError: an intermediate product exceeds the working width.
        ValueError: a negative argument or non-positive unit.
    """
    _require_nonneg("base", base)
    _require_nonneg("exponent", exponent)
    _require_int("unit", unit)
    if unit <= 0:
        raise ValueError(f"unit must be positive: {unit}")

    if base == 0:
        return unit if exponent == 0 else 0

    z = base if exponent % 2 else unit
    x = base
    n = exponent // 2
    while n > 0:
        x = mul_div_floor(x, x, unit)
        if n % 2:
            z = mul_div_floor(z, x, unit)
        n //= 2
    return z
