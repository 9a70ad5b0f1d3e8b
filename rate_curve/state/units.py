"""
Units and integer widths shared by the state and core layers.

Rays are plain ints scaled by RAY. Persisted fields are unsigned 128-bit;
intermediate products are allowed to use the widened 256-bit working width.
"""

# Type aliases
Ray = int  # Real number scaled by RAY
Amount = int  # Non-negative token amount in the token's smallest unit
Timestamp = int  # Unix seconds

RAY: Ray = 10**27

U128_MAX = 2**128 - 1
U256_MAX = 2**256 - 1

SECONDS_PER_YEAR = 365 * 24 * 60 * 60


def parse_int(name: str, value: object) -> int:
    """Accept an int or a decimal string (27-digit rays survive YAML/JSON tooling)."""
    if isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got bool")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        digits = value.strip().replace("_", "")
        if digits.isascii() and digits.isdigit():
            return int(digits)
    raise TypeError(f"{name} must be an int or decimal string, got {type(value).__name__}")
