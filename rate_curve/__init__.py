"""
Redemption-rate curve engine.

Prices swaps, single-sided deposits and withdrawals between a yield-bearing
wrapper token and its underlying token using a compounding savings rate that
is mirrored from a remote accrual protocol.
"""

from .errors import (
    ConfigError,
    CurveOverflowError,
    InvalidRateError,
    InvalidTimestampError,
    MalformedStateError,
    NonIncreasingIndexError,
    RateCurveError,
    UnauthorizedUpdateError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "CurveOverflowError",
    "InvalidRateError",
    "InvalidTimestampError",
    "MalformedStateError",
    "NonIncreasingIndexError",
    "RateCurveError",
    "UnauthorizedUpdateError",
]
