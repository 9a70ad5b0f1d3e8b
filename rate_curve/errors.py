"""Exception types for the redemption-rate curve engine.

Every error carries the violated ``rule`` and the offending ``value`` so the
caller can act on it. None of these are transient: callers fix their inputs
(or wait for time to pass) instead of resubmitting the same request.
"""

from __future__ import annotations

from typing import Optional


class RateCurveError(Exception):
    """Base class for all curve-engine errors."""

    def __init__(self, rule: str, value: Optional[int] = None, detail: str = "") -> None:
        self.rule = rule
        self.value = value
        msg = rule if value is None else f"{rule} (value={value})"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class CurveOverflowError(RateCurveError):
    """Raised when an arithmetic step does not fit the widened working width."""


class InvalidTimestampError(RateCurveError):
    """Raised when a checkpoint is in the future, moves backward, or precedes ``rho``."""


class InvalidRateError(RateCurveError):
    """Raised when ``ssr`` (or the index it implies) is outside the allowed range."""


class NonIncreasingIndexError(RateCurveError):
    """Raised when a proposed ``chi`` would erase already-accrued value."""


class MalformedStateError(RateCurveError):
    """Raised when a persisted record fails a structural or invariant check."""


class UnauthorizedUpdateError(RateCurveError):
    """Raised by the authority gate when the caller lacks the needed permission."""


class ConfigError(RateCurveError):
    """Raised when a pool configuration file cannot be turned into a curve."""
