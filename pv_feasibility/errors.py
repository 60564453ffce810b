"""
Error taxonomy for the PV feasibility calculators.

All calculators fail fast with one of these exceptions. A numeric zero is
never used as an error signal.
"""

import math
import numbers
from typing import Sequence


class FeasibilityError(Exception):
    """Base class for recoverable calculator failures."""


class ValidationError(FeasibilityError, ValueError):
    """Malformed or out-of-range caller input."""


class ConfigurationError(FeasibilityError, LookupError):
    """Missing coefficient or matrix entry for a requested key."""


class NoViableSizingError(FeasibilityError):
    """Alternate-tariff sizing cannot satisfy the grid surplus ceiling."""


class NoConvergenceError(FeasibilityError):
    """IRR solver could not bracket a root within its declared bounds."""


class ProgrammerError(AssertionError):
    """Violated internal invariant (e.g. wrong array length). Not recoverable."""


def require_finite_non_negative(value: float, name: str) -> float:
    """
    Validate a scalar caller input.

    Args:
        value: Value to check
        name: Parameter name used in the error message

    Returns:
        The value as float

    Raises:
        ValidationError: If value is not a finite, non-negative number
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")

    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {number}")
    if number < 0:
        raise ValidationError(f"{name} must be non-negative, got {number}")
    return number


def require_month(value, name: str = "month") -> int:
    """Month number in 1..12. Any integer type is accepted, bool is not."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or not 1 <= value <= 12:
        raise ValidationError(f"{name} must be an integer in 1..12, got {value!r}")
    return int(value)


def require_length(values: Sequence, expected: int, name: str) -> None:
    """Internal invariant: monthly arrays always hold exactly `expected` entries."""
    if len(values) != expected:
        raise ProgrammerError(
            f"{name}: expected {expected} entries, received {len(values)}"
        )
