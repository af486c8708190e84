"""
Utility functions.
"""

import numpy as np

from .exceptions import ValidationError, LengthMismatchError, InvalidArgumentError


def check_array(X, name='X', dtype=np.float64):
    """Validate matrix input and return an owned float64 copy."""
    X = np.array(X, dtype=dtype)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if X.ndim != 2:
        raise ValidationError(f"{name} must be 2-dimensional, got {X.ndim} dimensions")
    if not np.all(np.isfinite(X)):
        raise ValidationError(f"{name} contains NaN or Inf")
    return X


def check_vector(y, name='y', dtype=np.float64):
    """Validate vector input and return an owned float64 copy."""
    y = np.array(y, dtype=dtype)
    if y.ndim == 2 and y.shape[1] == 1:
        y = y.ravel()
    if y.ndim != 1:
        raise ValidationError(f"{name} must be 1-dimensional")
    if not np.all(np.isfinite(y)):
        raise ValidationError(f"{name} contains NaN or Inf")
    return y


def check_optional_length(v, n, name):
    """Check that an optional vector has length 0 or n."""
    if len(v) not in (0, n):
        raise LengthMismatchError(
            f"length of {name} is {len(v)}, must be {n} or 0",
            name=name, actual=len(v), expected=(0, n)
        )


def check_level(level):
    """Validate a confidence level in the open interval (0, 1)."""
    if not 0 < level < 1:
        raise InvalidArgumentError(f"level must be in (0, 1), got {level}")
    return float(level)


def format_level(level):
    """Percent label for a confidence level ('95' or '97.5')."""
    pct = level * 100
    return str(int(round(pct))) if np.isclose(pct, round(pct)) else f"{pct:g}"
