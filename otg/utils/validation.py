"""
Argument coercion shared by the generators.

Every helper validates before returning so callers can check all arguments
first and mutate afterwards.
"""

import math
from collections.abc import Sequence

import numpy as np

from otg.config import GOAL_EQUALITY_ATOL, GOAL_EQUALITY_RTOL
from otg.utils.errors import DimensionMismatchError, InvalidCycleDurationError, InvalidLimitError


def as_float_array(value, name: str) -> np.ndarray:
    """Float copy of an array-like; ragged nesting raises DimensionMismatchError."""
    try:
        return np.array(value, dtype=float)
    except ValueError as e:
        raise DimensionMismatchError(f"{name} is not a regular array: {e}") from e


def as_vector(value: Sequence[float] | np.ndarray, dimension: int, name: str) -> np.ndarray:
    """Return a float copy of value, raising DimensionMismatchError unless it has `dimension` entries."""
    arr = as_float_array(value, name)
    if arr.ndim > 1 or arr.reshape(-1).shape[0] != dimension:
        raise DimensionMismatchError(
            f"{name} must have {dimension} components, got shape {arr.shape}",
            expected=dimension,
            actual=None if arr.ndim > 1 else int(arr.size),
        )
    return arr.reshape(-1)


def as_limit_vector(value: float | Sequence[float] | np.ndarray, dimension: int, name: str) -> np.ndarray:
    """
    Coerce a limit argument to a strictly positive vector.

    A scalar is broadcast to all components.
    """
    arr = as_float_array(value, name)
    if arr.ndim == 0:
        arr = np.full(dimension, float(arr))
    else:
        arr = as_vector(arr, dimension, name)
    # NaN fails this comparison as well
    if not np.all(arr > 0.0):
        raise InvalidLimitError(f"{name} cannot be 0 or negative in any direction, got {arr.tolist()}")
    return arr


def check_cycle_duration(cycle_duration: float) -> float:
    cycle = float(cycle_duration)
    if not math.isfinite(cycle) or cycle <= 0.0:
        raise InvalidCycleDurationError(f"cycle duration must be positive and finite, got {cycle_duration}")
    return cycle


def is_approx(a: np.ndarray, b: np.ndarray) -> bool:
    """Relative closeness of two vectors, with an absolute floor for near-zero vectors."""
    diff = float(np.linalg.norm(a - b))
    scale = min(float(np.linalg.norm(a)), float(np.linalg.norm(b)))
    return diff <= max(GOAL_EQUALITY_RTOL * scale, GOAL_EQUALITY_ATOL)
