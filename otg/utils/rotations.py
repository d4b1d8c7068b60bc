"""
Rotation helpers for expressing orientations as rotation vectors relative to a
reference frame.

A rotation vector is the axis-angle vector (axis * angle, radians), i.e. the
log map of SO(3).
"""

from __future__ import annotations

import numpy as np
from scipy.spatial.transform import Rotation
from spatialmath import SO3

from otg.config import ORIENTATION_TOL
from otg.utils.errors import DimensionMismatchError, InvalidOrientationError
from otg.utils.validation import as_float_array


def as_rotation_matrix(orientation: np.ndarray | SO3, name: str = "orientation") -> np.ndarray:
    """
    Validate an orientation and return it as a re-orthonormalized 3x3 array.

    Accepts a 3x3 array-like or a spatialmath SO3.
    """
    R = orientation.R if isinstance(orientation, SO3) else as_float_array(orientation, name)
    if R.shape != (3, 3):
        raise DimensionMismatchError(f"{name} must be a 3x3 rotation matrix, got shape {R.shape}")
    if not np.all(np.isfinite(R)):
        raise InvalidOrientationError(f"{name} contains non-finite values")
    if np.linalg.norm(R.T @ R - np.eye(3)) > ORIENTATION_TOL:
        raise InvalidOrientationError(f"{name} is not orthonormal")
    if abs(np.linalg.det(R) - 1.0) > ORIENTATION_TOL:
        raise InvalidOrientationError(f"{name} is not a proper rotation (det != 1)")
    # Project onto SO(3) to remove accumulated rounding
    return Rotation.from_matrix(R).as_matrix()


def rotation_vector_between(reference: np.ndarray, orientation: np.ndarray) -> np.ndarray:
    """Rotation vector taking `reference` to `orientation`, expressed in the reference basis."""
    return Rotation.from_matrix(reference.T @ orientation).as_rotvec()


def compose_rotation_vector(reference: np.ndarray, rotation_vector: np.ndarray) -> np.ndarray:
    """Inverse of rotation_vector_between: reference @ exp(rotation_vector)."""
    return reference @ Rotation.from_rotvec(rotation_vector).as_matrix()
