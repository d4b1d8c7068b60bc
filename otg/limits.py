"""
Kinematic limits for the trajectory generators.

Holds per-axis limits for velocity, acceleration and jerk and checks sampled
trajectories against them.
"""

from __future__ import annotations

import numpy as np

from otg.utils.validation import as_limit_vector


class KinematicLimits:
    """
    Per-axis velocity, acceleration and jerk limits.

    Setters validate the whole vector first, so a rejected call leaves the
    previous limits in effect. A jerk of +inf on every axis means jerk
    limiting is disabled.
    """

    def __init__(self, dimension: int, max_velocity=1.0, max_acceleration=1.0, max_jerk=1.0):
        self.dimension = int(dimension)
        self.max_velocity = as_limit_vector(max_velocity, self.dimension, "max velocity")
        self.max_acceleration = as_limit_vector(max_acceleration, self.dimension, "max acceleration")
        self.max_jerk = as_limit_vector(max_jerk, self.dimension, "max jerk")

    def set_max_velocity(self, max_velocity) -> None:
        self.max_velocity[:] = as_limit_vector(max_velocity, self.dimension, "max velocity")

    def set_max_acceleration(self, max_acceleration) -> None:
        self.max_acceleration[:] = as_limit_vector(max_acceleration, self.dimension, "max acceleration")

    def set_max_jerk(self, max_jerk) -> None:
        self.max_jerk[:] = as_limit_vector(max_jerk, self.dimension, "max jerk")

    def disable_jerk(self) -> None:
        self.max_jerk.fill(np.inf)

    @property
    def jerk_limited(self) -> bool:
        return bool(np.all(np.isfinite(self.max_jerk)))

    def as_dict(self) -> dict[str, list[float]]:
        return {
            "max_velocity": self.max_velocity.tolist(),
            "max_acceleration": self.max_acceleration.tolist(),
            "max_jerk": self.max_jerk.tolist(),
        }

    def validate_trajectory(
        self, positions: np.ndarray, dt: float, tolerance: float = 1e-6
    ) -> dict[str, float | bool]:
        """
        Validate that a sampled trajectory respects the limits.

        Args:
            positions: array of shape (N, D) sampled every dt seconds
            dt: sample period
            tolerance: relative slack for discretization error

        Returns:
            Dictionary with validation results
        """
        positions = np.asarray(positions, dtype=float).reshape(-1, self.dimension)
        if positions.shape[0] < 4:
            return {
                "velocity_ok": True,
                "acceleration_ok": True,
                "jerk_ok": True,
                "max_velocity": 0.0,
                "max_acceleration": 0.0,
                "max_jerk": 0.0,
            }

        # Calculate derivatives numerically
        velocities = np.diff(positions, axis=0) / dt
        accelerations = np.diff(velocities, axis=0) / dt
        jerks = np.diff(accelerations, axis=0) / dt

        slack = 1.0 + tolerance
        validation: dict[str, float | bool] = {
            "velocity_ok": bool(np.all(np.abs(velocities) <= self.max_velocity * slack)),
            "acceleration_ok": bool(np.all(np.abs(accelerations) <= self.max_acceleration * slack)),
            "jerk_ok": bool(np.all(np.abs(jerks) <= self.max_jerk * slack)),
            "max_velocity": float(np.max(np.abs(velocities))),
            "max_acceleration": float(np.max(np.abs(accelerations))),
            "max_jerk": float(np.max(np.abs(jerks))),
        }

        return validation
