"""
Cartesian-space online trajectory generation for a 6-DOF pose.

The solver works on a flat 6D vector [x, y, z, rx, ry, rz]:
- Position: [x, y, z] in the base frame
- Orientation: [rx, ry, rz] rotation vector (axis * angle, radians) relative
  to a reference frame

The reference frame is re-anchored on the current orientation every time a
new orientation goal is set, so the rotation vector stays a small offset and
the solver never has to handle SO(3) directly. Angular velocity and
acceleration are reported in the base frame.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from spatialmath import SE3, SO3

from otg.config import (
    DEFAULT_ANGULAR_MAX_ACCELERATION,
    DEFAULT_ANGULAR_MAX_JERK,
    DEFAULT_ANGULAR_MAX_VELOCITY,
    DEFAULT_LINEAR_MAX_ACCELERATION,
    DEFAULT_LINEAR_MAX_JERK,
    DEFAULT_LINEAR_MAX_VELOCITY,
    GOAL_REACHED_VELOCITY_TOL,
    INTERVAL_S,
)
from otg.joint_space import SessionFactory
from otg.limits import KinematicLimits
from otg.solver import SolverStatus, SynchronizationMode, create_session
from otg.types import GeneratorState, KinematicState
from otg.utils.errors import SolverError
from otg.utils.rotations import (
    as_rotation_matrix,
    compose_rotation_vector,
    rotation_vector_between,
)
from otg.utils.validation import as_limit_vector, as_vector, check_cycle_duration, is_approx

logger = logging.getLogger(__name__)

Vector3 = float | Sequence[float] | np.ndarray

LINEAR = slice(0, 3)
ANGULAR = slice(3, 6)


class CartesianSpaceGenerator:
    """
    Online trajectory generator for end-effector position and orientation.

    Not thread-safe: one owner calls the setters and update().
    """

    def __init__(
        self,
        initial_position: Sequence[float] | np.ndarray,
        initial_orientation: np.ndarray | SO3,
        cycle_duration: float = INTERVAL_S,
        *,
        session_factory: SessionFactory = create_session,
    ):
        """
        Args:
            initial_position: initial end-effector position (3,)
            initial_orientation: initial orientation, 3x3 rotation matrix or SO3
            cycle_duration: duration of one control cycle in seconds
            session_factory: builds the 6-DOF solver session
        """
        self._cycle_duration = check_cycle_duration(cycle_duration)
        self._limits = KinematicLimits(
            6,
            np.r_[[DEFAULT_LINEAR_MAX_VELOCITY] * 3, [DEFAULT_ANGULAR_MAX_VELOCITY] * 3],
            np.r_[[DEFAULT_LINEAR_MAX_ACCELERATION] * 3, [DEFAULT_ANGULAR_MAX_ACCELERATION] * 3],
            np.r_[[DEFAULT_LINEAR_MAX_JERK] * 3, [DEFAULT_ANGULAR_MAX_JERK] * 3],
        )
        self._session = session_factory(6, self._cycle_duration, SynchronizationMode.PHASE)
        self._session.input.max_velocity = self._limits.max_velocity
        self._session.input.max_acceleration = self._limits.max_acceleration
        self._session.input.max_jerk = self._limits.max_jerk

        self._reference_frame = np.eye(3)
        # Last orientation goal in the base frame, used to ignore repeated goals
        self._goal_orientation = np.eye(3)
        self._goal_angular_velocity = np.zeros(3)

        self._goal_reached = False
        self._state = GeneratorState.INITIALIZED
        self.reinitialize(initial_position, initial_orientation)

    # ----- lifecycle -----

    def _ensure_operational(self) -> None:
        if self._state is GeneratorState.FATAL:
            raise SolverError(
                "generator is in a fatal state after a solver error; construct a new one",
                result=self._session.last_result,
            )

    def reinitialize(
        self,
        initial_position: Sequence[float] | np.ndarray,
        initial_orientation: np.ndarray | SO3,
    ) -> None:
        """Reset to rest at the given pose and make it the (reached) goal."""
        self._ensure_operational()
        position = as_vector(initial_position, 3, "initial position")
        orientation = as_rotation_matrix(initial_orientation, "initial orientation")

        self._reference_frame = orientation
        self._goal_orientation = orientation.copy()
        self._goal_angular_velocity = np.zeros(3)

        output = self._session.output
        output.position[LINEAR] = position
        output.position[ANGULAR] = 0.0
        output.velocity.fill(0.0)
        output.acceleration.fill(0.0)
        self._session.chain_output_as_next_input()

        inp = self._session.input
        inp.target_position[:] = output.position
        inp.target_velocity.fill(0.0)
        self._goal_reached = True
        self._state = GeneratorState.INITIALIZED
        logger.debug(f"Cartesian OTG reinitialized at {position.tolist()}")

    # ----- limits -----

    def _set_limit_half(self, limit: np.ndarray, half: slice, value: Vector3, name: str) -> None:
        self._ensure_operational()
        limit[half] = as_limit_vector(value, 3, name)
        logger.debug(f"Cartesian OTG {name} set to {limit[half].tolist()}")

    def set_max_linear_velocity(self, max_linear_velocity: Vector3) -> None:
        self._set_limit_half(self._limits.max_velocity, LINEAR, max_linear_velocity, "max linear velocity")

    def set_max_linear_acceleration(self, max_linear_acceleration: Vector3) -> None:
        self._set_limit_half(
            self._limits.max_acceleration, LINEAR, max_linear_acceleration, "max linear acceleration"
        )

    def set_max_angular_velocity(self, max_angular_velocity: Vector3) -> None:
        self._set_limit_half(self._limits.max_velocity, ANGULAR, max_angular_velocity, "max angular velocity")

    def set_max_angular_acceleration(self, max_angular_acceleration: Vector3) -> None:
        self._set_limit_half(
            self._limits.max_acceleration, ANGULAR, max_angular_acceleration, "max angular acceleration"
        )

    def set_max_jerk(self, max_linear_jerk: Vector3, max_angular_jerk: Vector3) -> None:
        """Set linear and angular jerk limits. Re-enables jerk limits after disable_jerk_limits()."""
        self._ensure_operational()
        linear = as_limit_vector(max_linear_jerk, 3, "max linear jerk")
        angular = as_limit_vector(max_angular_jerk, 3, "max angular jerk")
        self._limits.set_max_jerk(np.concatenate([linear, angular]))
        logger.debug(f"Cartesian OTG max jerk set to {self._limits.max_jerk.tolist()}")

    def disable_jerk_limits(self) -> None:
        """Use infinite jerk on all 6 axes; the current acceleration is reset to zero."""
        self._ensure_operational()
        self._limits.disable_jerk()
        self._session.input.current_acceleration.fill(0.0)
        self._session.output.acceleration.fill(0.0)
        logger.debug("Cartesian OTG jerk limits disabled")

    # ----- goals -----

    def set_goal_position_and_linear_velocity(
        self,
        goal_position: Sequence[float] | np.ndarray,
        goal_linear_velocity: Sequence[float] | np.ndarray,
    ) -> None:
        """Set the linear half of the goal. A goal equal to the current target is ignored."""
        self._ensure_operational()
        position = as_vector(goal_position, 3, "goal position")
        velocity = as_vector(goal_linear_velocity, 3, "goal linear velocity")

        inp = self._session.input
        if is_approx(position, inp.target_position[LINEAR]) and is_approx(velocity, inp.target_velocity[LINEAR]):
            return

        inp.target_position[LINEAR] = position
        inp.target_velocity[LINEAR] = velocity
        self._goal_reached = False
        self._state = GeneratorState.TARGET_SET
        logger.debug(f"Cartesian OTG position goal set: {position.tolist()} velocity={velocity.tolist()}")

    def set_goal_position(self, goal_position: Sequence[float] | np.ndarray) -> None:
        """Set the goal position with zero goal linear velocity."""
        self.set_goal_position_and_linear_velocity(goal_position, np.zeros(3))

    def set_goal_orientation_and_angular_velocity(
        self,
        goal_orientation: np.ndarray | SO3,
        goal_angular_velocity: Sequence[float] | np.ndarray,
    ) -> None:
        """
        Set the orientation half of the goal.

        The reference frame is moved to the current orientation and the goal is
        expressed as a rotation vector (and angular velocity) in that frame.

        Args:
            goal_orientation: goal orientation in the base frame
            goal_angular_velocity: goal angular velocity in the base frame
        """
        self._ensure_operational()
        orientation = as_rotation_matrix(goal_orientation, "goal orientation")
        angular_velocity = as_vector(goal_angular_velocity, 3, "goal angular velocity")

        if is_approx(orientation.ravel(), self._goal_orientation.ravel()) and is_approx(
            angular_velocity, self._goal_angular_velocity
        ):
            return

        self._goal_orientation = orientation
        self._goal_angular_velocity = angular_velocity
        self._reanchor_reference_frame()

        inp = self._session.input
        inp.target_position[ANGULAR] = rotation_vector_between(self._reference_frame, orientation)
        inp.target_velocity[ANGULAR] = self._reference_frame.T @ angular_velocity
        self._goal_reached = False
        self._state = GeneratorState.TARGET_SET
        logger.debug(
            f"Cartesian OTG orientation goal set: offset={inp.target_position[ANGULAR].tolist()} "
            f"angular velocity={angular_velocity.tolist()}"
        )

    def set_goal_orientation(self, goal_orientation: np.ndarray | SO3) -> None:
        """Set the goal orientation with zero goal angular velocity."""
        self.set_goal_orientation_and_angular_velocity(goal_orientation, np.zeros(3))

    def _reanchor_reference_frame(self) -> None:
        """Move the reference frame to the current orientation, keeping the angular motion."""
        output = self._session.output
        inp = self._session.input
        new_frame = as_rotation_matrix(
            compose_rotation_vector(self._reference_frame, output.position[ANGULAR]), "reference frame"
        )
        # old frame -> base -> new frame
        rotation = new_frame.T @ self._reference_frame

        for position, velocity, acceleration in (
            (output.position, output.velocity, output.acceleration),
            (inp.current_position, inp.current_velocity, inp.current_acceleration),
        ):
            position[ANGULAR] = 0.0
            velocity[ANGULAR] = rotation @ velocity[ANGULAR]
            acceleration[ANGULAR] = rotation @ acceleration[ANGULAR]

        self._reference_frame = new_frame

    # ----- cycle -----

    def update(self) -> None:
        """
        Compute the next desired pose. Call exactly once per control cycle.

        Raises:
            SolverError: the solver failed; the generator is unusable afterwards
        """
        self._ensure_operational()
        output, status = self._session.update()

        if status is SolverStatus.ERROR:
            self._state = GeneratorState.FATAL
            self._goal_reached = False
            raise SolverError(
                f"error in computing next Cartesian state: {self._session.last_error}",
                result=self._session.last_result,
            )

        self._session.chain_output_as_next_input()
        # Infinite-jerk axes start every solve from zero acceleration
        self._session.input.current_acceleration[np.isinf(self._limits.max_jerk)] = 0.0

        if status is SolverStatus.FINISHED:
            if np.linalg.norm(output.velocity) < GOAL_REACHED_VELOCITY_TOL:
                if not self._goal_reached:
                    logger.debug("Cartesian OTG goal reached")
                self._goal_reached = True
                self._state = GeneratorState.REACHED
            else:
                # Finished while still moving: stop at the current target pose
                self._session.input.target_velocity.fill(0.0)
                self._goal_angular_velocity = np.zeros(3)
                self._goal_reached = False
                self._state = GeneratorState.TARGET_SET
                logger.debug("Cartesian OTG finished with residual velocity, re-targeting with zero velocity")
            return

        self._goal_reached = False
        self._state = GeneratorState.CONVERGING

    # ----- accessors -----

    @property
    def cycle_duration(self) -> float:
        return self._cycle_duration

    @property
    def state(self) -> GeneratorState:
        return self._state

    @property
    def is_goal_reached(self) -> bool:
        return self._goal_reached

    @property
    def limits(self) -> KinematicLimits:
        return self._limits

    @property
    def jerk_limited(self) -> bool:
        return self._limits.jerk_limited

    @property
    def reference_frame(self) -> np.ndarray:
        return self._reference_frame.copy()

    @property
    def goal_position(self) -> np.ndarray:
        return self._session.input.target_position[LINEAR].copy()

    @property
    def goal_orientation(self) -> np.ndarray:
        return compose_rotation_vector(self._reference_frame, self._session.input.target_position[ANGULAR])

    @property
    def next_state(self) -> KinematicState:
        """Live 6D solver output (angular part relative to the reference frame); reused every cycle."""
        return self._session.output

    def get_next_position(self) -> np.ndarray:
        return self._session.output.position[LINEAR].copy()

    def get_next_linear_velocity(self) -> np.ndarray:
        return self._session.output.velocity[LINEAR].copy()

    def get_next_linear_acceleration(self) -> np.ndarray:
        return self._session.output.acceleration[LINEAR].copy()

    def get_next_orientation(self) -> np.ndarray:
        return compose_rotation_vector(self._reference_frame, self._session.output.position[ANGULAR])

    def get_next_angular_velocity(self) -> np.ndarray:
        return self._reference_frame @ self._session.output.velocity[ANGULAR]

    def get_next_angular_acceleration(self) -> np.ndarray:
        return self._reference_frame @ self._session.output.acceleration[ANGULAR]

    def get_next_pose(self) -> SE3:
        """Next position and orientation as an SE3 transform."""
        T = np.eye(4)
        T[:3, :3] = self.get_next_orientation()
        T[:3, 3] = self.get_next_position()
        return SE3(T, check=False)
