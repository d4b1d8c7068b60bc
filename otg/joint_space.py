"""
Joint-space online trajectory generation.

Drives D independent joints from the current sampled state toward a goal
position/velocity under velocity, acceleration and jerk limits. All axes are
phase synchronized so they reach the goal together.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import numpy as np

from otg.config import (
    DEFAULT_JOINT_MAX_ACCELERATION,
    DEFAULT_JOINT_MAX_JERK,
    DEFAULT_JOINT_MAX_VELOCITY,
    GOAL_REACHED_VELOCITY_TOL,
    INTERVAL_S,
)
from otg.limits import KinematicLimits
from otg.solver import SolverSession, SolverStatus, SynchronizationMode, create_session
from otg.types import GeneratorState, KinematicState
from otg.utils.errors import DimensionMismatchError, SolverError
from otg.utils.validation import as_float_array, as_vector, check_cycle_duration, is_approx

logger = logging.getLogger(__name__)

SessionFactory = Callable[[int, float, SynchronizationMode], SolverSession]


class JointSpaceGenerator:
    """
    Online trajectory generator for D joints.

    Typical use in a control loop::

        otg = JointSpaceGenerator(q0, 0.001)
        otg.set_max_velocity(1.0)
        otg.set_goal_position(q_goal)
        while not otg.is_goal_reached:
            otg.update()
            q_des = otg.get_next_position()

    Not thread-safe: one owner calls the setters and update().
    """

    def __init__(
        self,
        initial_position: Sequence[float] | np.ndarray,
        cycle_duration: float = INTERVAL_S,
        *,
        session_factory: SessionFactory = create_session,
    ):
        """
        Args:
            initial_position: initial joint positions; its length fixes the dimension D
            cycle_duration: duration of one control cycle in seconds (0.001 at 1 kHz)
            session_factory: builds the solver session, called as (D, cycle_duration, synchronization)
        """
        self._cycle_duration = check_cycle_duration(cycle_duration)
        shape = as_float_array(initial_position, "initial position").shape
        if len(shape) != 1 or shape[0] == 0:
            raise DimensionMismatchError(f"initial position must be a non-empty vector, got shape {shape}")
        self._dim = shape[0]

        self._limits = KinematicLimits(
            self._dim,
            DEFAULT_JOINT_MAX_VELOCITY,
            DEFAULT_JOINT_MAX_ACCELERATION,
            DEFAULT_JOINT_MAX_JERK,
        )
        self._session = session_factory(self._dim, self._cycle_duration, SynchronizationMode.PHASE)
        # The session reads the limit arrays in place
        self._session.input.max_velocity = self._limits.max_velocity
        self._session.input.max_acceleration = self._limits.max_acceleration
        self._session.input.max_jerk = self._limits.max_jerk

        self._goal_reached = False
        self._state = GeneratorState.INITIALIZED
        self.reinitialize(initial_position)

    # ----- lifecycle -----

    def _ensure_operational(self) -> None:
        if self._state is GeneratorState.FATAL:
            raise SolverError(
                "generator is in a fatal state after a solver error; construct a new one",
                result=self._session.last_result,
            )

    def reinitialize(self, initial_position: Sequence[float] | np.ndarray) -> None:
        """Reset to rest at `initial_position` and make it the (reached) goal."""
        self._ensure_operational()
        position = as_vector(initial_position, self._dim, "initial position")

        output = self._session.output
        output.position[:] = position
        output.velocity.fill(0.0)
        output.acceleration.fill(0.0)
        self._session.chain_output_as_next_input()

        self._session.input.target_position[:] = position
        self._session.input.target_velocity.fill(0.0)
        self._goal_reached = True
        self._state = GeneratorState.INITIALIZED
        logger.debug(f"Joint OTG reinitialized at {position.tolist()}")

    # ----- limits -----

    def set_max_velocity(self, max_velocity: float | Sequence[float] | np.ndarray) -> None:
        """Set the maximum velocity per joint (a scalar applies to all joints)."""
        self._ensure_operational()
        self._limits.set_max_velocity(max_velocity)
        logger.debug(f"Joint OTG max velocity set to {self._limits.max_velocity.tolist()}")

    def set_max_acceleration(self, max_acceleration: float | Sequence[float] | np.ndarray) -> None:
        """Set the maximum acceleration per joint (a scalar applies to all joints)."""
        self._ensure_operational()
        self._limits.set_max_acceleration(max_acceleration)
        logger.debug(f"Joint OTG max acceleration set to {self._limits.max_acceleration.tolist()}")

    def set_max_jerk(self, max_jerk: float | Sequence[float] | np.ndarray) -> None:
        """Set the maximum jerk per joint. Re-enables jerk limits after disable_jerk_limits()."""
        self._ensure_operational()
        self._limits.set_max_jerk(max_jerk)
        logger.debug(f"Joint OTG max jerk set to {self._limits.max_jerk.tolist()}")

    def disable_jerk_limits(self) -> None:
        """Use infinite jerk; the current acceleration is reset to zero as the solver requires."""
        self._ensure_operational()
        self._limits.disable_jerk()
        self._session.input.current_acceleration.fill(0.0)
        self._session.output.acceleration.fill(0.0)
        logger.debug("Joint OTG jerk limits disabled")

    # ----- goals -----

    def set_goal_position_and_velocity(
        self,
        goal_position: Sequence[float] | np.ndarray,
        goal_velocity: Sequence[float] | np.ndarray,
    ) -> None:
        """
        Set the goal state. A goal equal to the current target is ignored and
        does not reset the goal reached flag.
        """
        self._ensure_operational()
        position = as_vector(goal_position, self._dim, "goal position")
        velocity = as_vector(goal_velocity, self._dim, "goal velocity")

        inp = self._session.input
        if is_approx(position, inp.target_position) and is_approx(velocity, inp.target_velocity):
            return

        inp.target_position[:] = position
        inp.target_velocity[:] = velocity
        self._goal_reached = False
        self._state = GeneratorState.TARGET_SET
        logger.debug(f"Joint OTG goal set: position={position.tolist()} velocity={velocity.tolist()}")

    def set_goal_position(self, goal_position: Sequence[float] | np.ndarray) -> None:
        """Set the goal position with zero goal velocity."""
        self.set_goal_position_and_velocity(goal_position, np.zeros(self._dim))

    # ----- cycle -----

    def update(self) -> None:
        """
        Compute the next desired state. Call exactly once per control cycle.

        Raises:
            SolverError: the solver failed; the generator is unusable afterwards
        """
        self._ensure_operational()
        output, status = self._session.update()

        if status is SolverStatus.ERROR:
            self._state = GeneratorState.FATAL
            self._goal_reached = False
            raise SolverError(
                f"error in computing next joint state: {self._session.last_error}",
                result=self._session.last_result,
            )

        self._session.chain_output_as_next_input()
        # Infinite-jerk axes start every solve from zero acceleration
        self._session.input.current_acceleration[np.isinf(self._limits.max_jerk)] = 0.0

        if status is SolverStatus.FINISHED:
            if np.linalg.norm(output.velocity) < GOAL_REACHED_VELOCITY_TOL:
                if not self._goal_reached:
                    logger.debug("Joint OTG goal reached")
                self._goal_reached = True
                self._state = GeneratorState.REACHED
            else:
                # Finished while still moving: stop at the current target
                self._session.input.target_velocity.fill(0.0)
                self._goal_reached = False
                self._state = GeneratorState.TARGET_SET
                logger.debug("Joint OTG finished with residual velocity, re-targeting with zero velocity")
            return

        self._goal_reached = False
        self._state = GeneratorState.CONVERGING

    # ----- accessors -----

    @property
    def dimension(self) -> int:
        return self._dim

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
    def max_velocity(self) -> np.ndarray:
        return self._limits.max_velocity.copy()

    @property
    def max_acceleration(self) -> np.ndarray:
        return self._limits.max_acceleration.copy()

    @property
    def max_jerk(self) -> np.ndarray:
        return self._limits.max_jerk.copy()

    @property
    def goal_position(self) -> np.ndarray:
        return self._session.input.target_position.copy()

    @property
    def goal_velocity(self) -> np.ndarray:
        return self._session.input.target_velocity.copy()

    @property
    def next_state(self) -> KinematicState:
        """Live solver output; reused every cycle."""
        return self._session.output

    def get_next_position(self) -> np.ndarray:
        return self._session.output.position.copy()

    def get_next_velocity(self) -> np.ndarray:
        return self._session.output.velocity.copy()

    def get_next_acceleration(self) -> np.ndarray:
        return self._session.output.acceleration.copy()
