"""
Trajectory segment solver session backed by Ruckig.

A session owns the per-instance Ruckig state for a fixed number of degrees of
freedom: current sample, target, limits and synchronization mode. Each call to
update() advances the trajectory by exactly one control cycle.

Note: the arrays in `session.output` are reused across calls. Callers must copy
them if they need to keep values across cycles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np
from ruckig import InputParameter, OutputParameter, Result, Ruckig, Synchronization

from otg.config import TRACE, TRACE_ENABLED
from otg.types import KinematicState

logger = logging.getLogger(__name__)


class SolverStatus(Enum):
    """Outcome of one solver cycle."""
    WORKING = "WORKING"
    FINISHED = "FINISHED"
    ERROR = "ERROR"


class SynchronizationMode(Enum):
    """How the solver aligns the per-axis profiles (values are Ruckig names)."""
    PHASE = "Phase"  # all axes finish together on a straight line in state space
    TIME = "Time"  # all axes finish together
    TIME_IF_NECESSARY = "TimeIfNecessary"  # only synchronize axes with non-zero target velocity

    def to_ruckig(self) -> Synchronization:
        return getattr(Synchronization, self.value)


@dataclass
class SolverInput:
    """Everything the solver needs for one cycle. Vectors are float arrays of the session dimension."""
    current_position: np.ndarray
    current_velocity: np.ndarray
    current_acceleration: np.ndarray
    target_position: np.ndarray
    target_velocity: np.ndarray
    max_velocity: np.ndarray
    max_acceleration: np.ndarray
    max_jerk: np.ndarray
    synchronization: SynchronizationMode = SynchronizationMode.PHASE

    @classmethod
    def zeros(
        cls, dimension: int, synchronization: SynchronizationMode = SynchronizationMode.PHASE
    ) -> "SolverInput":
        return cls(
            *(np.zeros(dimension, dtype=np.float64) for _ in range(8)),
            synchronization=synchronization,
        )


class SolverSession:
    """
    One Ruckig instance plus its input/output parameters.

    Exclusively owned by a single generator; not thread-safe.
    """

    def __init__(
        self,
        dimension: int,
        cycle_duration: float,
        synchronization: SynchronizationMode = SynchronizationMode.PHASE,
    ):
        self.dimension = int(dimension)
        self.cycle_duration = float(cycle_duration)
        self.input = SolverInput.zeros(self.dimension, synchronization)
        self.output = KinematicState.at_rest(np.zeros(self.dimension))
        self.last_result: str | None = None
        self.last_error: str | None = None

        self._otg = Ruckig(self.dimension, self.cycle_duration)
        self._inp = InputParameter(self.dimension)
        self._out = OutputParameter(self.dimension)

    def _load(self, inp: SolverInput) -> None:
        # Ruckig copies values on assignment
        self._inp.current_position = inp.current_position
        self._inp.current_velocity = inp.current_velocity
        self._inp.current_acceleration = inp.current_acceleration
        self._inp.target_position = inp.target_position
        self._inp.target_velocity = inp.target_velocity
        self._inp.max_velocity = inp.max_velocity
        self._inp.max_acceleration = inp.max_acceleration
        self._inp.max_jerk = inp.max_jerk
        self._inp.synchronization = inp.synchronization.to_ruckig()

    def update(self, inp: SolverInput | None = None) -> tuple[KinematicState, SolverStatus]:
        """
        Advance by one cycle.

        Args:
            inp: input for this cycle; defaults to the session's own `input`

        Returns:
            (output, status) - output is the session's reused KinematicState
        """
        self._load(self.input if inp is None else inp)
        try:
            result = self._otg.update(self._inp, self._out)
        except RuntimeError as e:
            # Ruckig raises on invalid input instead of returning ErrorInvalidInput
            self.last_result = Result.ErrorInvalidInput.name
            self.last_error = str(e)
            logger.error(f"Ruckig rejected input: {e}")
            return self.output, SolverStatus.ERROR

        self.last_result = result.name
        if result == Result.Working:
            status = SolverStatus.WORKING
        elif result == Result.Finished:
            status = SolverStatus.FINISHED
        else:
            self.last_error = f"Ruckig returned {result.name}"
            logger.error(f"Ruckig error: {result.name}")
            return self.output, SolverStatus.ERROR

        self.output.position[:] = self._out.new_position
        self.output.velocity[:] = self._out.new_velocity
        self.output.acceleration[:] = self._out.new_acceleration
        if TRACE_ENABLED:
            logger.log(TRACE, "solver_update result=%s t=%.4f", result.name, self._out.time)
        return self.output, status

    def chain_output_as_next_input(self) -> None:
        """Carry the last output sample into the current state of the input."""
        self.input.current_position[:] = self.output.position
        self.input.current_velocity[:] = self.output.velocity
        self.input.current_acceleration[:] = self.output.acceleration


def create_session(
    dimension: int,
    cycle_duration: float,
    synchronization: SynchronizationMode = SynchronizationMode.PHASE,
) -> SolverSession:
    return SolverSession(dimension, cycle_duration, synchronization)
