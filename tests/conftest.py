"""
Pytest configuration and shared fixtures for the OTG test suite.

Provides generators configured with the standard test limits and a scripted
solver session for exercising the generator state machine without Ruckig.
"""

import os
import sys
import logging
from collections import deque

import numpy as np
import pytest

# Add the parent directory to Python path so we can import the package without installing it
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from otg import CartesianSpaceGenerator, JointSpaceGenerator
from otg.solver import SolverInput, SolverStatus, SynchronizationMode
from otg.types import KinematicState

logger = logging.getLogger(__name__)

CYCLE_S = 0.001


# ============================================================================
# SCRIPTED SOLVER SESSION
# ============================================================================

class ScriptedSession:
    """
    Solver session double that replays a script of statuses.

    WORKING moves the output halfway to the target with a fixed velocity,
    FINISHED lands on the target with `finish_velocity` on every axis and
    ERROR leaves the output untouched. An exhausted script keeps returning
    FINISHED.
    """

    def __init__(self, dimension: int, cycle_duration: float, synchronization: SynchronizationMode):
        self.dimension = dimension
        self.cycle_duration = cycle_duration
        self.synchronization = synchronization
        self.input = SolverInput.zeros(dimension, synchronization)
        self.output = KinematicState.at_rest(np.zeros(dimension))
        self.script: deque[SolverStatus] = deque()
        self.finish_velocity = 0.0
        self.working_velocity = 0.1
        self.last_result: str | None = None
        self.last_error: str | None = None
        self.calls = 0
        self.chained = 0
        self.targets: list[tuple[np.ndarray, np.ndarray]] = []

    def update(self, inp: SolverInput | None = None):
        inp = self.input if inp is None else inp
        self.calls += 1
        self.targets.append((inp.target_position.copy(), inp.target_velocity.copy()))
        status = self.script.popleft() if self.script else SolverStatus.FINISHED
        self.last_result = status.name
        if status is SolverStatus.WORKING:
            self.output.position[:] = inp.current_position + 0.5 * (inp.target_position - inp.current_position)
            self.output.velocity.fill(self.working_velocity)
            self.output.acceleration.fill(0.0)
        elif status is SolverStatus.FINISHED:
            self.output.position[:] = inp.target_position
            self.output.velocity.fill(self.finish_velocity)
            self.output.acceleration.fill(0.0)
        else:
            self.last_error = "scripted failure"
        return self.output, status

    def chain_output_as_next_input(self) -> None:
        self.chained += 1
        self.input.current_position[:] = self.output.position
        self.input.current_velocity[:] = self.output.velocity
        self.input.current_acceleration[:] = self.output.acceleration


@pytest.fixture
def scripted_factory():
    """
    Session factory recording every ScriptedSession it builds.

    Usage: JointSpaceGenerator(q0, session_factory=scripted_factory); then
    scripted_factory.sessions[-1].script.extend([...]).
    """
    class Factory:
        def __init__(self):
            self.sessions: list[ScriptedSession] = []

        def __call__(self, dimension, cycle_duration, synchronization):
            session = ScriptedSession(dimension, cycle_duration, synchronization)
            self.sessions.append(session)
            return session

        @property
        def session(self) -> ScriptedSession:
            return self.sessions[-1]

    return Factory()


# ============================================================================
# GENERATOR FIXTURES
# ============================================================================

@pytest.fixture
def joint_otg() -> JointSpaceGenerator:
    """Two-joint generator at the origin with the reference test limits."""
    otg = JointSpaceGenerator([0.0, 0.0], CYCLE_S)
    otg.set_max_velocity([1.0, 1.0])
    otg.set_max_acceleration([5.0, 5.0])
    otg.set_max_jerk([50.0, 50.0])
    return otg


@pytest.fixture
def cartesian_otg() -> CartesianSpaceGenerator:
    """Cartesian generator at the origin with identity orientation."""
    otg = CartesianSpaceGenerator(np.zeros(3), np.eye(3), CYCLE_S)
    otg.set_max_linear_velocity(0.5)
    otg.set_max_linear_acceleration(2.0)
    otg.set_max_angular_velocity(2.0)
    otg.set_max_angular_acceleration(8.0)
    otg.set_max_jerk(20.0, 80.0)
    return otg


# ============================================================================
# PYTEST CONFIGURATION HOOKS
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that drive the Ruckig-backed generators to convergence"
    )
