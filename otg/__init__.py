"""
OTG Python Package

Online trajectory generation for robot motion control: each control cycle the
generators produce the next jerk-limited reference state toward a goal.

Key components:
- JointSpaceGenerator: D independent joints, phase synchronized
- CartesianSpaceGenerator: end-effector position and orientation (6-DOF)
- SolverSession / create_session: Ruckig-backed per-cycle solver
- KinematicLimits: velocity/acceleration/jerk limit vectors
"""

from ._version import __version__
from .cartesian_space import CartesianSpaceGenerator
from .joint_space import JointSpaceGenerator
from .limits import KinematicLimits
from .solver import SolverInput, SolverSession, SolverStatus, SynchronizationMode, create_session
from .types import GeneratorState, KinematicState
from .utils.errors import (
    DimensionMismatchError,
    InvalidCycleDurationError,
    InvalidLimitError,
    InvalidOrientationError,
    OTGError,
    SolverError,
)

__all__ = [
    "__version__",
    "JointSpaceGenerator",
    "CartesianSpaceGenerator",
    "KinematicLimits",
    "SolverInput",
    "SolverSession",
    "SolverStatus",
    "SynchronizationMode",
    "create_session",
    "GeneratorState",
    "KinematicState",
    "OTGError",
    "DimensionMismatchError",
    "InvalidLimitError",
    "InvalidOrientationError",
    "InvalidCycleDurationError",
    "SolverError",
]
