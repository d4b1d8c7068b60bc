"""
Type definitions for the OTG generators.

Defines enums and dataclasses shared by the solver session and generators.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np


class GeneratorState(Enum):
    """Lifecycle of a trajectory generator."""
    INITIALIZED = "INITIALIZED"
    TARGET_SET = "TARGET_SET"
    CONVERGING = "CONVERGING"
    REACHED = "REACHED"
    FATAL = "FATAL"


@dataclass
class KinematicState:
    """
    Sampled position/velocity/acceleration of a D-dimensional system.

    Arrays are owned by the state; use copy() before keeping one across cycles.
    """
    position: np.ndarray
    velocity: np.ndarray
    acceleration: np.ndarray

    @classmethod
    def at_rest(cls, position) -> "KinematicState":
        pos = np.array(position, dtype=float)
        return cls(pos, np.zeros_like(pos), np.zeros_like(pos))

    @property
    def dimension(self) -> int:
        return int(self.position.shape[0])

    def copy(self) -> "KinematicState":
        return KinematicState(
            self.position.copy(), self.velocity.copy(), self.acceleration.copy()
        )
