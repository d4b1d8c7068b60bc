"""
Shared trajectory sampling utilities.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from otg.types import KinematicState


class _Generator(Protocol):
    def update(self) -> None: ...

    @property
    def is_goal_reached(self) -> bool: ...

    @property
    def next_state(self) -> KinematicState: ...


def rollout(generator: _Generator, max_cycles: int, extra_cycles: int = 0) -> dict[str, np.ndarray]:
    """
    Step a generator once per cycle until its goal is reached or max_cycles run out.

    The first row is the state before any update. After the goal is reached,
    `extra_cycles` further updates are recorded. Samples are the raw solver
    states (Cartesian angular components are rotation vectors in the
    generator's reference frame).

    Returns: dict with "position", "velocity", "acceleration" arrays of shape (N, D)
    and "reached" (bool array of shape (N,))
    """
    samples = [generator.next_state.copy()]
    reached = [generator.is_goal_reached]

    remaining_extra = extra_cycles
    for _ in range(max(0, int(max_cycles))):
        generator.update()
        samples.append(generator.next_state.copy())
        reached.append(generator.is_goal_reached)
        if generator.is_goal_reached:
            if remaining_extra <= 0:
                break
            remaining_extra -= 1

    return {
        "position": np.vstack([s.position for s in samples]),
        "velocity": np.vstack([s.velocity for s in samples]),
        "acceleration": np.vstack([s.acceleration for s in samples]),
        "reached": np.array(reached, dtype=bool),
    }
