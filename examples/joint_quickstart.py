"""
Joint-space quickstart for OTG.
- Drives a 6-joint generator at 1 kHz from zero to a goal
- Prints a sample every 100 cycles and the time to reach the goal

Run from the repository root:
    python examples/joint_quickstart.py
"""

import logging

import numpy as np

from otg import JointSpaceGenerator
from otg.config import TRACE, TRACE_ENABLED

CYCLE_S = 0.001
GOAL = [0.5, -0.3, 0.8, 0.0, 0.4, -0.6]


def main() -> None:
    # OTG_TRACE=1 also prints every solver cycle
    level = TRACE if TRACE_ENABLED else logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    otg = JointSpaceGenerator(np.zeros(6), CYCLE_S)
    otg.set_max_velocity(1.0)
    otg.set_max_acceleration(4.0)
    otg.set_max_jerk(40.0)
    otg.set_goal_position(GOAL)

    cycles = 0
    while not otg.is_goal_reached and cycles < 20_000:
        otg.update()
        cycles += 1
        if cycles % 100 == 0:
            print(f"t={cycles * CYCLE_S:.3f}s q={np.round(otg.get_next_position(), 4)}")

    print(f"goal reached: {otg.is_goal_reached} after {cycles * CYCLE_S:.3f}s")
    raise SystemExit(0 if otg.is_goal_reached else 1)


if __name__ == "__main__":
    main()
