"""
Cartesian quickstart for OTG.
- Moves the end effector 20 cm along x while rotating 90 degrees about z
- Switches the orientation goal halfway through the motion

Run from the repository root:
    python examples/cartesian_quickstart.py
"""

import numpy as np
from spatialmath import SO3

from otg import CartesianSpaceGenerator
from otg.utils.trajectory import rollout

CYCLE_S = 0.001


def main() -> None:
    otg = CartesianSpaceGenerator([0.3, 0.0, 0.4], SO3(), CYCLE_S)
    otg.set_max_linear_velocity(0.25)
    otg.set_max_angular_velocity(1.5)
    otg.set_goal_position([0.5, 0.0, 0.4])
    otg.set_goal_orientation(SO3.Rz(90, unit="deg"))

    first = rollout(otg, max_cycles=500)
    print(f"after {len(first['position']) - 1} cycles:\n{otg.get_next_pose()}")

    otg.set_goal_orientation(SO3.Rx(-30, unit="deg") * SO3.Rz(45, unit="deg"))
    second = rollout(otg, max_cycles=20_000)
    total = len(first["position"]) + len(second["position"]) - 2
    print(f"goal reached: {otg.is_goal_reached} after {total * CYCLE_S:.3f}s")
    print(otg.get_next_pose())
    print("peak linear speed:", np.max(np.linalg.norm(second["velocity"][:, :3], axis=1)))


if __name__ == "__main__":
    main()
