"""
Joint-space generator driven by the real Ruckig solver.
"""

import numpy as np
import pytest

from otg import JointSpaceGenerator
from otg.types import GeneratorState
from otg.utils.errors import SolverError
from otg.utils.trajectory import rollout

pytestmark = pytest.mark.integration


def test_two_joint_goal_converges_with_idle_axis_stationary(joint_otg):
    joint_otg.set_goal_position_and_velocity([1.0, 0.0], [0.0, 0.0])
    samples = rollout(joint_otg, max_cycles=10_000)

    assert joint_otg.is_goal_reached is True
    assert joint_otg.state is GeneratorState.REACHED
    assert np.linalg.norm(joint_otg.get_next_velocity()) < 1e-3
    assert np.allclose(joint_otg.get_next_position(), [1.0, 0.0], atol=1e-6)
    # Idle axis never moves
    assert np.allclose(samples["position"][:, 1], 0.0, atol=1e-12)
    # Monotonic progress on the moving axis
    assert np.all(np.diff(samples["position"][:, 0]) >= -1e-12)


def test_joint_trajectory_respects_limits(joint_otg):
    joint_otg.set_goal_position([1.0, -0.4])
    samples = rollout(joint_otg, max_cycles=10_000)
    assert joint_otg.is_goal_reached is True

    result = joint_otg.limits.validate_trajectory(samples["position"], joint_otg.cycle_duration, tolerance=1e-3)
    assert result["velocity_ok"], result
    assert result["acceleration_ok"], result
    assert result["jerk_ok"], result
    assert np.all(np.abs(samples["velocity"]) <= 1.0 + 1e-9)
    assert np.all(np.abs(samples["acceleration"]) <= 5.0 + 1e-9)


def test_phase_synchronized_axes_finish_together(joint_otg):
    joint_otg.set_goal_position([1.0, 0.5])
    samples = rollout(joint_otg, max_cycles=10_000)
    progress = samples["position"] / np.array([1.0, 0.5])
    # Straight line in joint space: both axes share the same normalized progress
    assert np.allclose(progress[:, 0], progress[:, 1], atol=1e-6)


def test_reached_goal_is_fixed_point(joint_otg):
    joint_otg.set_goal_position([0.3, 0.2])
    samples = rollout(joint_otg, max_cycles=10_000, extra_cycles=20)
    tail = samples["position"][-21:]
    assert samples["reached"][-21:].all()
    assert np.allclose(tail, tail[0], atol=1e-9)
    assert np.allclose(samples["velocity"][-21:], 0.0, atol=1e-9)


def test_same_goal_after_reached_keeps_flag(joint_otg):
    joint_otg.set_goal_position([0.2, 0.1])
    rollout(joint_otg, max_cycles=10_000)
    assert joint_otg.is_goal_reached is True
    joint_otg.set_goal_position([0.2, 0.1])
    assert joint_otg.is_goal_reached is True
    joint_otg.update()
    assert joint_otg.is_goal_reached is True


def test_new_goal_mid_motion_has_no_jump(joint_otg):
    joint_otg.set_goal_position([1.0, 1.0])
    rollout(joint_otg, max_cycles=300)
    assert joint_otg.state is GeneratorState.CONVERGING
    before = joint_otg.next_state.copy()

    joint_otg.set_goal_position([-0.5, 0.2])
    joint_otg.update()
    after = joint_otg.next_state
    dt = joint_otg.cycle_duration
    # One cycle of motion from the previous state, bounded by the limits
    assert np.all(np.abs(after.position - before.position) <= 1.0 * dt + 1e-9)
    assert np.all(np.abs(after.velocity - before.velocity) <= 5.0 * dt + 1e-9)

    rollout(joint_otg, max_cycles=10_000)
    assert np.allclose(joint_otg.get_next_position(), [-0.5, 0.2], atol=1e-6)


def test_goal_with_velocity_then_stops(joint_otg):
    joint_otg.set_goal_position_and_velocity([0.5, 0.0], [0.2, 0.0])
    rollout(joint_otg, max_cycles=10_000)
    # Finished with residual velocity re-targets the same position at rest
    assert joint_otg.is_goal_reached is True
    assert np.allclose(joint_otg.goal_velocity, 0.0)
    assert np.linalg.norm(joint_otg.get_next_velocity()) < 1e-3


def test_disabled_jerk_allows_acceleration_step(joint_otg):
    joint_otg.disable_jerk_limits()
    joint_otg.set_goal_position([1.0, 0.0])
    joint_otg.update()
    acceleration = joint_otg.get_next_acceleration()
    # A jerk limit of 50 would allow at most 0.05 after one cycle
    assert abs(acceleration[0]) > 1.0
    assert abs(acceleration[0]) <= 5.0 + 1e-9

    samples = rollout(joint_otg, max_cycles=10_000)
    assert joint_otg.is_goal_reached is True
    assert np.allclose(joint_otg.get_next_position(), [1.0, 0.0], atol=1e-6)
    assert np.all(np.abs(samples["acceleration"]) <= 5.0 + 1e-9)


def test_reenabling_jerk_after_disable(joint_otg):
    joint_otg.disable_jerk_limits()
    joint_otg.set_goal_position([0.5, 0.0])
    rollout(joint_otg, max_cycles=10_000)
    joint_otg.set_max_jerk([50.0, 50.0])
    joint_otg.set_goal_position([0.0, 0.0])
    rollout(joint_otg, max_cycles=10_000)
    assert joint_otg.is_goal_reached is True
    assert np.allclose(joint_otg.get_next_position(), [0.0, 0.0], atol=1e-6)


def test_unreachable_goal_velocity_is_fatal(joint_otg):
    joint_otg.set_goal_position_and_velocity([1.0, 0.0], [5.0, 0.0])
    with pytest.raises(SolverError) as exc_info:
        joint_otg.update()
    assert exc_info.value.result is not None
    assert joint_otg.state is GeneratorState.FATAL
    with pytest.raises(SolverError):
        joint_otg.update()


def test_default_limits_are_solvable():
    otg = JointSpaceGenerator([0.0, 0.0, 0.0, 0.0, 0.0, 0.0])
    otg.set_goal_position([0.1, -0.1, 0.2, 0.0, 0.3, -0.2])
    rollout(otg, max_cycles=20_000)
    assert otg.is_goal_reached is True
