import numpy as np
import pytest

from otg.config import TRACE
from otg.solver import (
    SolverInput,
    SolverSession,
    SolverStatus,
    SynchronizationMode,
    create_session,
)


def _configured_session(dimension=2, cycle=0.001) -> SolverSession:
    session = create_session(dimension, cycle)
    session.input.max_velocity[:] = 1.0
    session.input.max_acceleration[:] = 5.0
    session.input.max_jerk[:] = 50.0
    return session


def test_create_session_shapes():
    session = create_session(3, 0.004, SynchronizationMode.TIME)
    assert isinstance(session, SolverSession)
    assert session.dimension == 3
    assert session.cycle_duration == pytest.approx(0.004)
    assert session.input.synchronization is SynchronizationMode.TIME
    assert session.input.current_position.shape == (3,)
    assert session.output.position.shape == (3,)
    assert session.last_result is None


def test_solver_input_zeros_are_independent_arrays():
    inp = SolverInput.zeros(2)
    inp.current_position[0] = 1.0
    assert inp.target_position[0] == 0.0
    assert inp.synchronization is SynchronizationMode.PHASE


def test_at_target_is_finished():
    session = _configured_session()
    output, status = session.update()
    assert status is SolverStatus.FINISHED
    assert np.allclose(output.position, 0.0)
    assert np.allclose(output.velocity, 0.0)
    assert session.last_result == "Finished"


def test_moving_toward_target_is_working():
    session = _configured_session()
    session.input.target_position[:] = [1.0, 0.0]
    output, status = session.update()
    assert status is SolverStatus.WORKING
    assert 0.0 < output.position[0] < 1e-3
    assert output.velocity[0] > 0.0
    assert output.position[1] == pytest.approx(0.0, abs=1e-12)


def test_update_with_explicit_input():
    session = _configured_session()
    inp = SolverInput.zeros(2)
    inp.max_velocity[:] = 1.0
    inp.max_acceleration[:] = 5.0
    inp.max_jerk[:] = 50.0
    inp.target_position[:] = [0.0, -1.0]
    output, status = session.update(inp)
    assert status is SolverStatus.WORKING
    assert output.position[1] < 0.0
    # The session's own input is left alone
    assert np.allclose(session.input.target_position, 0.0)


def test_chain_output_as_next_input():
    session = _configured_session()
    session.input.target_position[:] = [1.0, 0.5]
    output, _ = session.update()
    session.chain_output_as_next_input()
    assert np.array_equal(session.input.current_position, output.position)
    assert np.array_equal(session.input.current_velocity, output.velocity)
    assert np.array_equal(session.input.current_acceleration, output.acceleration)
    # Chained copies, not aliases
    assert session.input.current_position is not output.position


def test_invalid_input_reports_error():
    session = _configured_session()
    session.input.target_position[:] = [1.0, 0.0]
    # Target velocity beyond the velocity limit
    session.input.target_velocity[:] = [5.0, 0.0]
    _, status = session.update()
    assert status is SolverStatus.ERROR
    assert session.last_result.startswith("Error")
    assert session.last_error


def test_cycle_trace_record_emitted_when_enabled(monkeypatch, caplog):
    monkeypatch.setattr("otg.solver.TRACE_ENABLED", True)
    caplog.set_level(TRACE, logger="otg.solver")
    session = _configured_session()
    session.input.target_position[:] = [1.0, 0.0]
    session.update()
    records = [r for r in caplog.records if r.levelno == TRACE]
    assert len(records) == 1
    assert records[0].levelname == "TRACE"
    assert "result=Working" in records[0].getMessage()


def test_cycle_trace_silent_when_disabled(monkeypatch, caplog):
    monkeypatch.setattr("otg.solver.TRACE_ENABLED", False)
    caplog.set_level(TRACE, logger="otg.solver")
    _configured_session().update()
    assert not [r for r in caplog.records if r.levelno == TRACE]
