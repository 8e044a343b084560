import numpy as np
import pytest

from gesture_particles.particles import (
    JITTER_AMPLITUDE,
    ParticleState,
    create_state,
    jitter_offsets,
    switch_shape,
    update,
)
from gesture_particles.shapes import Shape


@pytest.fixture
def state():
    return create_state(500, Shape.HEART, np.random.default_rng(7))


def test_initial_state(state):
    assert state.count == 500
    assert state.positions.shape == state.targets.shape == state.velocities.shape
    assert np.array_equal(state.positions, state.targets)
    assert state.positions is not state.targets
    assert np.all(np.abs(state.velocities) <= 0.01)
    assert state.gesture.current == state.gesture.target == 1.0


def test_mismatched_buffers_rejected():
    with pytest.raises(ValueError):
        ParticleState(
            positions=np.zeros((10, 3), np.float32),
            targets=np.zeros((11, 3), np.float32),
            velocities=np.zeros((10, 3), np.float32),
        )


def test_fixed_point_without_jitter(state):
    state.gesture.current = state.gesture.target = 2.0
    state.positions[:] = state.targets * np.float32(2.0)
    before = state.positions.copy()

    update(state, now_ms=123456.0, jitter=0)

    assert np.array_equal(state.positions, before)
    assert state.gesture.current == 2.0


def test_converges_monotonically(state):
    state.positions[:] = 0
    distances = []
    for frame in range(30):
        update(state, now_ms=frame * 16.0, jitter=0)
        distances.append(np.linalg.norm(state.positions - state.targets))

    assert all(b < a for a, b in zip(distances, distances[1:]))


def test_position_rate(state):
    state.positions[:] = 0
    update(state, now_ms=0.0, jitter=0)

    assert np.allclose(state.positions, state.targets * 0.08, atol=1e-6)


def test_gesture_target_scales_uniformly(state):
    update(state, now_ms=0.0, gesture_target=3.0, jitter=0)

    assert state.gesture.target == 3.0
    assert state.gesture.current == pytest.approx(1.2)

    for _ in range(400):
        update(state, now_ms=0.0, jitter=0)

    assert np.allclose(state.positions, state.targets * 3.0, atol=1e-3)


def test_missing_gesture_keeps_target(state):
    update(state, now_ms=0.0, gesture_target=2.5, jitter=0)
    update(state, now_ms=0.0, gesture_target=None, jitter=0)

    assert state.gesture.target == 2.5


def test_jitter_moves_only_x_and_y(state):
    before = state.positions.copy()
    now_ms = 5000.0
    update(state, now_ms=now_ms)

    dx, dy = jitter_offsets(state.count, now_ms)
    assert np.allclose(state.positions[:, 0] - before[:, 0], dx, atol=1e-5)
    assert np.allclose(state.positions[:, 1] - before[:, 1], dy, atol=1e-5)
    assert np.array_equal(state.positions[:, 2], before[:, 2])


def test_jitter_formula():
    dx, dy = jitter_offsets(3, 1000.0)

    assert dx[2] == pytest.approx(np.sin(1.0 + 2) * JITTER_AMPLITUDE)
    assert dy[1] == pytest.approx(np.cos(1.2 + 1) * JITTER_AMPLITUDE)


def test_switch_shape_keeps_current_positions(state):
    positions = state.positions.copy()
    old_targets = state.targets.copy()

    switch_shape(state, Shape.SATURN, np.random.default_rng(3))

    assert np.array_equal(state.positions, positions)
    assert not np.array_equal(state.targets, old_targets)
    assert state.targets.shape == positions.shape
    assert state.shape is Shape.SATURN


def test_switch_shape_by_unknown_name(state):
    switch_shape(state, "nebula")

    assert state.shape is Shape.DEFAULT


def test_update_marks_dirty(state):
    state.dirty = False
    update(state, now_ms=0.0)

    assert state.dirty is True
