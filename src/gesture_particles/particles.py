"""
Particles Module - Particle State and Motion Integration
========================================================
Holds the particle buffers and advances them once per frame:
ease the gesture scale toward its target, ease every particle toward its
scaled target position, then add a small time-varying jitter.

Shape switches only rewrite the target buffer; the integrator animates
the transition.
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass, field

from .shapes import Shape, generate_shape
from .gesture_logic import GestureScale


DEFAULT_PARTICLE_COUNT = 15000

# Fraction of the remaining gap closed per frame
POSITION_RATE = 0.08

# Idle jitter
JITTER_AMPLITUDE = 0.01
JITTER_FREQ_X = 0.001
JITTER_FREQ_Y = 0.0012


@dataclass
class ParticleState:
    """
    Everything the integrator owns.

    Attributes:
        positions: Current positions, float32 (N, 3)
        targets: Target positions before gesture scaling, float32 (N, 3)
        velocities: Per-particle drift, float32 (N, 3)
        gesture: Smoothed gesture scale
        shape: Shape the targets were generated from
        dirty: Positions changed since the last present
    """
    positions: np.ndarray
    targets: np.ndarray
    velocities: np.ndarray
    gesture: GestureScale = field(default_factory=GestureScale)
    shape: Shape = Shape.HEART
    dirty: bool = True

    def __post_init__(self):
        if self.positions.shape != self.targets.shape:
            raise ValueError(
                f"positions {self.positions.shape} and targets "
                f"{self.targets.shape} must have the same shape"
            )

    @property
    def count(self) -> int:
        """Number of particles."""
        return len(self.positions)


def create_state(
    count: int = DEFAULT_PARTICLE_COUNT,
    shape: Shape = Shape.HEART,
    rng: Optional[np.random.Generator] = None
) -> ParticleState:
    """
    Create the initial particle state.

    Particles start on the initial shape with targets equal to positions,
    and random velocities in [-0.01, 0.01).
    """
    if rng is None:
        rng = np.random.default_rng()

    if not isinstance(shape, Shape):
        shape = Shape.from_name(str(shape))

    positions = generate_shape(shape, count, rng)
    velocities = ((rng.random((count, 3)) - 0.5) * 0.02).astype(np.float32)

    return ParticleState(
        positions=positions,
        targets=positions.copy(),
        velocities=velocities,
        shape=shape
    )


def switch_shape(
    state: ParticleState,
    shape,
    rng: Optional[np.random.Generator] = None
) -> ParticleState:
    """
    Morph toward a new shape.

    Only the target buffer is regenerated; current positions are left
    alone so the transition is animated by update().

    Args:
        state: Particle state to modify
        shape: Shape member or name (unknown names give the cube)
        rng: Random generator
    """
    if not isinstance(shape, Shape):
        shape = Shape.from_name(str(shape))

    state.targets[:] = generate_shape(shape, state.count, rng)
    state.shape = shape
    return state


def jitter_offsets(count: int, now_ms: float, amplitude: float = JITTER_AMPLITUDE):
    """
    Per-particle jitter for x and y at a given wall-clock time.

    Returns:
        Tuple of (dx, dy) arrays of length count
    """
    phase = np.arange(count, dtype=np.float64)
    dx = np.sin(now_ms * JITTER_FREQ_X + phase) * amplitude
    dy = np.cos(now_ms * JITTER_FREQ_Y + phase) * amplitude
    return dx, dy


def update(
    state: ParticleState,
    now_ms: float,
    gesture_target: Optional[float] = None,
    jitter: float = JITTER_AMPLITUDE
) -> ParticleState:
    """
    Advance the particles by one frame.

    Args:
        state: Particle state, modified in place
        now_ms: Wall-clock time in milliseconds (drives the jitter)
        gesture_target: New target scale, or None to keep the current target
        jitter: Jitter amplitude (0 disables it)

    Returns:
        The same state object
    """
    if gesture_target is not None:
        state.gesture.set_target(gesture_target)

    scale = state.gesture.step()

    goal = state.targets * np.float32(scale)
    state.positions += (goal - state.positions) * np.float32(POSITION_RATE)

    if jitter:
        dx, dy = jitter_offsets(state.count, now_ms, jitter)
        state.positions[:, 0] += dx.astype(np.float32)
        state.positions[:, 1] += dy.astype(np.float32)

    state.dirty = True
    return state
