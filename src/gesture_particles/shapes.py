"""
Shapes Module - Parametric Point Cloud Generators
==================================================
Generates target coordinate sets for the particle cloud.
Every particle samples its own random parameters, so shapes are
deterministic in distribution only (pass a seeded Generator to reproduce).
"""

import numpy as np
from typing import Optional
from enum import Enum


class Shape(Enum):
    """Available particle cloud shapes."""
    HEART = "heart"
    FLOWER = "flower"
    SATURN = "saturn"
    FIREWORKS = "fireworks"
    DEFAULT = "default"      # Uniform cube

    @classmethod
    def from_name(cls, name: str) -> "Shape":
        """
        Resolve a shape by name.

        Unknown names fall through to DEFAULT instead of raising.
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            return cls.DEFAULT

    @classmethod
    def get_all_names(cls) -> list:
        """Get all shape names."""
        return [shape.value for shape in cls]


TWO_PI = 2.0 * np.pi

# Saturn layout
SATURN_SPHERE_FRACTION = 0.4
SATURN_SPHERE_RADIUS = 6.0
SATURN_RING_INNER = 8.0
SATURN_RING_OUTER = 14.0

FIREWORKS_RADIUS = 15.0
CUBE_SIZE = 20.0


def _heart(count: int, rng: np.random.Generator) -> np.ndarray:
    angle = rng.random(count) * TWO_PI
    x = 16 * np.sin(angle) ** 3
    y = (13 * np.cos(angle) - 5 * np.cos(2 * angle)
         - 2 * np.cos(3 * angle) - np.cos(4 * angle))
    z = (rng.random(count) - 0.5) * 5
    return np.stack([x * 0.6, y * 0.6, z], axis=-1)


def _flower(count: int, rng: np.random.Generator) -> np.ndarray:
    # 5-petal rose curve
    t = rng.random(count) * TWO_PI
    r = 10 * np.sin(5 * t) * np.cos(rng.random(count))
    x = r * np.cos(t)
    y = r * np.sin(t)
    z = (rng.random(count) - 0.5) * 3
    return np.stack([x, y, z], axis=-1)


def _saturn(count: int, rng: np.random.Generator) -> np.ndarray:
    points = np.empty((count, 3))
    # Index-based split: i < 0.4 * N belongs to the sphere
    is_sphere = np.arange(count) < count * SATURN_SPHERE_FRACTION
    n_sphere = int(is_sphere.sum())
    n_ring = count - n_sphere

    # Sphere: u = cos(polar) uniform in [-1, 1) avoids clustering at the poles
    u = rng.random(n_sphere) * 2 - 1
    phi = rng.random(n_sphere) * TWO_PI
    ring_r = SATURN_SPHERE_RADIUS * np.sqrt(1 - u * u)
    points[is_sphere] = np.stack([
        ring_r * np.cos(phi),
        ring_r * np.sin(phi),
        SATURN_SPHERE_RADIUS * u,
    ], axis=-1)

    # Flat ring in the XZ plane
    t = rng.random(n_ring) * TWO_PI
    dist = SATURN_RING_INNER + rng.random(n_ring) * (SATURN_RING_OUTER - SATURN_RING_INNER)
    points[~is_sphere] = np.stack([
        dist * np.cos(t),
        (rng.random(n_ring) - 0.5) * 0.5,
        dist * np.sin(t),
    ], axis=-1)
    return points


def _fireworks(count: int, rng: np.random.Generator) -> np.ndarray:
    # Uniform radius, so density increases toward the center
    distance = rng.random(count) * FIREWORKS_RADIUS
    theta = np.arccos(rng.random(count) * 2 - 1)
    phi = rng.random(count) * TWO_PI
    x = distance * np.sin(theta) * np.cos(phi)
    y = distance * np.sin(theta) * np.sin(phi)
    z = distance * np.cos(theta)
    return np.stack([x, y, z], axis=-1)


def _cube(count: int, rng: np.random.Generator) -> np.ndarray:
    return (rng.random((count, 3)) - 0.5) * CUBE_SIZE


_GENERATORS = {
    Shape.HEART: _heart,
    Shape.FLOWER: _flower,
    Shape.SATURN: _saturn,
    Shape.FIREWORKS: _fireworks,
    Shape.DEFAULT: _cube,
}


def generate_shape(
    shape,
    count: int,
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Generate a point cloud for the given shape.

    Args:
        shape: Shape member or shape name (unknown names give a cube)
        count: Number of particles
        rng: Random generator (a fresh default generator if None)

    Returns:
        float32 array of shape (count, 3)
    """
    if not isinstance(shape, Shape):
        shape = Shape.from_name(str(shape))
    if rng is None:
        rng = np.random.default_rng()

    points = _GENERATORS[shape](count, rng)
    return points.astype(np.float32)


if __name__ == "__main__":
    print("Testing Shapes Module")
    print("=" * 40)

    for name in Shape.get_all_names():
        pts = generate_shape(name, 15000)
        radii = np.linalg.norm(pts, axis=1)
        print(f"{name:>10}: {len(pts)} points, "
              f"radius {radii.min():.2f} .. {radii.max():.2f}")
