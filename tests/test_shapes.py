import numpy as np
import pytest

from gesture_particles.shapes import Shape, generate_shape


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.mark.parametrize("shape", list(Shape))
def test_generates_requested_count_of_finite_points(shape, rng):
    points = generate_shape(shape, 1000, rng)

    assert points.shape == (1000, 3)
    assert points.dtype == np.float32
    assert np.all(np.isfinite(points))


def test_unknown_name_falls_back_to_cube(rng):
    points = generate_shape("spiral", 500, rng)

    assert Shape.from_name("spiral") is Shape.DEFAULT
    assert np.all(np.abs(points) <= 10.0)


def test_from_name_is_case_insensitive():
    assert Shape.from_name("Saturn") is Shape.SATURN
    assert Shape.from_name(" heart ") is Shape.HEART


def test_saturn_sphere_and_ring(rng):
    count = 2000
    points = generate_shape(Shape.SATURN, count, rng).astype(np.float64)
    n_sphere = int(count * 0.4)

    sphere = points[:n_sphere]
    ring = points[n_sphere:]

    assert np.allclose(np.linalg.norm(sphere, axis=1), 6.0, atol=1e-4)

    ring_radius = np.hypot(ring[:, 0], ring[:, 2])
    assert np.all(ring_radius >= 8.0 - 1e-4)
    assert np.all(ring_radius <= 14.0 + 1e-4)
    assert np.all(np.abs(ring[:, 1]) <= 0.25)


def test_heart_bounds(rng):
    points = generate_shape(Shape.HEART, 2000, rng)

    assert np.all(np.abs(points[:, 0]) <= 16 * 0.6 + 1e-4)
    assert np.all(np.abs(points[:, 2]) <= 2.5)


def test_flower_depth_and_radius(rng):
    points = generate_shape(Shape.FLOWER, 2000, rng)

    assert np.all(np.hypot(points[:, 0], points[:, 1]) <= 10.0 + 1e-4)
    assert np.all(np.abs(points[:, 2]) <= 1.5)


def test_fireworks_within_radius(rng):
    points = generate_shape(Shape.FIREWORKS, 2000, rng)

    assert np.all(np.linalg.norm(points, axis=1) <= 15.0 + 1e-4)


def test_particles_sample_independently(rng):
    points = generate_shape(Shape.HEART, 100, rng)

    assert len(np.unique(points[:, 0])) > 90
