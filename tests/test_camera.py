import numpy as np

from gesture_particles.camera import Camera


def test_no_frame_before_capture():
    cam = Camera()

    assert cam.read_latest() == (0, None)
    assert cam.get_frame() is None


def test_store_frame_mirrors_and_counts():
    cam = Camera(mirror=True)
    frame = np.zeros((2, 3, 3), np.uint8)
    frame[:, 0] = 255

    cam._store_frame(frame)
    seq, latest = cam.read_latest()

    assert seq == 1
    assert latest[:, 2].min() == 255
    assert latest[:, 0].max() == 0


def test_read_returns_copy():
    cam = Camera(mirror=False)
    cam._store_frame(np.zeros((2, 2, 3), np.uint8))

    _, latest = cam.read_latest()
    latest[:] = 9

    assert cam.get_frame().max() == 0


def test_stop_without_start_is_safe():
    cam = Camera()
    cam.stop()

    assert not cam.is_running
