import numpy as np
import pytest

from gesture_particles import ui
from gesture_particles.gesture_logic import GestureReading
from gesture_particles.renderer import ColorPalette, parse_hex_color
from gesture_particles.shapes import Shape


@pytest.fixture
def app():
    return ui.ParticleCloudApp(
        particle_count=500,
        use_camera=False,
        window_name=None
    )


class FakeCamera:
    instances = []

    def __init__(self, camera_id=0, opens=True):
        self.opens = opens
        self.started = False
        self.stopped = False
        FakeCamera.instances.append(self)

    def start(self):
        self.started = True
        return self.opens

    def stop(self):
        self.stopped = True


class FakeTracker:
    def __init__(self, **kwargs):
        self.released = False

    def release(self):
        self.released = True


def test_step_reads_latest_gesture(app):
    app.channel.publish(GestureReading(scale=2.5, hand_detected=True))
    frame = app.step(now_ms=1000.0)

    assert frame.shape == (ui.ParticleCloudApp.WINDOW_HEIGHT,
                           ui.ParticleCloudApp.WINDOW_WIDTH, 3)
    assert app.state.gesture.target == 2.5
    assert app.state.gesture.current == pytest.approx(1.15)


def test_step_without_gesture_keeps_neutral(app):
    app.step(now_ms=0.0)

    assert app.state.gesture.target == 1.0


def test_shape_keys_switch_targets_only(app):
    positions = app.state.positions.copy()

    assert app._handle_keyboard(ord('3')) is True
    assert app.state.shape is Shape.SATURN
    assert np.array_equal(app.state.positions, positions)

    app._handle_keyboard(ord('0'))
    assert app.state.shape is Shape.DEFAULT


def test_quit_keys(app):
    assert app._handle_keyboard(ord('q')) is False
    assert app._handle_keyboard(27) is False


def test_color_and_preview_keys(app):
    app._handle_keyboard(ord('c'))
    assert app.renderer.color == parse_hex_color(ColorPalette.get_all()[1])

    app._handle_keyboard(ord('p'))
    assert app._show_preview is True


def test_unknown_key_is_ignored(app):
    assert app._handle_keyboard(0xFF) is True
    assert app.state.shape is Shape.HEART


def test_model_failure_leaves_camera_closed(app, monkeypatch):
    def broken_tracker(**kwargs):
        raise RuntimeError("model download failed")

    FakeCamera.instances.clear()
    monkeypatch.setattr(ui, "HandTracker", broken_tracker)
    monkeypatch.setattr(ui, "Camera", FakeCamera)
    app.use_camera = True

    with pytest.raises(RuntimeError):
        app.run()

    assert FakeCamera.instances == []
    assert app._running is False


def test_camera_failure_releases_tracker(app, monkeypatch):
    trackers = []

    def make_tracker(**kwargs):
        tracker = FakeTracker()
        trackers.append(tracker)
        return tracker

    monkeypatch.setattr(ui, "HandTracker", make_tracker)
    monkeypatch.setattr(ui, "Camera", lambda camera_id: FakeCamera(camera_id, opens=False))

    assert app._start_gesture_tracking() is False
    assert trackers[0].released is True
    assert app.tracker is None
    assert app.camera is None
