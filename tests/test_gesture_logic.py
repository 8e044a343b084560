import threading

import pytest

from gesture_particles.gesture_logic import (
    NEUTRAL_SCALE,
    GestureChannel,
    GestureReading,
    GestureScale,
    pinch_distance,
    scale_from_distance,
)
from gesture_particles.hand_tracking import HandData, landmarks_from_normalized


def make_hand(thumb, index):
    coords = [(0.5, 0.5, 0.0)] * 21
    coords[4] = (thumb[0], thumb[1], 0.0)
    coords[8] = (index[0], index[1], 0.0)
    return HandData(landmarks=landmarks_from_normalized(coords, 640, 480))


def test_range_endpoints():
    assert scale_from_distance(0.05) == pytest.approx(0.5)
    assert scale_from_distance(0.30) == pytest.approx(3.0)


def test_clamp_boundaries():
    assert scale_from_distance(0.0) == 0.3
    assert scale_from_distance(1.0) == 4.0


def test_linear_between_endpoints():
    assert scale_from_distance(0.175) == pytest.approx(1.75)


def test_pinch_distance_ignores_depth():
    hand = make_hand((0.2, 0.2), (0.5, 0.6))
    thumb = hand.landmarks[4]
    index = hand.landmarks[8]

    assert pinch_distance(thumb, index) == pytest.approx(0.5)


def test_reading_uses_thumb_and_index_tips():
    hand = make_hand((0.4, 0.5), (0.4, 0.55))
    reading = GestureReading.from_hand(hand)

    assert reading.distance == pytest.approx(0.05)
    assert reading.scale == pytest.approx(0.5)


def test_reading_without_hand_is_neutral():
    reading = GestureReading.from_hand(None)

    assert reading.scale == NEUTRAL_SCALE
    assert reading.hand_detected is False
    assert reading.distance is None


def test_reading_from_open_hand():
    reading = GestureReading.from_hand(make_hand((0.1, 0.5), (0.9, 0.5)))

    assert reading.hand_detected is True
    assert reading.distance == pytest.approx(0.8)
    assert reading.scale == 4.0


def test_gesture_scale_eases_toward_target():
    scale = GestureScale()
    scale.set_target(2.0)

    assert scale.step() == pytest.approx(1.1)
    assert scale.step() == pytest.approx(1.19)
    assert scale.target == 2.0


def test_channel_keeps_only_latest():
    channel = GestureChannel()
    assert channel.latest() is None

    channel.publish(GestureReading(scale=2.0, hand_detected=True))
    channel.publish(GestureReading(scale=3.0, hand_detected=True))

    assert channel.latest().scale == 3.0


def test_channel_concurrent_publish():
    channel = GestureChannel()

    def writer(value):
        for _ in range(200):
            channel.publish(GestureReading(scale=value, hand_detected=True))

    threads = [threading.Thread(target=writer, args=(v,)) for v in (1.5, 2.5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert channel.latest().scale in (1.5, 2.5)
