"""
Gesture Logic Module - Pinch Distance to Scale Mapping
=======================================================
Maps the thumb/index pinch openness of a single hand to a target scale
for the particle cloud, smooths the applied scale, and carries the latest
gesture reading from the tracking thread to the render loop.
"""

import cv2
import numpy as np
from typing import Optional, Tuple
from dataclasses import dataclass, field
import threading
import time

from .hand_tracking import HandData, HandLandmark, Point


# Scale used while no hand is visible
NEUTRAL_SCALE = 1.0

# Pinch distance range (normalized image coordinates) and the scales it maps to
DISTANCE_RANGE = (0.05, 0.30)   # closed fist .. open hand
SCALE_RANGE = (0.5, 3.0)
SCALE_LIMITS = (0.3, 4.0)


def pinch_distance(thumb, index) -> float:
    """
    Calculate the 2D distance between two landmarks.

    Args:
        thumb: Thumb tip with normalized x/y attributes
        index: Index fingertip with normalized x/y attributes

    Returns:
        Euclidean distance in normalized image coordinates
    """
    return float(np.hypot(thumb.x - index.x, thumb.y - index.y))


def scale_from_distance(distance: float) -> float:
    """
    Linearly remap a pinch distance to a scale factor, then clamp it.

    0.05 maps to 0.5 and 0.30 maps to 3.0; the result is clamped to [0.3, 4.0].
    """
    min_d, max_d = DISTANCE_RANGE
    min_s, max_s = SCALE_RANGE
    scale = (distance - min_d) / (max_d - min_d) * (max_s - min_s) + min_s
    return max(SCALE_LIMITS[0], min(SCALE_LIMITS[1], scale))


def _pinch_landmarks(hand_data: HandData) -> Tuple[Point, Point]:
    return (hand_data.get_landmark(HandLandmark.THUMB_TIP),
            hand_data.get_landmark(HandLandmark.INDEX_TIP))


@dataclass
class GestureReading:
    """
    A single gesture sample published by the tracking thread.

    Attributes:
        scale: Target scale for the particle cloud
        hand_detected: Whether a hand was visible in the frame
        distance: Raw pinch distance (None without a hand)
        timestamp: When the reading was taken
    """
    scale: float
    hand_detected: bool
    distance: Optional[float] = None
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_hand(cls, hand_data: Optional[HandData]) -> "GestureReading":
        """Build a reading from tracker output (None means no hand)."""
        if hand_data is None:
            return cls(scale=NEUTRAL_SCALE, hand_detected=False)

        thumb, index = _pinch_landmarks(hand_data)
        distance = pinch_distance(thumb, index)
        return cls(
            scale=scale_from_distance(distance),
            hand_detected=True,
            distance=distance
        )


@dataclass
class GestureScale:
    """
    Smoothed gesture scale.

    The target is only written when gesture input arrives or is lost;
    the current value eases toward it once per frame.
    """
    RATE = 0.1

    current: float = NEUTRAL_SCALE
    target: float = NEUTRAL_SCALE

    def set_target(self, target: float):
        """Set the scale to ease toward."""
        self.target = target

    def step(self) -> float:
        """Advance one frame and return the current scale."""
        self.current += (self.target - self.current) * self.RATE
        return self.current


class GestureChannel:
    """
    Single-slot, latest-value channel between tracking and rendering.

    The writer overwrites the slot; the reader never blocks and only ever
    sees the newest reading.
    """

    def __init__(self):
        self._reading: Optional[GestureReading] = None
        self._lock = threading.Lock()

    def publish(self, reading: GestureReading):
        """Replace the current reading."""
        with self._lock:
            self._reading = reading

    def latest(self) -> Optional[GestureReading]:
        """Get the newest reading, or None if nothing was published yet."""
        with self._lock:
            return self._reading


def draw_gesture_ui(
    frame: np.ndarray,
    hand_data: Optional[HandData],
    reading: Optional[GestureReading]
) -> np.ndarray:
    """
    Draw the pinch line and target scale on a camera frame.

    Args:
        frame: BGR camera frame to draw on
        hand_data: Detected hand (None if no hand)
        reading: Reading published for this frame

    Returns:
        Frame with gesture overlay
    """
    if hand_data is not None:
        thumb, index = _pinch_landmarks(hand_data)
        cv2.line(frame, thumb.to_tuple(), index.to_tuple(), (0, 255, 0), 2)
        cv2.circle(frame, thumb.to_tuple(), 8, (0, 255, 0), -1)
        cv2.circle(frame, index.to_tuple(), 8, (0, 255, 0), -1)

    if reading is not None:
        text = f"Scale: {reading.scale:.2f}"
        if reading.distance is not None:
            text += f"  Dist: {reading.distance:.3f}"
        cv2.putText(frame, text, (10, frame.shape[0] - 15),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 255, 255), 2)

    return frame
