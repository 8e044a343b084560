"""
Gesture Source Module - Background Hand Tracking
=================================================
Runs hand landmark inference on a background thread, once per new camera
frame, and publishes the resulting target scale into a GestureChannel.
"""

import numpy as np
from typing import Optional
import threading
import time

from .gesture_logic import GestureChannel, GestureReading, draw_gesture_ui


class GestureSource:
    """
    Connects a Camera and a HandTracker to a GestureChannel.

    Every captured frame is inferred at most once. A frame with a hand
    publishes its pinch scale; a frame without one publishes the neutral
    scale. The latest annotated frame is kept for the preview window.
    """

    def __init__(self, camera, tracker, channel: Optional[GestureChannel] = None):
        """
        Initialize the gesture source.

        Args:
            camera: Object with read_latest() -> (seq, frame)
            tracker: Object with process(frame) -> list of HandData
            channel: Channel to publish into (a new one if None)
        """
        self.camera = camera
        self.tracker = tracker
        self.channel = channel or GestureChannel()

        self._last_seq = 0
        self._preview: Optional[np.ndarray] = None
        self._preview_lock = threading.Lock()
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def poll(self) -> bool:
        """
        Process the newest camera frame if it has not been seen yet.

        Returns:
            True if a frame was processed
        """
        seq, frame = self.camera.read_latest()
        if frame is None or seq == self._last_seq:
            return False
        self._last_seq = seq

        hands = self.tracker.process(frame)
        hand_data = hands[0] if hands else None

        reading = GestureReading.from_hand(hand_data)
        self.channel.publish(reading)

        if hand_data is not None and hasattr(self.tracker, "draw_landmarks"):
            frame = self.tracker.draw_landmarks(frame, hand_data)
        frame = draw_gesture_ui(frame, hand_data, reading)

        with self._preview_lock:
            self._preview = frame
        return True

    def _run(self):
        while self._running:
            if not self.poll():
                time.sleep(0.002)

    def start(self):
        """Start the tracking thread."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        print("[INFO] Gesture tracking started")

    def stop(self):
        """Stop the tracking thread."""
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

    def get_preview(self) -> Optional[np.ndarray]:
        """Latest annotated camera frame."""
        with self._preview_lock:
            return self._preview

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
