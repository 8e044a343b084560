"""
Hand Tracking Module - MediaPipe Hand Landmark Detection
=========================================================
Detects hand landmarks using the MediaPipe Hand Landmarker (Tasks API)
in VIDEO running mode. Provides normalized and pixel coordinates for all
21 hand landmarks; the particle cloud only needs the thumb and index tips.
"""

import os
import cv2
import numpy as np
from typing import Optional, Tuple, List, Dict
from dataclasses import dataclass
from enum import IntEnum
import urllib.request
from pathlib import Path
import time


MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)
DEFAULT_MODEL_PATH = Path("models") / "hand_landmarker.task"


class HandLandmark(IntEnum):
    """
    MediaPipe hand landmark indices.
    Reference: https://mediapipe.dev/images/mobile/hand_landmarks.png
    """
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# Bones drawn in the camera preview
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),          # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),          # Index
    (0, 9), (9, 10), (10, 11), (11, 12),     # Middle
    (0, 13), (13, 14), (14, 15), (15, 16),   # Ring
    (0, 17), (17, 18), (18, 19), (19, 20),   # Pinky
    (5, 9), (9, 13), (13, 17),               # Palm
]


@dataclass
class Point:
    """A hand landmark with normalized and pixel coordinates."""
    x: float  # Normalized x (0-1)
    y: float  # Normalized y (0-1)
    z: float  # Relative depth
    px: int   # Pixel x coordinate
    py: int   # Pixel y coordinate

    def to_tuple(self) -> Tuple[int, int]:
        """Return pixel coordinates as tuple."""
        return (self.px, self.py)


@dataclass
class HandData:
    """
    Contains all data for a detected hand.

    Attributes:
        landmarks: Dict mapping HandLandmark to Point
        handedness: 'Left' or 'Right'
        confidence: Handedness classification score
    """
    landmarks: Dict[HandLandmark, Point]
    handedness: str = "Right"
    confidence: float = 0.0

    def get_landmark(self, landmark: HandLandmark) -> Optional[Point]:
        """Get a specific landmark point."""
        return self.landmarks.get(landmark)


def resolve_model_path() -> Path:
    """Model location, overridable through HAND_MODEL_PATH."""
    return Path(os.environ.get("HAND_MODEL_PATH", str(DEFAULT_MODEL_PATH)))


def _download_model(model_path: Path) -> None:
    """Download the hand landmarker model if not present."""
    print("[INFO] Downloading hand landmarker model...")
    model_path.parent.mkdir(parents=True, exist_ok=True)
    urllib.request.urlretrieve(MODEL_URL, model_path)
    print(f"[INFO] Model downloaded to {model_path}")


class HandTracker:
    """
    Hand tracking using MediaPipe Hand Landmarker (Tasks API).

    Uses VIDEO running mode, which tracks between sequential frames
    instead of running full detection on each one.
    """

    def __init__(
        self,
        max_hands: int = 1,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        model_path: Optional[Path] = None
    ):
        """
        Initialize the hand tracker.

        Args:
            max_hands: Maximum number of hands to detect
            model_complexity: Kept for API compatibility (the Tasks API ships one model)
            min_detection_confidence: Minimum confidence for detection
            min_tracking_confidence: Minimum confidence for tracking
            model_path: Landmarker model file (downloaded if missing)
        """
        import mediapipe as mp
        from mediapipe.tasks import python
        from mediapipe.tasks.python import vision

        self._mp = mp
        self.max_hands = max_hands
        self.model_complexity = model_complexity
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence

        self._model_path = Path(model_path) if model_path else resolve_model_path()
        if not self._model_path.exists():
            _download_model(self._model_path)

        base_options = python.BaseOptions(model_asset_path=str(self._model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_hands=max_hands,
            min_hand_detection_confidence=min_detection_confidence,
            min_hand_presence_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence
        )
        self.detector = vision.HandLandmarker.create_from_options(options)

        # VIDEO mode requires strictly increasing timestamps
        self._start_time = time.time()
        self._last_timestamp_ms = -1

    def _next_timestamp(self) -> int:
        timestamp = int((time.time() - self._start_time) * 1000)
        timestamp = max(timestamp, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp
        return timestamp

    def process(self, frame: np.ndarray) -> List[HandData]:
        """
        Detect hands in a BGR frame.

        Args:
            frame: BGR image from camera

        Returns:
            List of HandData objects, empty if no hand is visible
        """
        height, width = frame.shape[:2]
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=rgb_frame)

        results = self.detector.detect_for_video(mp_image, self._next_timestamp())

        hands_data = []
        for idx, hand_landmarks in enumerate(results.hand_landmarks or []):
            handedness = "Right"
            confidence = 0.0
            if results.handedness and idx < len(results.handedness):
                hand_info = results.handedness[idx]
                if hand_info:
                    handedness = hand_info[0].category_name
                    confidence = hand_info[0].score

            hands_data.append(HandData(
                landmarks=landmarks_from_normalized(
                    [(lm.x, lm.y, lm.z) for lm in hand_landmarks], width, height
                ),
                handedness=handedness,
                confidence=confidence
            ))

        return hands_data

    def draw_landmarks(
        self,
        frame: np.ndarray,
        hand_data: HandData,
        landmark_color: Tuple[int, int, int] = (255, 242, 0),
        connection_color: Tuple[int, int, int] = (255, 255, 255),
        thickness: int = 2
    ) -> np.ndarray:
        """
        Draw hand landmarks and bones on frame.

        Args:
            frame: Image to draw on
            hand_data: Hand data to visualize
            landmark_color: BGR color for landmarks
            connection_color: BGR color for connections
            thickness: Line thickness

        Returns:
            Frame with landmarks drawn
        """
        for start, end in HAND_CONNECTIONS:
            p1 = hand_data.landmarks.get(HandLandmark(start))
            p2 = hand_data.landmarks.get(HandLandmark(end))
            if p1 and p2:
                cv2.line(frame, p1.to_tuple(), p2.to_tuple(), connection_color, thickness)

        for point in hand_data.landmarks.values():
            cv2.circle(frame, point.to_tuple(), 4, landmark_color, -1)

        return frame

    def release(self):
        """Release resources."""
        if self.detector:
            self.detector.close()
            self.detector = None


def landmarks_from_normalized(
    coords: List[Tuple[float, float, float]],
    width: int,
    height: int
) -> Dict[HandLandmark, Point]:
    """
    Convert normalized (x, y, z) landmarks into Points.

    Pixel coordinates are clamped to the frame bounds.
    """
    landmarks = {}
    for idx, (x, y, z) in enumerate(coords):
        px = max(0, min(int(x * width), width - 1))
        py = max(0, min(int(y * height), height - 1))
        landmarks[HandLandmark(idx)] = Point(x=x, y=y, z=z, px=px, py=py)
    return landmarks


if __name__ == "__main__":
    from .camera import Camera

    print("Testing Hand Tracking Module")
    print("=" * 40)
    print("Press 'q' to quit")

    with Camera() as cam:
        tracker = HandTracker()

        while True:
            frame = cam.get_frame()
            if frame is None:
                continue

            for hand in tracker.process(frame):
                frame = tracker.draw_landmarks(frame, hand)

            cv2.imshow("Hand Tracking Test", frame)
            if cv2.waitKey(1) & 0xFF == ord('q'):
                break

        tracker.release()
        cv2.destroyAllWindows()
