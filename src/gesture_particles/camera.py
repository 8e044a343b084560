"""
Camera Module - Webcam Stream Handler
======================================
Captures webcam frames on a background thread and keeps only the newest
one. Each stored frame carries a sequence number so consumers can tell a
new frame from one they have already processed.
"""

import cv2
import numpy as np
from typing import Optional, Tuple
import threading
import time


class Camera:
    """
    Threaded webcam reader with a single latest-frame slot.

    Attributes:
        camera_id: Index of the camera device (default 0)
        width: Frame width in pixels
        height: Frame height in pixels
        fps: Requested frames per second
        mirror: Flip frames horizontally
    """

    def __init__(
        self,
        camera_id: int = 0,
        width: int = 640,
        height: int = 480,
        fps: int = 30,
        mirror: bool = True,
        backend: int = cv2.CAP_ANY
    ):
        """
        Initialize the camera with specified parameters.

        Args:
            camera_id: Camera device index
            width: Desired frame width
            height: Desired frame height
            fps: Target frame rate
            mirror: Flip frames horizontally (more intuitive for the user)
            backend: OpenCV capture backend (e.g. cv2.CAP_DSHOW on Windows)
        """
        self.camera_id = camera_id
        self.width = width
        self.height = height
        self.fps = fps
        self.mirror = mirror
        self.backend = backend

        self.cap: Optional[cv2.VideoCapture] = None

        # Latest frame slot
        self._frame: Optional[np.ndarray] = None
        self._frame_seq = 0
        self._frame_lock = threading.Lock()
        self._running = False
        self._thread: Optional[threading.Thread] = None

        self._start_time = 0.0

    def start(self) -> bool:
        """
        Start the camera capture.

        Returns:
            True if camera started successfully, False otherwise
        """
        self.cap = cv2.VideoCapture(self.camera_id, self.backend)

        if not self.cap.isOpened():
            print(f"[ERROR] Failed to open camera {self.camera_id}")
            self.cap.release()
            self.cap = None
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.fps)
        # Buffer of 1 for minimum latency
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        # Actual resolution may differ from requested
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        print(f"[INFO] Camera started: {self.width}x{self.height} @ {self.fps}fps")

        self._running = True
        self._start_time = time.time()
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()

        return True

    def _capture_loop(self):
        """Capture frames until stopped."""
        while self._running:
            ret, frame = self.cap.read()
            if ret:
                self._store_frame(frame)
            else:
                time.sleep(0.001)

    def _store_frame(self, frame: np.ndarray):
        if self.mirror:
            frame = cv2.flip(frame, 1)

        with self._frame_lock:
            self._frame = frame
            self._frame_seq += 1

    def read_latest(self) -> Tuple[int, Optional[np.ndarray]]:
        """
        Read the newest frame with its sequence number.

        Returns:
            Tuple of (sequence number, copy of the frame or None).
            The sequence number is 0 until the first frame arrives.
        """
        with self._frame_lock:
            if self._frame is None:
                return self._frame_seq, None
            return self._frame_seq, self._frame.copy()

    def get_frame(self) -> Optional[np.ndarray]:
        """Get a copy of the latest frame, or None if none arrived yet."""
        return self.read_latest()[1]

    def get_fps(self) -> float:
        """Average capture rate since start."""
        elapsed = time.time() - self._start_time
        if elapsed <= 0:
            return 0.0
        with self._frame_lock:
            return self._frame_seq / elapsed

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self):
        """Stop the camera capture and release resources."""
        self._running = False

        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self.cap is not None:
            self.cap.release()
            self.cap = None
            print("[INFO] Camera stopped")

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
        return False


if __name__ == "__main__":
    print("Testing Camera Module")
    print("=" * 40)
    print("Press 'q' to quit")

    with Camera() as cam:
        while cam.is_running:
            frame = cam.get_frame()
            if frame is not None:
                cv2.putText(
                    frame, f"FPS: {cam.get_fps():.1f}", (10, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 1, (0, 255, 0), 2
                )
                cv2.imshow("Camera Test", frame)

            if cv2.waitKey(1) & 0xFF == ord('q'):
                break

        cv2.destroyAllWindows()
