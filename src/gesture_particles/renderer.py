"""
Renderer Module - OpenCV Point Cloud Presentation
==================================================
Projects the particle cloud through a perspective camera and splats it
into an image with additive blending. Also owns the window: resize,
fullscreen, overlays and the camera preview.
"""

import cv2
import numpy as np
from typing import Optional, Tuple, List
import math
import re

from .particles import ParticleState


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """
    Parse a '#RRGGBB' (or 'RRGGBB') string.

    Returns:
        BGR color tuple

    Raises:
        ValueError: If the string is not a 6-digit hex color
    """
    text = value.strip()
    if text.startswith("#"):
        text = text[1:]
    if not re.fullmatch(r"[0-9A-Fa-f]{6}", text):
        raise ValueError(f"Invalid hex color: {value!r}")
    r, g, b = (int(text[i:i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


def to_hex(color: Tuple[int, int, int]) -> str:
    """Format a BGR color as '#RRGGBB'."""
    b, g, r = color
    return f"#{r:02X}{g:02X}{b:02X}"


class ColorPalette:
    """Particle colors cycled from the keyboard."""

    CYAN = "#00F2FF"
    MAGENTA = "#FF2E88"
    GOLD = "#FFC93C"
    LIME = "#9DFF5C"
    VIOLET = "#8F5CFF"
    ORANGE = "#FF7A1A"
    WHITE = "#FFFFFF"

    @classmethod
    def get_all(cls) -> List[str]:
        """Get all palette colors."""
        return [cls.CYAN, cls.MAGENTA, cls.GOLD, cls.LIME,
                cls.VIOLET, cls.ORANGE, cls.WHITE]


class PointCloudRenderer:
    """
    Perspective point-cloud renderer.

    The camera sits on the +z axis looking at the origin. The cloud
    slowly rotates about Y and X every presented frame.
    """

    FOV = 75.0              # Vertical field of view, degrees
    NEAR = 0.1
    FAR = 1000.0
    CAMERA_Z = 25.0

    POINT_SIZE = 0.12       # World units, attenuated with depth
    OPACITY = 0.8
    BACKGROUND = (5, 5, 5)  # BGR

    ROTATION_SPEED = (0.001, 0.002)  # Radians per frame about (X, Y)

    def __init__(
        self,
        width: int = 1280,
        height: int = 720,
        color: str = ColorPalette.CYAN,
        window_name: Optional[str] = None
    ):
        """
        Initialize the renderer.

        Args:
            width: Output width in pixels
            height: Output height in pixels
            color: Particle color as '#RRGGBB'
            window_name: OpenCV window to present into (None for offscreen)
        """
        self.width = width
        self.height = height
        self.color = parse_hex_color(color)
        self.window_name = window_name

        self.rotation = [0.0, 0.0]  # (X, Y) radians
        self._fullscreen = False

        if window_name:
            cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
            cv2.resizeWindow(window_name, width, height)

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def focal_length(self) -> float:
        """Focal length in pixels for the vertical FOV."""
        return (self.height / 2) / math.tan(math.radians(self.FOV) / 2)

    def set_color(self, color: str):
        """Set the particle color from a '#RRGGBB' string."""
        self.color = parse_hex_color(color)

    def resize(self, width: int, height: int):
        """Follow a new window size."""
        if width <= 0 or height <= 0:
            return
        self.width = width
        self.height = height

    def sync_window_size(self):
        """Poll the window size and resize to match."""
        if not self.window_name:
            return
        try:
            _, _, w, h = cv2.getWindowImageRect(self.window_name)
        except cv2.error:
            return
        if (w, h) != (self.width, self.height):
            self.resize(w, h)

    def toggle_fullscreen(self) -> bool:
        """Switch the window between fullscreen and normal."""
        self._fullscreen = not self._fullscreen
        if self.window_name:
            mode = cv2.WINDOW_FULLSCREEN if self._fullscreen else cv2.WINDOW_NORMAL
            cv2.setWindowProperty(self.window_name, cv2.WND_PROP_FULLSCREEN, mode)
        return self._fullscreen

    def advance_rotation(self):
        self.rotation[0] += self.ROTATION_SPEED[0]
        self.rotation[1] += self.ROTATION_SPEED[1]

    def _rotation_matrix(self) -> np.ndarray:
        # Euler XYZ: R = Rx @ Ry
        ax, ay = self.rotation
        cx, sx = math.cos(ax), math.sin(ax)
        cy, sy = math.cos(ay), math.sin(ay)
        rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]], dtype=np.float32)
        ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=np.float32)
        return rx @ ry

    def project(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Project world points to pixel coordinates.

        Args:
            points: (N, 3) world positions

        Returns:
            Tuple of (integer pixel coords (M, 2), depths (M,)) for the
            points inside the frustum and the frame
        """
        rotated = points @ self._rotation_matrix().T
        depth = self.CAMERA_Z - rotated[:, 2]

        visible = (depth > self.NEAR) & (depth < self.FAR)
        rotated = rotated[visible]
        depth = depth[visible]

        f = self.focal_length
        sx = self.width / 2 + f * rotated[:, 0] / depth
        sy = self.height / 2 - f * rotated[:, 1] / depth
        pixels = np.stack([sx, sy], axis=-1).astype(np.int32)

        inside = ((pixels[:, 0] >= 0) & (pixels[:, 0] < self.width) &
                  (pixels[:, 1] >= 0) & (pixels[:, 1] < self.height))
        return pixels[inside], depth[inside]

    def point_size_px(self, depth: float) -> int:
        """On-screen point size at a given depth."""
        return max(1, int(round(self.POINT_SIZE * (self.height / 2) / depth)))

    def render(self, state: ParticleState) -> np.ndarray:
        """
        Render the particle positions without advancing the rotation.

        Returns:
            BGR image of the current window size
        """
        pixels, depth = self.project(state.positions)

        # Additive blending: every point adds OPACITY * color to its pixels
        flat = pixels[:, 1] * self.width + pixels[:, 0]
        coverage = np.bincount(flat, minlength=self.width * self.height)
        coverage = coverage.reshape(self.height, self.width).astype(np.float32)

        if len(depth):
            size = self.point_size_px(float(np.median(depth)))
            if size > 1:
                coverage = cv2.boxFilter(coverage, -1, (size, size), normalize=False)

        intensity = (coverage * self.OPACITY)[..., None]
        color = np.array(self.color, dtype=np.float32)
        background = np.array(self.BACKGROUND, dtype=np.float32)
        image = np.clip(background + intensity * color, 0, 255)

        state.dirty = False
        return image.astype(np.uint8)

    def present(self, state: ParticleState) -> np.ndarray:
        """Advance the scene rotation one frame and render."""
        self.advance_rotation()
        return self.render(state)

    def draw_status(
        self,
        image: np.ndarray,
        lines: List[str],
        hand_detected: Optional[bool] = None
    ) -> np.ndarray:
        """Draw status text in the top-left corner."""
        y = 30
        if hand_detected is not None:
            status = "Hand detected" if hand_detected else "Searching for hand..."
            color = (0, 255, 0) if hand_detected else (0, 200, 255)
            cv2.putText(image, status, (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
            y += 28

        for line in lines:
            cv2.putText(image, line, (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55,
                        (200, 200, 200), 1)
            y += 22
        return image

    def draw_preview(
        self,
        image: np.ndarray,
        preview: np.ndarray,
        max_width: int = 240
    ) -> np.ndarray:
        """Place a scaled camera preview in the bottom-right corner."""
        h, w = image.shape[:2]
        ph, pw = preview.shape[:2]
        scale = min(max_width / pw, (h // 3) / ph)
        new_w, new_h = int(pw * scale), int(ph * scale)
        if new_w <= 0 or new_h <= 0 or new_w > w - 20 or new_h > h - 20:
            return image

        small = cv2.resize(preview, (new_w, new_h))
        x, y = w - new_w - 10, h - new_h - 10
        image[y:y + new_h, x:x + new_w] = small
        cv2.rectangle(image, (x - 1, y - 1), (x + new_w, y + new_h), self.color, 1)
        return image

    def show(self, image: np.ndarray):
        """Display an image in the renderer's window."""
        if self.window_name:
            cv2.imshow(self.window_name, image)

    def close(self):
        if self.window_name:
            cv2.destroyWindow(self.window_name)


if __name__ == "__main__":
    from .particles import create_state, update, switch_shape
    from .shapes import Shape
    import time

    print("Testing Renderer Module")
    print("=" * 40)
    print("Press 1-4 to switch shapes, 'q' to quit")

    state = create_state()
    renderer = PointCloudRenderer(window_name="Renderer Test")
    keys = {ord('1'): Shape.HEART, ord('2'): Shape.FLOWER,
            ord('3'): Shape.SATURN, ord('4'): Shape.FIREWORKS}

    while True:
        update(state, time.time() * 1000)
        renderer.show(renderer.present(state))

        key = cv2.waitKey(16) & 0xFF
        if key == ord('q'):
            break
        if key in keys:
            switch_shape(state, keys[key])

    renderer.close()
