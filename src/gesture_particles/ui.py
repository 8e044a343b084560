"""
UI Module - Main Application Interface
======================================
Gesture-controlled particle cloud. Runs the frame loop: read the latest
gesture, update the particles, present them, handle the keyboard.
"""

import argparse
import os
import cv2
import numpy as np
from typing import Optional
import time

from .camera import Camera
from .hand_tracking import HandTracker
from .gesture_logic import GestureChannel, GestureReading
from .gesture_source import GestureSource
from .particles import DEFAULT_PARTICLE_COUNT, create_state, switch_shape, update
from .renderer import ColorPalette, PointCloudRenderer, parse_hex_color, to_hex
from .shapes import Shape


class ParticleCloudApp:
    """
    Main application class for the gesture-controlled particle cloud.

    Owns the particle state, the renderer and (optionally) the camera
    and gesture tracking thread.
    """

    WINDOW_NAME = "Gesture Particles"
    WINDOW_WIDTH = 1280
    WINDOW_HEIGHT = 720

    SHAPE_KEYS = {
        ord('1'): Shape.HEART,
        ord('2'): Shape.FLOWER,
        ord('3'): Shape.SATURN,
        ord('4'): Shape.FIREWORKS,
        ord('0'): Shape.DEFAULT,
    }

    def __init__(
        self,
        camera_id: int = 0,
        particle_count: int = DEFAULT_PARTICLE_COUNT,
        shape: Shape = Shape.HEART,
        color: str = ColorPalette.CYAN,
        target_fps: int = 60,
        use_camera: bool = True,
        show_preview: bool = False,
        fullscreen: bool = False,
        window_name: Optional[str] = WINDOW_NAME
    ):
        """
        Initialize the application.

        Args:
            camera_id: Camera device index
            particle_count: Number of particles
            shape: Initial shape
            color: Initial particle color ('#RRGGBB')
            target_fps: Frame rate of the render loop
            use_camera: Enable gesture control
            show_preview: Show the camera preview in the corner
            fullscreen: Start in fullscreen
            window_name: OpenCV window title (None renders offscreen)
        """
        self.state = create_state(particle_count, shape)
        self.renderer = PointCloudRenderer(
            width=self.WINDOW_WIDTH,
            height=self.WINDOW_HEIGHT,
            color=color,
            window_name=window_name
        )
        if fullscreen:
            self.renderer.toggle_fullscreen()

        self.channel = GestureChannel()
        self.camera_id = camera_id
        self.use_camera = use_camera
        self.camera: Optional[Camera] = None
        self.tracker: Optional[HandTracker] = None
        self.gesture_source: Optional[GestureSource] = None

        self._frame_interval = 1.0 / max(1, target_fps)
        self._show_preview = show_preview
        self._running = False

        self._colors = ColorPalette.get_all()
        self._current_color_idx = (
            self._colors.index(color) if color in self._colors else 0
        )

        # Performance tracking
        self._fps_counter = 0
        self._fps_time = time.time()
        self._current_fps = 0.0

    def _start_gesture_tracking(self) -> bool:
        """Load the hand model, open the camera and start the tracking thread."""
        self.tracker = HandTracker(
            max_hands=1,
            model_complexity=1,
            min_detection_confidence=0.5,
            min_tracking_confidence=0.5
        )

        self.camera = Camera(camera_id=self.camera_id)
        if not self.camera.start():
            self.camera = None
            self.tracker.release()
            self.tracker = None
            return False

        self.gesture_source = GestureSource(self.camera, self.tracker, self.channel)
        self.gesture_source.start()
        return True

    def _stop_gesture_tracking(self):
        if self.gesture_source is not None:
            self.gesture_source.stop()
        if self.camera is not None:
            self.camera.stop()
        if self.tracker is not None:
            self.tracker.release()
        self.gesture_source = None
        self.camera = None
        self.tracker = None

    def _update_fps(self):
        """Update FPS counter."""
        self._fps_counter += 1
        current_time = time.time()
        elapsed = current_time - self._fps_time

        if elapsed >= 1.0:
            self._current_fps = self._fps_counter / elapsed
            self._fps_counter = 0
            self._fps_time = current_time

    def step(self, now_ms: float) -> np.ndarray:
        """
        Run one frame: update with the latest gesture, then present.

        Returns:
            Rendered frame
        """
        reading: Optional[GestureReading] = self.channel.latest()
        gesture_target = reading.scale if reading is not None else None

        update(self.state, now_ms, gesture_target)
        frame = self.renderer.present(self.state)

        hand_detected = None
        if self.gesture_source is not None:
            hand_detected = reading is not None and reading.hand_detected
        self.renderer.draw_status(frame, [
            f"Shape: {self.state.shape.value}",
            f"Scale: {self.state.gesture.current:.2f}",
            f"FPS: {self._current_fps:.1f}",
        ], hand_detected=hand_detected)

        if self._show_preview and self.gesture_source is not None:
            preview = self.gesture_source.get_preview()
            if preview is not None:
                frame = self.renderer.draw_preview(frame, preview)

        return frame

    def set_shape(self, shape: Shape):
        switch_shape(self.state, shape)
        print(f"[INFO] Shape: {shape.value}")

    def cycle_color(self):
        self._current_color_idx = (self._current_color_idx + 1) % len(self._colors)
        color = self._colors[self._current_color_idx]
        self.renderer.set_color(color)
        print(f"[INFO] Color: {color}")

    def _handle_keyboard(self, key: int) -> bool:
        """
        Handle keyboard input.

        Returns:
            False if should quit, True otherwise
        """
        if key == ord('q') or key == 27:  # Q or Escape
            return False

        if key in self.SHAPE_KEYS:
            self.set_shape(self.SHAPE_KEYS[key])
        elif key == ord('c'):
            self.cycle_color()
        elif key == ord('f'):
            self.renderer.toggle_fullscreen()
        elif key == ord('p'):
            self._show_preview = not self._show_preview

        return True

    def run(self):
        """Run the main application loop."""
        print("\n" + "=" * 60)
        print("  Gesture Particles - Hand-Controlled Particle Cloud")
        print("=" * 60)
        print("\nGesture:")
        print("  Pinch thumb and index together  -> shrink")
        print("  Spread thumb and index apart    -> grow")
        print("\nKeyboard:")
        print("  [1] Heart | [2] Flower | [3] Saturn | [4] Fireworks | [0] Cube")
        print("  [C] Cycle color | [F] Fullscreen | [P] Camera preview")
        print("  [Q] Quit")
        print("\n" + "=" * 60)

        self._running = True

        try:
            if self.use_camera and not self._start_gesture_tracking():
                print("[WARNING] Camera unavailable, gesture control disabled")

            while self._running:
                frame_start = time.time()

                self.renderer.sync_window_size()
                frame = self.step(frame_start * 1000)
                self.renderer.show(frame)
                self._update_fps()

                # Sleep off the rest of the frame inside waitKey
                remaining = self._frame_interval - (time.time() - frame_start)
                key = cv2.waitKey(max(1, int(remaining * 1000))) & 0xFF
                if not self._handle_keyboard(key):
                    break

        finally:
            self._running = False
            self._stop_gesture_tracking()
            self.renderer.close()
            print("\n[INFO] Application closed")


def _hex_color(value: str) -> str:
    """argparse type for '#RRGGBB' colors."""
    try:
        return to_hex(parse_hex_color(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Gesture Particles - morph a particle cloud with your hand"
    )
    parser.add_argument('--camera', type=int,
                        default=int(os.environ.get('PARTICLES_CAMERA', 0)),
                        help='Camera device index')
    parser.add_argument('--particles', type=int,
                        default=int(os.environ.get('PARTICLES_COUNT', DEFAULT_PARTICLE_COUNT)),
                        help='Number of particles')
    parser.add_argument('--shape', choices=Shape.get_all_names(), default='heart',
                        help='Initial shape')
    parser.add_argument('--color', type=_hex_color, default=ColorPalette.CYAN,
                        help='Particle color as #RRGGBB')
    parser.add_argument('--fps', type=int, default=60, help='Target frame rate')
    parser.add_argument('--no-camera', action='store_true',
                        help='Run without gesture control')
    parser.add_argument('--preview', action='store_true',
                        help='Show the camera preview')
    parser.add_argument('--fullscreen', action='store_true', help='Start fullscreen')
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    app = ParticleCloudApp(
        camera_id=args.camera,
        particle_count=args.particles,
        shape=Shape.from_name(args.shape),
        color=args.color,
        target_fps=args.fps,
        use_camera=not args.no_camera,
        show_preview=args.preview,
        fullscreen=args.fullscreen
    )
    app.run()


if __name__ == "__main__":
    main()
