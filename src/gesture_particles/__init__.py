# Gesture Particles - Hand-Controlled 3D Particle Cloud
# Author: Gesture Particles Team
# Version: 1.0.0

"""
Core modules for the gesture-controlled particle cloud:
- shapes: Parametric point cloud generators
- particles: Particle state and per-frame motion integration
- gesture_logic: Pinch distance to scale mapping, gesture channel
- hand_tracking: MediaPipe hand landmark detection
- camera: Webcam stream handler
- gesture_source: Background hand tracking thread
- renderer: OpenCV point cloud presentation
- ui: Main application interface
"""

__version__ = "1.0.0"
__author__ = "Gesture Particles Team"
