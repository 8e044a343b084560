#!/usr/bin/env python
"""
Gesture Particles - Main Entry Point
====================================
Run the gesture-controlled particle cloud.
"""

from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from gesture_particles.ui import main

if __name__ == "__main__":
    main()
