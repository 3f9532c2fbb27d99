"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths (e.g., "~/.circlematrix/...") scattered
   throughout the code.
2. Tuning: Animation, rendering and persistence constants live in one place so the
   controllers and the view agree on them.

Exports:
    DATA_PATH (str): Absolute path to the per-user data directory.
    PROJECTS_PATH (str): Absolute path to the HDF5 project library.
    SETTINGS_PATH (str): Absolute path to the last-session settings JSON.
"""
import math
import os
from pathlib import Path


def get_data_path(relative_path: str = "") -> str:
    """
    Get absolute path inside the user data directory.
    The CIRCLEMATRIX_HOME environment variable overrides the default location.
    """
    override = os.environ.get("CIRCLEMATRIX_HOME")
    if override:
        base_path: Path = Path(override)
    else:
        base_path = Path.home() / ".circlematrix"
    return os.path.join(str(base_path), relative_path)


# Global Paths
DATA_PATH: str = get_data_path()
PROJECTS_PATH: str = get_data_path("projects.h5")
SETTINGS_PATH: str = get_data_path("settings.json")

# Animation constants
ANIMATION = {
    "DEFAULT_DURATION": 4.0,  # seconds for one full sweep at speed 1.0
    "MIN_SPEED": 0.1,
    "MAX_SPEED": 5.0,
    "DEFAULT_SPEED": 1.0,
    "SHAPE_CHANGE_THRESHOLD": 0.1,  # radians
    "SHAPE_CHANGE_ANGLES": (math.pi / 2, 3 * math.pi / 2),
}

# 3D rendering constants
RENDER = {
    "DEFAULT_FOV": 75.0,
    "DEFAULT_CAMERA_POSITION": (0.0, 0.0, 15.0),
    "Z_FIGHTING_OFFSET": 0.001,
    "CIRCLE_SEGMENTS": 32,
    "FRAME_INTERVAL_MS": 16,  # ~60 fps
}

# UI constants
UI = {
    "PREVIEW_SIZE": 600,
    "WINDOW_TITLE": "Circle Matrix",
}

# Project management constants
PROJECT = {
    "MAX_CAPTURES": 50,
    "SHARE_BASE_URL": "https://circlematrix.app/",
}
