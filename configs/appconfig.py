# Application Configuration
# Centralized configuration for ports, output paths and solver defaults
from __future__ import annotations

import math
from pathlib import Path


class AppConfig:
    """Centralized application configuration"""

    USER_DIR = Path(__file__).parent.parent / "user"

    # Port Configuration
    BACKEND_PORT = 8021

    # Reference mechanism (double-crank with coupler point)
    DEFAULT_R1 = 1.0
    DEFAULT_R2 = 2.0
    DEFAULT_R3 = 3.5
    DEFAULT_R4 = 4.0
    DEFAULT_R6 = math.sqrt(5)
    DEFAULT_BETA = math.degrees(math.atan(0.5))
    DEFAULT_THETA2 = 0.0

    # Sampling
    SAMPLE_STEP_DEGREES = 2.0
    MIN_STEP_DEGREES = 1e-3
    REFERENCE_ANGLES = (0.0, 90.0, 180.0, -90.0)
    TRAJECTORY_CACHE_SIZE = 32

    @classmethod
    def default_linkage(cls) -> dict[str, float]:
        return {
            'r1': cls.DEFAULT_R1,
            'r2': cls.DEFAULT_R2,
            'r3': cls.DEFAULT_R3,
            'r4': cls.DEFAULT_R4,
            'r6': cls.DEFAULT_R6,
            'beta': cls.DEFAULT_BETA,
            'theta2': cls.DEFAULT_THETA2,
        }


# For easy imports
BACKEND_PORT = AppConfig.BACKEND_PORT
USER_DIR = AppConfig.USER_DIR
SAMPLE_STEP_DEGREES = AppConfig.SAMPLE_STEP_DEGREES
REFERENCE_ANGLES = AppConfig.REFERENCE_ANGLES
