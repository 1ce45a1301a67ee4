"""
trajectory_utils.py - Full-revolution sampling of the coupler trajectory.

This module provides:
  - sample_trajectory: drive the position solver from 0 to 360 degrees
  - TrajectoryCache: memo keyed on geometry + assembly mode (not driver angle)
  - Helpers to turn samples into arrays and to find assemblable angle ranges

=============================================================================
STEP_DEGREES (Driver Angle Step):
    Spacing between sampled driver angles. The sampler evaluates
    theta2 = i * step for i = 0 .. floor(360 / step), so a step that divides
    360 evenly also evaluates 360 itself (2 degrees -> 181 evaluations).

    Samples where the mechanism cannot be assembled are DROPPED, so a
    non-Grashof mechanism returns a sequence with gaps in theta2.
    Use find_valid_ranges() to recover the contiguous intervals.
=============================================================================
"""
from __future__ import annotations

import logging
import math
import threading
from collections import OrderedDict

import numpy as np

from configs.appconfig import AppConfig
from configs.appconfig import SAMPLE_STEP_DEGREES
from configs.link_models import AssemblyMode
from configs.link_models import LinkageConfig
from fourbar_tools.kinematic import solve_position
from fourbar_tools.schemas import TrajectorySample

logger = logging.getLogger(__name__)


# =============================================================================
# Type Definitions
# =============================================================================

Trajectory = tuple[TrajectorySample, ...]
TrajectoryArray = np.ndarray  # Shape: (n_samples, 5) -> theta2, theta3, theta4, cx, cy


# =============================================================================
# Sampling
# =============================================================================

def _check_step(step_degrees: float) -> float:
    step = float(step_degrees)
    if not math.isfinite(step) or step <= 0:
        raise ValueError(f'step_degrees must be a positive finite number, got {step_degrees!r}')
    if step < AppConfig.MIN_STEP_DEGREES:
        raise ValueError(f'step_degrees must be at least {AppConfig.MIN_STEP_DEGREES}, got {step_degrees!r}')
    return step


def sample_trajectory(
    config: LinkageConfig,
    mode: AssemblyMode | str | int = AssemblyMode.OPEN,
    step_degrees: float = SAMPLE_STEP_DEGREES,
) -> Trajectory:
    """
    Sample one full driver revolution and keep the assemblable poses.

    The driver angle of `config` is ignored; every other field is used as is.

    Args:
        config: Mechanism geometry
        mode: Assembly branch, held fixed for the whole revolution
        step_degrees: Driver angle spacing in degrees

    Returns:
        Samples ordered by increasing theta2. Invalid angles are omitted.

    Raises:
        ValueError: If step_degrees is not a positive finite number
    """
    step = _check_step(step_degrees)
    mode = AssemblyMode.parse(mode)

    n_steps = int(math.floor(360.0 / step + 1e-9))
    samples = []
    for i in range(n_steps + 1):
        pose = solve_position(config.with_theta2(i * step), mode)
        if pose.is_valid:
            samples.append(pose.to_sample())

    n_dropped = n_steps + 1 - len(samples)
    if n_dropped:
        logger.debug(f'Dropped {n_dropped} of {n_steps + 1} driver angles with no {mode.value} assembly')

    return tuple(samples)


# =============================================================================
# Caching
# =============================================================================

class TrajectoryCache:
    """
    LRU memo for sample_trajectory.

    Keyed on (geometry_key, mode, step). The driver angle is not part of the
    key, so moving the crank never triggers a resample. Results are immutable
    tuples and identical to an uncached call.
    """

    def __init__(self, maxsize: int = AppConfig.TRAJECTORY_CACHE_SIZE):
        if maxsize < 1:
            raise ValueError('maxsize must be at least 1')
        self.maxsize = maxsize
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[tuple, Trajectory] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(
        self,
        config: LinkageConfig,
        mode: AssemblyMode | str | int = AssemblyMode.OPEN,
        step_degrees: float = SAMPLE_STEP_DEGREES,
    ) -> Trajectory:
        step = _check_step(step_degrees)
        mode = AssemblyMode.parse(mode)
        key = (config.geometry_key(), mode, step)

        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self.hits += 1
                return self._entries[key]

        trajectory = sample_trajectory(config, mode, step)

        with self._lock:
            self.misses += 1
            self._entries[key] = trajectory
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)
        return trajectory

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0


# =============================================================================
# Conversion & Analysis
# =============================================================================

def trajectory_to_array(samples: Trajectory) -> TrajectoryArray:
    """Stack samples into an (n, 5) array of theta2, theta3, theta4, cx, cy."""
    if not samples:
        return np.empty((0, 5))
    return np.array([
        (s.theta2, s.theta3, s.theta4, s.cx, s.cy) for s in samples
    ], dtype=float)


def find_valid_ranges(
    samples: Trajectory,
    step_degrees: float = SAMPLE_STEP_DEGREES,
) -> list[tuple[float, float]]:
    """
    Group sampled driver angles into contiguous intervals.

    Two consecutive samples belong to the same interval when their theta2
    values are one step apart.

    Returns:
        [(start_theta2, end_theta2), ...] in increasing order
    """
    step = _check_step(step_degrees)
    ranges: list[tuple[float, float]] = []
    if not samples:
        return ranges

    start = prev = samples[0].theta2
    for sample in samples[1:]:
        if sample.theta2 - prev > step * (1 + 1e-6):
            ranges.append((start, prev))
            start = sample.theta2
        prev = sample.theta2
    ranges.append((start, prev))
    return ranges
