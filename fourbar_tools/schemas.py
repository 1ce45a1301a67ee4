"""
schemas.py - Data structures for four-bar kinematics.

Result types shared by the position solver, the trajectory sampler and
their consumers (API, plots, tables).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from configs.link_models import AssemblyMode

Point = tuple[float, float]

NAN_POINT: Point = (math.nan, math.nan)


@dataclass(frozen=True)
class Pose:
    """Result of a single position analysis.

    When is_valid is False, b, c, theta3 and theta4 are NaN and reason says
    which assembly test failed. Check is_valid before reading them.
    """
    p1: Point
    p2: Point
    a: Point
    b: Point
    c: Point
    theta2: float   # degrees, as given
    theta3: float   # degrees, (-180, 180]
    theta4: float   # degrees, (-180, 180]
    is_valid: bool
    mode: AssemblyMode
    reason: str | None = None

    def to_sample(self) -> TrajectorySample:
        return TrajectorySample(
            theta2=self.theta2,
            theta3=self.theta3,
            theta4=self.theta4,
            cx=self.c[0],
            cy=self.c[1],
        )

    def to_dict(self) -> dict:
        return {
            'p1': list(self.p1),
            'p2': list(self.p2),
            'a': list(self.a),
            'b': list(self.b),
            'c': list(self.c),
            'theta2': self.theta2,
            'theta3': self.theta3,
            'theta4': self.theta4,
            'is_valid': self.is_valid,
            'mode': self.mode.value,
            'reason': self.reason,
        }


@dataclass(frozen=True)
class TrajectorySample:
    """Reduced form of one valid pose along a driver revolution."""
    theta2: float
    theta3: float
    theta4: float
    cx: float
    cy: float

    def to_dict(self) -> dict:
        return {
            'theta2': self.theta2,
            'theta3': self.theta3,
            'theta4': self.theta4,
            'cx': self.cx,
            'cy': self.cy,
        }


class GrashofType(str, Enum):
    """Mobility class from the Grashof link-length inequality."""
    CRANK_ROCKER = 'crank-rocker'
    DOUBLE_CRANK = 'double-crank'
    DOUBLE_ROCKER = 'double-rocker'
    ROCKER_CRANK = 'rocker-crank'
    CHANGE_POINT = 'change-point'
    TRIPLE_ROCKER = 'triple-rocker'

    @property
    def is_grashof(self) -> bool:
        return self is not GrashofType.TRIPLE_ROCKER
