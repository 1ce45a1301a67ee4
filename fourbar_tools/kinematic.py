"""
kinematic.py - Closed-form position analysis of a four-bar linkage.

This module provides:
  - Circle-circle intersection returning both candidate points
  - The position solver: driver angle -> pose of joints A, B and coupler point C
  - Reference-angle tabulation and Grashof classification helpers

Design notes:
  - Every function is pure; nothing here keeps state between calls
  - All angles cross the public interface in degrees, radians are internal
  - The frame never moves: first pivot at the origin, second pivot at (r1, 0)
  - An unreachable assembly is a result (Pose.is_valid == False), not an exception
"""
from __future__ import annotations

import logging
import math
from typing import Iterable

import numpy as np

from configs.appconfig import REFERENCE_ANGLES
from configs.link_models import AssemblyMode
from configs.link_models import LinkageConfig
from fourbar_tools.schemas import GrashofType
from fourbar_tools.schemas import NAN_POINT
from fourbar_tools.schemas import Point
from fourbar_tools.schemas import Pose

logger = logging.getLogger(__name__)

# Relative tolerance for the Grashof equality (change-point) test
GRASHOF_TOLERANCE = 1e-9

# Relative slack on the circle reach test, absorbs round-off at tangency
REACH_TOLERANCE = 1e-12


# =============================================================================
# Geometry Primitives
# =============================================================================

def wrap_degrees(angle: float) -> float:
    """Wrap an angle in degrees into (-180, 180]."""
    wrapped = (angle + 180.0) % 360.0 - 180.0
    if wrapped <= -180.0:
        wrapped += 360.0
    return wrapped


def circle_circle_intersection(
    center0: Point,
    radius0: float,
    center1: Point,
    radius1: float,
) -> tuple[Point, Point] | None:
    """
    Compute both intersection points of two circles.

    Args:
        center0, radius0: First circle
        center1, radius1: Second circle

    Returns:
        (right, left) where "right" lies on the right-hand side of the directed
        line center0 -> center1 and "left" on the left-hand side. The two are
        equal when the circles are tangent. None when the circles do not meet
        or share a center.
    """
    dx = center1[0] - center0[0]
    dy = center1[1] - center0[1]
    d = float(np.hypot(dx, dy))

    if d == 0:
        return None
    tol = REACH_TOLERANCE * max(radius0 + radius1, d)
    if d > radius0 + radius1 + tol or d < abs(radius0 - radius1) - tol:
        return None

    # Signed distance from center0 to the radical line, then half-chord length
    a = (radius0 * radius0 - radius1 * radius1 + d * d) / (2 * d)
    h = float(np.sqrt(max(0.0, radius0 * radius0 - a * a)))

    px = center0[0] + (a * dx) / d
    py = center0[1] + (a * dy) / d

    right = (px + (h * dy) / d, py - (h * dx) / d)
    left = (px - (h * dy) / d, py + (h * dx) / d)
    return right, left


def _assembly_failure(d: float, r3: float, r4: float) -> str:
    """Describe why joint B cannot be placed for a crank-tip distance d."""
    if d == 0:
        return 'crank tip coincides with the output pivot'
    if d > r3 + r4:
        return f'coupler and output link cannot reach: d={d:.6g} > r3+r4={r3 + r4:.6g}'
    return f'coupler and output link overlap: d={d:.6g} < |r3-r4|={abs(r3 - r4):.6g}'


# =============================================================================
# Position Solver
# =============================================================================

def solve_position(
    config: LinkageConfig,
    mode: AssemblyMode | str | int = AssemblyMode.OPEN,
) -> Pose:
    """
    Solve the pose of a four-bar linkage for one driver angle.

    Joint B is the intersection of the circle of radius r3 around joint A and
    the circle of radius r4 around the output pivot. OPEN picks the candidate to
    the right of the directed line A -> output pivot, CROSSED the one to the left.

    Args:
        config: Link lengths, coupler-point offset and driver angle
        mode: Assembly branch (enum, 'open'/'crossed', or +1/-1)

    Returns:
        Pose. Never raises for a valid LinkageConfig; an impossible assembly
        yields is_valid=False with NaN for B, C, theta3 and theta4.
    """
    mode = AssemblyMode.parse(mode)

    p1 = (0.0, 0.0)
    p2 = (float(config.r1), 0.0)

    theta2_rad = np.radians(config.theta2)
    a = (
        float(config.r2 * np.cos(theta2_rad)),
        float(config.r2 * np.sin(theta2_rad)),
    )

    candidates = circle_circle_intersection(a, config.r3, p2, config.r4)
    if candidates is None:
        d = float(np.hypot(p2[0] - a[0], p2[1] - a[1]))
        reason = _assembly_failure(d, config.r3, config.r4)
        logger.debug(f'No assembly at theta2={config.theta2}: {reason}')
        return Pose(
            p1=p1,
            p2=p2,
            a=a,
            b=NAN_POINT,
            c=NAN_POINT,
            theta2=config.theta2,
            theta3=math.nan,
            theta4=math.nan,
            is_valid=False,
            mode=mode,
            reason=reason,
        )

    right, left = candidates
    b = right if mode is AssemblyMode.OPEN else left

    theta3_rad = float(np.arctan2(b[1] - a[1], b[0] - a[0]))
    theta4_rad = float(np.arctan2(b[1] - p2[1], b[0] - p2[0]))

    # beta is measured from the coupler link, so C turns with A->B
    angle_ac = theta3_rad + np.radians(config.beta)
    c = (
        float(a[0] + config.r6 * np.cos(angle_ac)),
        float(a[1] + config.r6 * np.sin(angle_ac)),
    )

    return Pose(
        p1=p1,
        p2=p2,
        a=a,
        b=b,
        c=c,
        theta2=config.theta2,
        theta3=wrap_degrees(math.degrees(theta3_rad)),
        theta4=wrap_degrees(math.degrees(theta4_rad)),
        is_valid=True,
        mode=mode,
    )


# =============================================================================
# Tabulation & Classification
# =============================================================================

def solution_table(
    config: LinkageConfig,
    mode: AssemblyMode | str | int = AssemblyMode.OPEN,
    angles: Iterable[float] = REFERENCE_ANGLES,
) -> list[dict]:
    """
    Solve the mechanism at a set of reference driver angles.

    Negative angles are brought into [0, 360) before solving.

    Returns:
        One row per angle:
        {'angle', 'theta2', 'theta3', 'theta4', 'is_valid'}
    """
    rows = []
    for angle in angles:
        theta2 = float(angle) % 360.0
        pose = solve_position(config.with_theta2(theta2), mode)
        rows.append({
            'angle': float(angle),
            'theta2': theta2,
            'theta3': pose.theta3,
            'theta4': pose.theta4,
            'is_valid': pose.is_valid,
        })
    return rows


def classify_grashof(config: LinkageConfig) -> GrashofType:
    """
    Classify the mechanism by the Grashof inequality s + l <= p + q.

    Grashof mechanisms are named by which link is shortest; an equality is a
    change-point mechanism and anything else a triple-rocker.
    """
    lengths = config.link_lengths()
    shortest = min(lengths, key=lengths.get)
    s = lengths[shortest]
    l = max(lengths.values())
    pq = sum(lengths.values()) - s - l

    if abs((s + l) - pq) <= GRASHOF_TOLERANCE * max(l, 1.0):
        return GrashofType.CHANGE_POINT
    if s + l > pq:
        return GrashofType.TRIPLE_ROCKER

    return {
        'ground': GrashofType.DOUBLE_CRANK,
        'crank': GrashofType.CRANK_ROCKER,
        'coupler': GrashofType.DOUBLE_ROCKER,
        'rocker': GrashofType.ROCKER_CRANK,
    }[shortest]
