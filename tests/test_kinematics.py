"""
test_kinematics.py - Tests for the four-bar position solver.

Covers:
  1. Circle-circle intersection candidates and their labeling
  2. Worked configurations with hand-computed joint positions
  3. Invariants: ground frame, circle membership, angle range, branch symmetry
  4. Unassemblable configurations and their NaN sentinels
  5. Reference-angle tabulation and Grashof classification
"""
from __future__ import annotations

import math

import numpy as np
import pytest

from configs.link_models import AssemblyMode
from configs.link_models import LinkageConfig
from fourbar_tools.kinematic import circle_circle_intersection
from fourbar_tools.kinematic import classify_grashof
from fourbar_tools.kinematic import solution_table
from fourbar_tools.kinematic import solve_position
from fourbar_tools.kinematic import wrap_degrees
from fourbar_tools.schemas import GrashofType


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def reference_config() -> LinkageConfig:
    """r1=1, r2=2, r3=3.5, r4=4, r6=sqrt(5), beta=atan(0.5)."""
    return LinkageConfig(
        r1=1.0, r2=2.0, r3=3.5, r4=4.0,
        r6=math.sqrt(5), beta=math.degrees(math.atan(0.5)), theta2=0.0,
    )


@pytest.fixture
def unreachable_config() -> LinkageConfig:
    """Ground far longer than the other links combined."""
    return LinkageConfig(r1=10.0, r2=1.0, r3=1.0, r4=1.0, r6=0.5, beta=0.0)


def _dist(p, q) -> float:
    return math.hypot(p[0] - q[0], p[1] - q[1])


# =============================================================================
# Test: geometry primitives
# =============================================================================

def test_circle_circle_intersection_both_candidates():
    """Circles at (0,0) r=3 and (4,0) r=3 meet at (2, -sqrt(5)) and (2, +sqrt(5))"""
    right, left = circle_circle_intersection((0, 0), 3, (4, 0), 3)
    assert right == pytest.approx((2.0, -math.sqrt(5)))
    assert left == pytest.approx((2.0, math.sqrt(5)))


def test_circle_circle_intersection_labels_follow_direction():
    """Swapping the circles swaps which candidate is on the right"""
    right, left = circle_circle_intersection((4, 0), 3, (0, 0), 3)
    assert right == pytest.approx((2.0, math.sqrt(5)))
    assert left == pytest.approx((2.0, -math.sqrt(5)))


def test_circle_circle_no_intersection():
    """Separate, nested and concentric circles have no intersection"""
    assert circle_circle_intersection((0, 0), 1, (10, 0), 1) is None
    assert circle_circle_intersection((0, 0), 5, (1, 0), 1) is None
    assert circle_circle_intersection((0, 0), 1, (0, 0), 1) is None


def test_circle_circle_internal_tangent_round_off():
    """d = 0.3 - 0.1 rounds just below |0.5 - 0.3|; still one tangent point"""
    candidates = circle_circle_intersection((0.1, 0.0), 0.5, (0.3, 0.0), 0.3)
    assert candidates is not None
    right, left = candidates
    assert right == pytest.approx((0.6, 0.0), abs=1e-6)
    assert left == pytest.approx((0.6, 0.0), abs=1e-6)


def test_circle_circle_tangent():
    """Externally tangent circles give one point twice"""
    right, left = circle_circle_intersection((0, 0), 1, (2, 0), 1)
    assert right == pytest.approx((1.0, 0.0))
    assert left == pytest.approx((1.0, 0.0))


@pytest.mark.parametrize('angle, expected', [
    (0.0, 0.0),
    (180.0, 180.0),
    (-180.0, 180.0),
    (540.0, 180.0),
    (190.0, -170.0),
    (-190.0, 170.0),
    (725.0, 5.0),
])
def test_wrap_degrees(angle, expected):
    assert wrap_degrees(angle) == pytest.approx(expected)


# =============================================================================
# Test: worked configurations
# =============================================================================

def test_solve_reference_theta2_zero_open(reference_config):
    """
    theta2=0: A=(2,0), d=1, a=-1.375, h=sqrt(3.5^2 - 1.375^2).

    The open branch is to the right of A -> P2, which points along -x,
    so B lies above the ground line.
    """
    pose = solve_position(reference_config, AssemblyMode.OPEN)
    h = math.sqrt(3.5 ** 2 - 1.375 ** 2)

    assert pose.is_valid
    assert pose.reason is None
    assert pose.mode is AssemblyMode.OPEN
    assert pose.a == pytest.approx((2.0, 0.0))
    assert pose.b == pytest.approx((3.375, h))
    assert pose.theta3 == pytest.approx(math.degrees(math.atan2(h, 1.375)))
    assert pose.theta4 == pytest.approx(math.degrees(math.atan2(h, 2.375)))
    assert _dist(pose.b, pose.a) == pytest.approx(3.5)
    assert _dist(pose.b, pose.p2) == pytest.approx(4.0)


def test_solve_reference_theta2_zero_crossed(reference_config):
    """The crossed branch mirrors B across the line through A and P2"""
    pose = solve_position(reference_config, AssemblyMode.CROSSED)
    h = math.sqrt(3.5 ** 2 - 1.375 ** 2)

    assert pose.is_valid
    assert pose.mode is AssemblyMode.CROSSED
    assert pose.b == pytest.approx((3.375, -h))
    assert pose.theta3 == pytest.approx(-math.degrees(math.atan2(h, 1.375)))


def test_solve_reference_theta2_ninety(reference_config):
    """theta2=90: A=(0,2), d=sqrt(5) lies inside [0.5, 7.5]"""
    pose = solve_position(reference_config.with_theta2(90.0))

    assert pose.is_valid
    assert pose.a == pytest.approx((0.0, 2.0), abs=1e-12)
    assert _dist(pose.a, pose.p2) == pytest.approx(math.sqrt(5))
    assert _dist(pose.b, pose.a) == pytest.approx(3.5)
    assert _dist(pose.b, pose.p2) == pytest.approx(4.0)


def test_coupler_point_rides_on_coupler(reference_config):
    """
    r6=sqrt(5), beta=atan(0.5) puts C at (2, 1) in the coupler's own frame:
    two units along A->B and one unit to its left.
    """
    for theta2 in (0.0, 37.0, 90.0, 200.0, 311.0):
        pose = solve_position(reference_config.with_theta2(theta2))
        ux = (pose.b[0] - pose.a[0]) / 3.5
        uy = (pose.b[1] - pose.a[1]) / 3.5
        expected = (pose.a[0] + 2 * ux - uy, pose.a[1] + 2 * uy + ux)
        assert pose.c == pytest.approx(expected)


def test_coupler_point_zero_offset_sits_on_joint_a(reference_config):
    config = reference_config.model_copy(update={'r6': 0.0, 'beta': 75.0})
    pose = solve_position(config.with_theta2(123.0))
    assert pose.c == pytest.approx(pose.a)


def test_driver_angle_is_periodic(reference_config):
    """theta2 outside [0, 360) is accepted and behaves periodically"""
    base = solve_position(reference_config.with_theta2(30.0))
    for theta2 in (390.0, -330.0, 750.0):
        pose = solve_position(reference_config.with_theta2(theta2))
        assert pose.theta2 == theta2
        assert pose.b == pytest.approx(base.b, abs=1e-9)
        assert pose.c == pytest.approx(base.c, abs=1e-9)
        assert pose.theta3 == pytest.approx(base.theta3, abs=1e-9)


def test_mode_accepts_legacy_flags(reference_config):
    assert solve_position(reference_config, 1).b == solve_position(reference_config, 'open').b
    assert solve_position(reference_config, -1).b == solve_position(reference_config, AssemblyMode.CROSSED).b


# =============================================================================
# Test: invariants
# =============================================================================

@pytest.mark.parametrize('mode', list(AssemblyMode))
def test_invariants_over_full_revolution(reference_config, mode):
    """Ground frame, circle membership and angle range hold for every pose"""
    for theta2 in np.arange(0.0, 360.0, 5.0):
        pose = solve_position(reference_config.with_theta2(theta2), mode)
        assert pose.p1 == (0.0, 0.0)
        assert pose.p2 == (1.0, 0.0)
        assert pose.is_valid
        assert _dist(pose.b, pose.a) == pytest.approx(3.5)
        assert _dist(pose.b, pose.p2) == pytest.approx(4.0)
        assert -180.0 < pose.theta3 <= 180.0
        assert -180.0 < pose.theta4 <= 180.0


def test_ground_frame_holds_for_invalid_pose(unreachable_config):
    pose = solve_position(unreachable_config)
    assert pose.p1 == (0.0, 0.0)
    assert pose.p2 == (10.0, 0.0)


def test_branches_are_mirror_images(reference_config):
    """Open and crossed B differ and are symmetric about the line A-P2"""
    for theta2 in np.arange(0.0, 360.0, 10.0):
        config = reference_config.with_theta2(theta2)
        b_open = solve_position(config, AssemblyMode.OPEN).b
        b_cross = solve_position(config, AssemblyMode.CROSSED).b
        a = solve_position(config).a

        assert _dist(b_open, b_cross) > 1e-6

        # Midpoint of the two candidates lies on line A-P2
        mid = ((b_open[0] + b_cross[0]) / 2, (b_open[1] + b_cross[1]) / 2)
        cross = (1.0 - a[0]) * (mid[1] - a[1]) - (0.0 - a[1]) * (mid[0] - a[0])
        assert cross == pytest.approx(0.0, abs=1e-9)


def test_open_branch_is_right_of_a_to_p2(reference_config):
    for theta2 in np.arange(0.0, 360.0, 15.0):
        pose = solve_position(reference_config.with_theta2(theta2), AssemblyMode.OPEN)
        ax, ay = pose.a
        cross = (pose.p2[0] - ax) * (pose.b[1] - ay) - (pose.p2[1] - ay) * (pose.b[0] - ax)
        assert cross < 0


def test_branches_coincide_at_tangency():
    """d == r3 + r4: both modes give the same B, and theta4 reports 180"""
    config = LinkageConfig(r1=3.0, r2=1.0, r3=1.0, r4=1.0, r6=0.0, beta=0.0)
    open_pose = solve_position(config, AssemblyMode.OPEN)
    crossed_pose = solve_position(config, AssemblyMode.CROSSED)

    assert open_pose.is_valid and crossed_pose.is_valid
    assert open_pose.b == pytest.approx((2.0, 0.0))
    assert crossed_pose.b == pytest.approx(open_pose.b)
    assert open_pose.theta3 == pytest.approx(0.0)
    assert open_pose.theta4 == pytest.approx(180.0)


def test_branch_is_continuous_along_revolution(reference_config):
    """A fixed mode never jumps to the other branch between nearby angles"""
    prev = None
    for theta2 in np.arange(0.0, 361.0, 1.0):
        pose = solve_position(reference_config.with_theta2(theta2), AssemblyMode.OPEN)
        if prev is not None:
            assert abs(wrap_degrees(pose.theta4 - prev.theta4)) < 20.0
            assert _dist(pose.b, prev.b) < 1.0
        prev = pose


# =============================================================================
# Test: unassemblable configurations
# =============================================================================

@pytest.mark.parametrize('mode', list(AssemblyMode))
def test_unreachable_config_is_invalid_everywhere(unreachable_config, mode):
    """r3 + r4 < r1 - r2: the coupler and rocker can never meet"""
    for theta2 in np.arange(0.0, 360.0, 10.0):
        pose = solve_position(unreachable_config.with_theta2(theta2), mode)
        assert not pose.is_valid
        assert pose.mode is mode


def test_invalid_pose_uses_nan_sentinels(unreachable_config):
    """theta2=0: A=(1,0), d=9 > r3 + r4 = 2"""
    pose = solve_position(unreachable_config)

    assert not pose.is_valid
    assert pose.a == pytest.approx((1.0, 0.0))
    assert all(math.isnan(v) for v in pose.b)
    assert all(math.isnan(v) for v in pose.c)
    assert math.isnan(pose.theta3)
    assert math.isnan(pose.theta4)
    assert 'cannot reach' in pose.reason


def test_invalid_when_links_overlap():
    """d < |r3 - r4|: one circle sits inside the other"""
    config = LinkageConfig(r1=2.0, r2=1.0, r3=1.0, r4=5.0, r6=1.0, beta=0.0)
    pose = solve_position(config.with_theta2(60.0))
    assert not pose.is_valid
    assert 'overlap' in pose.reason


def test_invalid_when_crank_tip_hits_output_pivot():
    """d == 0 is undefined even when r3 == r4"""
    config = LinkageConfig(r1=2.0, r2=2.0, r3=1.0, r4=1.0, r6=1.0, beta=0.0)
    pose = solve_position(config)
    assert not pose.is_valid
    assert 'coincides' in pose.reason


def test_pose_to_dict_round_trips_fields(reference_config):
    data = solve_position(reference_config).to_dict()
    assert data['mode'] == 'open'
    assert data['is_valid'] is True
    assert data['p2'] == [1.0, 0.0]
    assert len(data['b']) == 2


# =============================================================================
# Test: solution_table
# =============================================================================

def test_solution_table_reference_angles(reference_config):
    rows = solution_table(reference_config, AssemblyMode.OPEN)

    assert [r['angle'] for r in rows] == [0.0, 90.0, 180.0, -90.0]
    assert [r['theta2'] for r in rows] == [0.0, 90.0, 180.0, 270.0]
    assert all(r['is_valid'] for r in rows)

    direct = solve_position(reference_config.with_theta2(270.0), AssemblyMode.OPEN)
    assert rows[3]['theta3'] == pytest.approx(direct.theta3)
    assert rows[3]['theta4'] == pytest.approx(direct.theta4)


def test_solution_table_ignores_config_driver_angle(reference_config):
    """The table depends on geometry only"""
    assert solution_table(reference_config.with_theta2(77.0)) == solution_table(reference_config)


def test_solution_table_marks_invalid_rows(unreachable_config):
    rows = solution_table(unreachable_config, angles=[0, 180])
    assert len(rows) == 2
    assert not any(r['is_valid'] for r in rows)
    assert math.isnan(rows[0]['theta3'])


# =============================================================================
# Test: classify_grashof
# =============================================================================

@pytest.mark.parametrize('lengths, expected', [
    ((1.0, 2.0, 3.5, 4.0), GrashofType.DOUBLE_CRANK),
    ((4.0, 1.0, 3.0, 3.5), GrashofType.CRANK_ROCKER),
    ((3.0, 2.5, 1.0, 2.8), GrashofType.DOUBLE_ROCKER),
    ((4.0, 3.0, 3.5, 1.0), GrashofType.ROCKER_CRANK),
    ((2.0, 1.0, 2.0, 1.0), GrashofType.CHANGE_POINT),
    ((3.0, 2.5, 1.0, 1.2), GrashofType.TRIPLE_ROCKER),
    ((10.0, 1.0, 1.0, 1.0), GrashofType.TRIPLE_ROCKER),
])
def test_classify_grashof(lengths, expected):
    r1, r2, r3, r4 = lengths
    config = LinkageConfig(r1=r1, r2=r2, r3=r3, r4=r4)
    assert classify_grashof(config) is expected


@pytest.mark.parametrize('lengths', [
    (1.0, 2.0, 3.5, 4.0),   # ground shortest
    (4.0, 1.0, 3.0, 3.5),   # crank shortest
    (0.3, 0.1, 0.5, 0.3),   # crank shortest, s + l == p + q
])
def test_grashof_crank_assembles_at_every_angle(lengths):
    """Ground or crank shortest with s + l <= p + q: the crank fully rotates"""
    r1, r2, r3, r4 = lengths
    config = LinkageConfig(r1=r1, r2=r2, r3=r3, r4=r4)
    for theta2 in np.arange(0.0, 360.0, 1.0):
        poses = [solve_position(config.with_theta2(theta2), mode) for mode in AssemblyMode]
        assert any(p.is_valid for p in poses), f"no assembly at theta2={theta2}"


def test_change_point_assembles_at_folded_angle():
    """At theta2=0 the change-point mechanism folds flat; both modes meet there"""
    config = LinkageConfig(r1=0.3, r2=0.1, r3=0.5, r4=0.3)
    assert classify_grashof(config) is GrashofType.CHANGE_POINT

    open_pose = solve_position(config, AssemblyMode.OPEN)
    crossed_pose = solve_position(config, AssemblyMode.CROSSED)
    assert open_pose.is_valid and crossed_pose.is_valid
    assert open_pose.b == pytest.approx((0.6, 0.0), abs=1e-6)
    assert crossed_pose.b == pytest.approx(open_pose.b, abs=1e-6)