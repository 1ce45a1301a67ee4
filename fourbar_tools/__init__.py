"""
Four-bar linkage position analysis.

Modules:
- kinematic: position solver, tabulation, Grashof classification
- trajectory_utils: full-revolution sampling and trajectory caching
- schemas: Pose / TrajectorySample result types
"""
from __future__ import annotations

from configs.link_models import AssemblyMode
from configs.link_models import LinkageConfig
from configs.link_models import config_from_params
from fourbar_tools.kinematic import circle_circle_intersection
from fourbar_tools.kinematic import classify_grashof
from fourbar_tools.kinematic import solution_table
from fourbar_tools.kinematic import solve_position
from fourbar_tools.schemas import GrashofType
from fourbar_tools.schemas import Pose
from fourbar_tools.schemas import TrajectorySample
from fourbar_tools.trajectory_utils import TrajectoryCache
from fourbar_tools.trajectory_utils import find_valid_ranges
from fourbar_tools.trajectory_utils import sample_trajectory
from fourbar_tools.trajectory_utils import trajectory_to_array

__all__ = [
    'AssemblyMode',
    'LinkageConfig',
    'config_from_params',
    'circle_circle_intersection',
    'classify_grashof',
    'solution_table',
    'solve_position',
    'GrashofType',
    'Pose',
    'TrajectorySample',
    'TrajectoryCache',
    'find_valid_ranges',
    'sample_trajectory',
    'trajectory_to_array',
]
