"""
Visualization tools for four-bar mechanisms.

Modules:
- viz: static pose / coupler curve and link angle plots
"""
from __future__ import annotations

from viz_tools.viz import DEFAULT_STYLE
from viz_tools.viz import plot_angle_curves
from viz_tools.viz import plot_linkage
from viz_tools.viz import PlotStyleConfig

__all__ = [
    'plot_linkage',
    'plot_angle_curves',
    'PlotStyleConfig',
    'DEFAULT_STYLE',
]
