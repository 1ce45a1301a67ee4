"""
matplotlib_config.py - Rendering defaults for linkage plots.

The API server and the test suite render to files only, so the backend is
switched to Agg whenever there is no display and no explicit MPLBACKEND.
"""
from __future__ import annotations

import os

import matplotlib

# Linkage drawings: rounded link ends on a light grid
LINKAGE_RC = {
    'figure.dpi': 100,
    'savefig.dpi': 150,
    'font.size': 10,
    'axes.grid': True,
    'grid.alpha': 0.3,
    'lines.solid_capstyle': 'round',
}


def is_headless() -> bool:
    if os.environ.get('MPLBACKEND'):
        return False
    return os.environ.get('DISPLAY') is None and os.name != 'nt'


def configure_matplotlib_for_backend(headless: bool | None = None) -> str:
    """
    Select the plotting backend and apply the linkage rcParams.

    Call this BEFORE importing matplotlib.pyplot.

    Args:
        headless: force (True) or skip (False) the Agg switch; None detects it

    Returns:
        The backend name matplotlib ends up with
    """
    if headless is None:
        headless = is_headless()
    if headless:
        matplotlib.use('Agg')

    matplotlib.rcParams.update(LINKAGE_RC)
    return matplotlib.get_backend()
