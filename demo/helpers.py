"""
Shared utilities for demo scripts.

This module provides:
- A registry of named example mechanisms
- Formatted output helpers
"""
from __future__ import annotations

from configs.link_models import LinkageConfig


# =============================================================================
# MECHANISM REGISTRY
# =============================================================================

MECHANISMS = {
    'reference': {
        'config': LinkageConfig(),
        'description': 'Double-crank with offset coupler point (ground shortest)',
    },
    'crank-rocker': {
        'config': LinkageConfig(r1=4.0, r2=1.0, r3=3.0, r4=3.5, r6=2.0, beta=30.0),
        'description': 'Crank-rocker (crank shortest), full crank rotation',
    },
    'triple-rocker': {
        'config': LinkageConfig(r1=3.0, r2=2.5, r3=1.0, r4=1.2, r6=0.5, beta=0.0),
        'description': 'Non-Grashof triple-rocker, crank only partially rotates',
    },
}


def load_mechanism(name: str) -> tuple[LinkageConfig, str]:
    """
    Look up a named example mechanism.

    Returns:
        (config, description)

    Raises:
        ValueError: If name is unknown
    """
    if name not in MECHANISMS:
        available = list(MECHANISMS.keys())
        raise ValueError(f"Unknown mechanism '{name}'. Available: {available}")

    entry = MECHANISMS[name]
    return entry['config'], entry['description']


# =============================================================================
# OUTPUT HELPERS
# =============================================================================

def print_section(title: str, width: int = 70):
    """Print a formatted section header."""
    print('\n' + '=' * width)
    print(f'  {title}')
    print('=' * width)


def format_angle(value: float) -> str:
    """Degrees with two decimals, or N/A for an undefined angle."""
    return 'N/A' if value != value else f'{value:.2f}'


def print_solution_table(rows: list[dict]):
    """Print rows from solution_table()."""
    print(f"{'theta2 (in)':>12} {'theta3 (coupler)':>18} {'theta4 (output)':>18}")
    for row in rows:
        print(
            f"{row['angle']:>11g}° {format_angle(row['theta3']):>17}° {format_angle(row['theta4']):>17}°",
        )
