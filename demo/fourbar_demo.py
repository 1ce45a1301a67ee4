#!/usr/bin/env python3
"""
fourbar_demo.py - Solve, tabulate and plot an example four-bar mechanism.

Usage:
    python -m demo.fourbar_demo
    python -m demo.fourbar_demo --mechanism triple-rocker --mode crossed --theta2 30
"""
from __future__ import annotations

import argparse

from configs.appconfig import SAMPLE_STEP_DEGREES
from configs.appconfig import USER_DIR
from configs.link_models import AssemblyMode
from demo.helpers import load_mechanism
from demo.helpers import MECHANISMS
from demo.helpers import print_section
from demo.helpers import print_solution_table
from fourbar_tools.kinematic import classify_grashof
from fourbar_tools.kinematic import solution_table
from fourbar_tools.kinematic import solve_position
from fourbar_tools.trajectory_utils import find_valid_ranges
from fourbar_tools.trajectory_utils import sample_trajectory
from viz_tools.viz import plot_angle_curves
from viz_tools.viz import plot_linkage


def main(argv=None):
    parser = argparse.ArgumentParser(description='Four-bar coupler-point demo')
    parser.add_argument('--mechanism', choices=list(MECHANISMS), default='reference')
    parser.add_argument('--mode', choices=[m.value for m in AssemblyMode], default='open')
    parser.add_argument('--theta2', type=float, default=None, help='Driver angle to draw (degrees)')
    parser.add_argument('--step', type=float, default=SAMPLE_STEP_DEGREES, help='Sampling step (degrees)')
    parser.add_argument('--no-plots', action='store_true')
    args = parser.parse_args(argv)

    config, description = load_mechanism(args.mechanism)
    if args.theta2 is not None:
        config = config.with_theta2(args.theta2)
    mode = AssemblyMode(args.mode)

    print_section(f'{args.mechanism}: {description}')
    print(f'Links: {config.link_lengths()}')
    print(f'Coupler point: r6={config.r6:.3f}, beta={config.beta:.3f} deg')
    print(f'Grashof class: {classify_grashof(config).value}')

    print_section(f'Exact solutions ({mode.value})')
    print_solution_table(solution_table(config, mode))

    samples = sample_trajectory(config, mode, args.step)
    ranges = find_valid_ranges(samples, args.step)
    print_section('Trajectory')
    print(f'Valid samples: {len(samples)}')
    for start, end in ranges:
        print(f'  assembles for theta2 in [{start:g}, {end:g}]')

    pose = solve_position(config, mode)
    if pose.is_valid:
        print(f'Pose at theta2={config.theta2:g}: B=({pose.b[0]:.4f}, {pose.b[1]:.4f}), '
              f'C=({pose.c[0]:.4f}, {pose.c[1]:.4f})')
    else:
        print(f'No assembly at theta2={config.theta2:g}: {pose.reason}')

    if not args.no_plots:
        linkage_path = plot_linkage(
            pose, samples,
            title=f'{args.mechanism} ({mode.value})',
            out_path=USER_DIR / f'{args.mechanism}_{mode.value}_linkage.png',
        )
        angles_path = plot_angle_curves(
            samples,
            title=f'{args.mechanism} angles ({mode.value})',
            out_path=USER_DIR / f'{args.mechanism}_{mode.value}_angles.png',
        )
        print(f'\nSaved: {linkage_path}')
        print(f'Saved: {angles_path}')


if __name__ == '__main__':
    main()
