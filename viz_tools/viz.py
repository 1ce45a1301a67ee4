from __future__ import annotations

from pathlib import Path

from configs.matplotlib_config import configure_matplotlib_for_backend
# Configure matplotlib for backend use BEFORE any pyplot import
configure_matplotlib_for_backend()

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import seaborn as sns  # noqa: E402
from pydantic import BaseModel  # noqa: E402
from pydantic import Field  # noqa: E402

from fourbar_tools.schemas import Pose  # noqa: E402
from fourbar_tools.trajectory_utils import Trajectory  # noqa: E402
from fourbar_tools.trajectory_utils import trajectory_to_array  # noqa: E402


class PlotStyleConfig(BaseModel):
    """Pydantic configuration for plot styling"""

    # Colors
    color_palette: str = Field(default='tab10', description='Seaborn color palette for the links')
    pivot_color: str = Field(default='#1f77b4', description='Color for ground pivots')
    coupler_point_color: str = Field(default='#d62728', description='Color for the coupler point and its curve')

    # Line and marker properties
    linewidth: float = Field(default=2.0, ge=0.1, le=10.0, description='Line width')
    markersize: float = Field(default=60.0, ge=1.0, le=500.0, description='Marker size')
    alpha: float = Field(default=0.9, ge=0.0, le=1.0, description='Transparency')

    # Display options
    show_grid: bool = Field(default=True, description='Show grid')
    show_legend: bool = Field(default=True, description='Show legend')
    equal_aspect: bool = Field(default=True, description='Use equal aspect ratio')

    # Output properties
    dpi: int = Field(default=150, ge=72, le=600, description='DPI for saved figures')
    bbox_inches: str = Field(default='tight', description='Bounding box for saved figures')


# Default style configuration
DEFAULT_STYLE = PlotStyleConfig()


def _setup_plot_style(
    title: str,
    style: PlotStyleConfig = DEFAULT_STYLE,
    xlabel: str = 'X',
    ylabel: str = 'Y',
    equal_aspect: bool | None = None,
) -> None:
    """Setup common plot styling"""
    plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title)
    if style.show_grid:
        plt.grid(True, zorder=-1)
    if style.equal_aspect if equal_aspect is None else equal_aspect:
        plt.axis('equal')
    if style.show_legend and plt.gca().get_legend_handles_labels()[0]:
        plt.legend()


def _handle_output(
    title: str, out_path: str | Path | None = None,
    style: PlotStyleConfig = DEFAULT_STYLE,
) -> Path | None:
    """Save the current figure if out_path is given, otherwise show it"""
    if out_path is not None:
        out_path = Path(out_path)
        if out_path.is_dir():
            full_path = out_path / f'{title}.png'
        else:
            full_path = out_path

        full_path.parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(full_path, dpi=style.dpi, bbox_inches=style.bbox_inches)
        plt.close()
        return full_path

    try:
        plt.show()
    except Exception:
        # No display available
        plt.close()
    return None


def plot_linkage(
    pose: Pose,
    samples: Trajectory = (),
    title: str = 'Four-bar Linkage',
    out_path: str | Path | None = None,
    style: PlotStyleConfig = DEFAULT_STYLE,
) -> Path | None:
    """
    Draw one pose of the mechanism over its coupler curve.

    Links are drawn only when the pose is valid; the ground pivots and the
    crank are always drawn.

    Args:
        pose: Output of solve_position
        samples: Output of sample_trajectory (coupler curve), may be empty
        title: Plot title
        out_path: Output path for saving (None to display)
        style: Style configuration

    Returns:
        Path of the saved figure, or None when displayed
    """
    plt.figure(figsize=(10, 8))
    colors = sns.color_palette(style.color_palette)

    if samples:
        arr = trajectory_to_array(samples)
        plt.plot(
            arr[:, 3], arr[:, 4],
            color=style.coupler_point_color, linewidth=style.linewidth / 2,
            alpha=style.alpha * 0.6, linestyle='--', label='coupler curve',
        )

    segments = [('ground', pose.p1, pose.p2), ('crank', pose.p1, pose.a)]
    if pose.is_valid:
        segments += [
            ('coupler', pose.a, pose.b),
            ('rocker', pose.p2, pose.b),
            ('coupler point', pose.a, pose.c),
        ]

    for color, (name, start, end) in zip(colors, segments):
        plt.plot(
            [start[0], end[0]], [start[1], end[1]],
            color=color, linewidth=style.linewidth, alpha=style.alpha,
            linestyle=':' if name == 'ground' else '-', label=name,
        )

    plt.scatter(
        [pose.p1[0], pose.p2[0]], [pose.p1[1], pose.p2[1]],
        color=style.pivot_color, marker='^', s=style.markersize, zorder=10,
    )
    if pose.is_valid:
        plt.scatter(
            pose.c[0], pose.c[1],
            color=style.coupler_point_color, s=style.markersize, zorder=11,
        )
    else:
        plt.annotate(
            'no assembly', xy=pose.a, xytext=(10, 10),
            textcoords='offset points', color=style.coupler_point_color,
        )

    _setup_plot_style(title, style)
    return _handle_output(title, out_path, style)


def plot_angle_curves(
    samples: Trajectory,
    title: str = 'Link Angles',
    out_path: str | Path | None = None,
    style: PlotStyleConfig = DEFAULT_STYLE,
) -> Path | None:
    """
    Plot theta3 and theta4 against the driver angle theta2.

    Gaps where the mechanism cannot assemble are left open instead of being
    bridged by a line.
    """
    plt.figure(figsize=(10, 5))
    colors = sns.color_palette(style.color_palette)

    arr = trajectory_to_array(samples)
    if len(arr) > 1:
        # Break the line at assembly gaps and at +/-180 wraps
        step = np.min(np.diff(arr[:, 0]))
        breaks = np.diff(arr[:, 0]) > step * 1.5
        for col, name, color in ((1, 'theta3', colors[0]), (2, 'theta4', colors[1])):
            wraps = np.abs(np.diff(arr[:, col])) > 180
            split = np.where(breaks | wraps)[0] + 1
            for i, (xs, ys) in enumerate(zip(np.split(arr[:, 0], split), np.split(arr[:, col], split))):
                plt.plot(
                    xs, ys, color=color, linewidth=style.linewidth,
                    alpha=style.alpha, label=name if i == 0 else None,
                )
    elif len(arr) == 1:
        plt.scatter(arr[:, 0], arr[:, 1], color=colors[0], label='theta3')
        plt.scatter(arr[:, 0], arr[:, 2], color=colors[1], label='theta4')

    plt.xlim(0, 360)
    _setup_plot_style(title, style, xlabel='theta2 (deg)', ylabel='angle (deg)', equal_aspect=False)
    return _handle_output(title, out_path, style)
