"""
Static matplotlib snapshots of a swerve simulation.

Draws, in field coordinates:
    - the field bounds
    - the sampled trail
    - the chassis outline rotated by the robot heading
    - one arrow per module showing its drive vector

Screen Mapping:
    Field +X is drawn upward and field +Y to the left, matching the operator
    view, so the horizontal plot axis is -y and the vertical axis is x.

A module with negative speed drives backwards along its stored angle; the
arrow is drawn along ``ModuleState.drive_vector`` and therefore points the
way the wheel actually pushes.
"""

import logging
from typing import Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Polygon, Rectangle

from ..kinematics.frames import rotation_matrix
from ..kinematics.geometry import ModuleStates, SwerveGeometry
from ..simulation.pose import FieldBounds, RobotPose
from ..simulation.trail import TrailPoint

logger = logging.getLogger(__name__)

MODULE_COLORS = {
    "FL": "tab:blue",
    "FR": "tab:orange",
    "RL": "tab:green",
    "RR": "tab:red",
}


def _to_screen(points: np.ndarray) -> np.ndarray:
    """Map Nx2 field [x, y] points to plot [horizontal, vertical]."""
    points = np.atleast_2d(points)
    return np.column_stack((-points[:, 1], points[:, 0]))


def chassis_outline(pose: RobotPose, geometry: SwerveGeometry) -> np.ndarray:
    """Chassis corners in field coordinates, ordered FL, FR, RR, RL."""
    half_length = geometry.length / 2.0
    half_width = geometry.width / 2.0
    corners = np.array([
        [half_length, half_width],
        [half_length, -half_width],
        [-half_length, -half_width],
        [-half_length, half_width],
    ])
    return corners @ rotation_matrix(pose.heading).T + np.array([pose.x, pose.y])


def plot_simulation(pose: RobotPose,
                    module_states: ModuleStates,
                    trail: Sequence[TrailPoint] = (),
                    geometry: Optional[SwerveGeometry] = None,
                    bounds: Optional[FieldBounds] = None,
                    ax=None,
                    vector_scale: float = 0.4):
    """
    Draw one simulation frame.

    Args:
        pose: Robot pose in the field frame
        module_states: Optimized module targets (robot frame)
        trail: Sampled trail points, oldest first
        geometry: Chassis dimensions
        bounds: Field bounds
        ax: Existing axes to draw into; a new figure is created if None
        vector_scale: Arrow length per unit of module speed

    Returns:
        The matplotlib axes drawn into
    """
    geometry = geometry or SwerveGeometry()
    bounds = bounds or FieldBounds()

    if ax is None:
        fig = plt.figure(figsize=(8, 8))
        ax = fig.add_subplot(111)

    # Field bounds (robot centre limits)
    ax.add_patch(Rectangle((-bounds.y, -bounds.x), 2 * bounds.y, 2 * bounds.x,
                           fill=False, linestyle='--', edgecolor='gray'))

    if len(trail) > 1:
        trail_xy = _to_screen(np.array([[point.x, point.y] for point in trail]))
        ax.plot(trail_xy[:, 0], trail_xy[:, 1], color='tab:purple', alpha=0.6,
                linewidth=1.5, label='Trail')

    ax.add_patch(Polygon(_to_screen(chassis_outline(pose, geometry)), closed=True,
                         fill=False, edgecolor='black', linewidth=2))

    rotation = rotation_matrix(pose.heading)
    origin = np.array([pose.x, pose.y])
    for state in module_states:
        wheel = rotation @ state.position.to_array() + origin
        drive = rotation @ state.drive_vector.to_array() * vector_scale
        (sx, sy), = _to_screen(wheel)
        (dx, dy), = _to_screen(drive)
        color = MODULE_COLORS.get(state.id.value, 'black')
        ax.plot(sx, sy, 'o', color=color, label=state.id.value)
        if abs(state.speed) > 1e-9:
            ax.arrow(sx, sy, dx, dy, color=color, width=1.5, length_includes_head=True)

    margin = max(geometry.width, geometry.length)
    ax.set_xlim(-bounds.y - margin, bounds.y + margin)
    ax.set_ylim(-bounds.x - margin, bounds.x + margin)
    ax.set_aspect('equal')
    ax.set_xlabel('Field -Y')
    ax.set_ylabel('Field +X')
    ax.set_title(f'Pose ({pose.x:.1f}, {pose.y:.1f}) heading {pose.heading:.1f}°')
    ax.grid(True, alpha=0.3)
    ax.legend(loc='upper right', fontsize=8)

    return ax


def save_snapshot(simulation, path: str, dpi: int = 100) -> None:
    """Render a SwerveSimulation's current state to an image file."""
    fig = plt.figure(figsize=(8, 8))
    ax = fig.add_subplot(111)
    plot_simulation(simulation.pose, simulation.module_states, simulation.trail.points,
                    geometry=simulation.geometry, bounds=simulation.parameters.field_bounds,
                    ax=ax)
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logger.info(f"Saved simulation snapshot to {path}")
