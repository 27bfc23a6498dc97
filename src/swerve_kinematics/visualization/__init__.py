"""
Visualization components for swerve simulations.
"""

from .plotter import chassis_outline, plot_simulation, save_snapshot

__all__ = [
    "chassis_outline",
    "plot_simulation",
    "save_snapshot",
]
