"""
Swerve Kinematics: Four-Module Swerve Drive Kinematics and Simulation

A scientific Python package for teaching and visualizing how a swerve drive
base turns a chassis velocity command into per-wheel steering angles and
drive speeds.

This package implements:
- Angle normalization into (-180, 180]
- Rigid-body inverse kinematics for four independently steered modules
- Minimal-rotation module optimization (steer less, reverse drive instead)
- Field-centric and robot-centric frame transforms
- Fixed-timestep pose integration on a bounded field with trail sampling

Module targets are animation-stable: each wheel's steering angle stays
within a quarter turn of its previous value from one tick to the next.
"""

from .kinematics import (
    InvalidGeometryError,
    InverseKinematicsSolver,
    ModuleId,
    ModuleState,
    ModuleStates,
    SwerveGeometry,
    Vector2,
    calculate_swerve_states,
    field_to_robot,
    normalize_angle,
    optimize_module_state,
    robot_to_field,
)
from .simulation import (
    ChassisCommand,
    CommandScaling,
    DriveMode,
    FieldBounds,
    RobotPose,
    SimulationParameters,
    SwerveSimulation,
    simulation_step,
    stick_to_command,
)

# Optional visualization import (graceful failure if not available)
try:
    from .visualization.plotter import plot_simulation
    _has_visualization = True
except ImportError:
    plot_simulation = None
    _has_visualization = False

__version__ = "1.0.0"
__author__ = "Swerve Kinematics Team"

__all__ = [
    "InvalidGeometryError",
    "InverseKinematicsSolver",
    "ModuleId",
    "ModuleState",
    "ModuleStates",
    "SwerveGeometry",
    "Vector2",
    "calculate_swerve_states",
    "field_to_robot",
    "normalize_angle",
    "optimize_module_state",
    "robot_to_field",
    "ChassisCommand",
    "CommandScaling",
    "DriveMode",
    "FieldBounds",
    "RobotPose",
    "SimulationParameters",
    "SwerveSimulation",
    "simulation_step",
    "stick_to_command",
]

# Add visualization to __all__ only if available
if _has_visualization:
    __all__.append("plot_simulation")
