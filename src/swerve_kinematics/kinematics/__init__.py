"""
Swerve drive kinematics.

Components:
    - normalize_angle: angle wrapping into (-180, 180]
    - InverseKinematicsSolver: chassis twist -> four raw module targets
    - optimize_module_state: minimal-rotation equivalent module target
    - field_to_robot / robot_to_field: planar frame transforms
"""

from .angles import normalize_angle, angle_difference, unit_vector
from .geometry import (
    InvalidGeometryError,
    ModuleId,
    ModuleGeometry,
    ModuleState,
    ModuleStates,
    SwerveGeometry,
    Vector2,
)
from .inverse import InverseKinematicsSolver, calculate_swerve_states
from .optimizer import OptimizedState, optimize_module_state, optimize_module_states
from .frames import field_to_robot, robot_to_field, rotation_matrix

__all__ = [
    "normalize_angle",
    "angle_difference",
    "unit_vector",
    "InvalidGeometryError",
    "ModuleId",
    "ModuleGeometry",
    "ModuleState",
    "ModuleStates",
    "SwerveGeometry",
    "Vector2",
    "InverseKinematicsSolver",
    "calculate_swerve_states",
    "OptimizedState",
    "optimize_module_state",
    "optimize_module_states",
    "field_to_robot",
    "robot_to_field",
    "rotation_matrix",
]
