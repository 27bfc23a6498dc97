"""
Field ↔ robot frame velocity transforms.

Both frames share the planar convention x-up/forward, y-left. The robot
frame is the field frame rotated CCW by the robot heading θ, so

    v_field = R(θ) v_robot,       v_robot = R(θ)ᵀ v_field

    R(θ) = [[cos θ, -sin θ],
            [sin θ,  cos θ]]

Field-centric driving ("push the stick up, the robot goes up the field
regardless of where it faces") feeds R(θ)ᵀ v_field into the solver.
"""

import numpy as np

from .geometry import Vector2


def rotation_matrix(heading: float) -> np.ndarray:
    """2x2 rotation from robot frame to field frame for a heading in degrees."""
    theta = np.radians(heading)
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s],
                     [s, c]])


def field_to_robot(vx: float, vy: float, heading: float) -> Vector2:
    """
    Rotate a field-frame velocity into the robot frame.

    Args:
        vx: Field-frame x velocity
        vy: Field-frame y velocity
        heading: Robot heading in degrees, CCW from field +X

    Returns:
        Robot-frame velocity (rVx = vx cosθ + vy sinθ, rVy = -vx sinθ + vy cosθ)
    """
    return Vector2.from_array(rotation_matrix(heading).T @ np.array([vx, vy]))


def robot_to_field(vx: float, vy: float, heading: float) -> Vector2:
    """Rotate a robot-frame velocity into the field frame."""
    return Vector2.from_array(rotation_matrix(heading) @ np.array([vx, vy]))
