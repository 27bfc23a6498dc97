"""
Angle utilities for swerve kinematics.

All angles in this package are expressed in degrees, measured from the
robot's +X (forward) axis, positive counter-clockwise toward +Y (left).

Mathematical Framework:
    Canonical range is the half-open interval (-180, 180]:

        normalize(a) = ((a mod 360) - 360)   if (a mod 360) > 180
                     = (a mod 360)           otherwise

    Python's float modulo takes the sign of the divisor, so a single modulo
    lands in [0, 360] and one subtraction is enough. The boundary value
    -180 therefore maps to +180.
"""

import numpy as np


HALF_TURN = 180.0
FULL_TURN = 360.0


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle in degrees into the range (-180, 180].

    Args:
        angle: Angle in degrees, any finite value

    Returns:
        Equivalent angle in (-180, 180]
    """
    angle = float(angle)
    if -HALF_TURN < angle <= HALF_TURN:
        return angle

    wrapped = angle % FULL_TURN
    if wrapped > HALF_TURN:
        wrapped -= FULL_TURN
    return wrapped


def angle_difference(target: float, current: float) -> float:
    """Shortest signed rotation (degrees) taking ``current`` onto ``target``."""
    return normalize_angle(target - current)


def unit_vector(angle: float) -> np.ndarray:
    """Unit direction [cos, sin] for an angle in degrees."""
    theta = np.radians(angle)
    return np.array([np.cos(theta), np.sin(theta)])
