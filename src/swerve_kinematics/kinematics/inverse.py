"""
Inverse kinematics for a four-module swerve drive.

Given a chassis twist in the robot frame, compute the velocity each wheel
must produce so that the chassis moves as a rigid body.

Mathematical Model:
    For a module at offset r = (rx, ry) from the chassis centre, with chassis
    translation v = (vx, vy) and yaw rate ω (rad/s, CCW positive):

        v_i = v + ω × r

        vx_i = vx - ω * ry
        vy_i = vy + ω * rx

    The steering angle and drive speed follow from the wheel velocity:

        speed_i = sqrt(vx_i² + vy_i²)
        angle_i = atan2(vy_i, vx_i)          [degrees, (-180, 180]]

    atan2(0, 0) = 0, so a stationary module points forward.

Units:
    vx, vy share the distance unit of the geometry (per second); ω must be in
    radians per second for the cross-product term to carry that same unit.
"""

from typing import Optional

import numpy as np

from .geometry import ModuleState, ModuleStates, SwerveGeometry, Vector2


class InverseKinematicsSolver:
    """
    Maps chassis velocity commands to raw per-module targets.

    The solver is stateless apart from its validated geometry; every call to
    :meth:`solve` is a pure function of its arguments.

    Attributes:
        geometry (SwerveGeometry): Chassis dimensions
    """

    def __init__(self, geometry: Optional[SwerveGeometry] = None):
        self.geometry = geometry or SwerveGeometry()
        self._modules = self.geometry.modules
        self._offsets = self.geometry.offsets

    def wheel_velocities(self, vx: float, vy: float, omega: float) -> np.ndarray:
        """
        Rigid-body wheel velocities for a robot-frame twist.

        Args:
            vx: Forward velocity [unit/s]
            vy: Leftward velocity [unit/s]
            omega: Yaw rate [rad/s], CCW positive

        Returns:
            4x2 array of [vx_i, vy_i] in FL, FR, RL, RR order
        """
        rx = self._offsets[:, 0]
        ry = self._offsets[:, 1]
        return np.column_stack((vx - omega * ry, vy + omega * rx))

    def solve(self, vx: float, vy: float, omega: float) -> ModuleStates:
        """
        Compute unoptimized module targets.

        Returns:
            ModuleStates with angle in (-180, 180] and non-negative speed
        """
        velocities = self.wheel_velocities(vx, vy, omega)
        speeds = np.hypot(velocities[:, 0], velocities[:, 1])
        angles = np.degrees(np.arctan2(velocities[:, 1], velocities[:, 0]))

        return ModuleStates(*(
            ModuleState(
                id=module.id,
                position=module.position,
                velocity=Vector2.from_array(velocity),
                angle=float(angle),
                speed=float(speed),
            )
            for module, velocity, angle, speed in zip(self._modules, velocities, angles, speeds)
        ))

    def __repr__(self) -> str:
        return (f"InverseKinematicsSolver(width={self.geometry.width:.1f}, "
                f"length={self.geometry.length:.1f})")


def calculate_swerve_states(vx: float, vy: float, omega: float,
                            width: float, length: float) -> ModuleStates:
    """
    Compute the four raw module targets for a chassis command.

    Args:
        vx: Robot-frame forward velocity
        vy: Robot-frame leftward velocity
        omega: Yaw rate in rad/s
        width: Chassis width, must be positive
        length: Chassis length, must be positive

    Returns:
        ModuleStates in FL, FR, RL, RR order

    Raises:
        InvalidGeometryError: If width or length is not positive
    """
    return InverseKinematicsSolver(SwerveGeometry(width=width, length=length)).solve(vx, vy, omega)
