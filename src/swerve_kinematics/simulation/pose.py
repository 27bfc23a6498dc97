"""
Robot pose integration on a bounded field.

Physical Model:
    Explicit Euler integration of a planar rigid body over one tick:

        x' = clip(x + vx * dt, -Bx, Bx)
        y' = clip(y + vy * dt, -By, By)
        θ' = normalize(θ + ω * dt)

    with (vx, vy) the field-frame velocity and ω the yaw rate in deg/s.
    The field edge is a hard clamp: position stops advancing, velocity is
    left untouched.

Stability:
    dt is clamped to [0, max_dt] before use so that a stalled or paused
    caller cannot produce a large jump.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..kinematics.angles import normalize_angle
from ..kinematics.geometry import Vector2

logger = logging.getLogger(__name__)

DEFAULT_MAX_DT = 0.1


@dataclass(frozen=True)
class RobotPose:
    """Field-frame robot position and heading (degrees, CCW from +X)."""

    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0

    @property
    def position(self) -> Vector2:
        return Vector2(self.x, self.y)


@dataclass(frozen=True)
class FieldBounds:
    """Half-extents of the field; the robot centre stays in [-x, x] × [-y, y]."""

    x: float = 200.0
    y: float = 250.0

    def __post_init__(self):
        """Validate field bounds."""
        if not (np.isfinite(self.x) and np.isfinite(self.y)):
            raise ValueError(f"Field bounds must be finite, got ({self.x}, {self.y})")
        if self.x <= 0 or self.y <= 0:
            raise ValueError(f"Field bounds must be positive, got ({self.x}, {self.y})")

    def contains(self, pose: RobotPose) -> bool:
        return abs(pose.x) <= self.x and abs(pose.y) <= self.y


def clamp_dt(dt: float, max_dt: float = DEFAULT_MAX_DT) -> float:
    """Clamp a time step into [0, max_dt]."""
    if not np.isfinite(dt):
        raise ValueError(f"Time step must be finite, got {dt}")
    clamped = float(np.clip(dt, 0.0, max_dt))
    if clamped != dt:
        logger.debug(f"Clamped time step from {dt:.4f}s to {clamped:.4f}s")
    return clamped


class PoseIntegrator:
    """
    Fixed-timestep pose integrator with field-bound clamping.

    Attributes:
        bounds (FieldBounds): Position limits
        max_dt (float): Largest time step applied in a single update [s]
    """

    def __init__(self, bounds: Optional[FieldBounds] = None, max_dt: float = DEFAULT_MAX_DT):
        if not np.isfinite(max_dt) or max_dt <= 0:
            raise ValueError(f"Maximum time step must be positive and finite, got {max_dt}")
        self.bounds = bounds or FieldBounds()
        self.max_dt = max_dt

    def integrate(self,
                  pose: RobotPose,
                  field_velocity: Vector2,
                  omega: float,
                  dt: float) -> RobotPose:
        """
        Advance a pose by one tick.

        Args:
            pose: Pose at the start of the tick
            field_velocity: Field-frame translation velocity [unit/s]
            omega: Yaw rate [deg/s], CCW positive
            dt: Elapsed time [s]; clamped to [0, max_dt]

        Returns:
            New pose with clamped position and wrapped heading
        """
        dt = clamp_dt(dt, self.max_dt)

        x = float(np.clip(pose.x + field_velocity.x * dt, -self.bounds.x, self.bounds.x))
        y = float(np.clip(pose.y + field_velocity.y * dt, -self.bounds.y, self.bounds.y))
        heading = normalize_angle(pose.heading + omega * dt)

        return RobotPose(x=x, y=y, heading=heading)

    def __repr__(self) -> str:
        return (f"PoseIntegrator(bounds=({self.bounds.x:.1f}, {self.bounds.y:.1f}), "
                f"max_dt={self.max_dt:.3f}s)")
