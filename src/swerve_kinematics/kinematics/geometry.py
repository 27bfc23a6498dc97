"""
Chassis geometry and module state types for a four-module swerve base.

Coordinate Frames:
    - Robot frame: x-forward, y-left, origin at the chassis centre
    - Field frame: x-up, y-left, fixed to the playing field

Module Layout (robot frame, L = length/2, W = width/2):

        FL (+L, +W)    FR (+L, -W)
        RL (-L, +W)    RR (-L, -W)

The order FL, FR, RL, RR is a positional contract: per-wheel continuity
between ticks pairs modules by index.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple, Tuple

import numpy as np

from .angles import normalize_angle, unit_vector


class InvalidGeometryError(ValueError):
    """Raised when a chassis is configured with a non-positive dimension."""


class ModuleId(Enum):
    """Swerve module positions, in their fixed publication order."""
    FL = "FL"
    FR = "FR"
    RL = "RL"
    RR = "RR"


# Corner signs (x, y) for each module, in ModuleId order
_CORNER_SIGNS = {
    ModuleId.FL: (1.0, 1.0),
    ModuleId.FR: (1.0, -1.0),
    ModuleId.RL: (-1.0, 1.0),
    ModuleId.RR: (-1.0, -1.0),
}


@dataclass(frozen=True)
class Vector2:
    """Planar vector; x is forward/up, y is left."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_array(cls, values) -> "Vector2":
        return cls(float(values[0]), float(values[1]))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y])

    @property
    def norm(self) -> float:
        return math.hypot(self.x, self.y)


@dataclass(frozen=True)
class ModuleGeometry:
    """Fixed offset of one wheel module from the robot centre."""

    id: ModuleId
    position: Vector2


@dataclass(frozen=True)
class SwerveGeometry:
    """
    Rectangular swerve chassis dimensions.

    Attributes:
        width: Distance between left and right module centres
        length: Distance between front and rear module centres

    Raises:
        InvalidGeometryError: If either dimension is not a positive finite number
    """

    width: float = 200.0
    length: float = 200.0

    def __post_init__(self):
        """Validate chassis dimensions."""
        for name in ("width", "length"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise InvalidGeometryError(f"Chassis {name} must be positive, got {value}")

    @property
    def modules(self) -> Tuple[ModuleGeometry, ...]:
        """Module offsets in FL, FR, RL, RR order."""
        half_length = self.length / 2.0
        half_width = self.width / 2.0
        return tuple(
            ModuleGeometry(module_id, Vector2(sx * half_length, sy * half_width))
            for module_id, (sx, sy) in _CORNER_SIGNS.items()
        )

    @property
    def offsets(self) -> np.ndarray:
        """4x2 array of module offsets [rx, ry] in FL, FR, RL, RR order."""
        return np.array([module.position.to_array() for module in self.modules])


@dataclass(frozen=True)
class ModuleState:
    """
    Drive target for a single swerve module.

    ``angle`` is the stored steering angle in degrees. Straight out of the
    solver it lies in (-180, 180]; after optimization it is a continuous,
    unbounded value kept close to the previous tick's angle. The physical
    wheel direction is always derived from it through ``physical_angle``.

    ``speed`` is signed after optimization: negative means the wheel drives
    backwards relative to ``angle``.
    """

    id: ModuleId
    position: Vector2
    velocity: Vector2
    angle: float
    speed: float

    @property
    def physical_angle(self) -> float:
        """Steering angle wrapped into (-180, 180]."""
        return normalize_angle(self.angle)

    @property
    def drive_vector(self) -> Vector2:
        """Ground velocity produced by this module: speed * unit(angle)."""
        return Vector2.from_array(self.speed * unit_vector(self.angle))

    def with_target(self, angle: float, speed: float) -> "ModuleState":
        return replace(self, angle=angle, speed=speed)


class ModuleStates(NamedTuple):
    """Four module states in the fixed FL, FR, RL, RR order."""

    front_left: ModuleState
    front_right: ModuleState
    rear_left: ModuleState
    rear_right: ModuleState

    def by_id(self, module_id: ModuleId) -> ModuleState:
        return self[list(ModuleId).index(module_id)]

    @property
    def angles(self) -> np.ndarray:
        return np.array([state.angle for state in self])

    @property
    def speeds(self) -> np.ndarray:
        return np.array([state.speed for state in self])
