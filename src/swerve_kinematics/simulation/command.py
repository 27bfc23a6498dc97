"""
Chassis commands and operator input mapping.

Input Conventions:
    A 2-axis stick reports (x, y) with x positive to the right and y positive
    up, both in [-1, 1]. The chassis frame is x-forward, y-left, so

        vx =  y * max_linear_speed
        vy = -x * max_linear_speed
        ω  = radians(rotation * max_angular_rate)

    Positive rotation input is counter-clockwise.

Threading:
    Input producers may update the command at any time between ticks.
    CommandBuffer guards the latest command with a lock so each tick reads
    one consistent (vx, vy, omega) triple.
"""

import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class DriveMode(Enum):
    """Frame in which chassis commands are expressed."""
    ROBOT_CENTRIC = "robot"   # Command already in the robot frame
    FIELD_CENTRIC = "field"   # Command in the field frame, rotated by heading


@dataclass(frozen=True)
class ChassisCommand:
    """Instantaneous commanded chassis velocity (omega in rad/s)."""

    vx: float = 0.0
    vy: float = 0.0
    omega: float = 0.0

    @property
    def omega_degrees(self) -> float:
        return math.degrees(self.omega)

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite([self.vx, self.vy, self.omega])))


@dataclass(frozen=True)
class CommandScaling:
    """Scaling from normalized operator input to physical command."""

    max_linear_speed: float = 150.0   # [unit/s]
    max_angular_rate: float = 90.0    # [deg/s]

    def __post_init__(self):
        """Validate scaling limits."""
        if self.max_linear_speed <= 0 or self.max_angular_rate <= 0:
            raise ValueError("Command scaling limits must be positive")


def clamp_to_unit_disk(x: float, y: float):
    """Project a stick deflection onto the unit disk, preserving direction."""
    magnitude = math.hypot(x, y)
    if magnitude > 1.0:
        return x / magnitude, y / magnitude
    return x, y


def stick_to_command(stick_x: float, stick_y: float, rotation: float = 0.0,
                     scaling: Optional[CommandScaling] = None) -> ChassisCommand:
    """
    Convert normalized operator input into a chassis command.

    Args:
        stick_x: Stick deflection to the right, [-1, 1]
        stick_y: Stick deflection up, [-1, 1]
        rotation: Rotation input, [-1, 1], CCW positive
        scaling: Physical limits; defaults to CommandScaling()

    Returns:
        ChassisCommand with up mapped to +X and left mapped to +Y
    """
    scaling = scaling or CommandScaling()
    x, y = clamp_to_unit_disk(stick_x, stick_y)
    rotation = float(np.clip(rotation, -1.0, 1.0))

    return ChassisCommand(
        vx=y * scaling.max_linear_speed,
        vy=-x * scaling.max_linear_speed,
        omega=math.radians(rotation * scaling.max_angular_rate),
    )


class CommandBuffer:
    """Latest chassis command, shared between an input producer and the tick loop."""

    def __init__(self, initial: Optional[ChassisCommand] = None):
        self._command = initial or ChassisCommand()
        self._lock = threading.Lock()

    def update(self, command: ChassisCommand) -> None:
        with self._lock:
            self._command = command

    def snapshot(self) -> ChassisCommand:
        with self._lock:
            return self._command
