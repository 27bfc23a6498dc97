"""
Tick-driven swerve robot simulation.

Components:
    - PoseIntegrator: Euler pose update with dt and field-bound clamping
    - TrailSampler: time-decimated, capacity-bounded pose history
    - CommandBuffer / stick_to_command: command snapshotting and input scaling
    - simulation_step / SwerveSimulation: per-tick orchestration
"""

from .command import (
    ChassisCommand,
    CommandBuffer,
    CommandScaling,
    DriveMode,
    clamp_to_unit_disk,
    stick_to_command,
)
from .pose import FieldBounds, PoseIntegrator, RobotPose, clamp_dt
from .trail import TrailPoint, TrailSampler
from .step import SimulationParameters, StepResult, SwerveSimulation, simulation_step

__all__ = [
    "ChassisCommand",
    "CommandBuffer",
    "CommandScaling",
    "DriveMode",
    "clamp_to_unit_disk",
    "stick_to_command",
    "FieldBounds",
    "PoseIntegrator",
    "RobotPose",
    "clamp_dt",
    "TrailPoint",
    "TrailSampler",
    "SimulationParameters",
    "StepResult",
    "SwerveSimulation",
    "simulation_step",
]
