"""
Per-tick swerve simulation.

One tick runs, in order:

    1. Frame transform   - field-centric commands are rotated into the robot
                           frame using the heading at the start of the tick
    2. Inverse kinematics - four raw module targets
    3. Optimization      - each target against the same module's previous
                           angle, for steering continuity
    4. Pose integration  - field-frame velocity and yaw rate over clamped dt
    5. Trail sampling    - optional, on the newly integrated pose

``simulation_step`` is a pure function of its inputs (plus the trail object
the caller hands it). ``SwerveSimulation`` is the caller-owned holder that
threads pose, module states and trail from one tick to the next.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..kinematics.frames import field_to_robot, robot_to_field
from ..kinematics.geometry import ModuleStates, SwerveGeometry, Vector2
from ..kinematics.inverse import InverseKinematicsSolver
from ..kinematics.optimizer import optimize_module_states
from .command import ChassisCommand, CommandBuffer, CommandScaling, DriveMode, stick_to_command
from .pose import DEFAULT_MAX_DT, FieldBounds, PoseIntegrator, RobotPose
from .trail import TrailPoint, TrailSampler

logger = logging.getLogger(__name__)


@dataclass
class SimulationParameters:
    """Simulation configuration with validation."""

    max_dt: float = DEFAULT_MAX_DT              # Largest integrated time step [s]
    field_bounds: FieldBounds = field(default_factory=FieldBounds)
    trail_capacity: int = 100                   # Retained trail points
    trail_interval: float = 0.1                 # Minimum time between trail samples [s]
    trail_speed_threshold: float = 1.0          # Minimum field speed to record trail [unit/s]
    drive_mode: DriveMode = DriveMode.FIELD_CENTRIC

    def __post_init__(self):
        """Validate simulation parameters."""
        if not np.isfinite(self.max_dt) or self.max_dt <= 0:
            raise ValueError(f"Maximum time step must be positive and finite, got {self.max_dt}")
        if self.trail_capacity <= 0:
            raise ValueError(f"Trail capacity must be positive, got {self.trail_capacity}")
        if not (np.isfinite(self.trail_interval) and np.isfinite(self.trail_speed_threshold)):
            raise ValueError("Trail sampling interval and speed threshold must be finite")
        if self.trail_interval < 0 or self.trail_speed_threshold < 0:
            raise ValueError("Trail sampling interval and speed threshold must be non-negative")
        if not isinstance(self.drive_mode, DriveMode):
            self.drive_mode = DriveMode(self.drive_mode)


@dataclass
class StepResult:
    """Everything published by one simulation tick."""

    pose: RobotPose
    module_states: ModuleStates
    field_velocity: Vector2
    robot_velocity: Vector2
    trail_point: Optional[TrailPoint] = None


def simulation_step(command: ChassisCommand,
                    dt: float,
                    previous_pose: RobotPose,
                    previous_module_states: Optional[ModuleStates] = None,
                    *,
                    geometry: Optional[SwerveGeometry] = None,
                    parameters: Optional[SimulationParameters] = None,
                    trail: Optional[TrailSampler] = None,
                    timestamp: float = 0.0,
                    solver: Optional[InverseKinematicsSolver] = None,
                    integrator: Optional[PoseIntegrator] = None) -> StepResult:
    """
    Advance the swerve simulation by one tick.

    Args:
        command: Chassis command snapshot for this tick (omega in rad/s)
        dt: Elapsed time since the previous tick [s]; clamped to [0, max_dt]
        previous_pose: Pose published by the previous tick
        previous_module_states: Module states published by the previous tick;
            None starts from the zero-command solution (all wheels forward)
        geometry: Chassis dimensions
        parameters: Simulation configuration
        trail: Trail to sample the new pose into, owned by the caller
        timestamp: Current time for trail decimation [s]
        solver: Prebuilt solver for ``geometry``; built on demand if None
        integrator: Prebuilt integrator for ``parameters``; built on demand if None

    Returns:
        StepResult built entirely from this tick's values

    Raises:
        ValueError: If the command or dt is not finite
    """
    if not command.is_finite():
        raise ValueError(f"Chassis command contains NaN or infinite values: {command}")
    if not np.isfinite(dt):
        raise ValueError(f"Time step must be finite, got {dt}")

    parameters = parameters or SimulationParameters()
    solver = solver or InverseKinematicsSolver(geometry)

    if parameters.drive_mode is DriveMode.FIELD_CENTRIC:
        field_velocity = Vector2(command.vx, command.vy)
        robot_velocity = field_to_robot(command.vx, command.vy, previous_pose.heading)
    else:
        robot_velocity = Vector2(command.vx, command.vy)
        field_velocity = robot_to_field(command.vx, command.vy, previous_pose.heading)

    targets = solver.solve(robot_velocity.x, robot_velocity.y, command.omega)
    if previous_module_states is None:
        previous_module_states = solver.solve(0.0, 0.0, 0.0)
    module_states = optimize_module_states(targets, previous_module_states)

    integrator = integrator or PoseIntegrator(parameters.field_bounds, parameters.max_dt)
    pose = integrator.integrate(previous_pose, field_velocity, command.omega_degrees, dt)

    trail_point = None
    if trail is not None:
        trail_point = trail.sample(pose, field_velocity.norm, timestamp)

    return StepResult(
        pose=pose,
        module_states=module_states,
        field_velocity=field_velocity,
        robot_velocity=robot_velocity,
        trail_point=trail_point,
    )


class SwerveSimulation:
    """
    Stateful swerve robot simulation driven by an external tick source.

    The instance owns everything carried between ticks: pose, the previous
    module states (continuity reference for the optimizer), the trail and the
    simulation clock. Commands arrive through a CommandBuffer and may be
    written from another thread; ticks themselves must be serialized.

    Attributes:
        geometry (SwerveGeometry): Chassis dimensions
        parameters (SimulationParameters): Integration and trail configuration
        scaling (CommandScaling): Operator input limits
        pose (RobotPose): Latest published pose
        module_states (ModuleStates): Latest published module targets
        trail (TrailSampler): Sampled pose history
        time (float): Simulation clock [s]
    """

    def __init__(self,
                 geometry: Optional[SwerveGeometry] = None,
                 parameters: Optional[SimulationParameters] = None,
                 scaling: Optional[CommandScaling] = None):
        self.geometry = geometry or SwerveGeometry()
        self.parameters = parameters or SimulationParameters()
        self.scaling = scaling or CommandScaling()

        self.commands = CommandBuffer()
        self.trail = TrailSampler(
            capacity=self.parameters.trail_capacity,
            min_interval=self.parameters.trail_interval,
            speed_threshold=self.parameters.trail_speed_threshold,
        )

        self.solver = InverseKinematicsSolver(self.geometry)
        self.integrator = PoseIntegrator(self.parameters.field_bounds, self.parameters.max_dt)

        self.pose = RobotPose()
        self.module_states = self.solver.solve(0.0, 0.0, 0.0)
        self.time = 0.0
        self.step_count = 0
        self._last_timestamp: Optional[float] = None

        logger.info(f"SwerveSimulation initialized: {self.geometry.width:.1f}x{self.geometry.length:.1f} "
                    f"chassis, {self.parameters.drive_mode.value}-centric driving")

    def set_command(self, command: ChassisCommand) -> None:
        self.commands.update(command)

    def set_stick(self, stick_x: float, stick_y: float, rotation: float = 0.0) -> None:
        """Set the command from normalized operator input (see stick_to_command)."""
        self.commands.update(stick_to_command(stick_x, stick_y, rotation, self.scaling))

    def step(self, dt: float, timestamp: Optional[float] = None) -> StepResult:
        """
        Run one tick with the latest command snapshot.

        Args:
            dt: Elapsed time since the previous tick [s]
            timestamp: Clock value for this tick; defaults to time + dt

        Returns:
            StepResult of this tick; the instance state is replaced by it
        """
        command = self.commands.snapshot()
        if timestamp is None:
            timestamp = self.time + max(dt, 0.0)

        result = simulation_step(
            command, dt, self.pose, self.module_states,
            geometry=self.geometry,
            parameters=self.parameters,
            trail=self.trail,
            timestamp=timestamp,
            solver=self.solver,
            integrator=self.integrator,
        )

        self.pose = result.pose
        self.module_states = result.module_states
        self.time = timestamp
        self.step_count += 1
        return result

    def tick(self, timestamp: float) -> StepResult:
        """
        Run one tick at a scheduler timestamp [s].

        The time step is the difference to the previous timestamp; the first
        tick only establishes the reference and integrates nothing.

        Raises:
            ValueError: If timestamp goes backwards
        """
        if self._last_timestamp is None:
            dt = 0.0
        elif timestamp < self._last_timestamp:
            raise ValueError(f"Timestamp went backwards: {timestamp} < {self._last_timestamp}")
        else:
            dt = timestamp - self._last_timestamp

        if dt > 10 * self.parameters.max_dt:
            logger.warning(f"Tick gap of {dt:.3f}s, integrating only {self.parameters.max_dt:.3f}s")

        result = self.step(dt, timestamp=timestamp)
        self._last_timestamp = timestamp
        return result

    def run(self, duration: float, dt: float = 0.02) -> List[StepResult]:
        """Run fixed-timestep ticks covering ``duration`` seconds."""
        if duration < 0:
            raise ValueError(f"Duration must be non-negative, got {duration}")
        if dt <= 0:
            raise ValueError(f"Time step must be positive, got {dt}")

        n_steps = int(math.ceil(duration / dt - 1e-9))
        return [self.step(dt) for _ in range(n_steps)]

    def reset(self) -> None:
        """Return the robot to the origin and clear its trail."""
        self.pose = RobotPose()
        self.trail.clear()
        logger.info("SwerveSimulation reset")

    def __repr__(self) -> str:
        return (f"SwerveSimulation(pose=({self.pose.x:.1f}, {self.pose.y:.1f}, "
                f"{self.pose.heading:.1f}°), t={self.time:.2f}s)")
