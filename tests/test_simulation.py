import pytest
import numpy as np
import math
import threading
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from swerve_kinematics.kinematics import (
    InverseKinematicsSolver,
    SwerveGeometry,
    Vector2,
    calculate_swerve_states,
    normalize_angle,
)
from swerve_kinematics.simulation import (
    ChassisCommand,
    CommandBuffer,
    CommandScaling,
    DriveMode,
    FieldBounds,
    PoseIntegrator,
    RobotPose,
    SimulationParameters,
    SwerveSimulation,
    TrailSampler,
    clamp_dt,
    simulation_step,
    stick_to_command,
)


class TestPoseIntegrator:
    """Test pose integration with dt and field-bound clamping"""

    @pytest.fixture
    def integrator(self):
        return PoseIntegrator(FieldBounds(200.0, 250.0), max_dt=0.1)

    def test_basic_integration(self, integrator):
        pose = integrator.integrate(RobotPose(), Vector2(100.0, -50.0), 90.0, 0.05)

        assert pose.x == pytest.approx(5.0)
        assert pose.y == pytest.approx(-2.5)
        assert pose.heading == pytest.approx(4.5)

    def test_dt_clamped_to_maximum(self, integrator):
        """Test a long stall integrates at most max_dt"""
        pose = integrator.integrate(RobotPose(), Vector2(100.0, 0.0), 0.0, 5.0)
        assert pose.x == pytest.approx(10.0)

    def test_negative_dt_does_not_move(self, integrator):
        start = RobotPose(10.0, 20.0, 30.0)
        pose = integrator.integrate(start, Vector2(100.0, 100.0), 45.0, -0.5)
        assert pose == start

    def test_non_finite_dt_rejected(self, integrator):
        with pytest.raises(ValueError):
            integrator.integrate(RobotPose(), Vector2(), 0.0, float('nan'))

    def test_heading_wraps(self, integrator):
        pose = integrator.integrate(RobotPose(heading=175.0), Vector2(), 100.0, 0.1)
        assert pose.heading == pytest.approx(-175.0)

    def test_position_clamp_converges_to_bound(self, integrator):
        """Test constant velocity ends exactly on the bound, never beyond"""
        pose = RobotPose()
        for _ in range(500):
            pose = integrator.integrate(pose, Vector2(150.0, -150.0), 0.0, 0.05)
            assert abs(pose.x) <= 200.0
            assert abs(pose.y) <= 250.0

        assert pose.x == 200.0
        assert pose.y == -250.0

    def test_clamp_does_not_bounce(self, integrator):
        """Test reversing at the wall moves away immediately"""
        pose = RobotPose(x=200.0)
        pose = integrator.integrate(pose, Vector2(-100.0, 0.0), 0.0, 0.1)
        assert pose.x == pytest.approx(190.0)

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            FieldBounds(0.0, 100.0)
        with pytest.raises(ValueError):
            PoseIntegrator(max_dt=0.0)

    @pytest.mark.parametrize("max_dt", [float('nan'), float('inf')])
    def test_non_finite_max_dt_rejected(self, max_dt):
        """Test a NaN or infinite step limit cannot disable the dt clamp"""
        with pytest.raises(ValueError):
            PoseIntegrator(max_dt=max_dt)

    def test_clamp_dt(self):
        assert clamp_dt(0.05, 0.1) == 0.05
        assert clamp_dt(1.0, 0.1) == 0.1
        assert clamp_dt(-1.0, 0.1) == 0.0


class TestTrailSampler:
    """Test time-decimated trail sampling"""

    def test_stationary_robot_leaves_no_trail(self):
        trail = TrailSampler(capacity=10, min_interval=0.1, speed_threshold=1.0)
        for i in range(20):
            assert trail.sample(RobotPose(), 0.0, i * 0.2) is None
        assert len(trail) == 0

    def test_speed_threshold_is_strict(self):
        trail = TrailSampler(speed_threshold=1.0)
        assert trail.sample(RobotPose(), 1.0, 0.0) is None
        assert trail.sample(RobotPose(), 1.5, 0.0) is not None

    def test_min_interval(self):
        """Test samples closer than the interval are skipped"""
        trail = TrailSampler(capacity=10, min_interval=0.1, speed_threshold=1.0)

        assert trail.sample(RobotPose(1.0, 0.0), 50.0, 0.0) is not None
        assert trail.sample(RobotPose(2.0, 0.0), 50.0, 0.05) is None
        assert trail.sample(RobotPose(3.0, 0.0), 50.0, 0.12) is not None

        assert [p.x for p in trail.points] == [1.0, 3.0]

    def test_capacity_evicts_oldest(self):
        """Test trail keeps only the most recent capacity points"""
        trail = TrailSampler(capacity=5, min_interval=0.0, speed_threshold=0.0)
        for i in range(12):
            trail.sample(RobotPose(float(i), 0.0), 10.0, float(i))

        assert len(trail) == 5
        assert [p.x for p in trail.points] == [7.0, 8.0, 9.0, 10.0, 11.0]

    def test_to_array(self):
        trail = TrailSampler(min_interval=0.0, speed_threshold=0.0)
        assert trail.to_array().shape == (0, 2)

        trail.sample(RobotPose(1.0, 2.0), 5.0, 0.0)
        np.testing.assert_allclose(trail.to_array(), [[1.0, 2.0]])

    def test_clear_resets_sampling_clock(self):
        trail = TrailSampler(min_interval=1.0)
        trail.sample(RobotPose(), 10.0, 0.0)
        trail.clear()

        assert len(trail) == 0
        assert trail.sample(RobotPose(), 10.0, 0.1) is not None

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            TrailSampler(capacity=0)
        with pytest.raises(ValueError):
            TrailSampler(min_interval=-1.0)
        with pytest.raises(ValueError):
            TrailSampler(min_interval=float('nan'))
        with pytest.raises(ValueError):
            TrailSampler(speed_threshold=float('inf'))

    def test_accumulated_clock_samples_every_interval(self):
        """Test float drift in a summed clock does not skip due samples"""
        trail = TrailSampler(capacity=100, min_interval=0.1, speed_threshold=1.0)
        clock = 0.0
        sampled_ticks = []
        for tick in range(20):
            clock += 0.05
            if trail.sample(RobotPose(clock, 0.0), 50.0, clock) is not None:
                sampled_ticks.append(tick)

        assert sampled_ticks == list(range(0, 20, 2))


class TestCommandInput:
    """Test command scaling and snapshotting"""

    def test_stick_up_is_forward(self):
        command = stick_to_command(0.0, 1.0)
        assert command.vx == pytest.approx(150.0)
        assert command.vy == pytest.approx(0.0)

    def test_stick_left_is_positive_y(self):
        command = stick_to_command(-1.0, 0.0)
        assert command.vx == pytest.approx(0.0)
        assert command.vy == pytest.approx(150.0)

    def test_stick_clamped_to_unit_disk(self):
        command = stick_to_command(1.0, 1.0)
        assert math.hypot(command.vx, command.vy) == pytest.approx(150.0)
        assert command.vx == pytest.approx(150.0 / math.sqrt(2))
        assert command.vy == pytest.approx(-150.0 / math.sqrt(2))

    def test_rotation_scaling(self):
        scaling = CommandScaling(max_linear_speed=2.0, max_angular_rate=180.0)
        command = stick_to_command(0.0, 0.0, rotation=0.5, scaling=scaling)
        assert command.omega == pytest.approx(math.pi / 2)
        assert command.omega_degrees == pytest.approx(90.0)

        command = stick_to_command(0.0, 0.0, rotation=-3.0, scaling=scaling)
        assert command.omega == pytest.approx(-math.pi)

    def test_invalid_scaling(self):
        with pytest.raises(ValueError):
            CommandScaling(max_linear_speed=0.0)

    def test_command_buffer_snapshot_is_consistent(self):
        """Test concurrent writers never produce a torn snapshot"""
        buffer = CommandBuffer()
        stop = threading.Event()

        def producer():
            i = 0
            while not stop.is_set():
                buffer.update(ChassisCommand(float(i), float(i), float(i)))
                i += 1

        thread = threading.Thread(target=producer)
        thread.start()
        try:
            for _ in range(2000):
                command = buffer.snapshot()
                assert command.vx == command.vy == command.omega
        finally:
            stop.set()
            thread.join()


class TestSimulationStep:
    """Test per-tick orchestration"""

    def test_zero_command_is_stationary(self):
        result = simulation_step(ChassisCommand(), 0.05, RobotPose())

        assert result.pose == RobotPose()
        assert result.trail_point is None
        for state in result.module_states:
            assert state.speed == 0.0
            assert state.angle == 0.0

    def test_field_centric_transform(self):
        """Test a field-up command drives a left-facing robot to its right"""
        parameters = SimulationParameters(drive_mode=DriveMode.FIELD_CENTRIC)
        result = simulation_step(ChassisCommand(vx=100.0), 0.1, RobotPose(heading=90.0),
                                 parameters=parameters)

        assert result.robot_velocity.x == pytest.approx(0.0, abs=1e-9)
        assert result.robot_velocity.y == pytest.approx(-100.0)
        assert result.pose.x == pytest.approx(10.0)
        assert result.pose.y == pytest.approx(0.0)
        for state in result.module_states:
            assert state.angle == pytest.approx(-90.0)
            assert state.speed == pytest.approx(100.0)

    def test_robot_centric_integrates_in_field_frame(self):
        parameters = SimulationParameters(drive_mode=DriveMode.ROBOT_CENTRIC)
        result = simulation_step(ChassisCommand(vx=100.0), 0.1, RobotPose(heading=90.0),
                                 parameters=parameters)

        assert result.robot_velocity == Vector2(100.0, 0.0)
        assert result.pose.x == pytest.approx(0.0, abs=1e-9)
        assert result.pose.y == pytest.approx(10.0)
        for state in result.module_states:
            assert state.angle == pytest.approx(0.0)

    def test_optimizes_against_previous_states(self):
        """Test a reversed command flips drive instead of steering 180 degrees"""
        previous = calculate_swerve_states(100, 0, 0, 200, 200)
        parameters = SimulationParameters(drive_mode=DriveMode.ROBOT_CENTRIC)
        result = simulation_step(ChassisCommand(vx=-100.0), 0.05, RobotPose(), previous,
                                 parameters=parameters)

        for state in result.module_states:
            assert state.angle == pytest.approx(0.0)
            assert state.speed == pytest.approx(-100.0)

    def test_rotation_uses_radians_for_kinematics_and_degrees_for_heading(self):
        result = simulation_step(ChassisCommand(omega=math.radians(90.0)), 0.1, RobotPose())

        assert result.pose.heading == pytest.approx(9.0)
        # Raw FL target is 135 degrees; from a forward wheel it flips to -45 and reverses drive
        front_left = result.module_states.front_left
        assert front_left.angle == pytest.approx(-45.0)
        assert front_left.speed == pytest.approx(-100.0 * math.sqrt(2) * math.pi / 2)
        assert abs(front_left.speed) == pytest.approx(100.0 * math.sqrt(2) * math.pi / 2)

    def test_non_finite_command_rejected(self):
        with pytest.raises(ValueError):
            simulation_step(ChassisCommand(vx=float('nan')), 0.05, RobotPose())
        with pytest.raises(ValueError):
            simulation_step(ChassisCommand(omega=float('inf')), 0.05, RobotPose())
        with pytest.raises(ValueError):
            simulation_step(ChassisCommand(), float('inf'), RobotPose())

    def test_trail_sampled_when_supplied(self):
        trail = TrailSampler(min_interval=0.1, speed_threshold=1.0)
        result = simulation_step(ChassisCommand(vx=50.0), 0.05, RobotPose(), trail=trail, timestamp=0.05)

        assert result.trail_point is not None
        assert result.trail_point.x == pytest.approx(result.pose.x)
        assert len(trail) == 1


class TestSwerveSimulation:
    """Test the stateful simulation holder"""

    @pytest.fixture
    def simulation(self):
        return SwerveSimulation()

    def test_initialization(self, simulation):
        assert simulation.pose == RobotPose()
        assert simulation.time == 0.0
        assert len(simulation.trail) == 0
        for state in simulation.module_states:
            assert state.angle == 0.0

    def test_invalid_geometry_rejected_before_ticks(self):
        with pytest.raises(ValueError):
            SwerveSimulation(geometry=SwerveGeometry(width=-1.0))

    def test_step_advances_clock_and_pose(self, simulation):
        simulation.set_stick(0.0, 1.0)
        simulation.step(0.05)

        assert simulation.time == pytest.approx(0.05)
        assert simulation.pose.x == pytest.approx(7.5)
        assert simulation.step_count == 1

    def test_steering_continuity(self, simulation):
        """Test no module ever steers more than 90 degrees in one tick"""
        previous = simulation.module_states.angles
        for i in range(400):
            direction = math.radians(i * 37.0)
            simulation.set_stick(math.cos(direction), math.sin(direction), rotation=math.sin(i * 0.1))
            simulation.step(0.02)

            current = simulation.module_states.angles
            for before, after in zip(previous, current):
                assert abs(normalize_angle(after - before)) <= 90.0 + 1e-9
                assert abs(after - before) <= 90.0 + 1e-9
            previous = current

    def test_heading_stays_wrapped(self, simulation):
        simulation.set_stick(0.0, 0.0, rotation=1.0)
        simulation.run(duration=10.0, dt=0.05)

        assert -180.0 < simulation.pose.heading <= 180.0
        # 90 deg/s for 10 s is 900 degrees -> 180
        assert abs(normalize_angle(simulation.pose.heading - 180.0)) < 1e-6

    def test_pose_clamped_at_field_edge(self, simulation):
        simulation.set_stick(0.0, 1.0)
        simulation.run(duration=5.0, dt=0.05)

        assert simulation.pose.x == simulation.parameters.field_bounds.x

    def test_trail_bounded(self):
        """Test trail never exceeds capacity and keeps the newest samples"""
        parameters = SimulationParameters(trail_capacity=20, field_bounds=FieldBounds(1e6, 1e6))
        simulation = SwerveSimulation(parameters=parameters)
        simulation.set_stick(0.5, 0.5)

        appended = []
        for _ in range(600):
            result = simulation.step(0.05)
            if result.trail_point is not None:
                appended.append(result.trail_point)
            assert len(simulation.trail) <= 20

        assert len(appended) > 20
        assert simulation.trail.points == tuple(appended[-20:])

    def test_tick_uses_timestamp_differences(self, simulation):
        simulation.set_stick(0.0, 1.0)
        simulation.tick(10.0)
        assert simulation.pose.x == 0.0

        simulation.tick(10.04)
        assert simulation.pose.x == pytest.approx(6.0)
        assert simulation.time == pytest.approx(10.04)

    def test_tick_clamps_long_gap(self, simulation):
        simulation.set_stick(0.0, 1.0)
        simulation.tick(0.0)
        simulation.tick(30.0)
        assert simulation.pose.x == pytest.approx(15.0)

    def test_tick_rejects_backwards_time(self, simulation):
        simulation.tick(1.0)
        with pytest.raises(ValueError):
            simulation.tick(0.5)

    def test_reset_clears_pose_and_trail(self, simulation):
        simulation.set_stick(0.0, 1.0, rotation=0.5)
        simulation.run(duration=1.0, dt=0.05)
        assert len(simulation.trail) > 0
        angles_before = simulation.module_states.angles

        simulation.reset()

        assert simulation.pose == RobotPose()
        assert len(simulation.trail) == 0
        np.testing.assert_allclose(simulation.module_states.angles, angles_before)

    def test_run_step_count(self, simulation):
        results = simulation.run(duration=1.0, dt=0.1)
        assert len(results) == 10

    def test_run_rejects_bad_arguments(self, simulation):
        with pytest.raises(ValueError):
            simulation.run(duration=1.0, dt=0.0)
        with pytest.raises(ValueError):
            simulation.run(duration=-1.0)

    def test_drive_mode_from_string(self):
        parameters = SimulationParameters(drive_mode="robot")
        assert parameters.drive_mode is DriveMode.ROBOT_CENTRIC

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            SimulationParameters(max_dt=0.0)
        with pytest.raises(ValueError):
            SimulationParameters(trail_capacity=0)

    @pytest.mark.parametrize("overrides", [
        {"max_dt": float('nan')},
        {"max_dt": float('inf')},
        {"trail_interval": float('nan')},
        {"trail_speed_threshold": float('inf')},
    ])
    def test_non_finite_parameters_rejected(self, overrides):
        """Test non-finite configuration is rejected before any tick runs"""
        with pytest.raises(ValueError):
            SwerveSimulation(parameters=SimulationParameters(**overrides))

    def test_fixed_step_trail_samples_every_interval(self):
        """Test step(dt) without timestamps samples the trail on every due tick"""
        simulation = SwerveSimulation(parameters=SimulationParameters(field_bounds=FieldBounds(1e6, 1e6)))
        simulation.set_stick(0.0, 1.0)

        sampled_ticks = [i for i in range(20) if simulation.step(0.05).trail_point is not None]

        assert sampled_ticks == list(range(0, 20, 2))

    def test_collaborators_built_once(self, simulation):
        """Test the simulation reuses one solver and integrator across ticks"""
        solver = simulation.solver
        integrator = simulation.integrator
        simulation.set_stick(0.0, 1.0, rotation=0.5)
        simulation.run(duration=0.5, dt=0.05)

        assert simulation.solver is solver
        assert simulation.integrator is integrator
        assert integrator.max_dt == simulation.parameters.max_dt

    def test_step_accepts_prebuilt_collaborators(self):
        geometry = SwerveGeometry(100.0, 300.0)
        parameters = SimulationParameters(drive_mode=DriveMode.ROBOT_CENTRIC)
        solver = InverseKinematicsSolver(geometry)
        integrator = PoseIntegrator(parameters.field_bounds, parameters.max_dt)
        command = ChassisCommand(vx=20.0, vy=-10.0, omega=0.3)

        shared = simulation_step(command, 0.05, RobotPose(), geometry=geometry, parameters=parameters,
                                 solver=solver, integrator=integrator)
        fresh = simulation_step(command, 0.05, RobotPose(), geometry=geometry, parameters=parameters)

        assert shared.pose == fresh.pose
        np.testing.assert_allclose(shared.module_states.angles, fresh.module_states.angles)
        np.testing.assert_allclose(shared.module_states.speeds, fresh.module_states.speeds)
