#!/usr/bin/env python3
"""
Swerve Drive Simulation Demo

Drives a simulated swerve robot with a constant stick input and reports the
resulting pose, module targets and trail.

Run with: swerve-sim --stick-y 1.0 --rotation 0.5 --duration 4
"""

import argparse
import logging
import sys

from .kinematics.geometry import SwerveGeometry
from .simulation.command import CommandScaling, DriveMode
from .simulation.pose import FieldBounds
from .simulation.step import SimulationParameters, SwerveSimulation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Swerve drive kinematics simulation')
    parser.add_argument('--stick-x', type=float, default=0.0,
                        help='Stick deflection to the right, [-1, 1]')
    parser.add_argument('--stick-y', type=float, default=0.0,
                        help='Stick deflection up, [-1, 1]')
    parser.add_argument('--rotation', type=float, default=0.0,
                        help='Rotation input, [-1, 1], CCW positive')
    parser.add_argument('--mode', choices=[mode.value for mode in DriveMode],
                        default=DriveMode.FIELD_CENTRIC.value,
                        help='Frame the stick command is expressed in')
    parser.add_argument('--duration', type=float, default=5.0,
                        help='Simulated time in seconds')
    parser.add_argument('--dt', type=float, default=1.0 / 60.0,
                        help='Tick period in seconds')
    parser.add_argument('--width', type=float, default=200.0, help='Chassis width')
    parser.add_argument('--length', type=float, default=200.0, help='Chassis length')
    parser.add_argument('--max-speed', type=float, default=150.0,
                        help='Linear speed at full stick [unit/s]')
    parser.add_argument('--max-omega', type=float, default=90.0,
                        help='Yaw rate at full rotation input [deg/s]')
    parser.add_argument('--plot', metavar='PATH',
                        help='Save a snapshot of the final state to PATH')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def print_report(simulation: SwerveSimulation) -> None:
    """Print the final simulation state."""
    pose = simulation.pose
    print(f"Simulated {simulation.time:.2f}s over {simulation.step_count} ticks")
    print(f"Pose: x={pose.x:.2f} y={pose.y:.2f} heading={pose.heading:.2f}°")
    print()
    print("Module   angle(cont)   angle(phys)     speed")
    for state in simulation.module_states:
        print(f"  {state.id.value}   {state.angle:11.2f}   {state.physical_angle:11.2f}   {state.speed:8.2f}")
    print()
    print(f"Trail points: {len(simulation.trail)} / {simulation.trail.capacity}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        simulation = SwerveSimulation(
            geometry=SwerveGeometry(width=args.width, length=args.length),
            parameters=SimulationParameters(field_bounds=FieldBounds(),
                                            drive_mode=DriveMode(args.mode)),
            scaling=CommandScaling(max_linear_speed=args.max_speed,
                                   max_angular_rate=args.max_omega),
        )
        simulation.set_stick(args.stick_x, args.stick_y, args.rotation)
        simulation.run(args.duration, args.dt)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print_report(simulation)

    if args.plot:
        import matplotlib
        matplotlib.use('Agg')
        from .visualization.plotter import save_snapshot
        save_snapshot(simulation, args.plot)
        print(f"Snapshot saved to {args.plot}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
