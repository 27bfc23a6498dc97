"""
Minimal-rotation steering optimization.

A swerve wheel pointing at angle a and driving at speed s produces the same
ground velocity as the wheel pointing at a + 180 and driving at -s. The
optimizer picks whichever of the two representations needs the smaller
steering rotation from the wheel's current angle, so a module never turns
more than a quarter turn in one step.

Algorithm:
    delta = normalize(target - current)
    if |delta| > 90:
        target, speed = target + 180, -speed
        delta = normalize(target - current)
    angle = current + delta

The returned angle is continuous (not re-wrapped): it is the representative
of the target direction nearest ``current``. Callers feed it back as the next
tick's ``current`` to keep the steering trajectory continuous.
"""

from typing import NamedTuple

from .angles import HALF_TURN, angle_difference
from .geometry import ModuleStates

QUARTER_TURN = 90.0


class OptimizedState(NamedTuple):
    """Steering angle (continuous, degrees) and signed drive speed."""
    angle: float
    speed: float


def optimize_module_state(target_angle: float, target_speed: float,
                          current_angle: float) -> OptimizedState:
    """
    Choose the equivalent module target closest to the current steering angle.

    Args:
        target_angle: Desired wheel direction in degrees, any range
        target_speed: Desired drive speed along ``target_angle``
        current_angle: Wheel's previous optimized angle (continuous)

    Returns:
        OptimizedState whose angle is within 90 degrees of ``current_angle``
    """
    delta = angle_difference(target_angle, current_angle)
    final_speed = target_speed

    if abs(delta) > QUARTER_TURN:
        final_speed = -target_speed
        delta = angle_difference(target_angle + HALF_TURN, current_angle)

    return OptimizedState(angle=current_angle + delta, speed=final_speed)


def optimize_module_states(targets: ModuleStates, previous: ModuleStates) -> ModuleStates:
    """Optimize each raw target against the same-index module from the previous tick."""
    optimized = []
    for target, prior in zip(targets, previous):
        result = optimize_module_state(target.angle, target.speed, prior.angle)
        optimized.append(target.with_target(result.angle, result.speed))
    return ModuleStates(*optimized)
