"""
Time-decimated pose history.

A point is recorded when the robot is actually moving and enough time has
passed since the previous sample, so a stationary robot leaves no trail and
a fast tick rate does not flood the buffer. The buffer keeps the most recent
``capacity`` points, oldest first.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .pose import RobotPose

logger = logging.getLogger(__name__)

# Slack for clocks accumulated from repeated float additions of dt
_TIME_TOLERANCE = 1e-9


@dataclass(frozen=True)
class TrailPoint:
    x: float
    y: float


class TrailSampler:
    """
    Capacity-bounded trail of sampled robot positions.

    Args:
        capacity: Maximum number of retained points
        min_interval: Minimum time between samples [s]
        speed_threshold: Field speed a robot must exceed to be sampled [unit/s]
    """

    def __init__(self, capacity: int = 100, min_interval: float = 0.1,
                 speed_threshold: float = 1.0):
        if capacity <= 0:
            raise ValueError("Trail capacity must be positive")
        if not (np.isfinite(min_interval) and np.isfinite(speed_threshold)):
            raise ValueError("Trail sampling interval and speed threshold must be finite")
        if min_interval < 0:
            raise ValueError("Trail sampling interval must be non-negative")
        if speed_threshold < 0:
            raise ValueError("Trail speed threshold must be non-negative")

        self.capacity = capacity
        self.min_interval = min_interval
        self.speed_threshold = speed_threshold

        self._points = deque(maxlen=capacity)
        self._last_sample_time: Optional[float] = None

    def sample(self, pose: RobotPose, field_speed: float, timestamp: float) -> Optional[TrailPoint]:
        """
        Offer the newly integrated pose to the trail.

        Args:
            pose: Pose after this tick's integration
            field_speed: Instantaneous field-frame speed [unit/s]
            timestamp: Current time [s], monotonically increasing

        Returns:
            The appended point, or None when the sample was skipped
        """
        if field_speed <= self.speed_threshold:
            return None
        if (self._last_sample_time is not None
                and timestamp - self._last_sample_time < self.min_interval - _TIME_TOLERANCE):
            return None

        if len(self._points) == self.capacity:
            logger.debug(f"Trail full ({self.capacity} points), dropping oldest sample")

        point = TrailPoint(pose.x, pose.y)
        self._points.append(point)
        self._last_sample_time = timestamp
        return point

    def clear(self) -> None:
        self._points.clear()
        self._last_sample_time = None

    @property
    def points(self) -> Tuple[TrailPoint, ...]:
        """Retained points, oldest first."""
        return tuple(self._points)

    def to_array(self) -> np.ndarray:
        """Nx2 array of [x, y] positions, oldest first."""
        if not self._points:
            return np.empty((0, 2))
        return np.array([[point.x, point.y] for point in self._points])

    def __len__(self) -> int:
        return len(self._points)
