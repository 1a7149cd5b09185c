from __future__ import annotations

import logging
import math

from pygame.math import Vector3

from .config import TargetConfig
from .rng import DeterministicRng
from ..utils.math3d import as_vector, is_finite_vector, lerp

logger = logging.getLogger("shoal.target")


class Target:
    """Attractor point drifting along a spiral whose extents change periodically.

    The position trails the spiral point through a small linear interpolation
    step each frame, so the flock sees a smooth path rather than a jumping one.
    Radius changes are driven from ``update`` by accumulated frame time.
    """

    def __init__(self, config: TargetConfig, rng: DeterministicRng):
        self._config = config
        self._rng = rng
        self.position = as_vector(config.initial_position)
        self.target_position = self.position.copy()
        self.angle = 0.0
        self.radius = config.radius
        self.y_radius = config.y_radius
        self.angular_speed = config.angular_speed
        self.move_speed = config.move_speed
        self._since_randomize = 0.0

    def update(self, dt: float) -> bool:
        interval = self._config.randomize_interval
        if interval > 0:
            self._since_randomize += dt
            while self._since_randomize >= interval:
                self._since_randomize -= interval
                self.randomize_radius()
        return self.update_position(dt)

    def randomize_radius(self) -> None:
        config = self._config
        self.radius = config.radius_min + self._rng.next_float() * config.radius_span
        self.y_radius = config.y_radius_min + self._rng.next_float() * config.y_radius_span
        logger.debug("New target radius x=%.3f y=%.3f", self.radius, self.y_radius)

    def update_position(self, dt: float = 0.016) -> bool:
        if not _valid_radius(self.radius) or not _valid_radius(self.y_radius):
            logger.warning(
                "Invalid target radius (radius=%r, y_radius=%r); skipping update", self.radius, self.y_radius
            )
            return False

        self.angle += self.angular_speed * dt
        if not math.isfinite(self.angle):
            logger.error("Target angle is not finite; resetting to 0")
            self.angle = 0.0

        self.target_position = Vector3(
            self.radius * math.cos(self.angle),
            self.y_radius * math.sin(self.angle),
            self.radius * math.sin(self.angle),
        )
        position = lerp(self.position, self.target_position, self.move_speed)
        if not is_finite_vector(position):
            logger.error("Target position is not finite (move_speed=%r); keeping previous position", self.move_speed)
            return False
        self.position = position
        return True


def _valid_radius(value: float) -> bool:
    return math.isfinite(value) and value > 0
