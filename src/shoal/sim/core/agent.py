from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pygame.math import Vector3

from .config import BoidParams
from .rng import DeterministicRng
from ..utils.math3d import orientation_from_direction, safe_normalize


@dataclass(slots=True)
class Boid:
    id: int
    position: Vector3
    velocity: Vector3
    direction: Vector3
    radius: float
    max_speed: float
    max_steering_force: float
    acceleration: float
    wander_angle: float = 0.0
    spatial_handle: Optional[tuple[int, int, int]] = None
    yaw: float = 0.0
    pitch: float = 0.0
    visual: Any = None


def spawn_boid(boid_id: int, params: BoidParams, rng: DeterministicRng) -> Boid:
    low = params.spawn_min
    high = params.spawn_max
    position = Vector3(
        rng.next_range(low[0], high[0]),
        rng.next_range(low[1], high[1]),
        rng.next_range(low[2], high[2]),
    )
    heading = Vector3(rng.next_range(-1.0, 1.0), 0.0, rng.next_range(-1.0, 1.0))
    direction = safe_normalize(heading)
    if direction.length_squared() == 0.0:
        heading = Vector3(1.0, 0.0, 0.0)
        direction = Vector3(1.0, 0.0, 0.0)

    speed_multiplier = rng.next_range(params.speed_min, params.speed_max)
    boid = Boid(
        id=boid_id,
        position=position,
        velocity=heading,
        direction=direction,
        # Faster fish are drawn smaller.
        radius=params.base_scale / speed_multiplier,
        max_speed=params.speed * speed_multiplier,
        max_steering_force=params.max_steering_force * speed_multiplier,
        acceleration=params.acceleration * speed_multiplier,
    )
    boid.yaw, boid.pitch = orientation_from_direction(direction)
    return boid

