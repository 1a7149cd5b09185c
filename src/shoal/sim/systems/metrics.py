from __future__ import annotations

from typing import Sequence

from pygame.math import Vector3

from ..core.agent import Boid
from ..types.metrics import TickMetrics


def create_metrics(
    tick: int,
    boids: Sequence[Boid],
    neighbor_checks: int,
    occupied_cells: int,
    target_position: Vector3,
    dt: float,
    duration_ms: float,
) -> TickMetrics:
    speed_sum = 0.0
    max_ratio = 0.0
    for boid in boids:
        speed = boid.velocity.length()
        speed_sum += speed
        if boid.max_speed > 0:
            max_ratio = max(max_ratio, speed / boid.max_speed)
    population = len(boids)
    return TickMetrics(
        tick=tick,
        population=population,
        neighbor_checks=neighbor_checks,
        average_speed=0.0 if population == 0 else speed_sum / population,
        max_speed_ratio=max_ratio,
        occupied_cells=occupied_cells,
        target_x=target_position.x,
        target_y=target_position.y,
        target_z=target_position.z,
        dt=dt,
        tick_duration_ms=duration_ms,
    )
