from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    neighbor_checks: int
    average_speed: float
    max_speed_ratio: float
    occupied_cells: int
    target_x: float
    target_y: float
    target_z: float
    dt: float
    tick_duration_ms: float = 0.0
