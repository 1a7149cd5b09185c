from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    boids: List[Dict[str, float]]
    target: Dict[str, float]
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotMetadata:
    seed: int
    max_time_step: float
    boundary_min: List[float]
    boundary_max: List[float]
    config_version: str
    boid_count: int
