from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

Triple = tuple[float, float, float]

BOID_SPEED = 20.0
BOID_ACCELERATION = BOID_SPEED / 2.0
BOID_FORCE_MAX = BOID_ACCELERATION / 5.0


@dataclass(frozen=True)
class SolidColour:
    """Fallback material used when a batch is created without one."""

    colour: int


@dataclass
class BoidParams:
    geometry: Any = None
    material: Any = None
    colour: int = 0x80FF80
    speed_min: float = 3.0
    speed_max: float = 4.0
    speed: float = BOID_SPEED
    max_steering_force: float = BOID_FORCE_MAX
    acceleration: float = BOID_ACCELERATION
    base_scale: float = 6.0
    spawn_min: Triple = (5.0, 0.0, 5.0)
    spawn_max: Triple = (5.0, 5.0, 5.0)

    def resolved_material(self) -> Any:
        if self.material is not None:
            return self.material
        return SolidColour(self.colour)


@dataclass
class SteeringConfig:
    origin_force: float = 8.0
    seek_min_force: float = 100.0
    seek_dead_zone: float = 50.0
    seek_falloff: float = 250.0
    alignment_force: float = 30.0
    separation_force: float = 5.0
    separation_spacing: float = 1.5
    separation_min_distance: float = 0.001
    cohesion_force: float = 100.0
    wander_force: float = 3.0
    wander_jitter: float = 0.1
    wander_lookahead: float = 2.0
    small_radius: float = 5.0
    similar_ratio_min: float = 0.75
    similar_ratio_max: float = 1.35
    vertical_scale: float = 0.25
    # Ground avoidance height band; both branches currently produce no force.
    ground_min_height: float = 10.0
    ground_max_height: float = 30.0
    neighbor_radius: float = 15.0


@dataclass
class BoundaryConfig:
    minimum: Triple = (-50.0, -70.0, -100.0)
    maximum: Triple = (50.0, 90.0, 100.0)
    strength: float = 0.1


@dataclass
class TargetConfig:
    initial_position: Triple = (0.0, 0.0, 0.0)
    radius: float = 1.0
    y_radius: float = 1.0
    angular_speed: float = 1.0
    move_speed: float = 0.005
    radius_min: float = 10.0
    radius_span: float = 40.0
    y_radius_min: float = 10.0
    y_radius_span: float = 200.0
    randomize_interval: float = 30.0
    frame_dt: float = 0.016


@dataclass
class SimulationConfig:
    seed: int = 42
    boid_count: int = 100
    max_time_step: float = 1.0 / 10.0
    time_step: float = 1.0 / 60.0
    cell_size: float = 15.0
    snapshot_queue_limit: int = 120
    config_version: str = "v1"
    boids: BoidParams = field(default_factory=BoidParams)
    steering: SteeringConfig = field(default_factory=SteeringConfig)
    boundary: BoundaryConfig = field(default_factory=BoundaryConfig)
    target: TargetConfig = field(default_factory=TargetConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def validate(self) -> None:
        boids = self.boids
        if boids.speed_min <= 0:
            raise ValueError(f"boids.speed_min must be positive, got {boids.speed_min}")
        if boids.speed_min > boids.speed_max:
            raise ValueError(f"boids.speed_min ({boids.speed_min}) exceeds boids.speed_max ({boids.speed_max})")
        if boids.base_scale <= 0:
            raise ValueError(f"boids.base_scale must be positive, got {boids.base_scale}")
        if self.max_time_step <= 0:
            raise ValueError(f"max_time_step must be positive, got {self.max_time_step}")
        if self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.boid_count < 0:
            raise ValueError(f"boid_count must not be negative, got {self.boid_count}")
        if self.snapshot_queue_limit < 1:
            raise ValueError(f"snapshot_queue_limit must be at least 1, got {self.snapshot_queue_limit}")
        for axis, low, high in zip("xyz", self.boundary.minimum, self.boundary.maximum):
            if low >= high:
                raise ValueError(f"boundary minimum {axis}={low} is not below maximum {axis}={high}")
        target = self.target
        if target.radius_min <= 0 or target.y_radius_min <= 0:
            raise ValueError("target radius ranges must start above zero")
        if target.radius_span < 0 or target.y_radius_span < 0:
            raise ValueError("target radius spans must not be negative")


def _triple(value: Any, default: Triple) -> Triple:
    if isinstance(value, (tuple, list)) and len(value) == 3:
        return (float(value[0]), float(value[1]), float(value[2]))
    return default


def _with_triples(section: dict, defaults: Any, names: tuple[str, ...]) -> dict:
    values = dict(section)
    for name in names:
        if name in values:
            values[name] = _triple(values[name], getattr(defaults, name))
    return values


def load_config(raw: Optional[dict]) -> SimulationConfig:
    raw = raw or {}
    boids = BoidParams(**_with_triples(raw.get("boids", {}), BoidParams(), ("spawn_min", "spawn_max")))
    steering = SteeringConfig(**raw.get("steering", {}))
    boundary = BoundaryConfig(**_with_triples(raw.get("boundary", {}), BoundaryConfig(), ("minimum", "maximum")))
    target = TargetConfig(**_with_triples(raw.get("target", {}), TargetConfig(), ("initial_position",)))
    sim_values = {k: v for k, v in raw.items() if k not in {"boids", "steering", "boundary", "target"}}
    return SimulationConfig(boids=boids, steering=steering, boundary=boundary, target=target, **sim_values)
