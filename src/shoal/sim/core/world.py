from __future__ import annotations

import logging
from time import perf_counter
from typing import Dict, List, Optional

from .agent import Boid, spawn_boid
from .config import SimulationConfig
from .render import NullRenderer, SceneRenderer
from .rng import RngStreams
from .spatial_grid import SpatialGrid
from .target import Target
from ..systems import kinematics, metrics as metrics_system
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata
from ..utils.math3d import clamp_value

logger = logging.getLogger("shoal.world")


class World:
    """Simulation context: owns the boids, the target, the spatial grid and the random streams."""

    def __init__(self, config: SimulationConfig, renderer: Optional[SceneRenderer] = None):
        config.validate()
        self._config = config
        self._renderer: SceneRenderer = renderer if renderer is not None else NullRenderer()
        self._rng = RngStreams(config.seed)
        self._grid = SpatialGrid(config.cell_size)
        self._target = Target(config.target, self._rng.target)
        self._boids: List[Boid] = []
        self._tick = 0
        self._metrics: TickMetrics | None = None
        self.initialize()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def boids(self) -> List[Boid]:
        return self._boids

    @property
    def target(self) -> Target:
        return self._target

    @property
    def grid(self) -> SpatialGrid:
        return self._grid

    @property
    def rng(self) -> RngStreams:
        return self._rng

    @property
    def renderer(self) -> SceneRenderer:
        return self._renderer

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def initialize(self) -> None:
        if self._boids:
            return
        params = self._config.boids
        geometry = params.geometry
        material = params.resolved_material()
        for boid_id in range(self._config.boid_count):
            boid = spawn_boid(boid_id, params, self._rng.boids)
            boid.spatial_handle = self._grid.upsert(boid.id, boid)
            boid.visual = self._renderer.create_visual(boid, geometry, material)
            self._boids.append(boid)
        logger.info("Created %d boids (seed=%d)", len(self._boids), self._config.seed)

    def reset(self) -> None:
        self._boids.clear()
        self._grid.clear()
        self._rng.reset()
        self._target = Target(self._config.target, self._rng.target)
        self._tick = 0
        self._metrics = None
        logger.debug("World reset")
        self.initialize()

    def clamp_time_step(self, dt: float) -> float:
        # Long frame stalls would otherwise blow up forces and velocities.
        return clamp_value(dt, 0.0, self._config.max_time_step)

    def step(self, dt: float) -> TickMetrics:
        start = perf_counter()
        dt = self.clamp_time_step(dt)
        self._target.update(self._config.target.frame_dt)

        neighbor_checks = 0
        for boid in self._boids:
            neighbor_checks += kinematics.step_boid(self, boid, dt)

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(
            self._tick,
            self._boids,
            neighbor_checks,
            self._grid.occupied_cells(),
            self._target.position,
            dt,
            duration_ms,
        )
        self._tick += 1
        return self._metrics

    def snapshot(self) -> Snapshot:
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(
                self._tick, self._boids, 0, self._grid.occupied_cells(), self._target.position, 0.0, 0.0
            )
        boundary = self._config.boundary
        metadata = SnapshotMetadata(
            seed=self._config.seed,
            max_time_step=self._config.max_time_step,
            boundary_min=list(boundary.minimum),
            boundary_max=list(boundary.maximum),
            config_version=self._config.config_version,
            boid_count=len(self._boids),
        )
        return Snapshot(
            tick=self._tick,
            metrics=metrics,
            boids=[self._boid_snapshot(boid) for boid in self._boids],
            target=self._target_snapshot(),
            metadata=metadata,
        )

    @staticmethod
    def _boid_snapshot(boid: Boid) -> Dict[str, float]:
        position = boid.position
        velocity = boid.velocity
        return {
            "id": boid.id,
            "x": position.x,
            "y": position.y,
            "z": position.z,
            "vx": velocity.x,
            "vy": velocity.y,
            "vz": velocity.z,
            "radius": boid.radius,
            "yaw": boid.yaw,
            "pitch": boid.pitch,
            "speed": velocity.length(),
        }

    def _target_snapshot(self) -> Dict[str, float]:
        target = self._target
        return {
            "x": target.position.x,
            "y": target.position.y,
            "z": target.position.z,
            "tx": target.target_position.x,
            "ty": target.target_position.y,
            "tz": target.target_position.z,
            "radius": target.radius,
            "y_radius": target.y_radius,
            "angle": target.angle,
        }
