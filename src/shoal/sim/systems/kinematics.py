from __future__ import annotations

from typing import List, TYPE_CHECKING

from pygame.math import Vector3

from . import steering
from ..core.agent import Boid
from ..core.config import BoundaryConfig, SteeringConfig
from ..core.rng import DeterministicRng
from ..utils.math3d import clamp_length, orientation_from_direction, safe_normalize

if TYPE_CHECKING:
    from ..core.world import World


def compose_steering(
    boid: Boid,
    neighbors: List[Boid],
    destination: Vector3,
    rng: DeterministicRng,
    config: SteeringConfig,
) -> Vector3:
    forces = [
        steering.seek(boid, destination, config),
        steering.wander(boid, rng, config),
        steering.ground_avoidance(boid, config),
        steering.separation(boid, neighbors, config),
    ]

    if boid.radius < config.small_radius:
        # Small fish school only with fish of a similar size, and keep a second,
        # narrower separation term on top of the general one.
        similar = steering.similar_sized(boid, neighbors, config)
        forces.append(steering.alignment(similar, config))
        forces.append(steering.cohesion(boid, similar, config))
        forces.append(steering.separation(boid, similar, config))

    total = Vector3()
    for force in forces:
        total += force
    return total


def apply_steering(boid: Boid, force: Vector3, dt: float, config: SteeringConfig) -> None:
    force = force * (boid.acceleration * dt)
    force.y *= config.vertical_scale
    force = clamp_length(force, boid.max_steering_force)
    boid.velocity = clamp_length(boid.velocity + force, boid.max_speed)
    _refresh_direction(boid)


def integrate(boid: Boid, dt: float) -> None:
    boid.position = boid.position + boid.velocity * dt


def contain(boid: Boid, boundary: BoundaryConfig) -> Vector3:
    """Push velocity back toward the box directly, outside the steering clamp."""
    correction = steering.boundary_correction(boid.position, boundary.minimum, boundary.maximum, boundary.strength)
    if correction.length_squared() > 0.0:
        boid.velocity = clamp_length(boid.velocity + correction, boid.max_speed)
        _refresh_direction(boid)
    return correction


def update_orientation(boid: Boid) -> None:
    boid.yaw, boid.pitch = orientation_from_direction(boid.direction)


def step_boid(world: World, boid: Boid, dt: float) -> int:
    config = world.config
    neighbors = world.grid.query_radius(boid.position, config.steering.neighbor_radius, exclude_id=boid.id)

    force = compose_steering(boid, neighbors, world.target.position, world.rng.wander, config.steering)
    apply_steering(boid, force, dt, config.steering)
    integrate(boid, dt)
    contain(boid, config.boundary)
    update_orientation(boid)

    boid.spatial_handle = world.grid.upsert(boid.id, boid, boid.spatial_handle)
    world.renderer.update_visual(boid)
    return len(neighbors)


def _refresh_direction(boid: Boid) -> None:
    direction = safe_normalize(boid.velocity)
    # A velocity of exactly zero keeps the previous heading.
    if direction.length_squared() > 0.0:
        boid.direction = direction
