from __future__ import annotations

import math
from typing import List, Sequence

from pygame.math import Vector3

from ..core.agent import Boid
from ..core.config import SteeringConfig
from ..core.rng import DeterministicRng
from ..utils.math3d import safe_normalize_xyz

_TWO_PI = 2.0 * math.pi


def seek(boid: Boid, destination: Vector3, config: SteeringConfig) -> Vector3:
    dx = destination.x - boid.position.x
    dy = destination.y - boid.position.y
    dz = destination.z - boid.position.z
    distance = math.sqrt(dx * dx + dy * dy + dz * dz)
    distance_factor = max(0.0, (distance - config.seek_dead_zone) / config.seek_falloff) ** 2
    magnitude = max(config.origin_force * distance_factor, config.seek_min_force)
    return safe_normalize_xyz(dx, dy, dz) * magnitude


def wander(boid: Boid, rng: DeterministicRng, config: SteeringConfig) -> Vector3:
    """Steer toward a jittered point ahead of the boid.

    The wander angle persists between ticks so successive draws stay
    correlated rather than producing per-tick noise.
    """
    boid.wander_angle += config.wander_jitter * rng.next_range(-_TWO_PI, _TWO_PI)
    direction = boid.direction
    ahead_x = direction.x * config.wander_lookahead + math.cos(boid.wander_angle)
    ahead_y = direction.y * config.wander_lookahead
    ahead_z = direction.z * config.wander_lookahead + math.sin(boid.wander_angle)
    return safe_normalize_xyz(ahead_x, ahead_y, ahead_z) * config.wander_force


def ground_avoidance(boid: Boid, config: SteeringConfig) -> Vector3:
    # Tuned constants still reference this hook; neither height band pushes yet.
    height = boid.position.y
    if height < config.ground_min_height:
        force = Vector3()
    elif height > config.ground_max_height:
        force = Vector3()
    else:
        force = Vector3()
    return force * config.separation_force


def separation(boid: Boid, neighbors: Sequence[Boid], config: SteeringConfig) -> Vector3:
    if not neighbors:
        return Vector3()
    accum_x = 0.0
    accum_y = 0.0
    accum_z = 0.0
    px = boid.position.x
    py = boid.position.y
    pz = boid.position.z
    for other in neighbors:
        combined_radius = boid.radius + other.radius
        spacing = config.separation_spacing * combined_radius
        away_x = px - other.position.x
        away_y = py - other.position.y
        away_z = pz - other.position.z
        distance_sq = away_x * away_x + away_y * away_y + away_z * away_z
        # Only overlapping neighbors push; inside the cutoff the gap sits on the min-distance floor.
        if distance_sq > spacing * spacing or distance_sq < 1e-12:
            continue
        distance = math.sqrt(distance_sq)
        gap = max(distance - spacing, config.separation_min_distance)
        scale = (config.separation_force / gap) * combined_radius / distance
        accum_x += away_x * scale
        accum_y += away_y * scale
        accum_z += away_z * scale
    return Vector3(accum_x, accum_y, accum_z)


def alignment(neighbors: Sequence[Boid], config: SteeringConfig) -> Vector3:
    sum_x = 0.0
    sum_y = 0.0
    sum_z = 0.0
    for other in neighbors:
        direction = other.direction
        sum_x += direction.x
        sum_y += direction.y
        sum_z += direction.z
    return safe_normalize_xyz(sum_x, sum_y, sum_z) * config.alignment_force


def cohesion(boid: Boid, neighbors: Sequence[Boid], config: SteeringConfig) -> Vector3:
    if not neighbors:
        return Vector3()
    sum_x = 0.0
    sum_y = 0.0
    sum_z = 0.0
    for other in neighbors:
        position = other.position
        sum_x += position.x
        sum_y += position.y
        sum_z += position.z
    inv = 1.0 / len(neighbors)
    return (
        safe_normalize_xyz(
            sum_x * inv - boid.position.x,
            sum_y * inv - boid.position.y,
            sum_z * inv - boid.position.z,
        )
        * config.cohesion_force
    )


def similar_sized(boid: Boid, neighbors: Sequence[Boid], config: SteeringConfig) -> List[Boid]:
    similar: List[Boid] = []
    for other in neighbors:
        ratio = boid.radius / other.radius
        if config.similar_ratio_min <= ratio <= config.similar_ratio_max:
            similar.append(other)
    return similar


def boundary_correction(
    position: Vector3,
    minimum: Sequence[float],
    maximum: Sequence[float],
    strength: float,
) -> Vector3:
    """Per-axis pull back inside the box, proportional to penetration depth."""
    correction = [0.0, 0.0, 0.0]
    for axis in range(3):
        value = position[axis]
        if value < minimum[axis]:
            correction[axis] = (minimum[axis] - value) * strength
        elif value > maximum[axis]:
            correction[axis] = (maximum[axis] - value) * strength
    return Vector3(correction[0], correction[1], correction[2])

