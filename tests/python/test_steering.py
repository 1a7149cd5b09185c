from __future__ import annotations

import math

import pytest
from pygame.math import Vector3
from pytest import approx

from shoal.sim.core.agent import Boid
from shoal.sim.core.config import SteeringConfig
from shoal.sim.core.rng import DeterministicRng
from shoal.sim.systems import steering
from shoal.sim.utils.math3d import is_finite_vector


def make_boid(
    boid_id: int = 0,
    position: Vector3 | None = None,
    direction: Vector3 | None = None,
    radius: float = 2.0,
) -> Boid:
    direction = direction if direction is not None else Vector3(1, 0, 0)
    return Boid(
        id=boid_id,
        position=position if position is not None else Vector3(),
        velocity=direction * 10.0,
        direction=direction,
        radius=radius,
        max_speed=60.0,
        max_steering_force=6.0,
        acceleration=30.0,
    )


CONFIG = SteeringConfig()


def test_seek_never_drops_below_minimum_force():
    boid = make_boid()
    for distance in (1.0, 25.0, 50.0, 120.0):
        force = steering.seek(boid, Vector3(distance, 0, 0), CONFIG)
        assert force.length() == approx(CONFIG.seek_min_force)
        assert force.x > 0


def test_seek_magnitude_is_non_decreasing_with_distance():
    boid = make_boid()
    magnitudes = [steering.seek(boid, Vector3(0, 0, d), CONFIG).length() for d in range(0, 3000, 50)]
    # normalize-then-scale leaves a last-bit wobble on the 100.0 floor
    assert all(later >= earlier - 1e-9 for earlier, later in zip(magnitudes, magnitudes[1:]))
    # 8 * ((2050 - 50) / 250) ** 2 = 512
    assert steering.seek(boid, Vector3(0, 0, 2050), CONFIG).length() == approx(512.0)


def test_seek_at_target_is_zero_not_nan():
    boid = make_boid(position=Vector3(4, 5, 6))
    force = steering.seek(boid, Vector3(4, 5, 6), CONFIG)
    assert is_finite_vector(force)
    assert force.length() == 0.0


def test_wander_advances_angle_and_has_fixed_magnitude():
    boid = make_boid()
    rng = DeterministicRng(3)
    angles = []
    for _ in range(10):
        force = steering.wander(boid, rng, CONFIG)
        angles.append(boid.wander_angle)
        assert force.length() == approx(CONFIG.wander_force)
    # Each increment is at most jitter * 2 * pi.
    for earlier, later in zip([0.0] + angles, angles):
        assert abs(later - earlier) <= CONFIG.wander_jitter * 2 * math.pi + 1e-9


def test_wander_is_deterministic_for_a_seed():
    def draws(seed: int) -> list[tuple[float, float, float]]:
        boid = make_boid()
        rng = DeterministicRng(seed)
        return [tuple(steering.wander(boid, rng, CONFIG)) for _ in range(5)]

    assert draws(9) == draws(9)


@pytest.mark.parametrize("height", [-20.0, 0.0, 20.0, 100.0])
def test_ground_avoidance_is_always_zero(height):
    force = steering.ground_avoidance(make_boid(position=Vector3(0, height, 0)), CONFIG)
    assert force.length() == 0.0


def test_separation_empty_neighbors_is_zero():
    assert steering.separation(make_boid(), [], CONFIG).length() == 0.0


def test_separation_zero_beyond_spacing():
    boid = make_boid(radius=2.0)
    other = make_boid(1, position=Vector3(0, 0, 1.5 * 4.0 + 0.01), radius=2.0)
    assert steering.separation(boid, [other], CONFIG).length() == 0.0


def test_separation_pushes_away_inside_spacing():
    boid = make_boid(radius=2.0)
    other = make_boid(1, position=Vector3(0, 0, 5.0), radius=2.0)
    force = steering.separation(boid, [other], CONFIG)
    assert force.z < 0
    assert force.x == approx(0.0)
    # 5 / 0.001 * (2 + 2)
    assert force.length() == approx(20000.0)


def test_separation_magnitude_is_flat_inside_cutoff():
    boid = make_boid(radius=2.0)
    near = make_boid(1, position=Vector3(0, 0, 1.0), radius=2.0)
    edge = make_boid(2, position=Vector3(0, 0, 5.99), radius=2.0)
    assert steering.separation(boid, [near], CONFIG).length() == approx(
        steering.separation(boid, [edge], CONFIG).length()
    )


def test_separation_from_coincident_neighbor_is_finite():
    boid = make_boid(position=Vector3(1, 2, 3))
    other = make_boid(1, position=Vector3(1, 2, 3))
    force = steering.separation(boid, [other], CONFIG)
    assert is_finite_vector(force)


def test_alignment_empty_neighbors_is_zero_not_nan():
    force = steering.alignment([], CONFIG)
    assert is_finite_vector(force)
    assert force.length() == 0.0


def test_alignment_follows_neighbor_heading():
    neighbors = [make_boid(1, direction=Vector3(0, 0, 1)), make_boid(2, direction=Vector3(0, 0, 1))]
    force = steering.alignment(neighbors, CONFIG)
    assert (force.x, force.y, force.z) == approx((0.0, 0.0, CONFIG.alignment_force))


def test_cohesion_empty_neighbors_is_zero():
    force = steering.cohesion(make_boid(), [], CONFIG)
    assert is_finite_vector(force)
    assert force.length() == 0.0


def test_cohesion_steers_toward_centroid():
    boid = make_boid()
    neighbors = [make_boid(1, position=Vector3(10, 0, 0)), make_boid(2, position=Vector3(10, 0, 10))]
    force = steering.cohesion(boid, neighbors, CONFIG)
    assert force.length() == approx(CONFIG.cohesion_force)
    assert force.x > 0 and force.z > 0
    assert force.x == approx(force.z * 2)


def test_similar_sized_filters_by_radius_ratio():
    boid = make_boid(radius=2.0)
    neighbors = [
        make_boid(1, radius=2.0),
        make_boid(2, radius=2.0 / 1.34),
        make_boid(3, radius=2.0 / 1.4),
        make_boid(4, radius=2.0 / 0.76),
        make_boid(5, radius=2.0 / 0.7),
    ]
    assert [other.id for other in steering.similar_sized(boid, neighbors, CONFIG)] == [1, 2, 4]


def test_boundary_correction_opposes_penetration():
    minimum = (-50.0, -70.0, -100.0)
    maximum = (50.0, 90.0, 100.0)
    correction = steering.boundary_correction(Vector3(60, -80, 0), minimum, maximum, 0.1)
    assert correction.x == approx(-1.0)
    assert correction.y == approx(1.0)
    assert correction.z == 0.0


def test_boundary_correction_inside_is_zero():
    correction = steering.boundary_correction(Vector3(0, 0, 0), (-1, -1, -1), (1, 1, 1), 0.1)
    assert correction.length() == 0.0
