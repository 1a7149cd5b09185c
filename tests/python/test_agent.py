from __future__ import annotations

from pygame.math import Vector3
from pytest import approx

from shoal.sim.core.agent import Boid, spawn_boid
from shoal.sim.core.config import BoidParams, SolidColour
from shoal.sim.core.rng import DeterministicRng


def test_boid_uses_slots():
    boid = spawn_boid(0, BoidParams(), DeterministicRng(1))
    assert hasattr(Boid, "__slots__")
    assert not hasattr(boid, "__dict__")


def test_spawn_derives_parameters_from_speed_multiplier():
    params = BoidParams()
    for boid_id in range(50):
        boid = spawn_boid(boid_id, params, DeterministicRng(boid_id))
        multiplier = boid.max_speed / params.speed
        assert params.speed_min <= multiplier < params.speed_max
        assert boid.radius == approx(params.base_scale / multiplier)
        assert boid.max_steering_force == approx(params.max_steering_force * multiplier)
        assert boid.acceleration == approx(params.acceleration * multiplier)
        assert boid.radius > 0


def test_spawn_direction_is_unit_and_parallel_to_velocity():
    boid = spawn_boid(3, BoidParams(), DeterministicRng(99))
    assert boid.direction.length() == approx(1.0)
    assert boid.direction.y == 0.0
    assert boid.velocity.normalize().dot(boid.direction) == approx(1.0)


def test_spawn_position_within_configured_box():
    params = BoidParams(spawn_min=(-10.0, 0.0, 5.0), spawn_max=(10.0, 5.0, 5.0))
    rng = DeterministicRng(4)
    for boid_id in range(30):
        position = spawn_boid(boid_id, params, rng).position
        assert -10.0 <= position.x < 10.0
        assert 0.0 <= position.y < 5.0
        assert position.z == 5.0


def test_spawn_is_deterministic():
    a = spawn_boid(0, BoidParams(), DeterministicRng(21))
    b = spawn_boid(0, BoidParams(), DeterministicRng(21))
    assert a.position == b.position
    assert a.velocity == b.velocity
    assert a.radius == b.radius


def test_material_falls_back_to_solid_colour():
    assert BoidParams(colour=0x123456).resolved_material() == SolidColour(0x123456)
    material = object()
    assert BoidParams(material=material).resolved_material() is material


def test_new_boid_starts_unindexed_with_zero_wander():
    boid = spawn_boid(0, BoidParams(), DeterministicRng(2))
    assert boid.spatial_handle is None
    assert boid.wander_angle == 0.0
    assert isinstance(boid.position, Vector3)
