from __future__ import annotations

import math

from pygame.math import Vector3


def safe_normalize(vector: Vector3) -> Vector3:
    return safe_normalize_xyz(vector.x, vector.y, vector.z)


def safe_normalize_xyz(x: float, y: float, z: float) -> Vector3:
    magnitude_sq = x * x + y * y + z * z
    if magnitude_sq < 1e-10:
        return Vector3()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector3(x * inv, y * inv, z * inv)


def clamp_length(vector: Vector3, max_length: float) -> Vector3:
    if max_length <= 0:
        return Vector3()
    magnitude_sq = vector.length_squared()
    if magnitude_sq <= max_length * max_length:
        return vector
    inv = max_length / math.sqrt(magnitude_sq)
    return Vector3(vector.x * inv, vector.y * inv, vector.z * inv)


def lerp(a: Vector3, b: Vector3, t: float) -> Vector3:
    return Vector3(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t, a.z + (b.z - a.z) * t)


def is_finite_vector(vector: Vector3) -> bool:
    return math.isfinite(vector.x) and math.isfinite(vector.y) and math.isfinite(vector.z)


def orientation_from_direction(direction: Vector3) -> tuple[float, float]:
    """Yaw about +Y (from +Z toward +X) and pitch above the XZ plane."""
    if direction.length_squared() < 1e-12:
        return 0.0, 0.0
    yaw = math.atan2(direction.x, direction.z)
    pitch = math.atan2(direction.y, math.hypot(direction.x, direction.z))
    return yaw, pitch


def clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def as_vector(values: tuple[float, float, float] | list[float] | Vector3) -> Vector3:
    return Vector3(float(values[0]), float(values[1]), float(values[2]))
