"""Infinite plane primitive.

A plane is stored as a point on the plane plus a unit normal. It can also be
built from the implicit form dot(normal, p) + d = 0 with from_d_vector().
"""

import math
from dataclasses import dataclass, field

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import EPSILON
from src.whitted.geometry.sphere import Hit
from src.whitted.materials.material import Material

# Type alias for 3D vectors
vec3 = tm.vec3


def _normalized(vector: tuple[float, float, float]) -> tuple[float, float, float]:
    x, y, z = (float(c) for c in vector)
    norm = math.sqrt(x * x + y * y + z * z)
    if norm < 1e-12:
        raise ValueError(f"Plane normal must be non-zero, got {vector}")
    return (x / norm, y / norm, z / norm)


@dataclass(frozen=True)
class Plane:
    """An infinite plane.

    Attributes:
        origin: Any point on the plane (x, y, z).
        normal: The plane normal. Normalized on construction.
        material: The surface material.
    """

    origin: tuple[float, float, float]
    normal: tuple[float, float, float]
    material: Material = field(default_factory=Material)

    def __post_init__(self) -> None:
        x, y, z = self.origin
        object.__setattr__(self, "origin", (float(x), float(y), float(z)))
        object.__setattr__(self, "normal", _normalized(self.normal))

    @classmethod
    def from_d_vector(
        cls,
        d: float,
        vector: tuple[float, float, float],
        material: Material | None = None,
    ) -> "Plane":
        """Build the plane dot(vector, p) + d = 0.

        The plane origin is vector * (-d / dot(vector, vector)), the point of
        the plane closest to the world origin.

        Args:
            d: Signed distance term of the implicit equation.
            vector: Plane normal direction (need not be normalized).
            material: The surface material. Defaults to a white diffuse one.
        """
        vx, vy, vz = (float(c) for c in vector)
        length_squared = vx * vx + vy * vy + vz * vz
        if length_squared < 1e-24:
            raise ValueError(f"Plane normal must be non-zero, got {vector}")
        scale = -d / length_squared
        return cls(
            origin=(vx * scale, vy * scale, vz * scale),
            normal=(vx, vy, vz),
            material=material if material is not None else Material(),
        )

    @property
    def d(self) -> float:
        """Signed distance term: -dot(origin, normal)."""
        return -sum(o * n for o, n in zip(self.origin, self.normal))


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane_origin: vec3, normal: vec3) -> Hit:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        plane_origin: A point on the plane.
        normal: The unit plane normal.

    Returns:
        A Hit record. hit == 0 when the ray is parallel to the plane or the
        plane lies behind the ray origin.
    """
    denominator = tm.dot(ray_direction, normal)

    did_hit = 0
    hit_t = 0.0

    if ti.abs(denominator) >= EPSILON:
        t = tm.dot(plane_origin - ray_origin, normal) / denominator
        if t >= 0.0:
            did_hit = 1
            hit_t = t

    return Hit(hit=did_hit, t=hit_t)
