"""Sphere primitive with geometric ray-sphere intersection.

The intersection projects the vector from the ray origin to the sphere center
onto the ray direction instead of solving the full quadratic. This gives the
near hit for rays starting outside the sphere and the far hit for rays
starting inside it, which is what refracted rays travelling through a sphere
need.

Example:
    >>> from src.whitted.geometry.sphere import Sphere
    >>> from src.whitted.materials.material import Material
    >>> sphere = Sphere(center=(0.0, 0.0, 5.0), radius=1.0, material=Material())
    >>> # Use hit_sphere within a Taichi kernel
"""

from dataclasses import dataclass, field

import taichi as ti
import taichi.math as tm

from src.whitted.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (x, y, z).
        radius: The radius of the sphere (positive float).
        material: The surface material.
    """

    center: tuple[float, float, float]
    radius: float
    material: Material = field(default_factory=Material)

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        x, y, z = self.center
        object.__setattr__(self, "center", (float(x), float(y), float(z)))


@ti.dataclass
class Hit:
    """Result of a ray-primitive intersection test.

    Attributes:
        hit: 1 if the ray intersects the primitive, 0 otherwise.
        t: Distance along the ray to the intersection. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, center: vec3, radius: ti.f32) -> Hit:
    """Test for ray-sphere intersection.

    Let b be the projection of (center - origin) onto the ray direction and
    d^2 the squared distance from the center to the ray line. The ray misses
    when b < 0 (sphere behind the origin) or d^2 > radius^2. Otherwise the
    candidate distances are b - c and b + c with c = sqrt(radius^2 - d^2);
    the near one is returned unless it lies behind the origin.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        A Hit record. hit == 0 if there is no forward intersection.
    """
    to_center = center - ray_origin
    b = tm.dot(to_center, ray_direction)

    did_hit = 0
    hit_t = 0.0

    if b >= 0.0:
        radius_squared = radius * radius
        d_squared = tm.dot(to_center, to_center) - b * b
        if d_squared <= radius_squared:
            c = ti.sqrt(radius_squared - d_squared)
            t = b - c
            if t < 0.0:
                t = b + c
            did_hit = 1
            hit_t = t

    return Hit(hit=did_hit, t=hit_t)


@ti.func
def sphere_normal(center: vec3, point: vec3) -> vec3:
    """Outward unit normal of a sphere at a surface point."""
    return tm.normalize(point - center)
