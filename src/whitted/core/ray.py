"""Ray data structure and vector utilities for Whitted-style ray tracing.

This module provides the fundamental Ray dataclass and the small set of vector
helpers used by the tracer. All operations are designed to work within Taichi
kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Offset applied to spawned rays to avoid re-hitting the surface they leave
BIAS = 1e-4

# Below this |dot(direction, normal)| a ray counts as parallel to a plane
EPSILON = 1e-9


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Unit length for every ray
            the tracer builds.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def offset_origin(point: vec3, direction: vec3) -> vec3:
    """Move a spawn point BIAS units along the direction the new ray travels."""
    return point + BIAS * direction


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector.
        normal: The surface normal (should be normalized).

    Returns:
        The normalized mirror direction incident - 2 * dot(incident, normal) * normal.
    """
    return tm.normalize(incident - 2.0 * tm.dot(incident, normal) * normal)


@ti.func
def refract_direction(incident: vec3, normal: vec3, outer_ior: ti.f32, inner_ior: ti.f32):
    """Refract a direction through a surface separating two media.

    The side of the surface the ray arrives from is decided by the sign of
    dot(incident, normal): a positive value means the ray is leaving the
    object, so the ratio of indices is inner / outer and the normal is flipped
    for the cosine term. The normal itself is used unflipped in the
    transmitted-direction formula.

    Args:
        incident: The incoming direction (normalized).
        normal: The outward surface normal (normalized).
        outer_ior: Refractive index of the medium surrounding the object.
        inner_ior: Refractive index of the object's material.

    Returns:
        A tuple (direction, valid). valid is 0 under total internal reflection,
        in which case direction is the zero vector.
    """
    eta = outer_ior / inner_ior
    cos_i = -tm.dot(incident, normal)
    if tm.dot(incident, normal) > 0.0:
        eta = inner_ior / outer_ior
        cos_i = -tm.dot(incident, -normal)

    cos2_t = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    direction = vec3(0.0, 0.0, 0.0)
    valid = 0
    if cos2_t > 0.0:
        direction = tm.normalize(incident * eta + normal * (eta * cos_i - ti.sqrt(cos2_t)))
        valid = 1
    return direction, valid
