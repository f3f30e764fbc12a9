"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with projection-based ray-sphere intersection
    plane: Infinite plane primitive

Each primitive has a frozen host-side dataclass used to build scenes and a
Taichi function used inside kernels:

    hit = hit_shape(ray_origin, ray_direction, ...shape data)

Scenes are intersected by linear scan; there is no acceleration structure.
"""

from .plane import Plane, hit_plane
from .sphere import Hit, Sphere, hit_sphere, sphere_normal

__all__ = [
    "Hit",
    "Sphere",
    "hit_sphere",
    "sphere_normal",
    "Plane",
    "hit_plane",
]
