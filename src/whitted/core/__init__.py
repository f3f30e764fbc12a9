"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, reflection and refraction helpers
    framebuffer: Row-major color grid produced by a render
    integrator: Whitted light transport (reflection, refraction, Phong lighting)
    pipeline: Parallel primary pass, edge detection and adaptive supersampling

All compute-intensive operations use Taichi kernels.
"""

from .framebuffer import Framebuffer
from .ray import (
    BIAS,
    EPSILON,
    Ray,
    make_ray,
    offset_origin,
    ray_at,
    reflect,
    refract_direction,
    vec3,
)

# Note: integrator and pipeline are NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.integrator or src.whitted.core.pipeline.

__all__ = [
    "BIAS",
    "EPSILON",
    "Framebuffer",
    "Ray",
    "ray_at",
    "make_ray",
    "offset_origin",
    "vec3",
    "reflect",
    "refract_direction",
]
