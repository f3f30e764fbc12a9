"""Whitted-style light transport.

This module implements the trace algorithm: for a ray, find the nearest hit;
return the background on a miss and the light color when a light is hit;
otherwise spawn a reflected and a refracted ray (while the depth bound allows)
and add Phong direct lighting from every unshadowed light.

Key features:
    - Mirror reflection weighted by reflection * surface color
    - Refraction with total internal reflection and Beer's-law absorption
      driven by the refracted ray's own hit distance
    - Binary hard shadows, a light never shadowing itself
    - Phong diffuse and specular terms
    - Colors are left unclamped; callers clamp when storing pixels

Taichi functions cannot recurse, so the reflection/refraction tree is walked
depth-first with an explicit stack. Each stack entry carries the ray, its
depth, the weight its color contributes to the root color and, for refracted
rays, the color that absorbs along the ray once its length is known. Every
worker lane has its own stack in the _stack_* fields; a kernel must give
concurrently running traces distinct lanes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.integrator import trace_rays
    >>> # After Scene.upload():
    >>> colors, distances = trace_rays(origins, directions, depth=0)
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import offset_origin, reflect, refract_direction
from src.whitted.materials.material import MaterialRecord
from src.whitted.scene.intersection import (
    intersect_nearest,
    is_light,
    is_occluded,
    light_indices,
    num_lights,
    object_material,
    object_normal,
    object_points,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Tracing Constants
# =============================================================================

# Largest max_ray_depth a scene may use
MAX_RAY_DEPTH = 32

# A depth-first walk of a binary tree of height MAX_RAY_DEPTH never holds more
# than MAX_RAY_DEPTH + 1 pending rays
MAX_STACK = MAX_RAY_DEPTH + 2

# Number of independent trace stacks (one per concurrently running worker)
MAX_LANES = 256

# Beer's law absorption per unit distance travelled inside a medium
ABSORPTION_COEFFICIENT = 0.15

# =============================================================================
# Scene Parameters
# =============================================================================

_background_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_ambient_refractive_index = ti.field(dtype=ti.f32, shape=())
_max_ray_depth = ti.field(dtype=ti.i32, shape=())


def setup_scene_parameters(
    background_color: tuple[float, float, float],
    refractive_index: float,
    max_ray_depth: int,
) -> None:
    """Configure the scene-wide tracing parameters.

    Args:
        background_color: Color returned by rays that hit nothing.
        refractive_index: Index of the medium the camera sits in.
        max_ray_depth: Number of reflection/refraction bounces allowed.

    Raises:
        ValueError: If max_ray_depth is outside [0, MAX_RAY_DEPTH].
    """
    if not 0 <= max_ray_depth <= MAX_RAY_DEPTH:
        raise ValueError(f"max_ray_depth = {max_ray_depth} is outside [0, {MAX_RAY_DEPTH}]")
    _background_color[None] = [background_color[0], background_color[1], background_color[2]]
    _ambient_refractive_index[None] = refractive_index
    _max_ray_depth[None] = max_ray_depth


# =============================================================================
# Trace Stacks
# =============================================================================

_stack_origin = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_LANES, MAX_STACK))
_stack_direction = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_LANES, MAX_STACK))
_stack_weight = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_LANES, MAX_STACK))
_stack_absorb = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_LANES, MAX_STACK))
_stack_absorbing = ti.field(dtype=ti.i32, shape=(MAX_LANES, MAX_STACK))
_stack_depth = ti.field(dtype=ti.i32, shape=(MAX_LANES, MAX_STACK))


@ti.func
def _push(
    lane: ti.i32,
    slot: ti.i32,
    origin: vec3,
    direction: vec3,
    depth: ti.i32,
    weight: vec3,
    absorb: vec3,
    absorbing: ti.i32,
):
    _stack_origin[lane, slot] = origin
    _stack_direction[lane, slot] = direction
    _stack_depth[lane, slot] = depth
    _stack_weight[lane, slot] = weight
    _stack_absorb[lane, slot] = absorb
    _stack_absorbing[lane, slot] = absorbing


# =============================================================================
# Direct Lighting
# =============================================================================


@ti.func
def direct_lighting(
    point: vec3,
    normal: vec3,
    view_direction: vec3,
    material: MaterialRecord,
) -> vec3:
    """Phong lighting from every light that is not shadowed at a point.

    Args:
        point: The surface point being shaded.
        normal: The surface normal at the point.
        view_direction: Direction of the ray that hit the point.
        material: The surface material.

    Returns:
        The sum of diffuse and specular contributions (RGB).
    """
    total = vec3(0.0, 0.0, 0.0)

    for k in range(num_lights[None]):
        light_index = light_indices[k]
        light_color = object_material(light_index, point).color
        to_light = object_points[light_index] - point
        distance_to_light = tm.length(to_light)
        light_direction = tm.normalize(to_light)

        shadow_origin = offset_origin(point, light_direction)
        if is_occluded(shadow_origin, light_direction, distance_to_light, light_index) == 0:
            if material.diffuse > 0.0:
                cos_theta = tm.dot(normal, light_direction)
                if cos_theta > 0.0:
                    total += light_color * material.color * (material.diffuse * cos_theta)

            # Specular is not tinted by the surface color
            if material.specular > 0.0 and material.shininess > 0:
                reflected = reflect(light_direction, normal)
                cos_alpha = tm.dot(view_direction, reflected)
                if cos_alpha > 0.0:
                    total += light_color * (material.specular * cos_alpha**material.shininess)

    return total


# =============================================================================
# Trace
# =============================================================================


@ti.dataclass
class TraceRecord:
    """Result of tracing one ray inside a kernel.

    Attributes:
        color: Accumulated color (unclamped).
        distance: Distance to the nearest hit of the traced ray, 0 on a miss.
    """

    color: vec3
    distance: ti.f32


@ti.func
def trace(ray_origin: vec3, ray_direction: vec3, depth: ti.i32, lane: ti.i32) -> TraceRecord:
    """Trace a ray through the scene.

    Equivalent to the recursive formulation

        trace(ray, depth) = background                      on a miss
                          = light color                     on a light hit
                          = reflection * color * trace(reflected, depth + 1)
                          + exp(-0.15 * color * d_t) * trace(refracted, depth + 1)
                          + direct lighting                 otherwise

    where d_t is the hit distance reported by the refracted trace, and the
    recursive terms are only present while depth < max_ray_depth.

    Args:
        ray_origin: Origin of the ray.
        ray_direction: Unit direction of the ray.
        depth: Recursion depth of this ray (0 for camera rays).
        lane: Trace stack to use; distinct for concurrent callers.

    Returns:
        A TraceRecord with the color and the ray's nearest-hit distance.
    """
    color = vec3(0.0, 0.0, 0.0)
    root_distance = 0.0
    is_root = 1

    no_absorb = vec3(0.0, 0.0, 0.0)
    _push(lane, 0, ray_origin, ray_direction, depth, vec3(1.0, 1.0, 1.0), no_absorb, 0)
    top = 1

    while top > 0:
        top -= 1
        origin = _stack_origin[lane, top]
        direction = _stack_direction[lane, top]
        node_depth = _stack_depth[lane, top]
        weight = _stack_weight[lane, top]

        nearest = intersect_nearest(origin, direction)
        distance = 0.0
        if nearest.hit == 1:
            distance = nearest.t

        if is_root == 1:
            root_distance = distance
            is_root = 0

        # Beer's law for refracted rays, over the length of this ray
        if _stack_absorbing[lane, top] == 1:
            absorbance = _stack_absorb[lane, top] * (ABSORPTION_COEFFICIENT * -distance)
            weight *= tm.exp(absorbance)

        if nearest.hit == 0:
            color += weight * _background_color[None]
        elif is_light(nearest.index) == 1:
            point = origin + distance * direction
            color += weight * object_material(nearest.index, point).color
        else:
            point = origin + distance * direction
            normal = object_normal(nearest.index, point)
            material = object_material(nearest.index, point)

            if node_depth < _max_ray_depth[None]:
                if material.reflection > 0.0:
                    reflected = reflect(direction, normal)
                    _push(
                        lane,
                        top,
                        offset_origin(point, reflected),
                        reflected,
                        node_depth + 1,
                        weight * material.reflection * material.color,
                        no_absorb,
                        0,
                    )
                    top += 1

                if material.refraction > 0.0:
                    refracted, valid = refract_direction(
                        direction,
                        normal,
                        _ambient_refractive_index[None],
                        material.refractive_index,
                    )
                    # valid == 0 is total internal reflection: no contribution
                    if valid == 1:
                        _push(
                            lane,
                            top,
                            offset_origin(point, refracted),
                            refracted,
                            node_depth + 1,
                            weight,
                            material.color,
                            1,
                        )
                        top += 1

            color += weight * direct_lighting(point, normal, direction, material)

    return TraceRecord(color=color, distance=root_distance)


# =============================================================================
# Host-side Tracing API
# =============================================================================


@dataclass(frozen=True)
class TraceResult:
    """Color and nearest-hit distance of one traced ray.

    Attributes:
        color: RGB color, unclamped.
        distance: Distance to the nearest hit, 0.0 if the ray hit nothing.
    """

    color: tuple[float, float, float]
    distance: float


@ti.kernel
def _trace_rays_kernel(
    origins: ti.types.ndarray(dtype=ti.f32, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f32, ndim=2),
    depth: ti.i32,
    colors: ti.types.ndarray(dtype=ti.f32, ndim=2),
    distances: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Trace a batch of rays one after another on lane 0."""
    ti.loop_config(serialize=True)
    for i in range(origins.shape[0]):
        origin = vec3(origins[i, 0], origins[i, 1], origins[i, 2])
        direction = vec3(directions[i, 0], directions[i, 1], directions[i, 2])
        result = trace(origin, direction, depth, 0)
        for c in ti.static(range(3)):
            colors[i, c] = result.color[c]
        distances[i] = result.distance


def trace_rays(
    origins: npt.ArrayLike,
    directions: npt.ArrayLike,
    depth: int = 0,
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Trace a batch of rays against the currently uploaded scene.

    Args:
        origins: Ray origins, shape (N, 3).
        directions: Ray directions, shape (N, 3). Normalized before tracing.
        depth: Recursion depth the rays start at.

    Returns:
        Tuple of (colors, distances) with shapes (N, 3) and (N,).

    Raises:
        ValueError: If the shapes do not match, a direction has zero length
            or depth is negative.
    """
    origins_array = np.ascontiguousarray(origins, dtype=np.float32).reshape(-1, 3)
    directions_array = np.asarray(directions, dtype=np.float64).reshape(-1, 3)
    if origins_array.shape != directions_array.shape:
        raise ValueError(
            f"origins and directions must have the same shape: "
            f"{origins_array.shape} vs {directions_array.shape}"
        )
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth}")

    norms = np.linalg.norm(directions_array, axis=1, keepdims=True)
    if np.any(norms < 1e-12):
        raise ValueError("Ray directions must have non-zero length")
    directions_array = np.ascontiguousarray(directions_array / norms, dtype=np.float32)

    count = origins_array.shape[0]
    colors = np.zeros((count, 3), dtype=np.float32)
    distances = np.zeros(count, dtype=np.float32)
    if count > 0:
        _trace_rays_kernel(origins_array, directions_array, depth, colors, distances)
    return colors, distances


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
) -> TraceResult:
    """Trace a single ray against the currently uploaded scene."""
    colors, distances = trace_rays([origin], [direction], depth)
    r, g, b = colors[0]
    return TraceResult(color=(float(r), float(g), float(b)), distance=float(distances[0]))
