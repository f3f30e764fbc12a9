"""Scene-level object storage and ray intersection.

Every scene entry (sphere, plane or light) lives in one set of Taichi fields,
indexed by its insertion order. The entry kind is a closed tagged variant
(SurfaceKind); all per-object operations dispatch on it:

    - intersect_object(i, origin, direction) -> Hit
    - object_normal(i, point) -> vec3
    - object_material(i, point) -> MaterialRecord

On top of these, intersect_nearest() performs the linear nearest-hit scan and
is_occluded() the early-exit shadow query. Light entries are also listed in
light_indices so the direct-lighting loop can iterate over them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.intersection import add_sphere, clear_scene, intersect_nearest
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, 5.0), 1.0, material_id=0)
    >>> # Use intersect_nearest within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.whitted.geometry.plane import hit_plane
from src.whitted.geometry.sphere import Hit, hit_sphere, sphere_normal
from src.whitted.materials.material import MaterialRecord, get_material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class SurfaceKind(IntEnum):
    """Kind of a scene entry.

    Used to dispatch intersection, normal and material lookups.
    """

    SPHERE = 0
    PLANE = 1
    LIGHT = 2


@ti.dataclass
class SceneHit:
    """Record of the nearest ray-scene intersection.

    Attributes:
        hit: 1 if any object was hit, 0 otherwise.
        t: Distance along the ray to the nearest hit. Only valid if hit == 1.
        index: Object index of the nearest hit. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    index: ti.i32


# Maximum number of entries (surfaces and lights) supported in the scene
MAX_OBJECTS = 1024

# Object storage: Structure of Arrays layout.
# object_points holds the sphere/light center or a point on the plane;
# object_normals is only meaningful for planes, object_radii only for spheres.
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_material_ids = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())

# Object indices of the light entries, in insertion order
light_indices = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all objects and lights.

    Resets the counts to zero. The field data is overwritten when new objects
    are added.
    """
    num_objects[None] = 0
    num_lights[None] = 0


def _next_index() -> int:
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of scene objects ({MAX_OBJECTS}) exceeded")
    return idx


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Returns:
        The object index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = _next_index()
    object_kinds[idx] = int(SurfaceKind.SPHERE)
    object_points[idx] = vec3(*center)
    object_radii[idx] = radius
    object_normals[idx] = vec3(0.0, 0.0, 0.0)
    object_material_ids[idx] = material_id
    num_objects[None] = idx + 1
    return idx


def add_plane(
    origin: tuple[float, float, float],
    normal: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add a plane to the scene.

    Args:
        origin: A point on the plane.
        normal: The unit plane normal.
        material_id: The material ID to associate with this plane.

    Returns:
        The object index of the added plane.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = _next_index()
    object_kinds[idx] = int(SurfaceKind.PLANE)
    object_points[idx] = vec3(*origin)
    object_radii[idx] = 0.0
    object_normals[idx] = vec3(*normal)
    object_material_ids[idx] = material_id
    num_objects[None] = idx + 1
    return idx


def add_light(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a spherical light to the scene.

    The light takes an object index like any surface and is also appended to
    the light list.

    Returns:
        The object index of the added light.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = _next_index()
    object_kinds[idx] = int(SurfaceKind.LIGHT)
    object_points[idx] = vec3(*center)
    object_radii[idx] = radius
    object_normals[idx] = vec3(0.0, 0.0, 0.0)
    object_material_ids[idx] = material_id
    num_objects[None] = idx + 1

    light_indices[num_lights[None]] = idx
    num_lights[None] += 1
    return idx


def get_object_count() -> int:
    """Get the number of entries (surfaces and lights) in the scene."""
    return int(num_objects[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


# =============================================================================
# Per-object Dispatch
# =============================================================================


@ti.func
def intersect_object(index: ti.i32, ray_origin: vec3, ray_direction: vec3) -> Hit:
    """Intersect a ray with one scene entry.

    Spheres and lights share the sphere test; planes use the plane test.
    """
    result = Hit(hit=0, t=0.0)
    if object_kinds[index] == int(SurfaceKind.PLANE):
        result = hit_plane(ray_origin, ray_direction, object_points[index], object_normals[index])
    else:
        result = hit_sphere(ray_origin, ray_direction, object_points[index], object_radii[index])
    return result


@ti.func
def object_normal(index: ti.i32, point: vec3) -> vec3:
    """Surface normal of a scene entry at a point on it."""
    normal = object_normals[index]
    if object_kinds[index] != int(SurfaceKind.PLANE):
        normal = sphere_normal(object_points[index], point)
    return normal


@ti.func
def object_material(index: ti.i32, point: vec3) -> MaterialRecord:
    """Material of a scene entry at a point on it.

    Materials are position independent; the point is accepted for symmetry
    with object_normal.
    """
    return get_material(object_material_ids[index])


@ti.func
def is_light(index: ti.i32) -> ti.i32:
    """1 if the scene entry is a light, 0 otherwise."""
    result = 0
    if object_kinds[index] == int(SurfaceKind.LIGHT):
        result = 1
    return result


# =============================================================================
# Scene Queries
# =============================================================================


@ti.func
def intersect_nearest(ray_origin: vec3, ray_direction: vec3) -> SceneHit:
    """Find the nearest scene entry hit by a ray.

    Tests every entry in insertion order and keeps the smallest distance.
    Ties keep the earlier entry.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHit with the nearest distance and object index, or a miss
        record (hit == 0, index == -1).
    """
    did_hit = 0
    nearest_t = 0.0
    nearest_index = -1

    for i in range(num_objects[None]):
        rec = intersect_object(i, ray_origin, ray_direction)
        if rec.hit == 1:
            if did_hit == 0 or rec.t < nearest_t:
                did_hit = 1
                nearest_t = rec.t
                nearest_index = i

    return SceneHit(hit=did_hit, t=nearest_t, index=nearest_index)


@ti.func
def is_occluded(
    ray_origin: vec3,
    ray_direction: vec3,
    max_distance: ti.f32,
    skip_index: ti.i32,
) -> ti.i32:
    """Test whether anything blocks a shadow ray.

    Returns on the first entry hit closer than max_distance. The entry at
    skip_index (the light being sampled) is ignored so a light never shadows
    itself.

    Args:
        ray_origin: The starting point of the shadow ray.
        ray_direction: The unit direction toward the light.
        max_distance: Distance to the light.
        skip_index: Object index of the light.

    Returns:
        1 if the ray is blocked, 0 otherwise.
    """
    blocked = 0

    for i in range(num_objects[None]):
        if blocked == 0 and i != skip_index:
            rec = intersect_object(i, ray_origin, ray_direction)
            if rec.hit == 1 and rec.t < max_distance:
                blocked = 1

    return blocked
