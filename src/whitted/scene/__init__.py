"""Scene module: scene description, object storage and example scenes.

Components:
    intersection: Taichi fields holding every scene entry, per-kind dispatch
        and the nearest-hit and shadow queries
    light: Spherical light source
    scene: Host-side Scene container uploaded into the fields
    presets: The built-in example scenes
"""

from .intersection import (
    MAX_OBJECTS,
    SceneHit,
    SurfaceKind,
    add_light,
    add_plane,
    add_sphere,
    clear_scene,
    get_light_count,
    get_object_count,
    intersect_nearest,
    is_occluded,
)
from .light import Light
from .scene import Scene
from .presets import EXAMPLE_SCENES, build_example

__all__ = [
    "MAX_OBJECTS",
    "SceneHit",
    "SurfaceKind",
    "add_light",
    "add_plane",
    "add_sphere",
    "clear_scene",
    "get_light_count",
    "get_object_count",
    "intersect_nearest",
    "is_occluded",
    "Light",
    "Scene",
    "EXAMPLE_SCENES",
    "build_example",
]
