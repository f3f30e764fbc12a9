"""Camera module for ray generation.

Components:
    pinhole: Pinhole camera with look-at orientation, field-of-view and
        plane-dimension constructors, and pixel/sub-pixel ray generation
"""

from .pinhole import (
    Camera,
    generate_primary_ray,
    generate_sub_rays,
    get_camera_info,
    primary_ray,
    ray_through,
    setup_camera,
    sub_ray,
)

__all__ = [
    "Camera",
    "setup_camera",
    "primary_ray",
    "sub_ray",
    "ray_through",
    "generate_primary_ray",
    "generate_sub_rays",
    "get_camera_info",
]
