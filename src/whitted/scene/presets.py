"""Built-in example scenes.

Each builder returns a (Scene, Camera) pair. The image size defaults to the
scene's native size and can be overridden.

Scenes:
    1: Four reflective spheres (one also refractive) on a huge ground sphere
       under a bright light, seen through a 30 degree field of view.
    2: Two spheres on a floor plane lit by two small lights.
    3: A closed room of planes with glass spheres, lit by two small lights,
       in front of a grid of small green spheres.
"""

from __future__ import annotations

from typing import Callable, Optional

from src.whitted.camera.pinhole import Camera
from src.whitted.geometry.plane import Plane
from src.whitted.geometry.sphere import Sphere
from src.whitted.materials.material import MaterialBuilder
from src.whitted.scene.light import Light
from src.whitted.scene.scene import Scene


def _plane_camera(width: int, height: int) -> Camera:
    return Camera.from_plane_dimensions(
        plane_width=8.0,
        plane_height=6.0,
        width=width,
        height=height,
        position=(0.0, 0.0, -5.0),
        look_at=(0.0, 0.0, 1.0),
        plane_distance=5.0,
    )


def reflective_spheres(width: int = 640, height: int = 480) -> tuple[Scene, Camera]:
    """Scene 1: reflective spheres on a ground sphere."""
    scene = Scene(background_color=(2.0, 2.0, 2.0), refractive_index=1.0, max_ray_depth=5)

    ground = MaterialBuilder().color((0.2, 0.2, 0.2)).build()
    scene.add_object(Sphere((0.0, -10004.0, 20.0), 10000.0, ground))

    glass = (
        MaterialBuilder()
        .color((1.0, 0.32, 0.36))
        .reflection(1.0)
        .refraction(0.5)
        .refractive_index(1.1)
        .build()
    )
    scene.add_object(Sphere((0.0, 0.0, 20.0), 4.0, glass))

    for center, radius, color in [
        ((5.0, -1.0, 15.0), 2.0, (0.9, 0.76, 0.46)),
        ((5.0, 0.0, 25.0), 3.0, (0.65, 0.77, 0.97)),
        ((-5.5, 0.0, 15.0), 3.0, (0.9, 0.9, 0.9)),
    ]:
        mirror = MaterialBuilder().color(color).reflection(1.0).build()
        scene.add_object(Sphere(center, radius, mirror))

    scene.add_light(Light((0.0, 20.0, 30.0), 3.0, (3.0, 3.0, 3.0)))

    camera = Camera.from_field_of_view(
        field_of_view=30.0,
        width=width,
        height=height,
        position=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, 1.0),
        plane_distance=1.0,
    )
    return scene, camera


def spheres_on_floor(width: int = 800, height: int = 600) -> tuple[Scene, Camera]:
    """Scene 2: a shiny and a mirror sphere on a floor plane."""
    scene = Scene(background_color=(0.0, 0.0, 0.0), refractive_index=1.0, max_ray_depth=5)

    floor = MaterialBuilder().color((0.4, 0.3, 0.3)).diffuse(1.0).build()
    scene.add_object(Plane.from_d_vector(4.4, (0.0, 1.0, 0.0), floor))

    shiny = (
        MaterialBuilder()
        .color((0.7, 0.7, 0.7))
        .diffuse(0.2)
        .specular(0.8)
        .shininess(20)
        .reflection(0.6)
        .build()
    )
    scene.add_object(Sphere((1.0, -0.8, 3.0), 2.5, shiny))

    mirror = (
        MaterialBuilder()
        .color((0.7, 0.7, 1.0))
        .diffuse(0.1)
        .specular(0.9)
        .shininess(20)
        .reflection(1.0)
        .build()
    )
    scene.add_object(Sphere((-5.5, -0.5, 7.0), 2.0, mirror))

    scene.add_light(Light((0.0, 5.0, 5.0), 0.1, (0.6, 0.6, 0.6)))
    scene.add_light(Light((2.0, 5.0, 1.0), 0.1, (0.7, 0.7, 0.9)))

    return scene, _plane_camera(width, height)


def glass_room(width: int = 800, height: int = 600) -> tuple[Scene, Camera]:
    """Scene 3: glass spheres in a room of planes."""
    scene = Scene(background_color=(0.0, 0.0, 0.0), refractive_index=1.0, max_ray_depth=5)

    floor = MaterialBuilder().color((0.4, 0.3, 0.3)).diffuse(1.0).specular(0.8).shininess(20).build()
    scene.add_object(Plane.from_d_vector(4.4, (0.0, 1.0, 0.0), floor))

    glass = (
        MaterialBuilder()
        .color((0.7, 0.7, 1.0))
        .diffuse(0.2)
        .specular(0.8)
        .shininess(20)
        .reflection(0.2)
        .refraction(0.8)
        .refractive_index(1.3)
        .build()
    )
    scene.add_object(Sphere((2.0, 0.8, 3.0), 2.5, glass))

    shiny = (
        MaterialBuilder()
        .color((0.7, 0.7, 1.0))
        .diffuse(0.1)
        .specular(0.8)
        .shininess(20)
        .reflection(0.5)
        .refractive_index(1.3)
        .build()
    )
    scene.add_object(Sphere((-5.5, -0.5, 7.0), 2.0, shiny))

    scene.add_light(Light((0.0, 5.0, 5.0), 0.1, (0.4, 0.4, 0.4)))
    scene.add_light(Light((-3.0, 5.0, 1.0), 0.1, (0.6, 0.6, 0.8)))

    red_glass = (
        MaterialBuilder()
        .color((1.0, 0.4, 0.4))
        .diffuse(0.2)
        .specular(0.8)
        .shininess(20)
        .refraction(0.8)
        .refractive_index(1.5)
        .build()
    )
    scene.add_object(Sphere((-1.5, -3.8, 1.0), 1.5, red_glass))

    back_wall = MaterialBuilder().color((0.5, 0.3, 0.5)).diffuse(0.6).build()
    scene.add_object(Plane.from_d_vector(12.0, (0.4, 0.0, -1.0), back_wall))

    ceiling = MaterialBuilder().color((0.4, 0.7, 0.7)).diffuse(0.5).build()
    scene.add_object(Plane.from_d_vector(7.4, (0.0, -1.0, 0.0), ceiling))

    green = MaterialBuilder().color((0.3, 1.0, 0.4)).diffuse(0.6).specular(0.6).shininess(20).build()
    for x in range(8):
        for y in range(7):
            center = (-4.5 + 1.5 * x, -4.3 + 1.5 * y, 10.0)
            scene.add_object(Sphere(center, 0.3, green))

    return scene, _plane_camera(width, height)


EXAMPLE_SCENES: dict[int, Callable[..., tuple[Scene, Camera]]] = {
    1: reflective_spheres,
    2: spheres_on_floor,
    3: glass_room,
}


def build_example(
    number: int, width: Optional[int] = None, height: Optional[int] = None
) -> tuple[Scene, Camera]:
    """Build one of the example scenes.

    Args:
        number: Example number (1, 2 or 3).
        width: Image width. Defaults to the scene's native width.
        height: Image height. Defaults to the scene's native height.

    Raises:
        ValueError: If there is no example with that number.
    """
    if number not in EXAMPLE_SCENES:
        raise ValueError(f"Unknown example {number}, choose from {sorted(EXAMPLE_SCENES)}")

    kwargs = {}
    if width is not None:
        kwargs["width"] = width
    if height is not None:
        kwargs["height"] = height
    return EXAMPLE_SCENES[number](**kwargs)
