"""Scene description and upload.

A Scene is the host-side description of what to render: surfaces, lights,
the background color, the ambient refractive index and the bounce limit.
upload() writes it into the Taichi fields the integrator reads, so a scene can
be built once and then traced many times.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene import Light, Scene
    >>> from src.whitted.geometry import Sphere
    >>> scene = Scene(background_color=(0.1, 0.1, 0.1))
    >>> scene.add_object(Sphere((0.0, 0.0, 5.0), 1.0))
    0
    >>> scene.add_light(Light((0.0, 5.0, 5.0), 0.1, (1.0, 1.0, 1.0)))
    1
    >>> result = scene.trace((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
"""

from __future__ import annotations

from typing import Union

import numpy as np
import numpy.typing as npt

# Module import only: the integrator imports scene.intersection
from src.whitted.core import integrator
from src.whitted.geometry.plane import Plane
from src.whitted.geometry.sphere import Sphere
from src.whitted.materials.material import Color, add_material, check_color, clear_materials
from src.whitted.scene import intersection
from src.whitted.scene.light import Light

Surface = Union[Sphere, Plane]


class Scene:
    """Ordered collection of surfaces and lights plus global parameters.

    Entries keep their insertion order, which is also their object index and
    the order ties are broken in when two entries are hit at the same distance.

    Attributes:
        background_color: Color of rays that hit nothing.
        refractive_index: Refractive index of the medium the camera is in.
        max_ray_depth: Number of reflection/refraction bounces allowed.
    """

    def __init__(
        self,
        background_color: Color = (0.0, 0.0, 0.0),
        refractive_index: float = 1.0,
        max_ray_depth: int = 5,
    ) -> None:
        if refractive_index <= 0.0:
            raise ValueError(f"refractive_index must be positive, got {refractive_index}")
        if not 0 <= max_ray_depth <= integrator.MAX_RAY_DEPTH:
            raise ValueError(
                f"max_ray_depth must be in [0, {integrator.MAX_RAY_DEPTH}], got {max_ray_depth}"
            )

        self.background_color = check_color("background_color", background_color)
        self.refractive_index = float(refractive_index)
        self.max_ray_depth = int(max_ray_depth)
        self._entries: list[Surface | Light] = []

    @property
    def objects(self) -> list[Surface | Light]:
        """All entries (surfaces and lights) in insertion order."""
        return list(self._entries)

    @property
    def lights(self) -> list[Light]:
        """Light entries in insertion order."""
        return [entry for entry in self._entries if isinstance(entry, Light)]

    def __len__(self) -> int:
        return len(self._entries)

    def add_object(self, surface: Surface) -> int:
        """Add a sphere or plane.

        Returns:
            The object index of the surface.

        Raises:
            TypeError: If surface is not a Sphere or Plane.
        """
        if not isinstance(surface, (Sphere, Plane)):
            raise TypeError(f"Expected a Sphere or Plane, got {type(surface).__name__}")
        self._entries.append(surface)
        return len(self._entries) - 1

    def add_light(self, light: Light) -> int:
        """Add a light. Lights are also intersectable objects.

        Returns:
            The object index of the light.

        Raises:
            TypeError: If light is not a Light.
        """
        if not isinstance(light, Light):
            raise TypeError(f"Expected a Light, got {type(light).__name__}")
        self._entries.append(light)
        return len(self._entries) - 1

    def upload(self) -> None:
        """Write the scene into the Taichi fields used by the tracer.

        Replaces whatever scene was uploaded before.

        Raises:
            RuntimeError: If the scene exceeds the object or material capacity.
        """
        intersection.clear_scene()
        clear_materials()

        for entry in self._entries:
            material_id = add_material(entry.material)
            if isinstance(entry, Light):
                intersection.add_light(entry.center, entry.radius, material_id)
            elif isinstance(entry, Sphere):
                intersection.add_sphere(entry.center, entry.radius, material_id)
            else:
                intersection.add_plane(entry.origin, entry.normal, material_id)

        integrator.setup_scene_parameters(
            self.background_color, self.refractive_index, self.max_ray_depth
        )

    def trace(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        depth: int = 0,
    ) -> integrator.TraceResult:
        """Upload the scene and trace one ray.

        Args:
            origin: Ray origin.
            direction: Ray direction. Normalized before tracing.
            depth: Recursion depth the ray starts at.

        Returns:
            The ray's color (unclamped) and nearest-hit distance.
        """
        self.upload()
        return integrator.trace_ray(origin, direction, depth)

    def trace_rays(
        self,
        origins: npt.ArrayLike,
        directions: npt.ArrayLike,
        depth: int = 0,
    ) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
        """Upload the scene and trace a batch of rays.

        Returns:
            Tuple of (colors, distances) with shapes (N, 3) and (N,).
        """
        self.upload()
        return integrator.trace_rays(origins, directions, depth)

    def __repr__(self) -> str:
        return (
            f"Scene(objects={len(self._entries)}, lights={len(self.lights)}, "
            f"background_color={self.background_color}, "
            f"refractive_index={self.refractive_index}, max_ray_depth={self.max_ray_depth})"
        )
