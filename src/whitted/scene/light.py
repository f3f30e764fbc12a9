"""Spherical light source.

A light is a small glowing sphere. It is intersectable like any sphere (rays
that hit it return its color directly) and it is the point the direct-lighting
term samples: shadow rays are cast toward its center.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.whitted.geometry.sphere import Sphere
from src.whitted.materials.material import Color, Material, check_color


@dataclass(frozen=True)
class Light:
    """A glowing sphere that both emits and occludes light.

    Attributes:
        center: Position of the light (x, y, z).
        radius: Radius of the visible light sphere (positive).
        color: Emitted RGB color. Components may exceed 1.
    """

    center: tuple[float, float, float]
    radius: float
    color: Color

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"Light radius must be positive, got {self.radius}")
        x, y, z = self.center
        object.__setattr__(self, "center", (float(x), float(y), float(z)))
        object.__setattr__(self, "color", check_color("Light color", self.color))

    @property
    def material(self) -> Material:
        """Emissive material carrying the light color."""
        return Material.emissive(self.color)

    @property
    def sphere(self) -> Sphere:
        """The sphere this light delegates intersection and normals to."""
        return Sphere(self.center, self.radius, self.material)
