"""Phong-style surface material with reflection and refraction coefficients.

A material describes how a surface responds to light in the Whitted model:

    - color: surface color, also the absorbing color for Beer's law
    - diffuse / specular / shininess: Phong direct-lighting terms
    - reflection: weight of the mirror-reflected ray
    - refraction / refractive_index: transmitted ray and its medium

Materials are plain host-side values. Before rendering they are copied into a
registry of Taichi fields and referenced by material ID from the scene's
object storage.

Example:
    >>> from src.whitted.materials.material import MaterialBuilder
    >>> glass = (
    ...     MaterialBuilder()
    ...     .color((0.7, 0.7, 1.0))
    ...     .diffuse(0.2)
    ...     .specular(0.8)
    ...     .shininess(20)
    ...     .refraction(0.8)
    ...     .refractive_index(1.3)
    ...     .build()
    ... )
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]

WHITE: Color = (1.0, 1.0, 1.0)
BLACK: Color = (0.0, 0.0, 0.0)


def _check_unit_interval(name: str, value: float) -> None:
    if value < 0.0 or value > 1.0:
        raise ValueError(f"Material {name} = {value} is outside [0, 1]")


def check_color(name: str, color: Color) -> Color:
    """Validate a color triple and return it as a tuple of floats.

    Raises:
        ValueError: If the color does not have three components or any
            component is negative.
    """
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0:
            raise ValueError(f"{name} component {i} = {component} is negative")
    return (float(color[0]), float(color[1]), float(color[2]))


@dataclass(frozen=True)
class Material:
    """Surface material properties.

    Attributes:
        color: RGB surface color. Components are non-negative and may exceed 1.
        diffuse: Diffuse coefficient in [0, 1].
        specular: Specular coefficient in [0, 1].
        shininess: Phong exponent (non-negative integer). 0 disables specular.
        reflection: Reflection coefficient in [0, 1].
        refraction: Refraction coefficient in [0, 1]. 0 disables refraction.
        refractive_index: Index of refraction of the material. Only used when
            refraction > 0, where it must be positive.
    """

    color: Color = WHITE
    diffuse: float = 1.0
    specular: float = 0.0
    shininess: int = 0
    reflection: float = 0.0
    refraction: float = 0.0
    refractive_index: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", check_color("Material color", self.color))
        _check_unit_interval("diffuse", self.diffuse)
        _check_unit_interval("specular", self.specular)
        _check_unit_interval("reflection", self.reflection)
        _check_unit_interval("refraction", self.refraction)
        if self.shininess < 0:
            raise ValueError(f"Material shininess = {self.shininess} is negative")
        if self.refraction > 0.0 and self.refractive_index <= 0.0:
            raise ValueError(
                f"Refractive material needs a positive refractive_index, "
                f"got {self.refractive_index}"
            )

    @classmethod
    def emissive(cls, color: Color) -> "Material":
        """Material of a light source: its color, fully diffuse, nothing else."""
        return cls(color=color)


class MaterialBuilder:
    """Fluent builder for Material values.

    Starts from a white, fully diffuse material with every other coefficient
    at zero.
    """

    def __init__(self) -> None:
        self._color: Color = WHITE
        self._diffuse = 1.0
        self._specular = 0.0
        self._shininess = 0
        self._reflection = 0.0
        self._refraction = 0.0
        self._refractive_index = 0.0

    def color(self, color: Color) -> "MaterialBuilder":
        self._color = color
        return self

    def diffuse(self, diffuse: float) -> "MaterialBuilder":
        self._diffuse = diffuse
        return self

    def specular(self, specular: float) -> "MaterialBuilder":
        self._specular = specular
        return self

    def shininess(self, shininess: int) -> "MaterialBuilder":
        self._shininess = shininess
        return self

    def reflection(self, reflection: float) -> "MaterialBuilder":
        self._reflection = reflection
        return self

    def refraction(self, refraction: float) -> "MaterialBuilder":
        self._refraction = refraction
        return self

    def refractive_index(self, refractive_index: float) -> "MaterialBuilder":
        self._refractive_index = refractive_index
        return self

    def build(self) -> Material:
        """Create the Material.

        Raises:
            ValueError: If any coefficient is out of range.
        """
        return Material(
            color=self._color,
            diffuse=self._diffuse,
            specular=self._specular,
            shininess=self._shininess,
            reflection=self._reflection,
            refraction=self._refraction,
            refractive_index=self._refractive_index,
        )


# =============================================================================
# Device-side Material Record
# =============================================================================


@ti.dataclass
class MaterialRecord:
    """Material properties as seen from inside Taichi kernels."""

    color: vec3
    diffuse: ti.f32
    specular: ti.f32
    shininess: ti.i32
    reflection: ti.f32
    refraction: ti.f32
    refractive_index: ti.f32


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_MATERIALS = 1024

material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuse = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_specular = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_reflection = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_refraction = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_refractive_index = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear the material registry.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Copy a material into the registry.

    Args:
        material: The material to register.

    Returns:
        The material ID of the registered material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_colors[idx] = vec3(*material.color)
    material_diffuse[idx] = material.diffuse
    material_specular[idx] = material.specular
    material_shininess[idx] = material.shininess
    material_reflection[idx] = material.reflection
    material_refraction[idx] = material.refraction
    material_refractive_index[idx] = material.refractive_index
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> MaterialRecord:
    """Look up a registered material by ID.

    Args:
        material_id: The ID returned by add_material().

    Returns:
        The material as a MaterialRecord.
    """
    return MaterialRecord(
        color=material_colors[material_id],
        diffuse=material_diffuse[material_id],
        specular=material_specular[material_id],
        shininess=material_shininess[material_id],
        reflection=material_reflection[material_id],
        refraction=material_refraction[material_id],
        refractive_index=material_refractive_index[material_id],
    )
