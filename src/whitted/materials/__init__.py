"""Materials module.

Components:
    material: Phong/Whitted material values, builder and the device registry

A material carries a surface color, Phong diffuse/specular/shininess terms
and the weights of the reflected and refracted rays. Host code works with
immutable Material values; kernels read MaterialRecord structs from the
registry by material ID.
"""

from .material import (
    BLACK,
    MAX_MATERIALS,
    WHITE,
    Material,
    MaterialBuilder,
    MaterialRecord,
    add_material,
    clear_materials,
    get_material,
    get_material_count,
)

__all__ = [
    "Material",
    "MaterialBuilder",
    "MaterialRecord",
    "WHITE",
    "BLACK",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
]
