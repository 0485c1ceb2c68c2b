"""Materials module.

Components:
    phong: Phong local illumination material (ambient, diffuse, specular
        coefficients plus specular and attenuation exponents)

Materials live in a fixed-capacity registry of Taichi fields and are shared
between objects by index. The shading functions in core.tracer read them with
get_material() inside the render kernel.
"""

from .phong import (
    DEFAULT_AMBIENT_COEFF,
    DEFAULT_ATTENUATION,
    DEFAULT_COLOUR,
    DEFAULT_DIFFUSE_COEFF,
    DEFAULT_SPECULAR_COEFF,
    DEFAULT_SPECULARITY,
    MAX_MATERIALS,
    Material,
    add_material,
    clear_materials,
    get_material,
    get_material_count,
    read_material,
)

__all__ = [
    "Material",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "read_material",
    "MAX_MATERIALS",
    "DEFAULT_COLOUR",
    "DEFAULT_AMBIENT_COEFF",
    "DEFAULT_DIFFUSE_COEFF",
    "DEFAULT_SPECULAR_COEFF",
    "DEFAULT_SPECULARITY",
    "DEFAULT_ATTENUATION",
]
