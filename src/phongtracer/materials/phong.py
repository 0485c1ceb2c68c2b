"""Phong material model.

A Phong material describes how a surface responds to the local illumination
model used by the tracer:

    ambient  = colour * ambient_coeff * ambient_intensity
    diffuse  = colour * attenuation * diffuse_coeff * dot(N, L)
    specular = 255 * attenuation * specular_coeff * max(dot(R, V), 0) ^ specularity

where attenuation = light_intensity / (distance ^ attenuation_exponent + 0.01).

Colours are stored on the 0-255 scale per channel. Coefficients are expected
in [0, 1] but are not enforced, so over-bright or negative materials are
possible.

Materials are stored in an arena of Taichi fields and referenced by index, so
a single material can be shared by any number of objects.
"""

import taichi as ti

from phongtracer.core.ray import real, vec3

# Defaults for material properties left unset by scene construction
DEFAULT_COLOUR = (255.0, 255.0, 255.0)
DEFAULT_AMBIENT_COEFF = 1.0
DEFAULT_DIFFUSE_COEFF = 1.0
DEFAULT_SPECULAR_COEFF = 1.0
DEFAULT_SPECULARITY = 20.0
DEFAULT_ATTENUATION = 1.0


@ti.dataclass
class Material:
    """Phong material properties.

    Attributes:
        colour: Base colour (RGB, 0-255 per channel).
        ambient: Ambient reflection coefficient.
        diffuse: Diffuse reflection coefficient.
        specular: Specular reflection coefficient.
        specularity: Phong specular exponent. Higher values give tighter
            highlights.
        attenuation: Exponent applied to the light distance when computing
            light falloff.
    """

    colour: vec3
    ambient: real
    diffuse: real
    specular: real
    specularity: real
    attenuation: real


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_MATERIALS = 256

material_colours = ti.Vector.field(3, dtype=real, shape=MAX_MATERIALS)
material_ambient = ti.field(dtype=real, shape=MAX_MATERIALS)
material_diffuse = ti.field(dtype=real, shape=MAX_MATERIALS)
material_specular = ti.field(dtype=real, shape=MAX_MATERIALS)
material_specularity = ti.field(dtype=real, shape=MAX_MATERIALS)
material_attenuation = ti.field(dtype=real, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(
    colour: tuple[float, float, float] = DEFAULT_COLOUR,
    ambient: float = DEFAULT_AMBIENT_COEFF,
    diffuse: float = DEFAULT_DIFFUSE_COEFF,
    specular: float = DEFAULT_SPECULAR_COEFF,
    specularity: float = DEFAULT_SPECULARITY,
    attenuation: float = DEFAULT_ATTENUATION,
) -> int:
    """Add a Phong material to the material registry.

    Args:
        colour: Base colour as (R, G, B), 0-255 per channel.
        ambient: Ambient reflection coefficient.
        diffuse: Diffuse reflection coefficient.
        specular: Specular reflection coefficient.
        specularity: Phong specular exponent.
        attenuation: Phong attenuation exponent.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If colour does not have three components.
    """
    if len(colour) != 3:
        raise ValueError(f"Material colour must have 3 components, got {len(colour)}")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_colours[idx] = [float(colour[0]), float(colour[1]), float(colour[2])]
    material_ambient[idx] = ambient
    material_diffuse[idx] = diffuse
    material_specular[idx] = specular
    material_specularity[idx] = specularity
    material_attenuation[idx] = attenuation
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


def read_material(material_idx: int) -> dict[str, float | tuple[float, float, float]]:
    """Read a material's properties back from the registry (Python side).

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        Dictionary with colour, ambient, diffuse, specular, specularity and
        attenuation.

    Raises:
        ValueError: If the index does not refer to a registered material.
    """
    if material_idx < 0 or material_idx >= num_materials[None]:
        raise ValueError(f"Invalid material index: {material_idx}")

    c = material_colours[material_idx]
    return {
        "colour": (float(c[0]), float(c[1]), float(c[2])),
        "ambient": float(material_ambient[material_idx]),
        "diffuse": float(material_diffuse[material_idx]),
        "specular": float(material_specular[material_idx]),
        "specularity": float(material_specularity[material_idx]),
        "attenuation": float(material_attenuation[material_idx]),
    }


@ti.func
def get_material(material_idx: ti.i32) -> Material:
    """Get a material by index.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        The Material record.
    """
    return Material(
        colour=material_colours[material_idx],
        ambient=material_ambient[material_idx],
        diffuse=material_diffuse[material_idx],
        specular=material_specular[material_idx],
        specularity=material_specularity[material_idx],
        attenuation=material_attenuation[material_idx],
    )
