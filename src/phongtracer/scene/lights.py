"""Point light storage.

Point lights have a position, a scalar intensity and a colour. They are held
in Taichi fields so the shading code can loop over them inside the render
kernel. Scene order is insertion order.

The light colour is recorded with the light but the shading model only uses
position and intensity.
"""

import taichi as ti

from phongtracer.core.ray import real, vec3

DEFAULT_LIGHT_COLOUR = (255.0, 255.0, 255.0)

MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=real, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=real, shape=MAX_LIGHTS)
light_colours = ti.Vector.field(3, dtype=real, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


@ti.dataclass
class PointLight:
    """A point light.

    Attributes:
        position: World-space position of the light.
        intensity: Scalar light intensity before distance attenuation.
        colour: Light colour (RGB, 0-255 per channel).
    """

    position: vec3
    intensity: real
    colour: vec3


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_light(
    position: tuple[float, float, float],
    intensity: float,
    colour: tuple[float, float, float] = DEFAULT_LIGHT_COLOUR,
) -> int:
    """Add a point light to the scene.

    Args:
        position: The light position as (x, y, z).
        intensity: The light intensity.
        colour: The light colour as (R, G, B), 0-255 per channel.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = [float(position[0]), float(position[1]), float(position[2])]
    light_intensities[idx] = intensity
    light_colours[idx] = [float(colour[0]), float(colour[1]), float(colour[2])]
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_light(light_idx: ti.i32) -> PointLight:
    """Get a light by index."""
    return PointLight(
        position=light_positions[light_idx],
        intensity=light_intensities[light_idx],
        colour=light_colours[light_idx],
    )
