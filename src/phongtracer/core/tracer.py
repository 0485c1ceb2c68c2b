"""Ray-tracing core: Phong shading with hard shadows.

This module implements the render kernel. For every pixel it asks the camera
for a primary ray, finds the nearest object, and shades the hit point with
the Phong local illumination model:

1. Ambient: colour * ambient_coeff * ambient_intensity
2. For each light facing the surface (dot(N, L) > 0), one shadow ray is cast
   toward the light. If nothing blocks it:
   - diffuse: colour * attenuation * diffuse_coeff * dot(N, L)
   - specular: 255 * attenuation * specular_coeff * dot(R, V)^specularity,
     added equally to all three channels

Rays that miss every object return the background colour with no lighting
applied. Colours are accumulated unclamped on the 0-255 scale; clamping
happens only when the framebuffer is exported.

The pixel loop is a Taichi parallel-for. Pixels are independent, and the ray
counter is updated with atomic adds, so the image and the ray count do not
depend on the number of threads.

Example:
    >>> from phongtracer.core.runtime import init_runtime
    >>> init_runtime()
    >>> from phongtracer.core.tracer import setup_render_target, render_image
    >>> from phongtracer.scene.example import create_example_scene
    >>> from phongtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera, config = create_example_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(camera.width, camera.height)
    >>> render_image()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from phongtracer.camera.pinhole import get_camera_origin, get_pixel_ray, is_camera_ready
from phongtracer.core.config import DEFAULT_AMBIENT_INTENSITY, DEFAULT_BACKGROUND_COLOUR
from phongtracer.core.ray import Ray, dot, length, make_ray, normalize, ray_at, real, vec3
from phongtracer.materials.phong import get_material
from phongtracer.scene.intersection import (
    any_hit,
    find_nearest,
    object_material,
    surface_normal,
)
from phongtracer.scene.lights import get_light, num_lights

# =============================================================================
# Shading Constants
# =============================================================================

# Added to the attenuation denominator so a light at distance zero stays finite
ATTENUATION_OFFSET = 0.01

# Scale of the specular highlight, which is added to every channel
SPECULAR_SCALE = 255.0

# =============================================================================
# Lighting Settings
# =============================================================================

_background_colour = ti.Vector.field(3, dtype=real, shape=())
_ambient_enabled = ti.field(dtype=ti.i32, shape=())
_ambient_intensity = ti.field(dtype=real, shape=())


def set_background_colour(colour: tuple[float, float, float]) -> None:
    """Set the colour returned for rays that hit nothing (0-255 per channel)."""
    _background_colour[None] = [float(colour[0]), float(colour[1]), float(colour[2])]


def get_background_colour() -> tuple[float, float, float]:
    """Get the current background colour."""
    c = _background_colour[None]
    return (float(c[0]), float(c[1]), float(c[2]))


def set_ambient_lighting(enabled: bool, intensity: float) -> None:
    """Configure the ambient term.

    Args:
        enabled: Whether the ambient term is added at hit points.
        intensity: Scene-wide ambient intensity.
    """
    _ambient_enabled[None] = 1 if enabled else 0
    _ambient_intensity[None] = intensity


def get_ambient_lighting() -> tuple[bool, float]:
    """Get the ambient settings as (enabled, intensity)."""
    return bool(_ambient_enabled[None]), float(_ambient_intensity[None])


def reset_lighting() -> None:
    """Restore the default background and ambient settings."""
    set_background_colour(DEFAULT_BACKGROUND_COLOUR)
    set_ambient_lighting(True, DEFAULT_AMBIENT_INTENSITY)


# =============================================================================
# Ray Counter
# =============================================================================

# One increment per primary ray and per shadow ray actually cast
_ray_count = ti.field(dtype=ti.i64, shape=())


def get_ray_count() -> int:
    """Get the number of rays cast since the last reset."""
    return int(_ray_count[None])


def reset_ray_count() -> None:
    """Reset the ray counter to zero."""
    _ray_count[None] = 0


# =============================================================================
# Render Target (Framebuffer)
# =============================================================================

# Maximum number of pixels (preallocated to avoid kernel recompilation)
MAX_FRAMEBUFFER_SIZE = 1920 * 1080

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Flat row-major colour buffer: index = y * width + x
_framebuffer = ti.Vector.field(3, dtype=real, shape=MAX_FRAMEBUFFER_SIZE)

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the framebuffer for a render of the given size.

    Sets the active dimensions and fills the active region with the current
    background colour.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the dimensions are not positive or the image would
            exceed MAX_FRAMEBUFFER_SIZE pixels.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width * height > MAX_FRAMEBUFFER_SIZE:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"size of {MAX_FRAMEBUFFER_SIZE} pixels"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


@ti.kernel
def _fill_background(size: ti.i32):
    for index in range(size):
        _framebuffer[index] = _background_colour[None]


def clear_render_target() -> None:
    """Fill the active framebuffer region with the background colour."""
    width, height = get_image_dimensions()
    if width > 0 and height > 0:
        _fill_background(width * height)


def release_render_target() -> None:
    """Mark the render target as not set up."""
    _image_width[None] = 0
    _image_height[None] = 0
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_framebuffer_numpy() -> npt.NDArray[np.float64]:
    """Get the rendered image as a NumPy array.

    Values are the raw, unclamped colours on the 0-255 scale.

    Returns:
        Array of shape (height, width, 3), row 0 at the top of the image.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    flat = _framebuffer.to_numpy()[: width * height]
    return flat.reshape(height, width, 3).astype(np.float64)


# =============================================================================
# Shading
# =============================================================================


@ti.func
def shade(object_index: ti.i32, point: vec3, normal: vec3) -> vec3:
    """Compute the colour of an object at a hit point.

    Applies the ambient term, then the diffuse and specular terms of every
    light that faces the surface and is not blocked by a shadow ray.

    Args:
        object_index: Row of the hit object in the object table.
        point: The intersection point on the object's surface.
        normal: The outward unit surface normal at point.

    Returns:
        The unclamped RGB colour (0-255 scale).
    """
    material = get_material(object_material(object_index))
    colour = vec3(0.0, 0.0, 0.0)

    if _ambient_enabled[None] == 1:
        colour += material.colour * (material.ambient * _ambient_intensity[None])

    camera_position = get_camera_origin()

    for i in range(num_lights[None]):
        light = get_light(i)

        to_light = light.position - point
        light_distance = length(to_light)
        light_vector = normalize(to_light)

        attenuation = light.intensity / (
            light_distance**material.attenuation + ATTENUATION_OFFSET
        )

        # Negative or zero when the surface faces away from the light
        facing = dot(normal, light_vector)

        if facing > 0.0:
            _ray_count[None] += 1
            in_shadow = any_hit(point, light_vector)

            if in_shadow == 0:
                colour += material.colour * (attenuation * material.diffuse * facing)

                # light_vector is unit length, so the reflection needs no
                # renormalization
                reflected = normal * facing * 2.0 - light_vector
                camera_vector = normalize(camera_position - point)
                cos_alpha = dot(reflected, camera_vector)

                specular = cos_alpha**material.specularity
                if specular < 0.0 or tm.isnan(specular):
                    specular = 0.0

                colour += SPECULAR_SCALE * attenuation * material.specular * specular

    return colour


@ti.func
def trace_ray(ray: Ray) -> vec3:
    """Trace a single ray through the scene.

    Args:
        ray: The ray to trace (unit direction).

    Returns:
        The shaded colour of the nearest object, or the background colour if
        the ray escapes.
    """
    colour = _background_colour[None]

    nearest = find_nearest(ray.origin, ray.direction)
    if nearest.hit == 1:
        point = ray_at(ray, nearest.t)
        normal = surface_normal(nearest.object_index, point)
        colour = shade(nearest.object_index, point, normal)

    return colour


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_range(start_index: ti.i32, end_index: ti.i32):
    """Render the framebuffer cells in [start_index, end_index)."""
    for index in range(start_index, end_index):
        width = _image_width[None]
        x = index % width
        y = (index - x) // width

        ray = get_pixel_ray(x, y)
        _ray_count[None] += 1

        _framebuffer[index] = trace_ray(ray)


@ti.kernel
def _trace_single(
    ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64
) -> vec3:
    return trace_ray(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)))


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(row_start: int = 0, row_end: int | None = None) -> None:
    """Render rows of the image into the framebuffer.

    Rows are rendered in parallel. Calling this for consecutive row ranges
    produces the same image as a single call for the whole image.

    Args:
        row_start: First row to render (0 = top).
        row_end: One past the last row to render. Defaults to the image
            height.

    Raises:
        RuntimeError: If the render target or the camera has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()
    if not is_camera_ready():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")

    width, height = get_image_dimensions()
    if row_end is None:
        row_end = height
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Invalid row range [{row_start}, {row_end}) for height {height}")

    if row_start < row_end:
        _render_range(row_start * width, row_end * width)


def trace_single_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, float, float]:
    """Trace one ray and return its colour.

    Useful for testing and debugging shading. The direction is normalized
    before tracing. Shadow rays cast while shading are counted; the ray
    itself is not, since it is not a primary ray. Specular highlights are
    computed toward the position of the configured camera.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z). Must not be zero.

    Returns:
        Tuple of (R, G, B), unclamped.

    Raises:
        ValueError: If the direction has zero length.
    """
    d = np.asarray(direction, dtype=np.float64)
    norm = float(np.linalg.norm(d))
    if norm == 0.0:
        raise ValueError("Ray direction must not be zero")
    d = d / norm

    colour = _trace_single(
        float(origin[0]),
        float(origin[1]),
        float(origin[2]),
        float(d[0]),
        float(d[1]),
        float(d[2]),
    )
    return (float(colour[0]), float(colour[1]), float(colour[2]))


# Fields start zeroed; give the lighting settings their defaults
reset_lighting()
