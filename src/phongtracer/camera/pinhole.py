"""Pinhole camera model for per-pixel primary ray generation.

This module implements a pinhole camera that generates one primary ray per
pixel. The camera supports:
- Look-at positioning (position, target, up)
- Horizontal field of view in degrees
- Arbitrary render dimensions (the vertical extent follows the aspect ratio)

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from target toward position (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Pixel (0, 0) is the top-left corner of the image. Rays pass through pixel
centers, so the same pixel always yields the same ray.

Example:
    >>> from phongtracer.camera.pinhole import PinholeCamera, setup_camera
    >>>
    >>> camera = PinholeCamera(
    ...     position=(0.0, 0.0, 0.0),
    ...     target=(0.0, 0.0, 100.0),
    ...     up=(0.0, 1.0, 0.0),
    ...     hfov=90.0,
    ...     width=640,
    ...     height=480,
    ... )
    >>> setup_camera(camera)
    >>> # Use get_pixel_ray(x, y) within a Taichi kernel
"""

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import taichi as ti

from phongtracer.core.ray import Ray, make_ray, normalize, real, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        target: Point the camera is looking at in world space (x, y, z).
        up: Up direction vector for camera orientation.
        hfov: Horizontal field of view in degrees.
        width: Render width in pixels.
        height: Render height in pixels.
    """

    position: tuple[float, float, float]
    target: tuple[float, float, float]
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    hfov: float = 90.0
    width: int = 640
    height: int = 480

    def to_dict(self) -> dict[str, Any]:
        """Export the camera to a dictionary (for JSON serialization)."""
        return {
            "position": list(self.position),
            "target": list(self.target),
            "up": list(self.up),
            "hfov": self.hfov,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PinholeCamera":
        """Load a camera from a dictionary.

        Args:
            data: Dictionary with 'position' and 'target' keys and optional
                'up', 'hfov', 'width' and 'height'.

        Raises:
            ValueError: If position or target is missing.
        """
        if "position" not in data or "target" not in data:
            raise ValueError("Camera configuration requires 'position' and 'target'")

        position = data["position"]
        target = data["target"]
        up = data.get("up", [0.0, 1.0, 0.0])
        return cls(
            position=(position[0], position[1], position[2]),
            target=(target[0], target[1], target[2]),
            up=(up[0], up[1], up[2]),
            hfov=data.get("hfov", 90.0),
            width=data.get("width", 640),
            height=data.get("height", 480),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=real, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=real, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=real, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=real, shape=())  # Backward (opposite view)

# Viewport vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=real, shape=())  # Full width, left to right
_viewport_vertical = ti.Vector.field(3, dtype=real, shape=())  # Full height, bottom to top
_upper_left_corner = ti.Vector.field(3, dtype=real, shape=())

_render_width = ti.field(dtype=ti.i32, shape=())
_render_height = ti.field(dtype=ti.i32, shape=())

_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis (u, v, w) and viewport geometry.
    The viewport is a virtual image plane at unit distance in front of the
    camera, tan(hfov / 2) wide on each side of the view axis.

    Args:
        camera: Camera configuration with position, orientation, FOV and
            render dimensions.

    Raises:
        ValueError: If the dimensions are not positive, hfov is outside
            (0, 180), position equals target, or up is parallel to the view
            direction.
    """
    if camera.width <= 0 or camera.height <= 0:
        raise ValueError(
            f"Render dimensions must be positive, got {camera.width}x{camera.height}"
        )
    if not 0.0 < camera.hfov < 180.0:
        raise ValueError(f"Horizontal FOV must be in (0, 180) degrees, got {camera.hfov}")

    position = np.array(camera.position, dtype=np.float64)
    target = np.array(camera.target, dtype=np.float64)
    up = np.array(camera.up, dtype=np.float64)

    w = position - target
    w_length = np.linalg.norm(w)
    if w_length < 1e-12:
        raise ValueError("Camera position and target must differ")
    w = w / w_length

    u = np.cross(up, w)
    u_length = np.linalg.norm(u)
    if u_length < 1e-12:
        raise ValueError("Camera up vector must not be parallel to the view direction")
    u = u / u_length

    v = np.cross(w, u)

    viewport_width = 2.0 * math.tan(math.radians(camera.hfov) / 2.0)
    viewport_height = viewport_width * camera.height / camera.width

    horizontal = viewport_width * u
    vertical = viewport_height * v

    # Top-left of the viewport: forward one unit, half left, half up
    upper_left = position - w - horizontal / 2.0 + vertical / 2.0

    _camera_origin[None] = position.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _upper_left_corner[None] = upper_left.tolist()
    _render_width[None] = camera.width
    _render_height[None] = camera.height
    _camera_initialized[None] = 1


def is_camera_ready() -> bool:
    """Check whether setup_camera() has been called."""
    return bool(_camera_initialized[None])


def reset_camera() -> None:
    """Mark the camera as not configured."""
    _camera_initialized[None] = 0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_pixel_ray(x: ti.i32, y: ti.i32) -> Ray:
    """Generate the primary ray through the center of pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        A Ray from the camera position with a unit direction.
    """
    s = (ti.cast(x, real) + 0.5) / ti.cast(_render_width[None], real)
    t = (ti.cast(y, real) + 0.5) / ti.cast(_render_height[None], real)

    point_on_viewport = (
        _upper_left_corner[None] + s * _viewport_horizontal[None] - t * _viewport_vertical[None]
    )

    origin = _camera_origin[None]
    direction = normalize(point_on_viewport - origin)

    return make_ray(origin, direction)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera position in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, upper_left and
        size (width, height).
    """

    def _as_tuple(field: Any) -> tuple[float, float, float]:
        value = field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _as_tuple(_camera_origin),
        "u": _as_tuple(_camera_u),
        "v": _as_tuple(_camera_v),
        "w": _as_tuple(_camera_w),
        "horizontal": _as_tuple(_viewport_horizontal),
        "vertical": _as_tuple(_viewport_vertical),
        "upper_left": _as_tuple(_upper_left_corner),
        "size": (float(_render_width[None]), float(_render_height[None])),
    }
