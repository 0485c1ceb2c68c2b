"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole (perspective) camera with look-at positioning and a
        horizontal field of view

The camera maps integer pixel coordinates to world-space rays:
    x in [0, width): left to right across the image
    y in [0, height): top to bottom across the image

Rays pass through pixel centers, so ray generation is deterministic for a
fixed camera configuration.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_camera_origin,
    get_pixel_ray,
    is_camera_ready,
    reset_camera,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "reset_camera",
    "is_camera_ready",
    "get_pixel_ray",
    "get_camera_origin",
    "get_camera_info",
]
