"""Preview module for rendered output.

Components:
    export: Framebuffer serialization to BMP and PNG via Pillow

Colours are clamped to [0, 255] and truncated to 8 bits at export time only;
the framebuffer itself is never clamped.

Example:
    >>> from phongtracer.preview import save_bmp
    >>> save_bmp(tracer.get_image_numpy(), "output.bmp")
"""

from phongtracer.preview.export import (
    framebuffer_to_uint8,
    save_bmp,
    save_image,
    save_png,
)

__all__ = [
    "framebuffer_to_uint8",
    "save_image",
    "save_bmp",
    "save_png",
]
