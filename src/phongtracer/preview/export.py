"""Image export utilities for rendered framebuffers.

The tracer accumulates unclamped colours on the 0-255 scale. Export clamps
each channel to [0, 255] and truncates to 8 bits; there is no tone mapping
or gamma correction.

Supported formats (via Pillow):
    - BMP (24-bit, stored bottom-up by the encoder)
    - PNG

Example:
    >>> from phongtracer.preview.export import save_bmp
    >>> from phongtracer.core.tracer import get_framebuffer_numpy
    >>> save_bmp(get_framebuffer_numpy(), "render.bmp")
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def framebuffer_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float framebuffer to 8-bit colour.

    Args:
        image: Colour array of shape (H, W, 3) on the 0-255 scale. Values
            outside the range are allowed.

    Returns:
        Array of shape (H, W, 3) with dtype uint8. Channels are clamped to
        [0, 255] then truncated toward zero.

    Raises:
        ValueError: If the array is not of shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    clamped = np.clip(np.nan_to_num(image, nan=0.0), 0.0, 255.0)
    return clamped.astype(np.uint8)


def save_image(
    image: npt.NDArray[np.floating],
    filepath: str | Path,
    *,
    image_format: str | None = None,
) -> Path:
    """Save a framebuffer to an image file.

    Args:
        image: Colour array of shape (H, W, 3) on the 0-255 scale, row 0 at
            the top of the image.
        filepath: Output file path.
        image_format: Pillow format name ("BMP", "PNG"). Inferred from the
            file extension when None.

    Returns:
        The path written.
    """
    path = Path(filepath)
    pil_image = PILImage.fromarray(framebuffer_to_uint8(image))
    pil_image.save(path, format=image_format)
    return path


def save_bmp(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Save a framebuffer as a 24-bit BMP file."""
    return save_image(image, filepath, image_format="BMP")


def save_png(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Save a framebuffer as a PNG file."""
    return save_image(image, filepath, image_format="PNG")
