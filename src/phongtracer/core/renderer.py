"""Tracer: object-oriented facade over the ray-tracing core.

The Tracer owns a scene, a camera and a configuration, and wraps the
module-level render target and kernels from core.tracer with:
- Whole-image and row-batched rendering with progress callbacks
- Standalone tracing of single rays
- Ray count diagnostics
- Image export

Rendering and scene state live in preallocated Taichi fields, so a process
holds one active render target and one active scene at a time. Creating a
second Tracer reconfigures the render target. Unless it is given an existing
scene, it also creates a new SceneManager, which clears the shared scene
storage; the scene it replaces raises RuntimeError on further use. Pass
scene= to render a scene that was built beforehand.

Example:
    >>> from phongtracer.core.runtime import init_runtime
    >>> init_runtime(threads=4)
    >>> from phongtracer.core.renderer import Tracer
    >>>
    >>> tracer = Tracer()
    >>> tracer.load_example_scene()
    >>> tracer.render()
    >>> tracer.save_image("example.bmp")
    >>> print(tracer.get_ray_count())
"""

import dataclasses
import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path
from types import TracebackType

import numpy as np
import numpy.typing as npt

from phongtracer.camera.pinhole import PinholeCamera, reset_camera, setup_camera
from phongtracer.core.config import TracerConfig
from phongtracer.core.runtime import get_runtime_threads
from phongtracer.core.tracer import (
    clear_render_target,
    get_framebuffer_numpy,
    get_ray_count,
    release_render_target,
    render_image,
    reset_ray_count,
    set_ambient_lighting,
    set_background_colour,
    setup_render_target,
    trace_single_ray,
)
from phongtracer.preview.export import framebuffer_to_uint8, save_image
from phongtracer.scene.example import ExampleSceneParams, create_example_scene
from phongtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_rendered, total_rows)
ProgressCallback = Callable[[int, int], None]


class Tracer:
    """Phong ray tracer owning a scene, a camera and a configuration.

    Attributes:
        config: The active TracerConfig.
        scene: The SceneManager holding lights, materials and objects.
        camera: The active camera, or None before one is set.
    """

    def __init__(
        self,
        config: TracerConfig | None = None,
        scene: SceneManager | None = None,
        camera: PinholeCamera | None = None,
    ) -> None:
        """Initialize the tracer.

        Args:
            config: Render configuration. Defaults to TracerConfig().
            scene: Scene to render. A new, empty SceneManager when None,
                which replaces any previously active scene.
            camera: Camera to render from. Can also be set later with
                set_camera() or load_example_scene().

        Raises:
            ValueError: If the configured size exceeds the framebuffer
                capacity.
        """
        self._scene = scene if scene is not None else SceneManager()
        self._camera: PinholeCamera | None = None
        self._config = config if config is not None else TracerConfig()
        self._last_render_seconds = 0.0

        self.apply_config(self._config)
        if camera is not None:
            self.set_camera(camera)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> TracerConfig:
        """Get the active configuration."""
        return self._config

    @property
    def scene(self) -> SceneManager:
        """Get the scene owned by this tracer."""
        return self._scene

    @property
    def camera(self) -> PinholeCamera | None:
        """Get the active camera."""
        return self._camera

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._config.height

    @property
    def ray_count(self) -> int:
        """Get the number of rays cast so far."""
        return get_ray_count()

    @property
    def last_render_seconds(self) -> float:
        """Wall-clock duration of the most recent render() call."""
        return self._last_render_seconds

    # =========================================================================
    # Configuration
    # =========================================================================

    def apply_config(self, config: TracerConfig) -> None:
        """Apply a configuration to the render target and lighting.

        The thread count takes effect through init_runtime(), which must run
        before the tracer modules are imported. A config asking for a
        different count than the runtime was started with is logged as a
        warning.

        Raises:
            ValueError: If the configured size exceeds the framebuffer
                capacity.
        """
        runtime_threads = get_runtime_threads()
        if config.threads is not None and config.threads != runtime_threads:
            logger.warning(
                "Config asks for %d threads but the runtime was initialised with %s; "
                "pass the thread count to init_runtime()",
                config.threads,
                runtime_threads if runtime_threads is not None else "all cores",
            )
        self._config = config
        set_background_colour(config.background_colour)
        set_ambient_lighting(config.ambient_enabled, config.ambient_intensity)
        setup_render_target(config.width, config.height)

        if self._camera is not None:
            self.set_camera(self._camera)

    def set_camera(self, camera: PinholeCamera) -> None:
        """Set the camera, matching its render dimensions to the tracer's.

        Raises:
            ValueError: If the camera configuration is invalid.
        """
        if (camera.width, camera.height) != (self.width, self.height):
            camera = dataclasses.replace(camera, width=self.width, height=self.height)
        setup_camera(camera)
        self._camera = camera

    def load_example_scene(self, params: ExampleSceneParams | None = None) -> None:
        """Replace the scene with the example scene and use its camera.

        The example scene's ambient intensity replaces the configured one.
        """
        _, camera, example_config = create_example_scene(
            self.width, self.height, params=params, scene=self._scene
        )
        self.apply_config(
            dataclasses.replace(
                self._config,
                ambient_enabled=example_config.ambient_enabled,
                ambient_intensity=example_config.ambient_intensity,
            )
        )
        self.set_camera(camera)
        logger.info(
            "Loaded example scene: %d objects, %d lights",
            self._scene.get_object_count(),
            self._scene.get_light_count(),
        )

    # =========================================================================
    # Rendering
    # =========================================================================

    def _check_camera(self) -> None:
        if self._camera is None:
            raise RuntimeError("No camera set. Call set_camera() or load_example_scene() first.")

    def render(
        self,
        batch_rows: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the whole image into the framebuffer.

        The framebuffer is reset to the background colour first. The ray
        counter keeps accumulating across renders; see reset_ray_count().

        Args:
            batch_rows: Number of rows to render between callbacks. The
                whole image is rendered in one batch when None.
            callback: Optional callback called after each batch with
                (rows_rendered, total_rows).

        Raises:
            RuntimeError: If no camera has been set.
            ValueError: If batch_rows is not positive.
        """
        for _ in self.render_progressive(batch_rows=batch_rows, callback=callback):
            pass

    def render_progressive(
        self,
        batch_rows: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image in row batches, yielding progress after each.

        Args:
            batch_rows: Number of rows per batch. The whole image is one
                batch when None.
            callback: Optional callback called after each batch.

        Yields:
            Tuple of (rows_rendered, total_rows).

        Raises:
            RuntimeError: If no camera has been set.
            ValueError: If batch_rows is not positive.
        """
        self._check_camera()
        if batch_rows is None:
            batch_rows = self.height
        if batch_rows <= 0:
            raise ValueError(f"batch_rows must be positive, got {batch_rows}")

        clear_render_target()
        start_time = time.perf_counter()
        start_rays = get_ray_count()

        row = 0
        while row < self.height:
            row_end = min(row + batch_rows, self.height)
            render_image(row, row_end)
            row = row_end

            if callback is not None:
                callback(row, self.height)
            yield (row, self.height)

        self._last_render_seconds = time.perf_counter() - start_time
        logger.info(
            "Rendered %dx%d in %.2fs (%d rays)",
            self.width,
            self.height,
            self._last_render_seconds,
            get_ray_count() - start_rays,
        )

    def trace_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> tuple[float, float, float]:
        """Trace a single ray through the scene.

        Args:
            origin: Ray origin as (x, y, z).
            direction: Ray direction as (x, y, z); normalized before tracing.

        Returns:
            The unclamped (R, G, B) colour of the ray.
        """
        return trace_single_ray(origin, direction)

    def get_ray_count(self) -> int:
        """Get the number of primary and shadow rays cast so far."""
        return get_ray_count()

    def reset_ray_count(self) -> None:
        """Reset the ray counter to zero."""
        reset_ray_count()

    # =========================================================================
    # Output
    # =========================================================================

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the framebuffer as an unclamped (height, width, 3) array."""
        return get_framebuffer_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the framebuffer clamped and truncated to 8 bits."""
        return framebuffer_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str | Path) -> Path:
        """Save the framebuffer to a file.

        The format is inferred from the extension (.bmp, .png).

        Returns:
            The path written.
        """
        path = save_image(self.get_image_numpy(), filepath)
        logger.info("Saved image to %s", path)
        return path

    # =========================================================================
    # Teardown
    # =========================================================================

    def close(self) -> None:
        """Release the scene, camera and render target.

        A scene that has already been replaced by a newer SceneManager is
        left alone.
        """
        if self._scene.is_active():
            self._scene.clear()
        self._camera = None
        reset_camera()
        release_render_target()

    def __enter__(self) -> "Tracer":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        """Return a string representation of the tracer state."""
        return (
            f"Tracer(width={self.width}, height={self.height}, "
            f"objects={self._scene.get_object_count()}, "
            f"lights={self._scene.get_light_count()}, rays={self.ray_count})"
        )
