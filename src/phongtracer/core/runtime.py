"""Taichi runtime initialisation.

The tracer runs on the Taichi CPU backend in double precision. Modules that
declare Taichi fields (scene, materials, lights, camera, render target) must be
imported after ``init_runtime()`` has been called, since ``ti.init`` discards
fields created before it.
"""

import logging
from typing import Any

import taichi as ti

logger = logging.getLogger(__name__)

# Thread count passed to the last init_runtime() call
_runtime_threads: int | None = None


def init_runtime(threads: int | None = None, *, debug: bool = False) -> None:
    """Initialise Taichi for CPU rendering.

    Args:
        threads: Maximum number of CPU worker threads used by the render
            kernel. None uses Taichi's default (all cores). Output is the
            same for any thread count.
        debug: Enable Taichi debug mode (bounds checking in kernels).

    Raises:
        ValueError: If threads is not positive.
    """
    global _runtime_threads

    options: dict[str, Any] = {
        "arch": ti.cpu,
        "default_fp": ti.f64,
        "debug": debug,
    }
    if threads is not None:
        if threads <= 0:
            raise ValueError(f"Thread count must be positive, got {threads}")
        options["cpu_max_num_threads"] = threads

    ti.init(**options)
    _runtime_threads = threads
    logger.debug("Taichi runtime initialised (threads=%s, debug=%s)", threads, debug)


def get_runtime_threads() -> int | None:
    """Get the thread count the runtime was initialised with (None for all cores)."""
    return _runtime_threads
