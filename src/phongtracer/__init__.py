"""Phong ray tracer on the Taichi CPU backend.

Renders scenes of spheres and planes lit by point lights with the Phong
illumination model and hard shadows.

Taichi must be initialised before importing modules that declare fields:

    >>> from phongtracer.core.runtime import init_runtime
    >>> init_runtime(threads=4)
    >>> from phongtracer.core.renderer import Tracer
"""

__version__ = "0.1.0"
