"""Core rendering module.

This module contains the fundamental building blocks of the ray tracer:

Components:
    ray: Ray data structure and vector utilities
    config: Render configuration (resolution, background, ambient, threads)
    runtime: Taichi runtime initialisation
    tracer: Phong shading, shadow rays and the per-pixel render kernel
    renderer: Object-oriented Tracer facade owning scene, camera and config

The tracer casts one primary ray per pixel, finds the nearest object, and
shades the hit point with an ambient term plus per-light diffuse and specular
terms gated by a shadow ray.
"""

from .config import TracerConfig
from .ray import Ray, dot, length, make_ray, normalize, ray_at, real, vec3
from .runtime import init_runtime

# Note: tracer and renderer are NOT imported here because they declare Taichi
# fields at import time. Import them after init_runtime():
#   from phongtracer.core.renderer import Tracer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "real",
    "length",
    "normalize",
    "dot",
    "TracerConfig",
    "init_runtime",
]
