"""Geometry module for shape primitives.

This module provides the geometric primitives and their intersection
algorithms:

Components:
    sphere: Sphere primitive with ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

Every primitive implements the same two operations, which the scene object
table dispatches to by object kind:
    intersect_<shape>(ray_origin, ray_direction, shape) -> IntersectionResult
    <shape>_normal(shape, point) -> vec3

Intersection routines never raise. A miss is reported with hit == 0.
"""

from .plane import Plane, intersect_plane, plane_normal
from .sphere import IntersectionResult, Sphere, intersect_sphere, make_miss, sphere_normal

__all__ = [
    "IntersectionResult",
    "make_miss",
    "Sphere",
    "intersect_sphere",
    "sphere_normal",
    "Plane",
    "intersect_plane",
    "plane_normal",
]
