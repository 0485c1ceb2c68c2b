"""Infinite plane primitive with ray-plane intersection.

A plane is defined by:
- point: Any point lying on the plane
- normal: The unit normal of the plane

Ray-plane intersection is a single linear solve: the ray
origin + t * direction meets the plane where

    dot(origin + t * direction - point, normal) = 0
    t = dot(point - origin, normal) / dot(direction, normal)

Rays parallel to the plane never hit it.

Example:
    >>> from phongtracer.geometry.plane import Plane, intersect_plane
    >>> # Ground plane at y=0 facing up
    >>> plane = Plane(point=vec3(0, 0, 0), normal=vec3(0, 1, 0))
    >>> # Use intersect_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from phongtracer.core.ray import vec3

from .sphere import IntersectionResult, make_miss

# Rays with |dot(direction, normal)| below this are treated as parallel
PARALLEL_EPSILON = 1e-12


@ti.dataclass
class Plane:
    """An infinite plane through a point with a unit normal.

    Attributes:
        point: A point on the plane (vec3).
        normal: The unit normal of the plane (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def intersect_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> IntersectionResult:
    """Test for ray-plane intersection.

    Both faces of the plane are hit. Only intersections ahead of the ray
    origin (t > 0) are reported.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        plane: The plane to test intersection against.

    Returns:
        An IntersectionResult for the single crossing point, or a miss for
        parallel rays and planes behind the origin.
    """
    result = make_miss()

    denom = tm.dot(ray_direction, plane.normal)
    if ti.abs(denom) > PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom
        if t > 0.0:
            result = IntersectionResult(hit=1, t=t)

    return result


@ti.func
def plane_normal(plane: Plane, point: vec3) -> vec3:
    """Unit normal of a plane. Constant across the surface."""
    return plane.normal
