"""Sphere primitive with robust ray-sphere intersection.

This module provides a Sphere dataclass, the IntersectionResult shared by all
primitives, and the sphere's intersection and surface normal functions.

Intersection uses the robust quadratic formula from Ray Tracing Gems to avoid
catastrophic cancellation when b^2 is nearly equal to 4ac.

Example:
    >>> from phongtracer.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=vec3(0, 0, 100), radius=50.0)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from phongtracer.core.ray import real, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: real


@ti.dataclass
class IntersectionResult:
    """Result of a ray-primitive intersection test.

    Attributes:
        hit: 1 if the ray intersects the primitive ahead of its origin,
            0 otherwise.
        t: The parametric distance along the ray to the nearest
            intersection. Only valid if hit == 1. Parametric (not world)
            distance, so results from different primitives are comparable.
    """

    hit: ti.i32
    t: real


@ti.func
def make_miss() -> IntersectionResult:
    """Create an IntersectionResult indicating no intersection."""
    return IntersectionResult(hit=0, t=0.0)


@ti.func
def _solve_quadratic_robust(h: real, a: real, c: real, sqrt_d: real):
    """Solve quadratic equation using robust formula from Ray Tracing Gems.

    Solves a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-12:
        # Tangent ray through the center plane: fall back to standard formula
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def intersect_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> IntersectionResult:
    """Test for ray-sphere intersection.

    The ray-sphere intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    which expands to a*t^2 + 2*h*t + c = 0 with:
        a = dot(direction, direction)
        h = dot(direction, oc)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    The nearest root ahead of the origin (t > 0) is reported. A ray starting
    inside the sphere therefore hits the far side. No minimum distance is
    applied here; the scene query rejects hits too close to the origin.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere to test intersection against.

    Returns:
        An IntersectionResult with the nearest positive root.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = make_miss()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        if t0 > 0.0:
            result = IntersectionResult(hit=1, t=t0)
        elif t1 > 0.0:
            result = IntersectionResult(hit=1, t=t1)

    return result


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Outward unit normal of a sphere at a point on its surface.

    Only meaningful for points on the surface; the result is not normalized
    otherwise.
    """
    return (point - sphere.center) / sphere.radius
