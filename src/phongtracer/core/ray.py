"""Ray data structure and vector utilities for the ray tracer.

This module provides the fundamental Ray dataclass and the small set of vector
helpers the tracing core relies on. All operations are Taichi functions so they
can be called from inside render kernels.

Vectors and scalars are double precision throughout. Parametric distances from
different primitives are compared directly against each other, and colours are
accumulated without clamping, so the extra precision keeps shadow rays clear of
their own surfaces.

Example:
    >>> from phongtracer.core.runtime import init_runtime
    >>> init_runtime()
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Scalar type used for all geometry and colour maths
real = ti.f64

# Type alias for 3D vectors (positions, directions and RGB colours)
vec3 = ti.types.vector(3, real)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Expected to be
            unit length; primary and shadow rays are always built from
            normalized directions.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v. Zero-length input is
        undefined.
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)
