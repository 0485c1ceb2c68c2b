"""Scene object table and ray-scene intersection queries.

Every object in the scene occupies one row of a single object table, tagged
with its ObjectKind. Keeping all kinds in one table preserves the order in
which objects were added, which decides ties in the nearest-hit search.

The polymorphic object contract is dispatched on the kind tag:
    intersection_check(object_index, origin, direction) -> IntersectionResult
    surface_normal(object_index, point) -> vec3

Each object references exactly one material by index. Materials are shared,
so several objects can point at the same row of the material registry.

Example:
    >>> from phongtracer.scene.intersection import add_sphere, add_plane, find_nearest
    >>> clear_objects()
    >>> add_sphere((0, 0, 100), 50.0, material_id=0)
    >>> add_plane((0, 0, 0), (0, 1, 0), material_id=1)
    >>> # Use find_nearest / any_hit within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti

from phongtracer.core.ray import real, vec3
from phongtracer.geometry.plane import Plane, intersect_plane, plane_normal
from phongtracer.geometry.sphere import (
    IntersectionResult,
    Sphere,
    intersect_sphere,
    make_miss,
    sphere_normal,
)

# Hits closer than this to the ray origin are ignored (self-intersection)
HIT_EPSILON = 1e-4


class ObjectKind(IntEnum):
    """Enumeration of supported object kinds."""

    SPHERE = 0
    PLANE = 1


_SPHERE = int(ObjectKind.SPHERE)
_PLANE = int(ObjectKind.PLANE)


@ti.dataclass
class NearestHit:
    """Result of the nearest-intersection search over the scene.

    Attributes:
        hit: 1 if any object was hit beyond HIT_EPSILON, 0 otherwise.
        t: Parametric distance to the nearest hit. Only valid if hit == 1.
        object_index: Row of the nearest object in the object table.
            -1 on a miss.
    """

    hit: ti.i32
    t: real
    object_index: ti.i32


# Maximum number of objects supported in the scene
MAX_OBJECTS = 1024

# Object table. position is the sphere center or a point on the plane,
# radius is only used by spheres and normal only by planes.
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_positions = ti.Vector.field(3, dtype=real, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=real, shape=MAX_OBJECTS)
object_normals = ti.Vector.field(3, dtype=real, shape=MAX_OBJECTS)
object_material_ids = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())


def clear_objects() -> None:
    """Clear all objects from the scene.

    Resets the object count to zero. The actual field data is not cleared
    but will be overwritten when new objects are added.
    """
    num_objects[None] = 0


def _append_object(
    kind: ObjectKind,
    position: tuple[float, float, float],
    radius: float,
    normal: tuple[float, float, float],
    material_id: int,
) -> int:
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    object_kinds[idx] = int(kind)
    object_positions[idx] = [float(position[0]), float(position[1]), float(position[2])]
    object_radii[idx] = radius
    object_normals[idx] = [float(normal[0]), float(normal[1]), float(normal[2])]
    object_material_ids[idx] = material_id
    num_objects[None] = idx + 1
    return idx


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material index to associate with this sphere.

    Returns:
        The index of the added object.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    return _append_object(ObjectKind.SPHERE, center, radius, (0.0, 0.0, 0.0), material_id)


def add_plane(
    point: tuple[float, float, float],
    normal: tuple[float, float, float],
    material_id: int,
) -> int:
    """Add an infinite plane to the scene.

    Args:
        point: Any point on the plane.
        normal: The unit normal of the plane. Not normalized here.
        material_id: The material index to associate with this plane.

    Returns:
        The index of the added object.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    return _append_object(ObjectKind.PLANE, point, 0.0, normal, material_id)


def get_object_count() -> int:
    """Get the number of objects in the scene."""
    return int(num_objects[None])


def _check_object_index(object_index: int) -> None:
    if object_index < 0 or object_index >= num_objects[None]:
        raise ValueError(f"Invalid object index: {object_index}")


def get_object_kind(object_index: int) -> ObjectKind:
    """Get the kind of an object.

    Raises:
        ValueError: If the index does not refer to an object in the scene.
    """
    _check_object_index(object_index)
    return ObjectKind(int(object_kinds[object_index]))


def get_object_material(object_index: int) -> int:
    """Get the material index assigned to an object.

    Raises:
        ValueError: If the index does not refer to an object in the scene.
    """
    _check_object_index(object_index)
    return int(object_material_ids[object_index])


def set_object_material(object_index: int, material_id: int) -> None:
    """Assign a material to an object, replacing the previous one.

    Raises:
        ValueError: If the index does not refer to an object in the scene.
    """
    _check_object_index(object_index)
    object_material_ids[object_index] = material_id


# =============================================================================
# Object Contract (Taichi-side dispatch)
# =============================================================================


@ti.func
def _sphere_at(object_index: ti.i32) -> Sphere:
    return Sphere(center=object_positions[object_index], radius=object_radii[object_index])


@ti.func
def _plane_at(object_index: ti.i32) -> Plane:
    return Plane(point=object_positions[object_index], normal=object_normals[object_index])


@ti.func
def intersection_check(
    object_index: ti.i32,
    ray_origin: vec3,
    ray_direction: vec3,
) -> IntersectionResult:
    """Intersect a ray with one object of the scene.

    Dispatches to the primitive-specific intersection routine based on the
    object kind.

    Args:
        object_index: Row of the object in the object table.
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        The IntersectionResult of the object's primitive. Unknown kinds miss.
    """
    result = make_miss()
    kind = object_kinds[object_index]

    if kind == _SPHERE:
        result = intersect_sphere(ray_origin, ray_direction, _sphere_at(object_index))
    elif kind == _PLANE:
        result = intersect_plane(ray_origin, ray_direction, _plane_at(object_index))

    return result


@ti.func
def surface_normal(object_index: ti.i32, point: vec3) -> vec3:
    """Outward unit normal of an object at a point on its surface.

    The point must lie on the object's surface, normally a verified
    intersection point. Anything else returns an arbitrary vector.
    """
    normal = vec3(0.0, 0.0, 0.0)
    kind = object_kinds[object_index]

    if kind == _SPHERE:
        normal = sphere_normal(_sphere_at(object_index), point)
    elif kind == _PLANE:
        normal = plane_normal(_plane_at(object_index), point)

    return normal


@ti.func
def object_material(object_index: ti.i32) -> ti.i32:
    """Material index of an object (Taichi side)."""
    return object_material_ids[object_index]


# =============================================================================
# Scene Queries
# =============================================================================


@ti.func
def find_nearest(ray_origin: vec3, ray_direction: vec3) -> NearestHit:
    """Find the nearest object hit by a ray.

    Tests every object in scene order and keeps the smallest t among hits
    with t > HIT_EPSILON. On equal distances the object added first wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        A NearestHit for the closest object, or hit == 0 if the ray escapes.
    """
    result = NearestHit(hit=0, t=0.0, object_index=-1)

    for i in range(num_objects[None]):
        rec = intersection_check(i, ray_origin, ray_direction)
        if rec.hit == 1 and rec.t > HIT_EPSILON:
            if result.hit == 0 or rec.t < result.t:
                result = NearestHit(hit=1, t=rec.t, object_index=i)

    return result


@ti.func
def any_hit(ray_origin: vec3, ray_direction: vec3) -> ti.i32:
    """Test if a ray hits any object in the scene (shadow ray query).

    Only the HIT_EPSILON lower bound applies. There is no upper bound, so an
    object beyond a light still counts as a hit for a shadow ray aimed at
    that light.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        1 if any object was hit, 0 otherwise.
    """
    hit_any = 0

    for i in range(num_objects[None]):
        if hit_any == 0:
            rec = intersection_check(i, ray_origin, ray_direction)
            if rec.hit == 1 and rec.t > HIT_EPSILON:
                hit_any = 1

    return hit_any
