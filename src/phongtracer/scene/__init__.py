"""Scene module for scene ownership and ray-scene queries.

Components:
    intersection: Object table, object contract dispatch, nearest-hit and
        shadow ray queries
    lights: Point light storage
    manager: SceneManager aggregate owning lights, materials and objects
    example: The example scene (three spheres on a ground plane, two lights)

Scene data is organized for kernel access:
    - One object table tagged by ObjectKind, in insertion order
    - Objects reference materials by index
    - Lights in a fixed-capacity list
"""

from .example import (
    EXAMPLE_AMBIENT_INTENSITY,
    ExampleSceneParams,
    create_example_camera,
    create_example_scene,
)
from .intersection import (
    HIT_EPSILON,
    MAX_OBJECTS,
    NearestHit,
    ObjectKind,
    add_plane,
    add_sphere,
    any_hit,
    clear_objects,
    find_nearest,
    get_object_count,
    get_object_kind,
    get_object_material,
    intersection_check,
    set_object_material,
    surface_normal,
)
from .lights import MAX_LIGHTS, PointLight, add_light, clear_lights, get_light, get_light_count
from .manager import (
    LightInfo,
    MaterialInfo,
    ObjectInfo,
    SceneConfig,
    SceneManager,
)

__all__ = [
    # Intersection module
    "ObjectKind",
    "NearestHit",
    "HIT_EPSILON",
    "MAX_OBJECTS",
    "add_sphere",
    "add_plane",
    "clear_objects",
    "get_object_count",
    "get_object_kind",
    "get_object_material",
    "set_object_material",
    "intersection_check",
    "surface_normal",
    "find_nearest",
    "any_hit",
    # Lights module
    "PointLight",
    "MAX_LIGHTS",
    "add_light",
    "clear_lights",
    "get_light",
    "get_light_count",
    # Manager module
    "SceneManager",
    "MaterialInfo",
    "ObjectInfo",
    "LightInfo",
    "SceneConfig",
    # Example scene
    "create_example_scene",
    "create_example_camera",
    "ExampleSceneParams",
    "EXAMPLE_AMBIENT_INTENSITY",
]
