"""Scene manager owning the lights, materials and objects of a scene.

This module provides a high-level scene API on top of the Taichi-side
registries (object table, material registry, light list). The SceneManager:
- Validates inputs before they reach the Taichi fields
- Keeps a Python-side record of everything added, for inspection and
  serialization
- Owns the lifetime of all lights, materials and objects: clear() releases
  them together

Materials are referenced by id and may be shared by any number of objects.
Every object gets a material when it is added, so an object without a
material cannot be created through this API.

The Taichi-side registries exist once per process, so only one SceneManager
is active at a time. Creating a manager clears the registries and makes it
the active one; any later use of the manager it replaced raises
RuntimeError.

Example:
    >>> from phongtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_material(colour=(255, 183, 182), specularity=200)
    >>> scene.add_sphere(center=(0, 100, 100), radius=70, material_id=red)
    >>> scene.add_sphere(center=(150, 0, 0), radius=50, material_id=red)
    >>> scene.add_light(position=(500, 200, 500), intensity=100.0)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar

import numpy as np

from phongtracer.materials.phong import (
    DEFAULT_AMBIENT_COEFF,
    DEFAULT_ATTENUATION,
    DEFAULT_COLOUR,
    DEFAULT_DIFFUSE_COEFF,
    DEFAULT_SPECULAR_COEFF,
    DEFAULT_SPECULARITY,
    MAX_MATERIALS,
    add_material,
    clear_materials,
    get_material_count,
)
from phongtracer.scene.intersection import (
    MAX_OBJECTS,
    ObjectKind,
    add_plane,
    add_sphere,
    clear_objects,
    get_object_count,
    set_object_material,
)
from phongtracer.scene.lights import (
    DEFAULT_LIGHT_COLOUR,
    MAX_LIGHTS,
    add_light,
    clear_lights,
    get_light_count,
)

logger = logging.getLogger(__name__)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material index in the registry.
        colour: Base colour (0-255 per channel).
        ambient: Ambient reflection coefficient.
        diffuse: Diffuse reflection coefficient.
        specular: Specular reflection coefficient.
        specularity: Phong specular exponent.
        attenuation: Phong attenuation exponent.
    """

    material_id: int
    colour: tuple[float, float, float]
    ambient: float
    diffuse: float
    specular: float
    specularity: float
    attenuation: float


@dataclass
class ObjectInfo:
    """Information about an object in the scene.

    Attributes:
        object_index: The row of the object in the object table.
        kind: The object kind (sphere or plane).
        position: Sphere center, or a point on the plane.
        material_id: The material assigned to the object.
        radius: Sphere radius. None for planes.
        normal: Plane unit normal. None for spheres.
    """

    object_index: int
    kind: ObjectKind
    position: tuple[float, float, float]
    material_id: int
    radius: float | None = None
    normal: tuple[float, float, float] | None = None


@dataclass
class LightInfo:
    """Information about a point light.

    Attributes:
        light_index: The index of the light in the light list.
        position: Light position.
        intensity: Light intensity.
        colour: Light colour (0-255 per channel).
    """

    light_index: int
    position: tuple[float, float, float]
    intensity: float
    colour: tuple[float, float, float]


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        objects: List of object configurations, in scene order.
        lights: List of light configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    objects: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Aggregate owning every light, material and object of a scene.

    Attributes:
        materials: MaterialInfo for all registered materials.
        objects: ObjectInfo for all objects, in scene order.
        lights: LightInfo for all lights, in scene order.

    Example:
        >>> scene = SceneManager()
        >>> blue = scene.add_material(colour=(119, 158, 247), specular=0.5, specularity=8)
        >>> ground = scene.add_material(colour=(179, 248, 203), specular=0.0)
        >>> scene.add_sphere((-150, 0, 0), 50, blue)
        >>> scene.add_plane((0, 0, 0), (0, 1, 0), ground)
    """

    # The manager whose records mirror the Taichi-side registries
    _active: ClassVar["SceneManager | None"] = None

    def __init__(self) -> None:
        """Initialize an empty scene and make it the active one.

        Any previously active manager is replaced and can no longer be used.
        """
        self.materials: list[MaterialInfo] = []
        self.objects: list[ObjectInfo] = []
        self.lights: list[LightInfo] = []
        if SceneManager._active is not None:
            logger.debug("Replacing the active scene")
        SceneManager._active = self
        self._clear_all()

    def is_active(self) -> bool:
        """Check whether this manager still owns the scene registries."""
        return SceneManager._active is self

    def _check_active(self) -> None:
        if not self.is_active():
            raise RuntimeError(
                "This SceneManager was replaced by a newer one and its scene was cleared"
            )

    def _clear_all(self) -> None:
        clear_objects()
        clear_materials()
        clear_lights()
        self.materials.clear()
        self.objects.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Release every light, material and object in the scene.

        Raises:
            RuntimeError: If this manager is no longer active.
        """
        self._check_active()
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(
        self,
        colour: tuple[float, float, float] = DEFAULT_COLOUR,
        ambient: float = DEFAULT_AMBIENT_COEFF,
        diffuse: float = DEFAULT_DIFFUSE_COEFF,
        specular: float = DEFAULT_SPECULAR_COEFF,
        specularity: float = DEFAULT_SPECULARITY,
        attenuation: float = DEFAULT_ATTENUATION,
    ) -> int:
        """Add a Phong material to the scene.

        Args:
            colour: Base colour as (R, G, B), 0-255 per channel.
            ambient: Ambient reflection coefficient.
            diffuse: Diffuse reflection coefficient.
            specular: Specular reflection coefficient.
            specularity: Phong specular exponent.
            attenuation: Phong attenuation exponent.

        Returns:
            The material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded or
                this manager is no longer active.
            ValueError: If colour does not have three components.
        """
        self._check_active()
        colour = _as_triple(colour, "Material colour")
        material_id = add_material(colour, ambient, diffuse, specular, specularity, attenuation)

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                colour=colour,
                ambient=float(ambient),
                diffuse=float(diffuse),
                specular=float(specular),
                specularity=float(specularity),
                attenuation=float(attenuation),
            )
        )
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        self._check_active()
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by id, or None if not found."""
        self._check_active()
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material_id(self, material_id: int) -> None:
        self._check_active()
        if material_id < 0 or material_id >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Object Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            material_id: The material id to assign to the sphere.

        Returns:
            The object index of the sphere.

        Raises:
            RuntimeError: If the maximum number of objects is exceeded or
                this manager has been replaced.
            ValueError: If material_id is invalid or radius is not positive.
        """
        self._check_material_id(material_id)
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")

        center = _as_triple(center, "Sphere center")
        object_index = add_sphere(center, float(radius), material_id)

        self.objects.append(
            ObjectInfo(
                object_index=object_index,
                kind=ObjectKind.SPHERE,
                position=center,
                material_id=material_id,
                radius=float(radius),
            )
        )
        return object_index

    def add_plane(
        self,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
        material_id: int,
    ) -> int:
        """Add an infinite plane to the scene.

        The normal is normalized before it is stored.

        Args:
            point: Any point on the plane as (x, y, z).
            normal: The plane normal as (x, y, z).
            material_id: The material id to assign to the plane.

        Returns:
            The object index of the plane.

        Raises:
            RuntimeError: If the maximum number of objects is exceeded or
                this manager has been replaced.
            ValueError: If material_id is invalid or the normal has zero
                length.
        """
        self._check_material_id(material_id)

        n = np.array(_as_triple(normal, "Plane normal"), dtype=np.float64)
        n_length = np.linalg.norm(n)
        if n_length < 1e-12:
            raise ValueError("Plane normal must not be zero")
        n = n / n_length
        unit_normal = (float(n[0]), float(n[1]), float(n[2]))

        point = _as_triple(point, "Plane point")
        object_index = add_plane(point, unit_normal, material_id)

        self.objects.append(
            ObjectInfo(
                object_index=object_index,
                kind=ObjectKind.PLANE,
                position=point,
                material_id=material_id,
                normal=unit_normal,
            )
        )
        return object_index

    def get_object_material(self, object_index: int) -> int:
        """Get the material id of an object.

        Raises:
            ValueError: If object_index is invalid.
        """
        self._check_active()
        if object_index < 0 or object_index >= len(self.objects):
            raise ValueError(f"Invalid object_index: {object_index}")
        return self.objects[object_index].material_id

    def set_object_material(self, object_index: int, material_id: int) -> None:
        """Replace the material of an object.

        Raises:
            ValueError: If object_index or material_id is invalid.
        """
        self._check_active()
        if object_index < 0 or object_index >= len(self.objects):
            raise ValueError(f"Invalid object_index: {object_index}")
        self._check_material_id(material_id)

        set_object_material(object_index, material_id)
        self.objects[object_index].material_id = material_id

    def get_object_count(self) -> int:
        """Get the number of objects in the scene."""
        self._check_active()
        return get_object_count()

    # =========================================================================
    # Light Management
    # =========================================================================

    def add_light(
        self,
        position: tuple[float, float, float],
        intensity: float,
        colour: tuple[float, float, float] = DEFAULT_LIGHT_COLOUR,
    ) -> int:
        """Add a point light to the scene.

        Args:
            position: The light position as (x, y, z).
            intensity: The light intensity.
            colour: The light colour as (R, G, B), 0-255 per channel.

        Returns:
            The light index.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
        """
        self._check_active()
        position = _as_triple(position, "Light position")
        colour = _as_triple(colour, "Light colour")
        light_index = add_light(position, float(intensity), colour)

        self.lights.append(
            LightInfo(
                light_index=light_index,
                position=position,
                intensity=float(intensity),
                colour=colour,
            )
        )
        return light_index

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        self._check_active()
        return get_light_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        self._check_active()
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append(
                {
                    "colour": list(mat.colour),
                    "ambient": mat.ambient,
                    "diffuse": mat.diffuse,
                    "specular": mat.specular,
                    "specularity": mat.specularity,
                    "attenuation": mat.attenuation,
                }
            )

        for obj in self.objects:
            obj_config: dict[str, Any] = {
                "type": obj.kind.name.lower(),
                "material_id": obj.material_id,
            }
            if obj.kind == ObjectKind.SPHERE:
                obj_config["center"] = list(obj.position)
                obj_config["radius"] = obj.radius
            else:
                obj_config["point"] = list(obj.position)
                obj_config["normal"] = list(obj.normal or (0.0, 1.0, 0.0))
            config.objects.append(obj_config)

        for light in self.lights:
            config.lights.append(
                {
                    "position": list(light.position),
                    "intensity": light.intensity,
                    "colour": list(light.colour),
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene first. Materials are loaded before objects
        so objects can refer to them by id.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            self.add_material(
                colour=mat_config.get("colour", list(DEFAULT_COLOUR)),
                ambient=mat_config.get("ambient", DEFAULT_AMBIENT_COEFF),
                diffuse=mat_config.get("diffuse", DEFAULT_DIFFUSE_COEFF),
                specular=mat_config.get("specular", DEFAULT_SPECULAR_COEFF),
                specularity=mat_config.get("specularity", DEFAULT_SPECULARITY),
                attenuation=mat_config.get("attenuation", DEFAULT_ATTENUATION),
            )

        for obj_config in config.objects:
            obj_type = obj_config.get("type", "").lower()
            material_id = obj_config.get("material_id", 0)
            if obj_type == "sphere":
                self.add_sphere(
                    obj_config.get("center", [0.0, 0.0, 0.0]),
                    obj_config.get("radius", 1.0),
                    material_id,
                )
            elif obj_type == "plane":
                self.add_plane(
                    obj_config.get("point", [0.0, 0.0, 0.0]),
                    obj_config.get("normal", [0.0, 1.0, 0.0]),
                    material_id,
                )
            else:
                raise ValueError(f"Unknown object type: {obj_type}")

        for light_config in config.lights:
            self.add_light(
                light_config.get("position", [0.0, 0.0, 0.0]),
                light_config.get("intensity", 1.0),
                light_config.get("colour", list(DEFAULT_LIGHT_COLOUR)),
            )

        logger.debug(
            "Loaded scene with %d materials, %d objects, %d lights",
            len(self.materials),
            len(self.objects),
            len(self.lights),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "objects": config.objects,
            "lights": config.lights,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'objects' and 'lights' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            objects=data.get("objects", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_objects() -> int:
        """Get the maximum number of objects supported."""
        return MAX_OBJECTS

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS
