"""Example scene configuration.

A small showcase scene for the Phong tracer:
- A ground plane at y = 0 (mint green, no specular highlight)
- A large pink sphere floating above the ground with a tight highlight
- Two smaller spheres resting on the ground: blue (broad, half-strength
  highlight) on the left, pink on the right sharing the large sphere's
  material
- A bright light up and to the right, and a dimmer one behind on the left
- A wide-angle camera looking down at the origin from the front right

Example:
    >>> from phongtracer.core.runtime import init_runtime
    >>> init_runtime()
    >>> from phongtracer.scene.example import create_example_scene
    >>> from phongtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera, config = create_example_scene()
    >>> setup_camera(camera)
"""

from dataclasses import dataclass

from phongtracer.camera.pinhole import PinholeCamera
from phongtracer.core.config import TracerConfig
from phongtracer.scene.manager import SceneManager

# Scene-wide ambient intensity used by the example scene
EXAMPLE_AMBIENT_INTENSITY = 0.08


@dataclass
class ExampleSceneParams:
    """Parameters for customizing the example scene.

    Attributes:
        key_light_intensity: Intensity of the main light.
        fill_light_intensity: Intensity of the light behind the scene.
        sphere_colour: Colour of the large and right-hand spheres.
        accent_colour: Colour of the left-hand sphere.
        ground_colour: Colour of the ground plane.
    """

    key_light_intensity: float = 100.0
    fill_light_intensity: float = 30.0
    sphere_colour: tuple[float, float, float] = (255.0, 183.0, 182.0)
    accent_colour: tuple[float, float, float] = (119.0, 158.0, 247.0)
    ground_colour: tuple[float, float, float] = (179.0, 248.0, 203.0)


def create_example_camera(width: int = 640, height: int = 480) -> PinholeCamera:
    """Create the camera used by the example scene."""
    return PinholeCamera(
        position=(200.0, 200.0, -300.0),
        target=(0.0, 0.0, 0.0),
        up=(0.0, 1.0, 0.0),
        hfov=120.0,
        width=width,
        height=height,
    )


def create_example_scene(
    width: int = 640,
    height: int = 480,
    params: ExampleSceneParams | None = None,
    scene: SceneManager | None = None,
) -> tuple[SceneManager, PinholeCamera, TracerConfig]:
    """Create the example scene.

    Args:
        width: Render width in pixels.
        height: Render height in pixels.
        params: Optional scene customization. Defaults are used when None.
        scene: Scene to populate. It is cleared first. A new SceneManager is
            created when None, replacing the active scene.

    Returns:
        Tuple of (scene, camera, config).
    """
    if params is None:
        params = ExampleSceneParams()
    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    config = TracerConfig(
        width=width,
        height=height,
        ambient_enabled=True,
        ambient_intensity=EXAMPLE_AMBIENT_INTENSITY,
    )

    scene.add_light(position=(500.0, 200.0, 500.0), intensity=params.key_light_intensity)
    scene.add_light(position=(-500.0, 200.0, -500.0), intensity=params.fill_light_intensity)

    pink = scene.add_material(colour=params.sphere_colour, specularity=200.0)
    blue = scene.add_material(colour=params.accent_colour, specular=0.5, specularity=8.0)
    ground = scene.add_material(colour=params.ground_colour, specular=0.0, specularity=0.0)

    scene.add_sphere(center=(0.0, 100.0, 100.0), radius=70.0, material_id=pink)
    scene.add_sphere(center=(-150.0, 0.0, 0.0), radius=50.0, material_id=blue)
    scene.add_sphere(center=(150.0, 0.0, 0.0), radius=50.0, material_id=pink)
    scene.add_plane(point=(0.0, 0.0, 0.0), normal=(0.0, 1.0, 0.0), material_id=ground)

    return scene, create_example_camera(width, height), config
