"""Pytest configuration for tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    discard every field declared by the package modules.
    """
    from phongtracer.core.runtime import init_runtime

    init_runtime()
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data, camera, render target and counters around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the modules declare their fields after ti.init()
    from phongtracer.camera.pinhole import reset_camera
    from phongtracer.core.tracer import release_render_target, reset_lighting, reset_ray_count
    from phongtracer.materials.phong import clear_materials
    from phongtracer.scene.intersection import clear_objects
    from phongtracer.scene.lights import clear_lights

    def _clear_all():
        clear_objects()
        clear_materials()
        clear_lights()
        reset_ray_count()
        reset_lighting()
        reset_camera()
        release_render_target()

    _clear_all()

    yield

    _clear_all()
