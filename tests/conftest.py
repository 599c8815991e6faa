"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene tables and render state around each test.

    Random streams are reseeded so every test draws the same numbers
    regardless of test order.
    """
    # Import here to ensure Taichi is initialized
    from pathtracer.camera.thin_lens import reset_camera
    from pathtracer.core.integrator import clear_render_target, reset_render_target
    from pathtracer.core.sampler import seed_streams
    from pathtracer.materials.registry import clear_materials
    from pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        reset_camera()
        clear_render_target()
        reset_render_target()

    _clear_all()
    seed_streams(1234, count=4096)

    yield

    _clear_all()
