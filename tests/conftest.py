"""Pytest configuration for skytrace tests.

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
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before fields are declared
    from skytrace.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()

        # Also clear integrator render target if it exists
        try:
            from skytrace.core.integrator import clear_render_target

            clear_render_target()
        except (ImportError, RuntimeError):
            pass

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def setup_default_camera():
    """Upload the default camera for a square image."""
    from skytrace.camera.pinhole import default_camera, setup_camera

    return setup_camera(default_camera(aspect_ratio=1.0))
