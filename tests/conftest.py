"""Pytest configuration for ray tracer tests.

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
    ti.init(arch=ti.cpu, cpu_max_num_threads=4)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene objects, materials and scene parameters around each test."""
    # Import here to ensure Taichi is initialized first
    from src.whitted.core.integrator import setup_scene_parameters
    from src.whitted.materials.material import clear_materials
    from src.whitted.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        setup_scene_parameters((0.0, 0.0, 0.0), 1.0, 5)

    _clear_all()
    yield
    _clear_all()
