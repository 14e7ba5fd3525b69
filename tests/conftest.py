"""Pytest configuration for ray caster tests.

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

    Fast math is off so that unit normals and dot products come out exact and
    shaded colors can be compared channel for channel.
    """
    ti.init(arch=ti.cpu, fast_math=False)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear boxes, materials and textures before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the fields are created after ti.init()
    from diorama.materials.phong import clear_materials
    from diorama.materials.texture import clear_textures
    from diorama.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_textures()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def white_light():
    """Upload a white light at (0, 0, 5) with intensity 1 and return it."""
    from diorama.core.color import Color
    from diorama.scene.light import Light, setup_light

    light = Light(position=(0.0, 0.0, 5.0), color=Color(255, 255, 255), intensity=1.0)
    setup_light(light)
    return light


@pytest.fixture
def checker_texture():
    """A 2x2 RGBA texture: red, green on top; blue, white below."""
    from diorama.materials.texture import Texture

    texels = bytes(
        [255, 0, 0, 255, 0, 255, 0, 255,
         0, 0, 255, 255, 255, 255, 255, 255]
    )
    return Texture(data=texels, width=2, height=2)
