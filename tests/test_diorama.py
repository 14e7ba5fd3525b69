"""Tests for the diorama scene.

Tests cover:
- Scene contents with and without texture images
- Solid ordering (cubes first, moon at index 0)
- Default camera and light for day and night
- A low-resolution render producing more than background
"""

import logging

import numpy as np
import pytest
from PIL import Image as PILImage

TEXTURE_NAMES = ("wood", "grass", "leaves", "wall", "roof", "water", "moon")

# 1 moon + 22 leaf cubes + 10 eave cubes, then 21 prisms
EXPECTED_CUBES = 33
EXPECTED_BOXES = 54


@pytest.fixture
def texture_dir(tmp_path):
    """A directory holding one small, distinctly colored PNG per texture."""
    for i, name in enumerate(TEXTURE_NAMES):
        PILImage.new("RGB", (4, 4), (30 * i, 255 - 30 * i, 100)).save(tmp_path / f"{name}.png")
    return tmp_path


class TestDioramaParams:
    """Tests for DioramaParams defaults."""

    def test_defaults(self):
        from diorama.core.color import Color
        from diorama.scene.diorama import DioramaParams

        params = DioramaParams()

        assert params.day_intensity == 1.7
        assert params.night_intensity == 0.2
        assert params.light_position == (0.0, 5.1, 0.1)
        assert params.light_color == Color(255, 236, 183)
        assert params.eye == (-1.0, 1.0, 9.0)

    def test_intensity_for_mode(self):
        from diorama.scene.diorama import DioramaParams

        params = DioramaParams(day_intensity=2.0, night_intensity=0.5)

        assert params.intensity(False) == 2.0
        assert params.intensity(True) == 0.5


class TestDioramaScene:
    """Tests for the scene contents."""

    def test_scene_with_textures(self, texture_dir):
        from diorama.scene.diorama import DioramaParams, create_diorama_scene

        scene, _, _ = create_diorama_scene(DioramaParams(texture_dir=texture_dir))

        assert scene.get_box_count() == EXPECTED_BOXES
        assert scene.get_material_count() == 8
        assert scene.get_texture_count() == len(TEXTURE_NAMES)

    def test_scene_without_textures(self, tmp_path, caplog):
        """Test that missing images fall back to untextured materials."""
        from diorama.scene.diorama import DioramaParams, create_diorama_scene

        with caplog.at_level(logging.ERROR, logger="diorama.materials.texture"):
            scene, _, _ = create_diorama_scene(DioramaParams(texture_dir=tmp_path))

        assert scene.get_box_count() == EXPECTED_BOXES
        assert scene.get_texture_count() == 0
        # Grass and leaves become identical without their textures
        assert scene.get_material_count() == 7
        assert "wood.png" in caplog.text

    def test_cubes_come_first(self, tmp_path):
        from diorama.geometry.box import BoxKind
        from diorama.scene.diorama import DioramaParams, create_diorama_scene

        scene, _, _ = create_diorama_scene(DioramaParams(texture_dir=tmp_path))
        kinds = [box.kind for box in scene.boxes]

        assert kinds[:EXPECTED_CUBES] == [BoxKind.CUBE] * EXPECTED_CUBES
        assert BoxKind.CUBE not in kinds[EXPECTED_CUBES:]
        assert scene.boxes[0].center == (0.0, 5.0, -5.0)

    def test_ground_slab(self, tmp_path):
        from diorama.scene.diorama import DioramaParams, create_diorama_scene

        scene, _, _ = create_diorama_scene(DioramaParams(texture_dir=tmp_path))
        ground = scene.boxes[EXPECTED_CUBES]

        assert ground.center == (1.0, -0.9, -2.0)
        assert ground.extents == (9.0, 0.3, 9.0)

    def test_moon_and_windows_glow(self, tmp_path):
        from diorama.core.color import Color
        from diorama.scene.diorama import create_diorama_materials

        materials = create_diorama_materials(tmp_path)

        assert materials["moon"].emission == Color(255, 255, 255)
        assert materials["windows"].emission == Color(255, 255, 255)
        assert materials["wood"].emission == Color(0, 0, 0)

    def test_camera_and_light(self, tmp_path):
        from diorama.scene.diorama import DioramaParams, create_diorama_scene

        _, camera, light = create_diorama_scene(DioramaParams(texture_dir=tmp_path))

        assert camera.eye == (-1.0, 1.0, 9.0)
        assert camera.center == (0.0, 0.0, 0.0)
        assert light.intensity == 1.7

    def test_night_light(self, tmp_path):
        from diorama.scene.diorama import DioramaParams, create_diorama_scene

        _, _, light = create_diorama_scene(DioramaParams(texture_dir=tmp_path, night=True))

        assert light.intensity == 0.2


class TestDioramaRender:
    """Tests rendering the diorama at a small size."""

    def test_render_shows_scene(self, texture_dir):
        from diorama.camera.orbit import setup_camera
        from diorama.core.renderer import FrameRenderer
        from diorama.scene.diorama import DioramaParams, create_diorama_scene
        from diorama.scene.light import setup_light

        _, camera, light = create_diorama_scene(DioramaParams(texture_dir=texture_dir))
        setup_camera(camera)
        setup_light(light)

        renderer = FrameRenderer(40, 30)
        renderer.render()
        image = renderer.get_image_numpy()

        background = np.all(image == np.array([9, 20, 55], dtype=np.uint8), axis=-1)
        assert image.shape == (30, 40, 3)
        assert 0 < background.sum() < background.size

    def test_night_is_darker(self, tmp_path):
        """Test that night lighting lowers the average brightness."""
        from diorama.camera.orbit import setup_camera
        from diorama.core.renderer import FrameRenderer
        from diorama.scene.diorama import DioramaParams, create_diorama_scene
        from diorama.scene.light import set_light_intensity, setup_light

        params = DioramaParams(texture_dir=tmp_path)
        _, camera, light = create_diorama_scene(params)
        setup_camera(camera)
        setup_light(light)

        renderer = FrameRenderer(40, 30)
        renderer.render()
        day = renderer.get_image_numpy().astype(np.float64).mean()

        set_light_intensity(params.night_intensity)
        renderer.render()
        night = renderer.get_image_numpy().astype(np.float64).mean()

        assert night < day
