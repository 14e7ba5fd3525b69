"""Tests for the preview module.

This module tests the preview/export, preview/display and the headless parts
of preview/interactive:
- Frame array conversion and packed color unpacking
- PNG export
- RMSE computation
- Keyboard handling: orbit, zoom, day/night toggle and PNG export

Note: Tests never open a window. Matplotlib runs on the Agg backend and the
interactive preview is driven through apply_input().
"""

import math

import matplotlib
import numpy as np
import pytest
import taichi as ti
from PIL import Image as PILImage

matplotlib.use("Agg")


class TestImageConversion:
    """Tests for image_to_uint8 and unpack_colors."""

    def test_uint8_passes_through(self):
        from diorama.preview.export import image_to_uint8

        image = np.full((2, 2, 3), 7, dtype=np.uint8)
        assert image_to_uint8(image) is image

    def test_float_is_clamped_and_truncated(self):
        from diorama.preview.export import image_to_uint8

        image = np.array([[[-5.0, 12.9, 300.0]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert result.tolist() == [[[0, 12, 255]]]

    def test_unpack_colors(self):
        from diorama.preview.export import unpack_colors

        packed = np.array([[0x091437, 0xFF0000], [0x00FF00, 0xFFFFFF]], dtype=np.int32)
        result = unpack_colors(packed)

        assert result.shape == (2, 2, 3)
        assert result[0, 0].tolist() == [9, 20, 55]
        assert result[0, 1].tolist() == [255, 0, 0]
        assert result[1, 0].tolist() == [0, 255, 0]
        assert result[1, 1].tolist() == [255, 255, 255]


class TestPNGExport:
    """Test PNG export functionality."""

    def test_save_png_from_array(self, tmp_path):
        from diorama.preview.export import save_png_from_array

        image = np.zeros((3, 5, 3), dtype=np.uint8)
        image[0, :, 0] = 255
        path = tmp_path / "frame.png"

        save_png_from_array(image, path)

        with PILImage.open(path) as loaded:
            assert loaded.size == (5, 3)
            np.testing.assert_array_equal(np.asarray(loaded.convert("RGB")), image)

    def test_save_png_from_renderer(self, white_light, tmp_path):
        from diorama.camera.orbit import OrbitCamera, setup_camera
        from diorama.core.renderer import FrameRenderer
        from diorama.preview.export import save_png

        setup_camera(OrbitCamera(eye=(0.0, 0.0, 5.0), center=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0)))
        renderer = FrameRenderer(6, 4)
        renderer.render()
        path = tmp_path / "render.png"

        save_png(renderer, path)

        with PILImage.open(path) as loaded:
            assert loaded.size == (6, 4)
            assert loaded.convert("RGB").getpixel((0, 0)) == (9, 20, 55)


class TestComputeRMSE:
    """Test RMSE computation."""

    def test_identical_images(self):
        from diorama.preview.export import compute_rmse

        image = np.random.default_rng(42).integers(0, 256, (8, 8, 3))
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        from diorama.preview.export import compute_rmse

        a = np.zeros((4, 4, 3), dtype=np.uint8)
        b = np.full((4, 4, 3), 3, dtype=np.uint8)
        assert abs(compute_rmse(a, b) - 3.0) < 1e-12

    def test_unsigned_difference_does_not_wrap(self):
        from diorama.preview.export import compute_rmse

        a = np.full((1, 1, 3), 10, dtype=np.uint8)
        b = np.full((1, 1, 3), 20, dtype=np.uint8)
        assert abs(compute_rmse(a, b) - 10.0) < 1e-12

    def test_shape_mismatch_raises(self):
        from diorama.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))


class TestDisplay:
    """Tests for the Matplotlib display helpers on a non-interactive backend."""

    def test_show_comparison_returns_rmse(self, monkeypatch):
        import matplotlib.pyplot as plt

        from diorama.preview.display import show_comparison

        monkeypatch.setattr(plt, "show", lambda *args, **kwargs: None)
        a = np.zeros((4, 4, 3), dtype=np.uint8)
        b = np.full((4, 4, 3), 2, dtype=np.uint8)

        rmse = show_comparison(a, b, labels=("day", "night"), block=False)
        plt.close("all")

        assert abs(rmse - 2.0) < 1e-12

    def test_show_preview(self, monkeypatch):
        import matplotlib.pyplot as plt

        from diorama.core.renderer import FrameRenderer
        from diorama.preview.display import show_preview

        shown = []
        monkeypatch.setattr(plt, "show", lambda *args, **kwargs: shown.append(True))
        renderer = FrameRenderer(4, 3)

        show_preview(renderer, block=False)
        plt.close("all")

        assert shown == [True]


@pytest.fixture
def preview(tmp_path):
    """An InteractivePreview over the diorama without textures, never shown."""
    from diorama.preview.interactive import InteractivePreview
    from diorama.scene.diorama import DioramaParams

    params = DioramaParams(texture_dir=tmp_path / "textures")
    preview = InteractivePreview(16, 12, params=params, output_dir=tmp_path / "out")
    preview.setup()
    return preview


class TestInteractiveInput:
    """Tests for keyboard handling without a window."""

    def test_left_and_right_undo_each_other(self, preview):
        start = preview.camera.eye

        preview.apply_input([ti.ui.LEFT])
        moved = preview.camera.eye
        preview.apply_input([ti.ui.RIGHT])

        assert moved != start
        assert np.allclose(preview.camera.eye, start, atol=1e-9)

    def test_orbit_step_is_a_tenth_of_pi(self, preview):
        from diorama.preview.interactive import ROTATION_SPEED

        eye = np.asarray(preview.camera.eye)
        yaw = math.atan2(eye[2], eye[0])

        preview.apply_input([ti.ui.LEFT])
        moved = np.asarray(preview.camera.eye)
        new_yaw = math.atan2(moved[2], moved[0])

        assert ROTATION_SPEED == pytest.approx(math.pi / 10.0)
        assert (new_yaw - yaw) % (2.0 * math.pi) == pytest.approx(ROTATION_SPEED)

    def test_up_and_down_change_height(self, preview):
        height = preview.camera.eye[1]

        preview.apply_input([ti.ui.UP])
        assert preview.camera.eye[1] > height

        preview.apply_input([ti.ui.DOWN])
        preview.apply_input([ti.ui.DOWN])
        assert preview.camera.eye[1] < height

    def test_held_key_acts_once_per_tick(self, preview):
        """Test that a key reported twice in one tick moves the camera once."""
        start = preview.camera.eye

        preview.apply_input([ti.ui.UP])
        preview.apply_input([ti.ui.DOWN, ti.ui.DOWN])

        assert np.allclose(preview.camera.eye, start, atol=1e-9)

    def test_render_frame_twice_reuses_blit(self, preview):
        """Test that consecutive frames go through the same display copy."""
        preview.render_frame()
        preview.render_frame()

        assert preview.renderer.frame_count == 2
        assert preview.display_image.to_numpy().max() > 0.0

    def test_zoom_keys(self, preview):
        radius = preview.camera.radius

        preview.apply_input(["w"])
        assert preview.camera.radius == pytest.approx(radius * 0.9)

        preview.apply_input(["s"])
        assert preview.camera.radius == pytest.approx(radius * 0.99)

    def test_toggle_day_night(self, preview):
        from diorama.scene.light import get_current_light

        assert not preview.night
        assert get_current_light().intensity == pytest.approx(1.7)

        preview.apply_input([], ["l"])
        assert preview.night
        assert get_current_light().intensity == pytest.approx(0.2)

        preview.apply_input([], ["l"])
        assert not preview.night
        assert get_current_light().intensity == pytest.approx(1.7)

    def test_export_key_writes_png(self, preview, tmp_path):
        preview.render_frame()
        preview.apply_input([], ["p"])

        files = list((tmp_path / "out").glob("diorama_*.png"))
        assert len(files) == 1
        with PILImage.open(files[0]) as image:
            assert image.size == (16, 12)

    def test_render_frame_fills_display(self, preview):
        """Test that the display field holds the frame scaled to [0, 1]."""
        preview.render_frame()
        display = preview.display_image.to_numpy()
        frame = preview.renderer.get_image_numpy()

        assert display.shape == (16, 12, 3)
        assert display.min() >= 0.0
        assert display.max() <= 1.0
        # Display rows are stored bottom-up
        np.testing.assert_allclose(
            np.flipud(display.transpose(1, 0, 2)) * 255.0, frame, atol=1e-3
        )
        assert preview.renderer.frame_count == 1

    def test_not_running_without_window(self, preview):
        assert not preview.is_running()
        preview.close()
