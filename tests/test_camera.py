"""Unit tests for the orbit camera.

Tests cover:
- View basis construction
- Orbiting: radius preservation, yaw steps and pitch clamping
- Zooming and invalid zoom factors
- Primary ray generation in kernels matching the host computation
"""

import math

import numpy as np
import pytest
import taichi as ti


def _camera(eye=(0.0, 0.0, 5.0)):
    from diorama.camera.orbit import OrbitCamera

    return OrbitCamera(eye=eye, center=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0))


class TestCameraBasis:
    """Tests for the forward/right/up basis."""

    def test_basis_looking_down_negative_z(self):
        """Test the basis of a camera on +Z looking at the origin."""
        forward, right, up = _camera().basis()

        assert np.allclose(forward, (0.0, 0.0, -1.0))
        assert np.allclose(right, (1.0, 0.0, 0.0))
        assert np.allclose(up, (0.0, 1.0, 0.0))

    def test_basis_is_orthonormal(self):
        """Test that an arbitrary view gives an orthonormal basis."""
        forward, right, up = _camera((-1.0, 1.0, 9.0)).basis()

        for v in (forward, right, up):
            assert abs(np.linalg.norm(v) - 1.0) < 1e-9
        assert abs(np.dot(forward, right)) < 1e-9
        assert abs(np.dot(forward, up)) < 1e-9
        assert abs(np.dot(right, up)) < 1e-9

    def test_base_change_maps_negative_z_to_forward(self):
        camera = _camera((-1.0, 1.0, 9.0))
        forward, _, _ = camera.basis()

        assert np.allclose(camera.base_change((0.0, 0.0, -1.0)), forward)

    def test_default_fov_is_sixty_degrees(self):
        from diorama.camera.orbit import DEFAULT_FOV

        assert abs(_camera().fov - math.pi / 3.0) < 1e-12
        assert DEFAULT_FOV == _camera().fov


class TestCameraOrbit:
    """Tests for orbiting around the center."""

    def test_orbit_preserves_radius(self):
        """Test that yaw and pitch steps keep the eye-center distance."""
        camera = _camera((-1.0, 1.0, 9.0))
        radius = camera.radius

        camera.orbit(math.pi / 10.0, 0.0)
        assert abs(camera.radius - radius) < 1e-9

        camera.orbit(0.0, -math.pi / 10.0)
        assert abs(camera.radius - radius) < 1e-9

    def test_yaw_keeps_height(self):
        """Test that a pure yaw step does not change the eye height."""
        camera = _camera((-1.0, 1.0, 9.0))
        camera.orbit(-math.pi / 10.0, 0.0)

        assert abs(camera.eye[1] - 1.0) < 1e-9

    def test_quarter_turn(self):
        """Test a quarter turn from +Z to -X."""
        camera = _camera((0.0, 0.0, 5.0))
        camera.orbit(math.pi / 2.0, 0.0)

        assert np.allclose(camera.eye, (-5.0, 0.0, 0.0), atol=1e-9)

    def test_positive_pitch_moves_eye_down(self):
        camera = _camera((0.0, 0.0, 5.0))
        camera.orbit(0.0, math.pi / 10.0)

        assert camera.eye[1] < 0.0

    @pytest.mark.parametrize("delta_pitch,sign", [(10.0, -1.0), (-10.0, 1.0)])
    def test_pitch_is_clamped_away_from_poles(self, delta_pitch, sign):
        """Test that large pitch steps stop 0.1 rad short of the poles."""
        from diorama.camera.orbit import PITCH_MARGIN

        camera = _camera((0.0, 0.0, 5.0))
        camera.orbit(0.0, delta_pitch)

        expected_y = sign * 5.0 * math.sin(math.pi / 2.0 - PITCH_MARGIN)
        assert abs(camera.eye[1] - expected_y) < 1e-9
        assert abs(camera.radius - 5.0) < 1e-9

    def test_orbit_moves_around_center(self):
        """Test orbiting about a center away from the origin."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(eye=(1.0, 2.0, 8.0), center=(1.0, 2.0, 3.0), up=(0.0, 1.0, 0.0))
        camera.orbit(math.pi, 0.0)

        assert np.allclose(camera.eye, (1.0, 2.0, -2.0), atol=1e-9)


class TestCameraZoom:
    """Tests for zooming toward and away from the center."""

    def test_zoom_scales_radius(self):
        camera = _camera((-1.0, 1.0, 9.0))
        radius = camera.radius

        camera.adjust_zoom(0.9)
        assert abs(camera.radius - 0.9 * radius) < 1e-9

        camera.adjust_zoom(1.1)
        assert abs(camera.radius - 0.99 * radius) < 1e-9

    def test_zoom_keeps_direction(self):
        camera = _camera((0.0, 0.0, 5.0))
        camera.adjust_zoom(0.5)

        assert np.allclose(camera.eye, (0.0, 0.0, 2.5))

    @pytest.mark.parametrize("factor", [0.0, -1.0])
    def test_non_positive_zoom_raises(self, factor):
        camera = _camera()

        with pytest.raises(ValueError):
            camera.adjust_zoom(factor)


class TestRayGeneration:
    """Tests for per-pixel rays inside kernels."""

    def _kernel_ray(self, x, y, width, height):
        from diorama.camera.orbit import get_ray

        result_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        result_direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(px: ti.i32, py: ti.i32, w: ti.i32, h: ti.i32):
            ray = get_ray(px, py, w, h)
            result_origin[None] = ray.origin
            result_direction[None] = ray.direction

        test_kernel(x, y, width, height)
        o = result_origin[None]
        d = result_direction[None]
        return (o[0], o[1], o[2]), (d[0], d[1], d[2])

    def test_center_pixel_looks_forward(self):
        """Test that the image center looks straight at the center point."""
        from diorama.camera.orbit import setup_camera

        camera = _camera((-1.0, 1.0, 9.0))
        setup_camera(camera)
        forward, _, _ = camera.basis()

        origin, direction = self._kernel_ray(400, 300, 800, 600)

        assert np.allclose(origin, camera.eye, atol=1e-5)
        assert np.allclose(direction, forward, atol=1e-5)

    @pytest.mark.parametrize("x,y", [(0, 0), (799, 0), (0, 599), (123, 456)])
    def test_kernel_matches_host(self, x, y):
        """Test that get_ray agrees with the host primary_direction."""
        from diorama.camera.orbit import setup_camera

        camera = _camera((-1.0, 1.0, 9.0))
        camera.orbit(math.pi / 10.0, -math.pi / 10.0)
        setup_camera(camera)

        _, direction = self._kernel_ray(x, y, 800, 600)

        assert np.allclose(direction, camera.primary_direction(x, y, 800, 600), atol=1e-5)

    def test_top_row_looks_up(self):
        """Test that y = 0 is the top of the image."""
        from diorama.camera.orbit import setup_camera

        setup_camera(_camera((0.0, 0.0, 5.0)))

        _, top = self._kernel_ray(2, 0, 4, 4)
        _, bottom = self._kernel_ray(2, 3, 4, 4)

        assert top[1] > 0.0
        assert bottom[1] < 0.0

    def test_directions_are_normalized(self):
        from diorama.camera.orbit import setup_camera

        setup_camera(_camera((-1.0, 1.0, 9.0)))
        _, direction = self._kernel_ray(17, 3, 64, 48)

        assert abs(np.linalg.norm(direction) - 1.0) < 1e-5

    def test_get_camera_info(self):
        """Test that the uploaded state reads back."""
        from diorama.camera.orbit import get_camera_info, setup_camera

        setup_camera(_camera((0.0, 0.0, 5.0)))
        info = get_camera_info()

        assert np.allclose(info["eye"], (0.0, 0.0, 5.0))
        assert np.allclose(info["forward"], (0.0, 0.0, -1.0))
        assert np.allclose(info["right"], (1.0, 0.0, 0.0))
        assert np.allclose(info["up"], (0.0, 1.0, 0.0))
