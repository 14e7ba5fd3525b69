"""Orbit camera with per-pixel ray generation.

The camera looks from ``eye`` at ``center`` and moves on a sphere around the
center point:

- orbit(): rotates the eye by yaw/pitch deltas, keeping the radius fixed and
  the pitch away from the poles
- adjust_zoom(): scales the eye-center distance

Primary rays follow a simple perspective mapping. For pixel (x, y), with y
counted from the top row:

    sx = (2x / width - 1) * aspect * tan(fov / 2)
    sy = (1 - 2y / height) * tan(fov / 2)
    direction = base_change(normalize(sx, sy, -1))

base_change() maps a camera-space direction to world space using the basis
derived from the view:

    forward = normalize(center - eye)
    right = normalize(forward x up)
    up' = right x forward

Camera motion happens on the host with NumPy. setup_camera() uploads the eye
and basis into Taichi fields, and get_ray() reads them inside kernels.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.camera.orbit import OrbitCamera, setup_camera
    >>> camera = OrbitCamera(eye=(-1.0, 1.0, 9.0), center=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0))
    >>> camera.orbit(math.pi / 10, 0.0)
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from diorama.core.ray import Ray, make_ray, vec3

# Pitch stays this far (in radians) from straight up or down
PITCH_MARGIN = 0.1

# Default vertical field of view (60 degrees)
DEFAULT_FOV = math.pi / 3.0


def _normalize(v: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return v / np.linalg.norm(v)


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class OrbitCamera:
    """A look-at camera that orbits and zooms around its center.

    Attributes:
        eye: Camera position in world space (x, y, z).
        center: Point the camera looks at and orbits around.
        up: Up direction used to build the view basis (typically (0, 1, 0)).
        fov: Field of view in radians.
    """

    eye: tuple[float, float, float]
    center: tuple[float, float, float]
    up: tuple[float, float, float]
    fov: float = DEFAULT_FOV

    @property
    def radius(self) -> float:
        """Distance between the eye and the center."""
        return float(np.linalg.norm(np.subtract(self.eye, self.center)))

    def basis(self):
        """Compute the (forward, right, up) unit vectors of the current view."""
        eye = np.asarray(self.eye, dtype=np.float64)
        center = np.asarray(self.center, dtype=np.float64)
        up = np.asarray(self.up, dtype=np.float64)

        forward = _normalize(center - eye)
        right = _normalize(np.cross(forward, up))
        true_up = np.cross(right, forward)
        return forward, right, true_up

    def base_change(self, vector) -> npt.NDArray[np.float64]:
        """Rotate a camera-space direction into world space.

        Args:
            vector: Direction in camera space, where -Z looks toward center.

        Returns:
            The normalized world-space direction.
        """
        forward, right, up = self.basis()
        v = np.asarray(vector, dtype=np.float64)
        return _normalize(v[0] * right + v[1] * up - v[2] * forward)

    def orbit(self, delta_yaw: float, delta_pitch: float) -> None:
        """Rotate the eye around the center.

        The eye stays at the same distance from the center. Pitch is clamped
        to (-pi/2 + 0.1, pi/2 - 0.1) so the view never flips over a pole.

        Args:
            delta_yaw: Rotation around the vertical axis, in radians.
            delta_pitch: Rotation toward or away from the vertical, in radians.
        """
        center = np.asarray(self.center, dtype=np.float64)
        radius_vector = np.asarray(self.eye, dtype=np.float64) - center
        radius = np.linalg.norm(radius_vector)

        current_yaw = math.atan2(radius_vector[2], radius_vector[0])
        radius_xz = math.hypot(radius_vector[0], radius_vector[2])
        current_pitch = math.atan2(-radius_vector[1], radius_xz)

        new_yaw = (current_yaw + delta_yaw) % (2.0 * math.pi)
        limit = math.pi / 2.0 - PITCH_MARGIN
        new_pitch = min(max(current_pitch + delta_pitch, -limit), limit)

        offset = np.array(
            [
                radius * math.cos(new_yaw) * math.cos(new_pitch),
                -radius * math.sin(new_pitch),
                radius * math.sin(new_yaw) * math.cos(new_pitch),
            ]
        )
        self.eye = tuple(float(c) for c in center + offset)

    def adjust_zoom(self, factor: float) -> None:
        """Scale the distance between the eye and the center.

        Args:
            factor: Multiplier for the distance; < 1 moves closer, > 1 away.

        Raises:
            ValueError: If factor is not positive.
        """
        if factor <= 0.0:
            raise ValueError(f"Zoom factor must be positive, got {factor}")
        center = np.asarray(self.center, dtype=np.float64)
        offset = (np.asarray(self.eye, dtype=np.float64) - center) * factor
        self.eye = tuple(float(c) for c in center + offset)

    def primary_direction(self, x: float, y: float, width: int, height: int):
        """Compute the world-space ray direction for pixel (x, y) on the host.

        Mirrors get_ray() for debugging and tests; y is counted from the top.
        """
        aspect = width / height
        scale = math.tan(self.fov * 0.5)
        sx = (2.0 * x / width - 1.0) * aspect * scale
        sy = (1.0 - 2.0 * y / height) * scale
        return self.base_change(_normalize(np.array([sx, sy, -1.0])))


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())

# tan(fov / 2)
_perspective_scale = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: OrbitCamera) -> None:
    """Upload the camera eye and view basis for ray generation.

    Must be called again after every orbit() or adjust_zoom() for the change
    to reach the kernels.

    Args:
        camera: The camera to render from.
    """
    forward, right, up = camera.basis()
    _camera_eye[None] = [float(c) for c in camera.eye]
    _camera_forward[None] = forward.tolist()
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _perspective_scale[None] = math.tan(camera.fov * 0.5)


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def base_change(v: vec3) -> vec3:
    """Rotate a camera-space direction into world space."""
    return tm.normalize(
        v.x * _camera_right[None] + v.y * _camera_up[None] - v.z * _camera_forward[None]
    )


@ti.func
def get_ray(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray for a pixel.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera eye with a normalized world-space direction.
    """
    fw = ti.cast(width, ti.f32)
    fh = ti.cast(height, ti.f32)
    scale = _perspective_scale[None]

    sx = (2.0 * ti.cast(x, ti.f32) / fw - 1.0) * (fw / fh) * scale
    sy = (1.0 - 2.0 * ti.cast(y, ti.f32) / fh) * scale

    direction = base_change(tm.normalize(vec3(sx, sy, -1.0)))
    return make_ray(_camera_eye[None], direction)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with eye, forward, right and up vectors.
    """
    info = {}
    for name, field in (
        ("eye", _camera_eye),
        ("forward", _camera_forward),
        ("right", _camera_right),
        ("up", _camera_up),
    ):
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
