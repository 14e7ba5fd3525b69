"""The scene's single point light.

Exactly one light is active at a time. Its values live in Taichi fields and
are read once per pixel, so the host can change the intensity between frames
(for example to switch between day and night) without rebuilding the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.core.color import Color
    >>> from diorama.scene.light import Light, set_light_intensity, setup_light
    >>> setup_light(Light(position=(0.0, 5.1, 0.1), color=Color(255, 236, 183), intensity=1.7))
    >>> set_light_intensity(0.2)  # night
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from diorama.core.color import Color, color_from_vec, make_color

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass
class Light:
    """A point light.

    Attributes:
        position: Light position in world space (x, y, z).
        color: Light color, used for specular highlights.
        intensity: Scalar multiplier applied to diffuse and specular terms.
    """

    position: tuple[float, float, float]
    color: Color
    intensity: float


@ti.dataclass
class PointLight:
    """Kernel-side copy of the light for one pixel evaluation."""

    position: vec3
    color: vec3
    intensity: ti.f32


_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_intensity = ti.field(dtype=ti.f32, shape=())


def setup_light(light: Light) -> None:
    """Upload the light used for shading subsequent frames."""
    _light_position[None] = [float(c) for c in light.position]
    _light_color[None] = make_color(light.color)
    _light_intensity[None] = light.intensity


def set_light_intensity(intensity: float) -> None:
    """Change only the intensity of the uploaded light."""
    _light_intensity[None] = intensity


def get_current_light() -> Light:
    """Read the uploaded light back from its fields."""
    position = _light_position[None]
    return Light(
        position=(float(position[0]), float(position[1]), float(position[2])),
        color=color_from_vec(_light_color[None]),
        intensity=float(_light_intensity[None]),
    )


@ti.func
def get_light() -> PointLight:
    """Read the current light inside a kernel."""
    return PointLight(
        position=_light_position[None],
        color=_light_color[None],
        intensity=_light_intensity[None],
    )
