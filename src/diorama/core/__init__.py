"""Core rendering module.

This module contains the building blocks of the ray caster:

Components:
    color: Saturating 8-bit RGB color arithmetic (host and kernel side)
    ray: Ray data structure and vector utilities
    shading: Background color and Phong-style shading of the nearest hit
    integrator: Render target and the per-frame kernel
    renderer: FrameRenderer facade for interactive and batch rendering

Each pixel is evaluated independently: a primary ray is cast, the nearest box
is found by a linear scan, and the hit is shaded with diffuse, texture,
specular and emission terms against a single point light.
"""

from .color import (
    CHANNEL_MAX,
    Color,
    color_add,
    color_from_vec,
    color_scale,
    make_color,
    pack_color,
)
from .ray import Ray, dot, make_ray, normalize, ray_at, reflect, vec3

# Note: shading, integrator and renderer are NOT imported here to avoid circular
# imports with the scene and materials packages. Import them directly, e.g.:
#   from diorama.core.renderer import FrameRenderer

__all__ = [
    "Color",
    "CHANNEL_MAX",
    "color_add",
    "color_scale",
    "pack_color",
    "make_color",
    "color_from_vec",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "normalize",
    "dot",
    "reflect",
]
