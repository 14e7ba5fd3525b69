"""Ray casting and Phong-style shading.

This module turns a camera ray into a final pixel color:

1. Resolve the nearest box hit (see diorama.scene.intersection)
2. Return the flat background color if nothing was hit
3. Otherwise combine, with saturating color addition:
   - diffuse: diffuse_color * albedo[0] * clamp(N . L, 0, 1) * intensity
   - texture: texel_color with the same weighting, added on top of diffuse
   - specular: light_color * albedo[1] * max(V . R, 0)^specular * intensity
   - emission: emissive_color * EMISSION_BOOST

Every multiplication is a saturating color scale applied left to right, so
intermediate results are clamped and truncated exactly like 8-bit channels.

The light comes from diorama.scene.light and is read once per pixel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.scene.light import get_light
    >>> # Use cast_ray(origin, direction, get_light()) within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from diorama.core.color import Color, color_add, color_scale
from diorama.core.ray import reflect
from diorama.materials.phong import get_material
from diorama.materials.texture import sample_texture
from diorama.scene.intersection import Intersect, intersect_scene
from diorama.scene.light import PointLight

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Shading Constants
# =============================================================================

# Color returned for rays that hit nothing (flat dark blue-gray)
BACKGROUND_COLOR = Color(9, 20, 55)
_BACKGROUND = vec3(9.0, 20.0, 55.0)

# Emissive materials are drawn brighter than their stored color
EMISSION_BOOST = 1.8


# =============================================================================
# Shading
# =============================================================================


@ti.func
def shade(ray_origin: vec3, rec: Intersect, light: PointLight) -> vec3:
    """Compute the color of a hit surface under the point light.

    Args:
        ray_origin: Origin of the ray that produced the hit (the eye).
        rec: A hit record with is_intersecting == 1.
        light: The light to shade with.

    Returns:
        The final color with channels in [0, 255].
    """
    material = get_material(rec.material_id)

    light_dir = tm.normalize(light.position - rec.point)
    view_dir = tm.normalize(ray_origin - rec.point)
    reflect_dir = reflect(-light_dir, rec.normal)

    diffuse_intensity = tm.clamp(tm.dot(rec.normal, light_dir), 0.0, 1.0)
    diffuse = color_scale(
        color_scale(
            color_scale(material.diffuse, material.albedo[0]),
            diffuse_intensity,
        ),
        light.intensity,
    )

    # Texel color adds a second diffuse contribution with the same weighting
    if material.texture_id >= 0:
        tex_color = sample_texture(material.texture_id, rec.u, rec.v)
        textured = color_scale(
            color_scale(
                color_scale(tex_color, material.albedo[0]),
                diffuse_intensity,
            ),
            light.intensity,
        )
        diffuse = color_add(diffuse, textured)

    specular_intensity = ti.pow(ti.max(tm.dot(view_dir, reflect_dir), 0.0), material.specular)
    specular = color_scale(
        color_scale(
            color_scale(light.color, material.albedo[1]),
            specular_intensity,
        ),
        light.intensity,
    )

    emission = color_scale(material.emission, EMISSION_BOOST)

    return color_add(color_add(diffuse, specular), emission)


@ti.func
def cast_ray(ray_origin: vec3, ray_direction: vec3, light: PointLight) -> vec3:
    """Cast a ray into the scene and return its color.

    Args:
        ray_origin: The starting point of the ray (the eye).
        ray_direction: The direction of the ray (normalized by the camera).
        light: The light to shade with.

    Returns:
        The shaded color of the nearest hit, or the background color.
    """
    rec = intersect_scene(ray_origin, ray_direction)
    color = _BACKGROUND
    if rec.is_intersecting == 1:
        color = shade(ray_origin, rec, light)
    return color
