"""Phong-style surface material and the material registry.

A material describes how a box surface responds to the scene's point light:

- diffuse: base color lit by the Lambert term
- specular: Phong exponent controlling highlight sharpness (>= 0)
- albedo: (diffuse_weight, specular_weight), used as direct multipliers and
  not required to sum to 1
- texture: optional image whose texel color is added on top of the diffuse
  color contribution
- emission: self-illumination added regardless of lighting

Materials are immutable values. Registering one copies its values into the
GPU registry, where the shader looks them up by material ID.

Example:
    >>> from diorama.core.color import Color
    >>> from diorama.materials.phong import Material
    >>> wood = Material(
    ...     diffuse=Color(101, 62, 4),
    ...     specular=20.0,
    ...     albedo=(0.6, 0.2),
    ... )
"""

from dataclasses import dataclass, field

import taichi as ti
import taichi.math as tm

from diorama.core.color import Color, make_color
from diorama.materials.texture import Texture

# Type aliases for vectors
vec2 = tm.vec2
vec3 = tm.vec3

# Texture ID stored for materials without a texture
NO_TEXTURE = -1


@dataclass(frozen=True)
class Material:
    """Surface appearance of a solid.

    Attributes:
        diffuse: Base diffuse color.
        specular: Specular exponent (>= 0). Larger values give tighter
            highlights; 0 makes the highlight term constant.
        albedo: (diffuse_weight, specular_weight) multipliers.
        texture: Optional texture; None means the diffuse color only.
        emission: Emissive color added regardless of lighting.
    """

    diffuse: Color
    specular: float
    albedo: tuple[float, float]
    texture: Texture | None = None
    emission: Color = field(default_factory=Color.black)

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", tuple(float(w) for w in self.albedo))

    @classmethod
    def black(cls) -> "Material":
        """An all-zero material: no diffuse, specular, texture or emission."""
        return cls(
            diffuse=Color(0, 0, 0),
            specular=0.0,
            albedo=(0.0, 0.0),
            texture=None,
            emission=Color(0, 0, 0),
        )

    @property
    def has_texture(self) -> bool:
        return self.texture is not None


@ti.dataclass
class PhongMaterial:
    """Kernel-side material record.

    Attributes:
        diffuse: Diffuse color with channels in [0, 255].
        specular: Specular exponent.
        albedo: (diffuse_weight, specular_weight).
        emission: Emissive color with channels in [0, 255].
        texture_id: Atlas index of the texture, or -1 when untextured.
    """

    diffuse: vec3
    specular: ti.f32
    albedo: vec2
    emission: vec3
    texture_id: ti.i32


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of distinct materials in the scene
MAX_MATERIALS = 256

material_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_specular = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_albedo = ti.Vector.field(2, dtype=ti.f32, shape=MAX_MATERIALS)
material_emission = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_texture_ids = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_phong_material(
    diffuse: Color,
    specular: float,
    albedo: tuple[float, float],
    emission: Color,
    texture_id: int = NO_TEXTURE,
) -> int:
    """Add a material to the material registry.

    Args:
        diffuse: Base diffuse color.
        specular: Specular exponent, must be >= 0.
        albedo: (diffuse_weight, specular_weight).
        emission: Emissive color.
        texture_id: Atlas index from add_texture(), or NO_TEXTURE.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the specular exponent is negative or albedo does not
            have exactly two weights.
    """
    if specular < 0.0:
        raise ValueError(f"Specular exponent must be >= 0, got {specular}")
    if len(albedo) != 2:
        raise ValueError(
            f"Albedo must be (diffuse_weight, specular_weight), got {albedo!r}"
        )

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_diffuse[idx] = make_color(diffuse)
    material_specular[idx] = specular
    material_albedo[idx] = vec2(albedo[0], albedo[1])
    material_emission[idx] = make_color(emission)
    material_texture_ids[idx] = texture_id
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> PhongMaterial:
    """Look up a material record by index.

    Args:
        material_id: The index of the material in the registry.

    Returns:
        The PhongMaterial stored at that index.
    """
    return PhongMaterial(
        diffuse=material_diffuse[material_id],
        specular=material_specular[material_id],
        albedo=material_albedo[material_id],
        emission=material_emission[material_id],
        texture_id=material_texture_ids[material_id],
    )
