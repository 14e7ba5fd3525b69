"""Materials module for surface appearance.

This module implements the Phong-style material model used by the shader and
the texture atlas that backs textured materials:

Components:
    phong: Material value type and the GPU material registry
    texture: Texture value type, Pillow-based loading and the texel atlas

Each registered material provides, by material ID:
    - diffuse color and diffuse weight
    - specular exponent and specular weight
    - emissive color
    - optional texture ID (-1 when untextured)

Texture lookups clamp (u, v) into the image so sampling never reads outside
the texture's texel range.
"""

from .phong import (
    MAX_MATERIALS,
    NO_TEXTURE,
    Material,
    PhongMaterial,
    add_phong_material,
    clear_materials,
    get_material,
    get_material_count,
)
from .texture import (
    MAX_TEXTURE_BYTES,
    MAX_TEXTURES,
    Texture,
    add_texture,
    clear_textures,
    get_texture_count,
    load_texture,
    sample_texture,
    texel_coords,
)

__all__ = [
    # Phong materials
    "Material",
    "PhongMaterial",
    "add_phong_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "MAX_MATERIALS",
    "NO_TEXTURE",
    # Textures
    "Texture",
    "load_texture",
    "add_texture",
    "clear_textures",
    "get_texture_count",
    "sample_texture",
    "texel_coords",
    "MAX_TEXTURES",
    "MAX_TEXTURE_BYTES",
]
