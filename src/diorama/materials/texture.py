"""Texture images and the GPU texture atlas.

A Texture is a decoded image stored as raw RGBA bytes (8 bits per channel,
row-major, top row first) plus its width and height. Textures are decoded on
the host with Pillow and uploaded once into a flat texel field shared by all
textures; the kernel side only ever reads resident texels.

Sampling maps (u, v) to a texel by scaling with the texture size and clamping
to the valid index range, so any u and v, including values outside [0, 1],
read a valid texel:

    tex_x = int(clamp(u * width, 0, width - 1))
    tex_y = int(clamp(v * height, 0, height - 1))

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.materials.texture import add_texture, load_texture
    >>> texture = load_texture("textures/wood.png")  # None if it can't be read
    >>> if texture is not None:
    ...     texture_id = add_texture(texture)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

BYTES_PER_TEXEL = 4


@dataclass(frozen=True)
class Texture:
    """A decoded RGBA image.

    Attributes:
        data: Raw RGBA bytes, row-major with the top row first.
        width: Width in pixels.
        height: Height in pixels.
        source: Path the texture was decoded from, if any. Not part of
            equality, so identical pixels from different files compare equal.

    Raises:
        ValueError: If the size is not positive or the buffer length is not
            width * height * 4.
    """

    data: bytes = field(repr=False)
    width: int
    height: int
    source: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Texture size must be at least 1x1, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * BYTES_PER_TEXEL
        if len(self.data) != expected:
            raise ValueError(
                f"Texture data has {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

    @classmethod
    def from_image(cls, image: PILImage.Image, source: str | None = None) -> "Texture":
        """Build a texture from any Pillow image, converting it to RGBA."""
        rgba = image.convert("RGBA")
        width, height = rgba.size
        return cls(data=rgba.tobytes(), width=width, height=height, source=source)

    def as_array(self) -> npt.NDArray[np.uint8]:
        """View the texels as an array of shape (height, width, 4)."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.width, BYTES_PER_TEXEL
        )

    def texel(self, x: int, y: int) -> tuple[int, int, int]:
        """Return the RGB bytes of the texel at column x, row y."""
        index = (y * self.width + x) * BYTES_PER_TEXEL
        return (self.data[index], self.data[index + 1], self.data[index + 2])


def load_texture(path: str | Path) -> Texture | None:
    """Decode an image file into a Texture.

    Failures are logged and reported as a missing texture, so callers can
    always fall back to an untextured material.

    Args:
        path: Path to any image format Pillow can read.

    Returns:
        The decoded texture, or None if the file could not be read.
    """
    try:
        with PILImage.open(path) as image:
            texture = Texture.from_image(image, source=str(path))
    except (OSError, ValueError) as exc:
        logger.error("Failed to load texture %s: %s", path, exc)
        return None

    logger.debug("Loaded texture %s (%dx%d)", path, texture.width, texture.height)
    return texture


# =============================================================================
# Texture Atlas Storage (for scene-level texture management)
# =============================================================================

# Maximum number of distinct textures in the atlas
MAX_TEXTURES = 64

# Total texel storage shared by all textures (16 MiB of RGBA bytes)
MAX_TEXTURE_BYTES = 1 << 24

texture_texels = ti.field(dtype=ti.u8, shape=MAX_TEXTURE_BYTES)
texture_offsets = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_widths = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_heights = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
num_textures = ti.field(dtype=ti.i32, shape=())
num_texture_bytes = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _upload_texels(offset: ti.i32, texels: ti.types.ndarray(dtype=ti.u8, ndim=1)):
    for i in range(texels.shape[0]):
        texture_texels[offset + i] = texels[i]


def clear_textures() -> None:
    """Clear the texture atlas.

    Resets the texture count and the used byte count. Existing texel data is
    overwritten by later uploads.
    """
    num_textures[None] = 0
    num_texture_bytes[None] = 0


def add_texture(texture: Texture) -> int:
    """Upload a texture into the atlas.

    Args:
        texture: The decoded texture.

    Returns:
        The texture ID used by materials to reference it.

    Raises:
        RuntimeError: If the texture count or the atlas byte capacity is exceeded.
    """
    idx = num_textures[None]
    if idx >= MAX_TEXTURES:
        raise RuntimeError(f"Maximum number of textures ({MAX_TEXTURES}) exceeded")

    offset = num_texture_bytes[None]
    size = len(texture.data)
    if offset + size > MAX_TEXTURE_BYTES:
        raise RuntimeError(
            f"Texture atlas full: {size} bytes requested, "
            f"{MAX_TEXTURE_BYTES - offset} of {MAX_TEXTURE_BYTES} available"
        )

    _upload_texels(offset, np.frombuffer(texture.data, dtype=np.uint8).copy())

    texture_offsets[idx] = offset
    texture_widths[idx] = texture.width
    texture_heights[idx] = texture.height
    num_texture_bytes[None] = offset + size
    num_textures[None] = idx + 1
    return idx


def get_texture_count() -> int:
    """Get the number of textures in the atlas."""
    return int(num_textures[None])


@ti.func
def texel_coords(texture_id: ti.i32, u: ti.f32, v: ti.f32):
    """Map (u, v) to clamped integer texel coordinates.

    Args:
        texture_id: The atlas index of the texture.
        u: Horizontal coordinate, nominally in [0, 1].
        v: Vertical coordinate, nominally in [0, 1].

    Returns:
        Tuple of (tex_x, tex_y), always inside the texture.
    """
    width = texture_widths[texture_id]
    height = texture_heights[texture_id]
    fx = tm.clamp(u * ti.cast(width, ti.f32), 0.0, ti.cast(width - 1, ti.f32))
    fy = tm.clamp(v * ti.cast(height, ti.f32), 0.0, ti.cast(height - 1, ti.f32))
    return ti.cast(fx, ti.i32), ti.cast(fy, ti.i32)


@ti.func
def sample_texture(texture_id: ti.i32, u: ti.f32, v: ti.f32) -> vec3:
    """Read the RGB color of the texel addressed by (u, v).

    Args:
        texture_id: The atlas index of the texture.
        u: Horizontal coordinate, clamped to the texture at sampling time.
        v: Vertical coordinate, clamped to the texture at sampling time.

    Returns:
        The texel color as a kernel color with channels in [0, 255]. The alpha
        byte is ignored.
    """
    tex_x, tex_y = texel_coords(texture_id, u, v)
    index = texture_offsets[texture_id] + (tex_y * texture_widths[texture_id] + tex_x) * 4
    return vec3(
        ti.cast(texture_texels[index], ti.f32),
        ti.cast(texture_texels[index + 1], ti.f32),
        ti.cast(texture_texels[index + 2], ti.f32),
    )
