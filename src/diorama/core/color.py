"""Saturating 8-bit RGB color arithmetic.

Colors are three independent channels in the [0, 255] range. Every operation
that changes a channel saturates instead of wrapping:

- Addition clamps each channel at 255.
- Scalar multiplication clamps to [0, 255] and truncates toward zero.

The same rules exist twice: on the host as the immutable ``Color`` value type
used to describe scenes, and inside Taichi kernels as ``@ti.func`` helpers that
operate on ``vec3`` values holding integral channel values.

Example:
    >>> from diorama.core.color import Color
    >>> Color(200, 10, 0) + Color(100, 10, 0)
    Color(r=255, g=20, b=0)
    >>> Color(100, 100, 100) * 0.5
    Color(r=50, g=50, b=50)
    >>> hex(Color(9, 20, 55).to_hex())
    '0x91437'
"""

import numbers
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

CHANNEL_MAX = 255


def _saturate(value: float) -> int:
    """Clamp a channel value to [0, 255] and truncate toward zero."""
    return int(min(max(value, 0.0), float(CHANNEL_MAX)))


@dataclass(frozen=True)
class Color:
    """An immutable RGB color with saturating channel arithmetic.

    Attributes:
        r: Red channel in [0, 255].
        g: Green channel in [0, 255].
        b: Blue channel in [0, 255].
    """

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "r", _saturate(self.r))
        object.__setattr__(self, "g", _saturate(self.g))
        object.__setattr__(self, "b", _saturate(self.b))

    @classmethod
    def from_hex(cls, packed: int) -> "Color":
        """Decode a packed 0xRRGGBB integer."""
        return cls((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)

    @classmethod
    def black(cls) -> "Color":
        return cls(0, 0, 0)

    def to_hex(self) -> int:
        """Encode as a packed 24-bit 0xRRGGBB integer."""
        return (self.r << 16) | (self.g << 8) | self.b

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def __add__(self, other: "Color") -> "Color":
        if not isinstance(other, Color):
            return NotImplemented
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, scalar: float) -> "Color":
        if not isinstance(scalar, numbers.Real):
            return NotImplemented
        return Color(
            _saturate(self.r * scalar),
            _saturate(self.g * scalar),
            _saturate(self.b * scalar),
        )

    __rmul__ = __mul__

    def __str__(self) -> str:
        return f"Color(r: {self.r}, g: {self.g}, b: {self.b})"


# =============================================================================
# Kernel-side color helpers
# =============================================================================


@ti.func
def color_add(a: vec3, b: vec3) -> vec3:
    """Saturating per-channel addition of two kernel colors."""
    return tm.min(a + b, vec3(255.0, 255.0, 255.0))


@ti.func
def color_scale(color: vec3, scalar: ti.f32) -> vec3:
    """Scale a kernel color, clamping to [0, 255] and truncating each channel.

    Truncation matches the host ``Color.__mul__`` so that a chain of scalings
    produces the same integral channels on both sides.
    """
    scaled = tm.clamp(color * scalar, 0.0, 255.0)
    return ti.floor(scaled)


@ti.func
def pack_color(color: vec3) -> ti.i32:
    """Pack a kernel color into a 24-bit 0xRRGGBB integer."""
    r = ti.cast(color.x, ti.i32)
    g = ti.cast(color.y, ti.i32)
    b = ti.cast(color.z, ti.i32)
    return (r << 16) | (g << 8) | b


def make_color(color: Color) -> vec3:
    """Convert a host Color into a kernel vec3 for field uploads."""
    return vec3(float(color.r), float(color.g), float(color.b))


def color_from_vec(values) -> Color:
    """Convert a kernel color (any 3-sequence of floats) back into a Color."""
    return Color(int(values[0]), int(values[1]), int(values[2]))
