"""Image export utilities for rendered frames.

Frames are already 8-bit sRGB-range colors, so export is a straight copy into
a Pillow image; no tone mapping or gamma step is involved.

Supported formats:
    - PNG and anything else Pillow infers from the file extension

Example:
    >>> from diorama.core.renderer import FrameRenderer
    >>> from diorama.preview.export import save_png
    >>>
    >>> renderer = FrameRenderer(800, 600)
    >>> renderer.render()
    >>> save_png(renderer, "diorama.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from diorama.core.renderer import FrameRenderer


def image_to_uint8(image: npt.NDArray) -> npt.NDArray[np.uint8]:
    """Convert a frame array to uint8 for display or export.

    Integer arrays and float arrays are both read as channel values in
    [0, 255]; values outside that range are clamped and fractions truncated,
    matching color arithmetic.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    if image.dtype == np.uint8:
        return image
    return np.clip(image, 0, 255).astype(np.uint8)


def unpack_colors(packed: npt.NDArray[np.integer]) -> npt.NDArray[np.uint8]:
    """Split packed 0xRRGGBB values into an RGB array.

    Args:
        packed: Integer array of shape (H, W).

    Returns:
        Array of shape (H, W, 3) with dtype uint8.
    """
    packed = packed.astype(np.int64)
    return np.stack(
        [(packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF],
        axis=-1,
    ).astype(np.uint8)


def save_png_from_array(image: npt.NDArray, filepath: str | Path) -> None:
    """Save an (H, W, 3) frame array as an image file.

    Args:
        image: Frame array, top row first.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath)


def save_png(renderer: FrameRenderer, filepath: str | Path) -> None:
    """Save the renderer's current frame as a PNG file.

    Args:
        renderer: The FrameRenderer whose frame to save.
        filepath: Output file path (should end in .png).
    """
    save_png_from_array(renderer.get_image_numpy(), filepath)


def compute_rmse(
    image_a: npt.NDArray,
    image_b: npt.NDArray,
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value in channel units (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
