"""Matplotlib-based preview display for rendered frames.

Example:
    >>> from diorama.core.renderer import FrameRenderer
    >>> from diorama.preview.display import show_preview
    >>>
    >>> renderer = FrameRenderer(800, 600)
    >>> renderer.render()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from diorama.preview.export import compute_rmse, image_to_uint8

if TYPE_CHECKING:
    from diorama.core.renderer import FrameRenderer


def show_preview(
    renderer: FrameRenderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display the current frame as a Matplotlib figure.

    Args:
        renderer: The FrameRenderer whose frame to display.
        title: Custom title (default shows size and frame count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = renderer.get_image_numpy()

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image)
    ax.axis("off")

    if title is None:
        title = f"Diorama {renderer.width}x{renderer.height} - frame {renderer.frame_count}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray,
    image_b: npt.NDArray,
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display side-by-side comparison of two frames with difference view.

    Handy for comparing day and night renders, or a frame before and after a
    change to the scene.

    Args:
        image_a: First frame (H, W, 3), channels in [0, 255].
        image_b: Second frame with the same shape.
        labels: Labels for the two frames.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two frames, in channel units.
    """
    import matplotlib.pyplot as plt

    display_a = image_to_uint8(image_a)
    display_b = image_to_uint8(image_b)
    rmse = compute_rmse(display_a, display_b)

    diff = np.abs(display_a.astype(np.float64) - display_b.astype(np.float64))
    diff_amplified = np.clip(diff * diff_scale, 0.0, 255.0).astype(np.uint8)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.3f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
