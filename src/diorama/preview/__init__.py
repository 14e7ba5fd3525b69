"""Preview module for output and visualization.

Components:
    display: Matplotlib-based static preview and frame comparison
    export: PNG export and frame array utilities
    interactive: Taichi GGUI window with orbit, zoom and day/night controls

Example:
    >>> from diorama.preview import save_png, show_preview
    >>> from diorama.core.renderer import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(800, 600)
    >>> renderer.render()
    >>> show_preview(renderer)
    >>> save_png(renderer, "diorama.png")

For the interactive viewer:
    >>> from diorama.preview import InteractivePreview
    >>> InteractivePreview(800, 600).run()
"""

from diorama.preview.display import show_comparison, show_preview
from diorama.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
    unpack_colors,
)
from diorama.preview.interactive import InteractivePreview

__all__ = [
    # Interactive preview
    "InteractivePreview",
    # Display functions
    "show_preview",
    "show_comparison",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "unpack_colors",
    "compute_rmse",
]
