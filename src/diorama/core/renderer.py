"""Frame renderer facade over the frame kernel.

The FrameRenderer class owns the render target dimensions and offers a small
object interface for interactive and batch use:
- One call renders one complete frame
- A frame counter for UI and logging
- Image access as RGB or packed 0xRRGGBB arrays
- Saving to any format Pillow supports

The pixel data itself lives in the module-level Taichi fields of
diorama.core.integrator, so only one FrameRenderer should be active at a time.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.camera.orbit import setup_camera
    >>> from diorama.core.renderer import FrameRenderer
    >>> from diorama.scene.light import setup_light
    >>> from diorama.scene.diorama import create_diorama_scene
    >>>
    >>> scene, camera, light = create_diorama_scene()
    >>> setup_camera(camera)
    >>> setup_light(light)
    >>>
    >>> renderer = FrameRenderer(800, 600)
    >>> renderer.render()
    >>> image = renderer.get_image_numpy()
"""

import logging

import numpy as np
import numpy.typing as npt

from diorama.core.integrator import (
    clear_render_target,
    get_image,
    get_image_numpy,
    get_packed_image_numpy,
    render_frame,
    save_image,
    setup_render_target,
)

logger = logging.getLogger(__name__)


class FrameRenderer:
    """Renders complete frames into the shared render target.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer and its render target.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).

        Raises:
            ValueError: If dimensions are out of the supported range.
        """
        self._width = width
        self._height = height
        self._frame_count = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def frame_count(self) -> int:
        """Number of frames rendered since creation or the last reset."""
        return self._frame_count

    def reset(self) -> None:
        """Clear the frame to black and restart the frame counter."""
        clear_render_target()
        self._frame_count = 0

    def resize(self, width: int, height: int) -> None:
        """Resize the render target. The current frame is cleared.

        Raises:
            ValueError: If dimensions are out of the supported range.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(self) -> None:
        """Render one full frame with the current camera, light and scene."""
        render_frame()
        self._frame_count += 1
        logger.debug("Rendered frame %d (%dx%d)", self._frame_count, self._width, self._height)

    def get_image(self):
        """Get the raw Taichi color buffer field.

        Note: This returns the full preallocated buffer, with row 0 at the
        bottom. Use width/height to determine the active region.
        """
        return get_image()

    def get_image_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the frame as an array of shape (height, width, 3), top row first."""
        return get_image_numpy()

    def get_packed_buffer(self) -> npt.NDArray[np.int32]:
        """Get the frame as packed 0xRRGGBB values of shape (height, width)."""
        return get_packed_image_numpy()

    def save_image(self, filepath: str) -> None:
        """Save the current frame to a file (e.g., "output.png")."""
        save_image(filepath)

    def __repr__(self) -> str:
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"frames={self.frame_count})"
        )
