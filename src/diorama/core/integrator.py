"""Frame kernel and render target for the ray caster.

One frame is a single kernel launch over every pixel. Each pixel builds its
primary ray from the orbit camera, casts it against the scene with the current
light, and writes the resulting color into its own cell of the color buffer.
There is no accumulation: rendering again simply overwrites the frame.

The color buffer is indexed (x, row) with row 0 at the bottom, the way Taichi
GUI canvases expect it. Public functions that take a pixel coordinate use image
convention instead (y = 0 is the top row), and get_image_numpy() returns the
top row first.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.camera.orbit import setup_camera
    >>> from diorama.core.integrator import render_frame, setup_render_target, save_image
    >>> from diorama.scene.light import setup_light
    >>> from diorama.scene.diorama import create_diorama_scene
    >>>
    >>> scene, camera, light = create_diorama_scene()
    >>> setup_camera(camera)
    >>> setup_light(light)
    >>> setup_render_target(800, 600)
    >>> render_frame()
    >>> save_image("diorama.png")
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from diorama.camera.orbit import get_ray
from diorama.core.color import Color, color_from_vec, pack_color
from diorama.core.shading import cast_ray
from diorama.scene.light import get_light

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Frame color buffer, channels in [0, 255]
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Packed 0xRRGGBB copy of the frame
_packed_buffer = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT to avoid Taichi kernel
    recompilation when the size changes.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to black."""
    _color_buffer.fill(0.0)
    _packed_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the color buffer.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Kernels
# =============================================================================


@ti.func
def render_pixel_impl(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    """Compute the color of pixel (x, y), y counted from the top."""
    ray = get_ray(x, y, width, height)
    return cast_ray(ray.origin, ray.direction, get_light())


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32):
    """Render every pixel of the frame into the color and packed buffers."""
    for i, j in ti.ndrange(width, height):
        color = render_pixel_impl(i, height - 1 - j, width, height)
        _color_buffer[i, j] = color
        _packed_buffer[i, j] = pack_color(color)


@ti.kernel
def _render_single_pixel(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    return render_pixel_impl(x, y, width, height)


@ti.kernel
def _cast_single_ray(origin: vec3, direction: vec3) -> vec3:
    return cast_ray(origin, direction, get_light())


# =============================================================================
# Public Rendering API
# =============================================================================


def render_frame() -> None:
    """Render one full frame with the current camera, light and scene.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_frame(width, height)


def render_pixel(x: int, y: int) -> Color:
    """Render a single pixel without touching the frame buffers.

    This is a Python-callable function for testing. For production rendering,
    use render_frame() which processes all pixels in parallel.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        The shaded color of that pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return color_from_vec(_render_single_pixel(x, y, width, height))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> Color:
    """Cast one ray against the scene with the current light.

    Args:
        origin: Ray origin in world space.
        direction: Ray direction; zero components are allowed.

    Returns:
        The shaded color, or the background color on a miss.
    """
    color = _cast_single_ray(vec3(*origin), vec3(*direction))
    return color_from_vec(color)


def get_image_numpy() -> npt.NDArray[np.uint8]:
    """Get the rendered frame as an 8-bit RGB array.

    Returns:
        NumPy array of shape (height, width, 3), top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    # Extract active region of the (width, height, 3) buffer
    image = _color_buffer.to_numpy()[:width, :height, :]

    # Transpose to (height, width, 3) and put the top row first
    image = np.flipud(np.transpose(image, (1, 0, 2)))

    return np.clip(image, 0.0, 255.0).astype(np.uint8)


def get_packed_image_numpy() -> npt.NDArray[np.int32]:
    """Get the rendered frame as packed 0xRRGGBB integers.

    Returns:
        NumPy array of shape (height, width), top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    packed = _packed_buffer.to_numpy()[:width, :height]
    return np.ascontiguousarray(np.flipud(packed.T))


def save_image(filepath: str) -> None:
    """Save the rendered frame to a file.

    The format is chosen by Pillow from the file extension.

    Args:
        filepath: Path to save the image (e.g., "output.png").

    Raises:
        RuntimeError: If render target has not been set up.
    """
    from PIL import Image as PILImage

    pil_image = PILImage.fromarray(get_image_numpy())
    pil_image.save(filepath)
