"""Interactive preview window using Taichi GGUI.

This module provides the interactive diorama viewer. Every tick it applies the
keyboard input, renders one full frame and shows it.

Controls:
    - Left / Right: orbit around the center (yaw)
    - Up / Down: orbit over and under the center (pitch)
    - W / S: zoom in / out
    - L: toggle between day and night lighting
    - P: export the current frame to a timestamped PNG
    - Escape: close the window

Input handling is separated from the window (see apply_input()), so camera and
light behavior can be driven without a display.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from diorama.preview.interactive import InteractivePreview
    >>> from diorama.scene.diorama import DioramaParams
    >>>
    >>> preview = InteractivePreview(800, 600, params=DioramaParams(texture_dir="textures"))
    >>> preview.run()  # Blocks until the window is closed
"""

import logging
import math
import os
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import taichi as ti

from diorama.scene.diorama import DioramaParams

if TYPE_CHECKING:
    from diorama.camera.orbit import OrbitCamera
    from diorama.core.renderer import FrameRenderer
    from diorama.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Orbit step per tick while an arrow key is held
ROTATION_SPEED = math.pi / 10.0

# Eye-center distance multipliers per tick
ZOOM_IN_FACTOR = 0.9
ZOOM_OUT_FACTOR = 1.1

KEY_ZOOM_IN = "w"
KEY_ZOOM_OUT = "s"
KEY_TOGGLE_LIGHT = "l"
KEY_EXPORT = "p"

# Keys polled every tick (held keys repeat)
HELD_KEYS = (ti.ui.LEFT, ti.ui.RIGHT, ti.ui.UP, ti.ui.DOWN, KEY_ZOOM_IN, KEY_ZOOM_OUT)

# Lazy kernel holder - kernel is created on first use after Taichi is initialized
_blit_kernel: Any = None


def _get_blit_kernel() -> Any:
    """Get or create the kernel copying the frame into the display field.

    The kernel is created lazily to ensure Taichi is initialized first.
    """
    global _blit_kernel
    if _blit_kernel is None:

        @ti.kernel
        def _kernel(src: ti.template(), dst: ti.template()):
            for i, j in dst:
                dst[i, j] = src[i, j] / 255.0

        _blit_kernel = _kernel
    return _blit_kernel


class InteractivePreview:
    """Interactive diorama viewer using Taichi GGUI.

    The window, renderer and scene are created lazily: construction only
    allocates the display field, setup() builds the scene and renderer, and
    run() opens the window.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        params: Diorama configuration (textures, light levels, camera).
        night: Whether night lighting is active.
        output_dir: Directory for exported PNG files.
        display_image: Taichi field holding the displayed frame (RGB in [0, 1]).
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        *,
        params: DioramaParams | None = None,
        title: str = "Diorama",
        output_dir: str | Path = ".",
    ) -> None:
        """Initialize the interactive preview.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            params: Diorama configuration. Defaults to DioramaParams().
            title: Window title.
            output_dir: Directory for exported PNG files.
        """
        self.width = width
        self.height = height
        self.params = params if params is not None else DioramaParams()
        self.night = self.params.night
        self.output_dir = Path(output_dir)
        self._title = title

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None
        self._renderer: "FrameRenderer | None" = None
        self._scene: "SceneManager | None" = None
        self._camera: "OrbitCamera | None" = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )

    # =========================================================================
    # Setup
    # =========================================================================

    def setup(self) -> None:
        """Build the diorama, upload the light and create the renderer."""
        from diorama.core.renderer import FrameRenderer
        from diorama.scene.diorama import create_diorama_scene
        from diorama.scene.light import setup_light

        scene, camera, light = create_diorama_scene(self.params)
        light.intensity = self.params.intensity(self.night)
        setup_light(light)

        self._scene = scene
        self._camera = camera
        if self._renderer is None:
            self._renderer = FrameRenderer(self.width, self.height)

    def _initialize_window(self) -> None:
        if self._window is not None:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def camera(self) -> "OrbitCamera":
        """The orbit camera, building the scene if needed."""
        if self._camera is None:
            self.setup()
        assert self._camera is not None
        return self._camera

    @property
    def renderer(self) -> "FrameRenderer":
        """The frame renderer, building the scene if needed."""
        if self._renderer is None:
            self.setup()
        assert self._renderer is not None
        return self._renderer

    # =========================================================================
    # Input Handling
    # =========================================================================

    def toggle_day_night(self) -> float:
        """Switch between day and night lighting.

        Returns:
            The new light intensity.
        """
        from diorama.scene.light import set_light_intensity

        self.night = not self.night
        intensity = self.params.intensity(self.night)
        set_light_intensity(intensity)
        logger.info("Switched to %s lighting", "night" if self.night else "day")
        return intensity

    def apply_input(self, held: Iterable[str], pressed: Iterable[str] = ()) -> None:
        """Apply one tick of keyboard input.

        Args:
            held: Keys currently held down. Arrow keys orbit and W/S zoom once
                per tick for as long as they are held.
            pressed: Keys pressed since the last tick. L toggles the light and
                P exports a PNG once per press.
        """
        held = set(held)
        camera = self.camera

        if ti.ui.LEFT in held:
            camera.orbit(ROTATION_SPEED, 0.0)
        if ti.ui.RIGHT in held:
            camera.orbit(-ROTATION_SPEED, 0.0)
        if ti.ui.UP in held:
            camera.orbit(0.0, -ROTATION_SPEED)
        if ti.ui.DOWN in held:
            camera.orbit(0.0, ROTATION_SPEED)
        if KEY_ZOOM_IN in held:
            camera.adjust_zoom(ZOOM_IN_FACTOR)
        if KEY_ZOOM_OUT in held:
            camera.adjust_zoom(ZOOM_OUT_FACTOR)

        for key in pressed:
            if key == KEY_TOGGLE_LIGHT:
                self.toggle_day_night()
            elif key == KEY_EXPORT:
                self.export_png()

    def _poll_window(self) -> tuple[list[str], list[str]]:
        """Collect held keys and new key presses from the window."""
        window = self._window
        assert window is not None

        held = [key for key in HELD_KEYS if window.is_pressed(key)]
        pressed = []
        while window.get_event(ti.ui.PRESS):
            key = window.event.key
            if key == ti.ui.ESCAPE:
                window.running = False
            else:
                pressed.append(key)
        return held, pressed

    # =========================================================================
    # Rendering
    # =========================================================================

    def render_frame(self) -> None:
        """Upload the camera, render one frame and copy it for display."""
        from diorama.camera.orbit import setup_camera

        setup_camera(self.camera)
        self.renderer.render()
        _get_blit_kernel()(self.renderer.get_image(), self.display_image)

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self._window is not None and self._window.running

    def show_frame(self) -> None:
        """Present the display field in the window."""
        assert self._window is not None and self._canvas is not None
        self._canvas.set_image(self.display_image)
        self._window.show()

    def run(self) -> None:
        """Run the main window event loop.

        This blocks until the window is closed with Escape or the close button.
        """
        if self._renderer is None:
            self.setup()
        self._initialize_window()

        while self.is_running():
            held, pressed = self._poll_window()
            self.apply_input(held, pressed)
            self.render_frame()
            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    # =========================================================================
    # Export
    # =========================================================================

    def export_png(self) -> Path:
        """Export the current frame to a timestamped PNG file.

        Returns:
            Path of the written file.
        """
        from diorama.preview.export import save_png

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"diorama_{timestamp}.png"

        save_png(self.renderer, path)
        print(f"Exported: {path} (frame {self.renderer.frame_count})")
        return path

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        if os.name == "nt":
            return True

        display = os.environ.get("DISPLAY")
        if os.uname().sysname == "Darwin":
            # SSH sessions without X forwarding have no display
            return not (os.environ.get("SSH_CONNECTION") and not display)

        return bool(display or os.environ.get("WAYLAND_DISPLAY"))
