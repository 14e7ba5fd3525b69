"""Camera module for view and ray generation.

Components:
    orbit: Look-at camera that orbits and zooms around a center point

Camera responsibilities:
    - Keep the eye on a sphere around the center while orbiting
    - Build the forward/right/up basis for the current view
    - Turn pixel coordinates into normalized world-space rays

Pixel coordinates follow image convention: x from the left edge, y from the
top row. All rays in a frame share the eye as their origin.
"""

from .orbit import (
    DEFAULT_FOV,
    OrbitCamera,
    base_change,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "OrbitCamera",
    "DEFAULT_FOV",
    "setup_camera",
    "get_ray",
    "base_change",
    "get_camera_info",
]
