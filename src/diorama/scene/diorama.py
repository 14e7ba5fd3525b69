"""Diorama scene configuration.

This module provides a factory function for the demo diorama: a small
landscape built entirely from axis-aligned boxes.

The diorama consists of:
- A grass base slab
- Four trees, each a wood trunk with a cluster of leaf cubes
- A house with wall, windows, door, a stepped roof and wooden eaves
- A stepped lake of overlapping water slabs with a dock and two posts
- A glowing moon cube above the scene
- A warm point light that switches between day and night intensity

Textures are looked up by file name in a texture directory. Missing or
unreadable images are logged and the affected materials render with their
diffuse color only.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.camera.orbit import setup_camera
    >>> from diorama.scene.diorama import DioramaParams, create_diorama_scene
    >>> from diorama.scene.light import setup_light
    >>>
    >>> scene, camera, light = create_diorama_scene(DioramaParams(texture_dir="textures"))
    >>> setup_camera(camera)
    >>> setup_light(light)
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from diorama.camera.orbit import OrbitCamera
from diorama.core.color import Color
from diorama.geometry.box import Cube, RectangularPrism
from diorama.materials.phong import Material
from diorama.materials.texture import load_texture
from diorama.scene.light import Light
from diorama.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Diorama Parameters
# =============================================================================


@dataclass
class DioramaParams:
    """Parameters for configuring the diorama scene.

    Attributes:
        texture_dir: Directory holding wood.png, grass.png, leaves.png,
            wall.png, roof.png, water.png and moon.png.
        day_intensity: Light intensity in day mode.
        night_intensity: Light intensity in night mode.
        night: Start in night mode instead of day mode.
        light_position: Position of the point light.
        light_color: Color of the point light.
        eye: Initial camera position.
        center: Point the camera orbits around.

    Example:
        >>> params = DioramaParams()
        >>> params.day_intensity
        1.7
        >>> night = DioramaParams(night=True, texture_dir="assets/textures")
    """

    texture_dir: str | Path = "textures"
    day_intensity: float = 1.7
    night_intensity: float = 0.2
    night: bool = False
    light_position: tuple[float, float, float] = (0.0, 5.1, 0.1)
    light_color: Color = Color(255, 236, 183)
    eye: tuple[float, float, float] = (-1.0, 1.0, 9.0)
    center: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def intensity(self, night: bool) -> float:
        """Light intensity for the given mode."""
        return self.night_intensity if night else self.day_intensity


# =============================================================================
# Diorama Layout
# =============================================================================

LEAF_SIZE = 0.74
EAVE_SIZE = 0.4

# Leaf cube centers, one group per tree
LEAF_CLUSTERS = (
    ((1.7, 1.2, -3.2), (1.0, 1.3, -2.8), (0.8, 0.9, -3.4),
     (0.5, 1.2, -3.5), (1.2, 1.6, -3.3), (1.0, 1.1, -3.8)),
    ((-3.3, 0.8, -4.3), (-3.0, 1.5, -4.0), (-2.9, 1.2, -4.2),
     (-2.6, 1.1, -3.61), (-3.4, 1.0, -3.7)),
    ((-1.2, 0.7, -1.8), (-1.3, 1.3, -2.2), (-1.92, 1.1, -2.2),
     (-1.0, 1.0, -2.75), (-1.7, 0.9, -2.4)),
    ((-1.0, 0.7, -5.8), (-1.0, 1.7, -6.0), (-1.5, 1.4, -6.1),
     (-0.5, 1.2, -6.2), (-1.3, 1.1, -5.9), (-0.3, 1.0, -5.95)),
)

# Wooden eave cubes along the front and back roof edges
EAVE_X = ((3.5, 0.45), (3.9, 0.6), (4.3, 0.7), (4.7, 0.6), (5.1, 0.45))
EAVE_Z = (2.3, -1.7)

# (center, height) of each 0.6 x 0.6 trunk
TRUNKS = (
    ((-1.0, 0.3, -6.0), 3.0),
    ((-3.0, 0.0, -4.0), 2.0),
    ((-1.5, 0.2, -2.4), 2.5),
    ((1.0, 0.0, -3.3), 2.0),
)

# (center, width, height, depth) of each roof layer, bottom to top
ROOF_LAYERS = (
    ((4.3, 0.49, 0.3), 1.95, 0.1, 4.0),
    ((4.3, 0.57, 0.3), 1.8, 0.1, 4.0),
    ((4.3, 0.66, 0.28), 1.65, 0.1, 3.6),
    ((4.3, 0.75, 0.28), 1.5, 0.1, 3.6),
)

LAKE_CENTER = (-0.9, -0.79, 0.2)
LAKE_LAYERS = ((2.0, 3.0), (2.5, 2.6), (3.0, 2.3), (3.5, 1.9))


def _textured(texture_dir: Path, name: str, **kwargs) -> Material:
    return Material(texture=load_texture(texture_dir / f"{name}.png"), **kwargs)


def create_diorama_materials(texture_dir: str | Path = "textures") -> dict[str, Material]:
    """Create the diorama's materials, loading their textures.

    Args:
        texture_dir: Directory holding the texture images.

    Returns:
        Materials keyed by name: wood, grass, leaves, wall, roof, water,
        windows and moon.
    """
    texture_dir = Path(texture_dir)
    no_emission = Color(0, 0, 0)
    moon_color = Color(228, 246, 255) * 1.5
    window_color = Color(253, 237, 191)

    return {
        "wood": _textured(
            texture_dir, "wood",
            diffuse=Color(101, 62, 4), specular=20.0, albedo=(0.6, 0.2), emission=no_emission,
        ),
        "grass": _textured(
            texture_dir, "grass",
            diffuse=Color(29, 60, 14), specular=7.0, albedo=(0.7, 0.1), emission=no_emission,
        ),
        "leaves": _textured(
            texture_dir, "leaves",
            diffuse=Color(29, 60, 14), specular=7.0, albedo=(0.7, 0.1), emission=no_emission,
        ),
        "wall": _textured(
            texture_dir, "wall",
            diffuse=Color(206, 100, 0), specular=15.0, albedo=(0.6, 0.3), emission=no_emission,
        ),
        "roof": _textured(
            texture_dir, "roof",
            diffuse=Color(38, 55, 71), specular=14.0, albedo=(0.6, 0.2), emission=no_emission,
        ),
        "water": _textured(
            texture_dir, "water",
            diffuse=Color(61, 133, 198), specular=5.0, albedo=(0.7, 0.04), emission=no_emission,
        ),
        # Emission only
        "windows": Material(
            diffuse=window_color,
            specular=0.0,
            albedo=(1.0, 0.0),
            texture=None,
            emission=window_color * 2.0,
        ),
        "moon": _textured(
            texture_dir, "moon",
            diffuse=moon_color, specular=11.0, albedo=(0.5, 0.5), emission=moon_color,
        ),
    }


def create_diorama_solids(materials: dict[str, Material]) -> list[Cube | RectangularPrism]:
    """Lay out the diorama's solids.

    Cubes come first, then prisms. Intersection keeps the first of two boxes
    hit at exactly the same distance, so this order decides coplanar faces.

    Args:
        materials: Materials from create_diorama_materials().

    Returns:
        The solids in insertion order.
    """
    wood = materials["wood"]
    leaves = materials["leaves"]

    solids: list[Cube | RectangularPrism] = [
        Cube(center=(0.0, 5.0, -5.0), side_length=1.0, material=materials["moon"]),
    ]
    for cluster in LEAF_CLUSTERS:
        solids.extend(Cube(center=c, side_length=LEAF_SIZE, material=leaves) for c in cluster)
    for z in EAVE_Z:
        solids.extend(
            Cube(center=(x, y, z), side_length=EAVE_SIZE, material=wood) for x, y in EAVE_X
        )

    # Ground
    solids.append(RectangularPrism((1.0, -0.9, -2.0), 9.0, 0.3, 9.0, materials["grass"]))

    for center, height in TRUNKS:
        solids.append(RectangularPrism(center, 0.6, height, 0.6, wood))

    # House, windows and door
    solids.append(RectangularPrism((4.3, -0.1, 0.3), 1.8, 1.3, 4.0, materials["wall"]))
    windows = materials["windows"]
    solids.append(RectangularPrism((3.35, 0.13, -0.9), 0.04, 0.45, 0.5, windows))
    solids.append(RectangularPrism((3.35, 0.13, 1.5), 0.04, 0.45, 0.5, windows))
    solids.append(RectangularPrism((4.3, 0.15, 2.4), 0.4, 0.4, 0.04, windows))
    solids.append(RectangularPrism((3.39, -0.3, 0.4), 0.03, 0.9, 0.5, wood))

    for center, width, height, depth in ROOF_LAYERS:
        solids.append(RectangularPrism(center, width, height, depth, materials["roof"]))

    for width, depth in LAKE_LAYERS:
        solids.append(RectangularPrism(LAKE_CENTER, width, 0.1, depth, materials["water"]))

    # Dock and posts
    solids.append(RectangularPrism((0.15, -0.7, 0.2), 1.4, 0.1, 0.8, wood))
    solids.append(RectangularPrism((-0.4, -0.65, -0.2), 0.2, 0.2, 0.2, wood))
    solids.append(RectangularPrism((-0.4, -0.65, 0.6), 0.2, 0.2, 0.2, wood))

    return solids


# =============================================================================
# Diorama Factory
# =============================================================================


def create_diorama_scene(
    params: DioramaParams | None = None,
) -> tuple[SceneManager, OrbitCamera, Light]:
    """Create the diorama scene.

    Clears the box, material and texture registries and uploads the diorama.
    The camera and light are returned as host values; upload them with
    setup_camera() and setup_light() before rendering.

    Args:
        params: Optional DioramaParams. If None, uses default DioramaParams().

    Returns:
        A tuple of (SceneManager, OrbitCamera, Light).
    """
    if params is None:
        params = DioramaParams()

    scene = SceneManager()
    materials = create_diorama_materials(params.texture_dir)
    scene.add_solids(create_diorama_solids(materials))

    camera = OrbitCamera(eye=params.eye, center=params.center, up=(0.0, 1.0, 0.0))
    light = Light(
        position=params.light_position,
        color=params.light_color,
        intensity=params.intensity(params.night),
    )

    logger.debug(
        "Created diorama: %d boxes, %d materials, %d textures",
        scene.get_box_count(),
        scene.get_material_count(),
        scene.get_texture_count(),
    )
    return scene, camera, light
