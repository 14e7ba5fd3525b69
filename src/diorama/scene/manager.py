"""Scene manager coordinating solids, materials and textures.

This module provides a high-level scene building API on top of the three GPU
registries (boxes, materials and the texture atlas). Solids are described with
the host value types Cube and RectangularPrism, each carrying its own Material.
The SceneManager uploads them and keeps the bookkeeping needed to share data:

- Identical materials (same values, same texture pixels) share one material ID
- Identical textures share one range of the texture atlas
- Boxes keep their solid kind and dimensions for export

Scenes can be exported to and loaded from plain dictionaries, which makes them
easy to store as JSON. Textures are referenced by the path they were loaded
from; a texture that cannot be loaded again falls back to the untextured
material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.core.color import Color
    >>> from diorama.geometry.box import Cube
    >>> from diorama.materials.phong import Material
    >>> from diorama.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = Material(diffuse=Color(255, 0, 0), specular=0.0, albedo=(1.0, 0.0))
    >>> scene.add_solid(Cube(center=(0.0, 0.0, 0.0), side_length=1.0, material=red))
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from diorama.core.color import Color
from diorama.geometry.box import BoxKind, Cube, RectangularPrism
from diorama.materials.phong import (
    MAX_MATERIALS,
    NO_TEXTURE,
    Material,
    add_phong_material,
    clear_materials,
    get_material_count,
)
from diorama.materials.texture import (
    MAX_TEXTURES,
    Texture,
    add_texture,
    clear_textures,
    get_texture_count,
    load_texture,
)
from diorama.scene.intersection import (
    MAX_BOXES,
    add_box,
    clear_scene,
    get_box_count,
)

logger = logging.getLogger(__name__)

Solid = Cube | RectangularPrism

_KIND_NAMES = {
    BoxKind.CUBE: "cube",
    BoxKind.RECTANGULAR_PRISM: "rectangular_prism",
}


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material registry index.
        material: The material value that was registered.
        texture_id: Atlas index of its texture, or -1 when untextured.
    """

    material_id: int
    material: Material
    texture_id: int


@dataclass
class BoxInfo:
    """Information about a box in the scene.

    Attributes:
        box_index: The index in the box storage arrays.
        kind: Whether the box was added as a cube or a rectangular prism.
        center: The center of the box.
        extents: Full size along X, Y and Z.
        material_id: The material ID assigned to the box.
    """

    box_index: int
    kind: BoxKind
    center: tuple[float, float, float]
    extents: tuple[float, float, float]
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations, in material ID order.
        boxes: List of box configurations referring to materials by ID.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    boxes: list[dict[str, Any]] = field(default_factory=list)


def _vec3(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Builds a scene from solids and keeps the GPU registries in sync.

    Creating a SceneManager clears the box, material and texture registries:
    only one scene is resident at a time.

    Attributes:
        materials: MaterialInfo for every registered material, by ID.
        boxes: BoxInfo for every box, in insertion (and intersection) order.

    Example:
        >>> scene = SceneManager()
        >>> wood = Material(diffuse=Color(101, 62, 4), specular=20.0, albedo=(0.6, 0.2))
        >>> scene.add_rectangular_prism((0.15, -0.7, 0.2), 1.4, 0.1, 0.8, wood)
        >>> scene.add_cube((-0.4, -0.65, -0.2), 0.2, wood)  # reuses the wood material
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.boxes: list[BoxInfo] = []
        self._material_ids: dict[Material, int] = {}
        self._texture_ids: dict[Texture, int] = {}
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_materials()
        clear_textures()
        self.materials.clear()
        self.boxes.clear()
        self._material_ids.clear()
        self._texture_ids.clear()

    def clear(self) -> None:
        """Clear the entire scene (boxes, materials and textures)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _add_texture(self, texture: Texture) -> int:
        texture_id = self._texture_ids.get(texture)
        if texture_id is None:
            texture_id = add_texture(texture)
            self._texture_ids[texture] = texture_id
        return texture_id

    def add_material(self, material: Material) -> int:
        """Register a material, reusing the ID of an identical one.

        Args:
            material: The material to register.

        Returns:
            The material ID to assign to boxes.

        Raises:
            RuntimeError: If the material or texture capacity is exceeded.
            ValueError: If the specular exponent is negative.
        """
        material_id = self._material_ids.get(material)
        if material_id is not None:
            return material_id

        texture_id = NO_TEXTURE
        if material.texture is not None:
            texture_id = self._add_texture(material.texture)

        material_id = add_phong_material(
            diffuse=material.diffuse,
            specular=material.specular,
            albedo=material.albedo,
            emission=material.emission,
            texture_id=texture_id,
        )
        self._material_ids[material] = material_id
        self.materials.append(
            MaterialInfo(material_id=material_id, material=material, texture_id=texture_id)
        )
        return material_id

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Solid Management
    # =========================================================================

    def add_box(
        self,
        center: tuple[float, float, float],
        extents: tuple[float, float, float],
        material_id: int,
        kind: BoxKind = BoxKind.RECTANGULAR_PRISM,
    ) -> int:
        """Add a box that uses an already registered material.

        Args:
            center: The center point of the box as (x, y, z).
            extents: Full size along X, Y and Z.
            material_id: ID returned by add_material().
            kind: The solid variant, kept for export.

        Returns:
            The box index.

        Raises:
            ValueError: If the material ID is unknown or an extent is negative.
            RuntimeError: If the box capacity is exceeded.
        """
        if not 0 <= material_id < len(self.materials):
            raise ValueError(f"Unknown material ID: {material_id}")
        center = _vec3(center, "center")
        extents = _vec3(extents, "extents")

        box_index = add_box(center, extents, material_id)
        self.boxes.append(
            BoxInfo(
                box_index=box_index,
                kind=kind,
                center=center,
                extents=extents,
                material_id=material_id,
            )
        )
        return box_index

    def add_solid(self, solid: Solid) -> int:
        """Add a Cube or RectangularPrism together with its material.

        Returns:
            The box index.
        """
        material_id = self.add_material(solid.material)
        return self.add_box(solid.center, solid.extents, material_id, solid.kind)

    def add_solids(self, solids) -> list[int]:
        """Add several solids in order and return their box indices."""
        return [self.add_solid(solid) for solid in solids]

    def add_cube(
        self,
        center: tuple[float, float, float],
        side_length: float,
        material: Material,
    ) -> tuple[int, int]:
        """Add a cube with its material.

        Returns:
            Tuple of (box_index, material_id).
        """
        material_id = self.add_material(material)
        cube = Cube(center=center, side_length=side_length, material=material)
        box_index = self.add_box(cube.center, cube.extents, material_id, BoxKind.CUBE)
        return box_index, material_id

    def add_rectangular_prism(
        self,
        center: tuple[float, float, float],
        width: float,
        height: float,
        depth: float,
        material: Material,
    ) -> tuple[int, int]:
        """Add a rectangular prism with its material.

        Args:
            center: The center point as (x, y, z).
            width: Size along X.
            height: Size along Y.
            depth: Size along Z.
            material: The prism's material.

        Returns:
            Tuple of (box_index, material_id).
        """
        material_id = self.add_material(material)
        prism = RectangularPrism(
            center=center, width=width, height=height, depth=depth, material=material
        )
        box_index = self.add_box(
            prism.center, prism.extents, material_id, BoxKind.RECTANGULAR_PRISM
        )
        return box_index, material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_box_count(self) -> int:
        """Get the number of boxes in the scene."""
        return get_box_count()

    def get_material_count(self) -> int:
        """Get the number of registered materials."""
        return get_material_count()

    def get_texture_count(self) -> int:
        """Get the number of textures in the atlas."""
        return get_texture_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Textures are exported by source path. A texture built in memory has no
        path and is exported as absent.

        Returns:
            A SceneConfig containing all materials and boxes.
        """
        config = SceneConfig()

        for info in self.materials:
            material = info.material
            texture_path = None
            if material.texture is not None:
                texture_path = material.texture.source
                if texture_path is None:
                    logger.warning(
                        "Material %d has an in-memory texture; exporting it untextured",
                        info.material_id,
                    )
            config.materials.append(
                {
                    "diffuse": list(material.diffuse.as_tuple()),
                    "specular": material.specular,
                    "albedo": list(material.albedo),
                    "emission": list(material.emission.as_tuple()),
                    "texture": texture_path,
                }
            )

        for box in self.boxes:
            box_config: dict[str, Any] = {
                "type": _KIND_NAMES[box.kind],
                "center": list(box.center),
                "material_id": box.material_id,
            }
            if box.kind == BoxKind.CUBE:
                box_config["side_length"] = box.extents[0]
            else:
                box_config["width"] = box.extents[0]
                box_config["height"] = box.extents[1]
                box_config["depth"] = box.extents[2]
            config.boxes.append(box_config)

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Material IDs in
        box entries refer to positions in config.materials.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Config positions may map onto fewer IDs when entries are identical
        material_ids: list[int] = []
        for mat_config in config.materials:
            texture = None
            texture_path = mat_config.get("texture")
            if texture_path:
                texture = load_texture(texture_path)
            material = Material(
                diffuse=Color(*mat_config.get("diffuse", [0, 0, 0])),
                specular=float(mat_config.get("specular", 0.0)),
                albedo=tuple(mat_config.get("albedo", [0.0, 0.0])),
                texture=texture,
                emission=Color(*mat_config.get("emission", [0, 0, 0])),
            )
            material_ids.append(self.add_material(material))

        for box_config in config.boxes:
            box_type = box_config.get("type", "").lower()
            center = _vec3(box_config.get("center", [0, 0, 0]), "center")
            index = box_config.get("material_id", 0)
            if not 0 <= index < len(material_ids):
                raise ValueError(f"Unknown material ID in box config: {index}")

            if box_type == "cube":
                side = float(box_config.get("side_length", 1.0))
                self.add_box(center, (side, side, side), material_ids[index], BoxKind.CUBE)
            elif box_type == "rectangular_prism":
                extents = (
                    float(box_config.get("width", 1.0)),
                    float(box_config.get("height", 1.0)),
                    float(box_config.get("depth", 1.0)),
                )
                self.add_box(
                    center, extents, material_ids[index], BoxKind.RECTANGULAR_PRISM
                )
            else:
                raise ValueError(f"Unknown solid type: {box_type}")

        logger.debug(
            "Loaded scene config: %d materials, %d boxes",
            len(self.materials),
            len(self.boxes),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "boxes": config.boxes,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials' and 'boxes' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            boxes=data.get("boxes", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_boxes() -> int:
        """Get the maximum number of boxes supported."""
        return MAX_BOXES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_textures() -> int:
        """Get the maximum number of textures supported."""
        return MAX_TEXTURES
