"""Scene module for scene storage, lighting and scene builders.

Components:
    intersection: Box storage in Taichi fields and nearest-hit queries
    light: The single point light shared by all pixels
    manager: Scene manager coordinating solids, materials and textures
    diorama: Factory for the demo diorama scene

Scene data is organized for GPU access:
    - Structure-of-Arrays layout for box centers, extents and material IDs
    - Materials and textures referenced by integer IDs
    - Boxes tested in insertion order, so ties go to the earlier box
"""

from .intersection import (
    MAX_BOXES,
    Intersect,
    add_box,
    clear_scene,
    get_box_count,
    intersect_scene,
)
from .light import (
    Light,
    PointLight,
    get_current_light,
    get_light,
    set_light_intensity,
    setup_light,
)
from .manager import (
    BoxInfo,
    MaterialInfo,
    SceneConfig,
    SceneManager,
)
from .diorama import (
    DioramaParams,
    create_diorama_materials,
    create_diorama_scene,
    create_diorama_solids,
)

__all__ = [
    # Intersection module
    "Intersect",
    "add_box",
    "clear_scene",
    "get_box_count",
    "intersect_scene",
    "MAX_BOXES",
    # Light module
    "Light",
    "PointLight",
    "setup_light",
    "set_light_intensity",
    "get_current_light",
    "get_light",
    # Manager module
    "SceneManager",
    "MaterialInfo",
    "BoxInfo",
    "SceneConfig",
    # Diorama module
    "DioramaParams",
    "create_diorama_scene",
    "create_diorama_materials",
    "create_diorama_solids",
]
