"""Scene-level box intersection testing.

This module stores every box in the scene in Taichi fields and resolves the
nearest hit for a ray by testing all of them. There is no acceleration
structure: each query is linear in the number of boxes.

The result is an Intersect, which extends the per-box HitRecord with the
material ID of the box that was hit.

Nearest-hit selection scans boxes in insertion order and keeps a running
minimum distance seeded at +inf. A hit replaces the current best only when its
distance is strictly smaller, so of two boxes hit at exactly the same distance
the one added first wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.scene.intersection import add_box, clear_scene, intersect_scene
    >>> clear_scene()
    >>> add_box(vec3(0, 0, 0), vec3(1, 1, 1), material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from diorama.geometry.box import Box, HitRecord, hit_box

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Intersect:
    """Record of a ray-scene intersection with material information.

    Attributes:
        is_intersecting: 1 if the ray hit any box, 0 otherwise. When 0, all
            other fields hold defaults and must not be read.
        distance: Distance along the ray to the hit (t, non-negative).
        point: The 3D hit point.
        normal: Axis-aligned unit normal of the hit face.
        u: Horizontal texture coordinate (unclamped).
        v: Vertical texture coordinate (unclamped).
        material_id: Material of the box that was hit, -1 for a miss.
    """

    is_intersecting: ti.i32
    distance: ti.f32
    point: vec3
    normal: vec3
    u: ti.f32
    v: ti.f32
    material_id: ti.i32


# Maximum number of boxes supported in the scene
MAX_BOXES = 1024

# Box storage: Structure of Arrays layout for GPU efficiency
box_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BOXES)
box_extents = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BOXES)
box_material_ids = ti.field(dtype=ti.i32, shape=MAX_BOXES)
num_boxes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all boxes from the scene.

    Resets the box count to zero. The field data is not cleared but will be
    overwritten when new boxes are added.
    """
    num_boxes[None] = 0


def add_box(
    center: vec3,
    extents: vec3,
    material_id: int = 0,
) -> int:
    """Add a box to the scene.

    Args:
        center: The center point of the box.
        extents: Full size along X, Y and Z (each >= 0).
        material_id: The material ID to associate with this box.

    Returns:
        The index of the added box.

    Raises:
        RuntimeError: If the maximum number of boxes is exceeded.
        ValueError: If any extent is negative.
    """
    for axis in range(3):
        if extents[axis] < 0.0:
            raise ValueError(f"Box extent {axis} = {extents[axis]} is negative")

    idx = num_boxes[None]
    if idx >= MAX_BOXES:
        raise RuntimeError(f"Maximum number of boxes ({MAX_BOXES}) exceeded")
    box_centers[idx] = center
    box_extents[idx] = extents
    box_material_ids[idx] = material_id
    num_boxes[None] = idx + 1
    return idx


def get_box_count() -> int:
    """Get the number of boxes in the scene."""
    return int(num_boxes[None])


@ti.func
def _hit_record_to_intersect(rec: HitRecord, material_id: ti.i32) -> Intersect:
    """Convert a per-box HitRecord into an Intersect with material ID."""
    return Intersect(
        is_intersecting=rec.hit,
        distance=rec.t,
        point=rec.point,
        normal=rec.normal,
        u=rec.u,
        v=rec.v,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> Intersect:
    """Create an Intersect indicating no intersection."""
    return Intersect(
        is_intersecting=0,
        distance=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        u=0.0,
        v=0.0,
        material_id=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> Intersect:
    """Find the nearest box hit by a ray.

    Tests every box and keeps the hit with the smallest distance. A box hit
    at exactly the current best distance does not replace it.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        The nearest Intersect, or a miss record if no box was hit.
    """
    zbuffer = tm.inf
    result = _make_miss_record()

    n_boxes = num_boxes[None]
    for i in range(n_boxes):
        box = Box(center=box_centers[i], extents=box_extents[i])
        rec = hit_box(ray_origin, ray_direction, box)
        if rec.hit == 1 and rec.t < zbuffer:
            zbuffer = rec.t
            result = _hit_record_to_intersect(rec, box_material_ids[i])

    return result
