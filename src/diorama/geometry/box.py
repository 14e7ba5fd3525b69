"""Axis-aligned box primitive with slab-method ray intersection.

This module provides the Box record shared by both solid variants and the
intersection routine that serves them:

- Cube: equal extents on all three axes (side_length)
- RectangularPrism: independent width, height and depth

Both variants reduce to a center and a 3-component extent vector, so a single
slab routine handles them. The routine returns a HitRecord with the hit
distance, hit point, an axis-aligned face normal and (u, v) texture
coordinates.

Face normals are not taken from the slab that produced t. They are recomputed
from the hit point by picking the axis whose boundary is nearest (largest
``|p - center| - half_extent``, ties resolved X, then Y, then Z). This is an
approximation that can pick the wrong face near edges and corners.

The UV mapping is keyed on the resolved normal's x and y components only, so
faces facing +/-Z fall through to the (x, y) branches. Both behaviors are kept
as-is because the diorama textures were authored against them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.geometry.box import Box, hit_box
    >>> box = Box(center=ti.math.vec3(0, 0, 0), extents=ti.math.vec3(1, 1, 1))
    >>> # Use hit_box within a Taichi kernel
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from diorama.core.ray import make_ray, ray_at

if TYPE_CHECKING:
    from diorama.materials.phong import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class BoxKind(IntEnum):
    """The closed set of box-shaped solids."""

    CUBE = 0
    RECTANGULAR_PRISM = 1


@dataclass(frozen=True)
class Cube:
    """A cube centered at ``center`` with equal side lengths.

    Attributes:
        center: Center of the cube in world space (x, y, z).
        side_length: Edge length on every axis.
        material: Surface material of all six faces.
    """

    center: tuple[float, float, float]
    side_length: float
    material: "Material"

    kind = BoxKind.CUBE

    @property
    def extents(self) -> tuple[float, float, float]:
        return (self.side_length, self.side_length, self.side_length)


@dataclass(frozen=True)
class RectangularPrism:
    """An axis-aligned box with independent extents per axis.

    Attributes:
        center: Center of the prism in world space (x, y, z).
        width: Extent along X.
        height: Extent along Y.
        depth: Extent along Z.
        material: Surface material of all six faces.
    """

    center: tuple[float, float, float]
    width: float
    height: float
    depth: float
    material: "Material"

    kind = BoxKind.RECTANGULAR_PRISM

    @property
    def extents(self) -> tuple[float, float, float]:
        return (self.width, self.height, self.depth)


@ti.dataclass
class Box:
    """Kernel-side box: a center and the full extent along each axis.

    Attributes:
        center: The center point of the box (vec3).
        extents: Full size along X, Y and Z (vec3). Half of this is the
            distance from the center to each face.
    """

    center: vec3
    extents: vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-box intersection.

    Attributes:
        hit: Whether the ray intersected the box (1 if hit, 0 if miss).
        t: Distance along the ray to the selected hit. Only valid if hit == 1.
        point: The 3D hit point. Only valid if hit == 1.
        normal: Axis-aligned unit normal of the face nearest to the hit point.
            Only valid if hit == 1.
        u: Horizontal texture coordinate, not clamped. Only valid if hit == 1.
        v: Vertical texture coordinate, not clamped. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    u: ti.f32
    v: ti.f32


@ti.func
def make_box(center: vec3, extents: vec3) -> Box:
    """Create a box from its center and full extents."""
    return Box(center=center, extents=extents)


@ti.func
def box_normal(point: vec3, center: vec3, half_extents: vec3) -> vec3:
    """Pick the axis-aligned normal of the face nearest to ``point``.

    For each axis the distance ``|point - center| - half_extent`` is computed;
    the largest wins, with X checked before Y before Z using ``>=``. The sign
    of ``point - center`` on that axis picks the positive or negative face.

    Args:
        point: A point on (or near) the box surface.
        center: The box center.
        half_extents: Half of the box extents.

    Returns:
        One of the six unit axis vectors.
    """
    diff = ti.abs(point - center) - half_extents
    normal = vec3(0.0, 0.0, 0.0)

    if diff.x >= diff.y and diff.x >= diff.z:
        normal = vec3(-1.0, 0.0, 0.0)
        if point.x > center.x:
            normal = vec3(1.0, 0.0, 0.0)
    elif diff.y >= diff.x and diff.y >= diff.z:
        normal = vec3(0.0, -1.0, 0.0)
        if point.y > center.y:
            normal = vec3(0.0, 1.0, 0.0)
    else:
        normal = vec3(0.0, 0.0, -1.0)
        if point.z > center.z:
            normal = vec3(0.0, 0.0, 1.0)

    return normal


@ti.func
def box_uv(point: vec3, normal: vec3, box_min: vec3, box_max: vec3, extents: vec3):
    """Compute face-dependent (u, v) texture coordinates for a hit point.

    u follows Z on the +/-X faces and X elsewhere; v follows Z on the +/-Y
    faces and Y elsewhere. Each coordinate is normalized by the box extent on
    the axis it follows. Values are left unclamped.

    Args:
        point: The hit point.
        normal: The resolved face normal.
        box_min: Minimum box corner.
        box_max: Maximum box corner.
        extents: Full box extents (width, height, depth).

    Returns:
        Tuple of (u, v).
    """
    u = (point.x - box_min.x) / extents.x
    if normal.x == 1.0:
        u = (point.z - box_min.z) / extents.z
    elif normal.x == -1.0:
        u = (point.z - box_max.z) / extents.z

    v = (point.y - box_min.y) / extents.y
    if normal.y == 1.0:
        v = (point.z - box_min.z) / extents.z
    elif normal.y == -1.0:
        v = (point.z - box_max.z) / extents.z

    return u, v


@ti.func
def hit_box(ray_origin: vec3, ray_direction: vec3, box: Box) -> HitRecord:
    """Test for ray-box intersection using the slab method.

    The ray is clipped against the three pairs of axis-aligned planes:
    1. Compute t where the ray crosses each min and max plane
    2. Sort each pair into (near, far)
    3. t_near = max of nears, t_far = min of fars
    4. Miss if t_near > t_far or t_far < 0

    A zero direction component produces +/-inf for that axis, which the
    min/max reductions handle without special casing. When the origin is
    inside the box (t_near < 0) the exit distance t_far is reported.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        box: The box to test intersection against.

    Returns:
        A HitRecord. Check the hit field to determine if intersection occurred.
    """
    half_extents = box.extents * 0.5
    box_min = box.center - half_extents
    box_max = box.center + half_extents

    t_lo = (box_min - ray_origin) / ray_direction
    t_hi = (box_max - ray_origin) / ray_direction

    near = ti.min(t_lo, t_hi)
    far = ti.max(t_lo, t_hi)

    t_near = ti.max(ti.max(near.x, near.y), near.z)
    t_far = ti.min(ti.min(far.x, far.y), far.z)

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    hit_u = 0.0
    hit_v = 0.0

    missed = t_near > t_far or t_far < 0.0
    if not missed:
        did_hit = 1
        hit_t = t_near
        if t_near < 0.0:
            hit_t = t_far

        hit_point = ray_at(make_ray(ray_origin, ray_direction), hit_t)
        hit_normal = box_normal(hit_point, box.center, half_extents)
        face_u, face_v = box_uv(hit_point, hit_normal, box_min, box_max, box.extents)
        hit_u = face_u
        hit_v = face_v

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        u=hit_u,
        v=hit_v,
    )
