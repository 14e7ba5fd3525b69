"""Geometry module for box-shaped primitives.

This module provides the axis-aligned box primitive and its intersection
algorithm:

Components:
    box: Cube and RectangularPrism solids, the kernel Box record, and
        slab-method ray/box intersection with face normals and UV mapping

Intersection routines are Taichi functions (@ti.func) so every pixel can test
the scene in parallel. Both solid variants share the same routine:
    rec = hit_box(ray_origin, ray_direction, box)
"""

from .box import (
    Box,
    BoxKind,
    Cube,
    HitRecord,
    RectangularPrism,
    box_normal,
    box_uv,
    hit_box,
    make_box,
)

__all__ = [
    "Box",
    "BoxKind",
    "Cube",
    "RectangularPrism",
    "HitRecord",
    "hit_box",
    "make_box",
    "box_normal",
    "box_uv",
]
