"""Taichi-based ray caster for axis-aligned box dioramas.

This package renders small static scenes made of axis-aligned boxes with
per-pixel Phong-style shading, using Taichi kernels for parallel evaluation:
- Slab-method ray/box intersection with face normals and UV mapping
- Diffuse, textured, specular and emissive shading with one point light
- An orbiting camera driven by an interactive preview window

Subpackages:
    core: Colors, rays, shading, the frame kernel and renderer facade
    geometry: Box primitive and intersection algorithm
    materials: Material registry and texture atlas
    scene: Scene storage, nearest-hit queries and scene builders
    camera: Orbit camera with per-pixel ray generation
    preview: Export and interactive preview utilities
"""

__version__ = "0.1.0"
