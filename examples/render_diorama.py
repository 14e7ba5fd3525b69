#!/usr/bin/env python3
"""Render the diorama scene to an image file.

This script builds the diorama, sets up the camera and light, renders one
frame and saves it. Optionally the camera can be orbited first, and the light
set to night mode.

Usage:
    python examples/render_diorama.py [options]

Options:
    --width WIDTH         Image width in pixels (default: 800)
    --height HEIGHT       Image height in pixels (default: 600)
    --textures DIR        Texture directory (default: textures)
    --night               Render with night lighting
    --orbit STEPS         Orbit left by STEPS * pi/10 before rendering
    --output OUTPUT       Output file path (default: diorama.png)
    --scene-json PATH     Also write the scene description as JSON
    --quiet               Suppress progress output

Example:
    python examples/render_diorama.py --night --orbit 2 --output night.png
"""

from __future__ import annotations

import argparse
import json
import math
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the diorama scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Image width in pixels (default: 800)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=600,
        help="Image height in pixels (default: 600)",
    )
    parser.add_argument(
        "--textures",
        type=str,
        default="textures",
        help="Texture directory (default: textures)",
    )
    parser.add_argument(
        "--night",
        action="store_true",
        help="Render with night lighting",
    )
    parser.add_argument(
        "--orbit",
        type=int,
        default=0,
        help="Orbit left by this many pi/10 steps before rendering (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="diorama.png",
        help="Output file path (default: diorama.png)",
    )
    parser.add_argument(
        "--scene-json",
        type=str,
        default=None,
        help="Also write the scene description to this JSON file",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_diorama(
    width: int = 800,
    height: int = 600,
    texture_dir: str = "textures",
    night: bool = False,
    orbit_steps: int = 0,
    output_path: str = "diorama.png",
    scene_json: str | None = None,
    quiet: bool = False,
) -> Path:
    """Render the diorama scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        texture_dir: Directory holding the texture images.
        night: Use the night light intensity.
        orbit_steps: Number of pi/10 orbit steps to the left.
        output_path: Output file path (PNG).
        scene_json: Optional path for a JSON dump of the scene.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from diorama.camera.orbit import setup_camera
    from diorama.core.renderer import FrameRenderer
    from diorama.preview.export import save_png
    from diorama.scene.diorama import DioramaParams, create_diorama_scene
    from diorama.scene.light import setup_light

    if not quiet:
        print(f"Creating diorama scene ({width}x{height})...")

    params = DioramaParams(texture_dir=texture_dir, night=night)
    scene, camera, light = create_diorama_scene(params)

    if not quiet:
        print(
            f"  {scene.get_box_count()} boxes, {scene.get_material_count()} materials, "
            f"{scene.get_texture_count()} textures"
        )

    for _ in range(orbit_steps):
        camera.orbit(math.pi / 10.0, 0.0)

    setup_camera(camera)
    setup_light(light)

    renderer = FrameRenderer(width, height)

    start_time = time.time()
    renderer.render()
    # Kernels launch asynchronously on GPU backends
    ti.sync()
    render_time = time.time() - start_time

    output_file = Path(output_path)
    save_png(renderer, output_file)

    if scene_json is not None:
        Path(scene_json).write_text(json.dumps(scene.to_dict(), indent=2))
        if not quiet:
            print(f"Scene written to: {scene_json}")

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Render time: {render_time:.3f}s (includes kernel compilation)")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_diorama(
            width=args.width,
            height=args.height,
            texture_dir=args.textures,
            night=args.night,
            orbit_steps=args.orbit,
            output_path=args.output,
            scene_json=args.scene_json,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
