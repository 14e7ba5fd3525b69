#!/usr/bin/env python3
"""Interactive diorama viewer.

This script opens a window showing the diorama and re-renders a full frame on
every tick while the camera orbits around the scene.

Usage:
    python examples/interactive_diorama.py [--textures DIR]

Controls:
    - Arrow keys: orbit the camera around the diorama
    - W / S: zoom in / out
    - L: toggle day and night lighting
    - P: export the current frame to a timestamped PNG
    - Escape: quit
"""

from __future__ import annotations

import argparse
import platform
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    # Try generic GPU (CUDA on Linux/Windows, Vulkan as fallback)
    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive diorama viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive diorama viewer.")
    parser.add_argument("--textures", default="textures", help="Texture directory")
    parser.add_argument("--width", type=int, default=800)
    parser.add_argument("--height", type=int, default=600)
    args = parser.parse_args()

    # Initialize Taichi first (before importing modules that use ti.kernel)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from diorama.preview.interactive import InteractivePreview
    from diorama.scene.diorama import DioramaParams

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("Use examples/render_diorama.py to render to a file instead.")
        return 1

    print(f"Creating interactive preview window ({args.width}x{args.height})...")
    preview = InteractivePreview(
        args.width,
        args.height,
        params=DioramaParams(texture_dir=args.textures),
    )

    print("Starting interactive rendering...")
    print("  - Arrow keys orbit, W/S zoom")
    print("  - L toggles day/night, P exports a PNG")
    print("  - Escape closes the window")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
