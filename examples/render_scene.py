#!/usr/bin/env python3
"""Render a preset scene or a setup file.

This script renders one of the preset scenes (or a JSON setup file) with the
Taichi path tracer and writes the result as a PNG or PPM image.

Usage:
    python examples/render_scene.py [options]

Options:
    --scene NAME          Preset scene: spheres, metallic, focus, diffuse, normals
    --setup FILE          Load a JSON setup file instead of a preset
    --save-setup FILE     Write the setup that is rendered to a JSON file
    --width WIDTH         Override the image width in pixels
    --height HEIGHT       Override the image height in pixels
    --antialias N         Override the subpixel grid size (N*N samples per pixel)
    --scatter-limit N     Override the maximum path depth
    --debug MODE          Override the debug mode: none, diffuse, normals
    --seed SEED           Seed for the per-pixel random streams
    --preview             Render at 1/16 size with one sample per pixel
    --output OUTPUT       Output file path (default: <scene>.png)
    --arch ARCH           Taichi backend: cpu or gpu (default: cpu)
    --threads N           CPU worker threads (default: all cores)
    --quiet               Suppress progress output
    --verbose             Log debug messages

Example:
    python examples/render_scene.py --scene spheres --preview
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

import taichi as ti

PRESET_NAMES = ["spheres", "metallic", "focus", "diffuse", "normals"]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset scene or a setup file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--scene",
        choices=PRESET_NAMES,
        default="spheres",
        help="Preset scene to render (default: spheres)",
    )
    source.add_argument("--setup", type=Path, help="JSON setup file to render")
    parser.add_argument("--save-setup", type=Path, help="Write the rendered setup to a JSON file")
    parser.add_argument("--width", type=int, help="Image width in pixels")
    parser.add_argument("--height", type=int, help="Image height in pixels")
    parser.add_argument("--antialias", type=int, help="Subpixel grid size N")
    parser.add_argument("--scatter-limit", type=int, help="Maximum path depth")
    parser.add_argument(
        "--debug",
        choices=["none", "diffuse", "normals"],
        help="Material override for visualizing geometry",
    )
    parser.add_argument("--seed", type=int, help="Seed for the random streams")
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Render at 1/16 size with one sample per pixel",
    )
    parser.add_argument("--output", type=str, help="Output file path (default: <scene>.png)")
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument("--threads", type=int, help="CPU worker threads (default: all cores)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages")
    return parser.parse_args(argv)


def _apply_overrides(parameters, args: argparse.Namespace):
    """Return the parameters with command-line overrides applied."""
    from pathtracer.core.parameters import DebugMode
    from pathtracer.scene.presets import preview_parameters

    if args.preview:
        parameters = preview_parameters(parameters)

    overrides = {
        "image_width": args.width,
        "image_height": args.height,
        "antialias_samples": args.antialias,
        "scatter_limit": args.scatter_limit,
        "seed": args.seed,
    }
    if args.debug is not None:
        overrides["debug_mode"] = DebugMode[args.debug.upper()]
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return dataclasses.replace(parameters, **overrides)


def render_scene(args: argparse.Namespace) -> Path:
    """Render the selected scene and save it to a file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.renderer import Renderer
    from pathtracer.preview.export import save_image
    from pathtracer.scene.presets import create_preset
    from pathtracer.scene.setup import Setup, load_setup, save_setup

    if args.setup is not None:
        setup = load_setup(args.setup)
        name = args.setup.stem
    else:
        setup = create_preset(args.scene)
        name = args.scene

    parameters = _apply_overrides(setup.parameters, args)
    if args.save_setup is not None:
        save_setup(args.save_setup, Setup(parameters=parameters, scene=setup.scene))

    quiet = args.quiet
    if not quiet:
        print(
            f"Rendering '{name}' ({parameters.image_width}x{parameters.image_height}, "
            f"{parameters.antialias_samples ** 2} samples per pixel)..."
        )

    start_time = time.time()

    def progress_callback(current: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / total) * 100 if total > 0 else 0
            print(
                f"\r  Progress: {current}/{total} rows ({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    renderer = Renderer(parameters)
    result = renderer.render(setup.scene, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(args.output or f"{name}.png")
    save_image(result.image, output_file)

    if not quiet:
        print(result.statistics.summary())
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_kwargs = {"arch": ti.gpu if args.arch == "gpu" else ti.cpu}
    if args.threads is not None:
        init_kwargs["cpu_max_num_threads"] = args.threads
    ti.init(**init_kwargs)

    try:
        render_scene(args)
        return 0
    except (OSError, RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
