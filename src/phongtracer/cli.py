"""Command-line entry point for rendering a scene to an image file.

Renders the example scene, or a scene loaded from a JSON file, and writes the
result as a BMP (or PNG, by extension).

Usage:
    phongtracer [options]
    python -m phongtracer.cli [options]

Options:
    --width WIDTH         Image width in pixels (default: 640)
    --height HEIGHT       Image height in pixels (default: 480)
    --threads N           Number of CPU worker threads (default: the scene
                          file's, else all cores)
    --ambient INTENSITY   Ambient light intensity (default: scene's own)
    --no-ambient          Disable the ambient term
    --output OUTPUT       Output file path (default: render.bmp)
    --scene FILE          JSON scene file (default: the example scene)
    --batch-rows ROWS     Rows per progress update (default: 32)
    --quiet               Suppress progress output
    --verbose             Enable INFO logging

A scene file holds 'materials', 'objects' and 'lights' lists as written by
SceneManager.to_dict(), plus a required 'camera' entry and an optional
'config' entry (TracerConfig fields). The config's threads value is used
unless --threads is given.

Example:
    phongtracer --width 320 --height 240 --threads 4 --output example.bmp
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from phongtracer.core.config import DEFAULT_HEIGHT, DEFAULT_WIDTH, TracerConfig
from phongtracer.core.runtime import init_runtime

DEFAULT_OUTPUT = "render.bmp"
DEFAULT_BATCH_ROWS = 32


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a Phong-shaded scene to an image file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Number of CPU worker threads (default: the scene file's, else all cores)",
    )
    parser.add_argument(
        "--ambient",
        type=float,
        default=None,
        help="Ambient light intensity (default: the scene's own)",
    )
    parser.add_argument(
        "--no-ambient",
        action="store_true",
        help="Disable the ambient term",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=DEFAULT_OUTPUT,
        help=f"Output file path (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: the example scene)",
    )
    parser.add_argument(
        "--batch-rows",
        type=int,
        default=DEFAULT_BATCH_ROWS,
        help=f"Rows per progress update (default: {DEFAULT_BATCH_ROWS})",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable INFO logging",
    )
    return parser.parse_args(argv)


def load_scene_file(filepath: str | Path) -> dict[str, Any]:
    """Read a JSON scene file.

    Raises:
        ValueError: If the file does not hold a JSON object with a 'camera'
            entry.
    """
    with open(filepath, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Scene file must contain a JSON object: {filepath}")
    if "camera" not in data:
        raise ValueError(f"Scene file has no 'camera' entry: {filepath}")
    return data


def resolve_threads(cli_threads: int | None, scene_data: dict[str, Any] | None) -> int | None:
    """Pick the worker thread count for a render.

    An explicit --threads value wins over the scene file's config entry.
    None means all cores.

    Raises:
        ValueError: If the scene file's config entry is invalid.
    """
    if cli_threads is not None:
        return cli_threads
    if scene_data is not None and "config" in scene_data:
        return TracerConfig.from_dict(scene_data["config"]).threads
    return None


def render_scene(
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    output_path: str = DEFAULT_OUTPUT,
    scene_path: str | None = None,
    scene_data: dict[str, Any] | None = None,
    threads: int | None = None,
    ambient: float | None = None,
    ambient_enabled: bool = True,
    batch_rows: int = DEFAULT_BATCH_ROWS,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Taichi must already be initialised with init_runtime().

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        output_path: Output file path (.bmp or .png).
        scene_path: JSON scene file. The example scene is used when neither
            scene_path nor scene_data is given.
        scene_data: Scene file contents already read with load_scene_file().
            Takes the place of reading scene_path.
        threads: Thread count recorded in the render configuration. It
            should match the one passed to init_runtime().
        ambient: Ambient intensity override. The scene's own when None.
        ambient_enabled: Whether the ambient term is added.
        batch_rows: Number of rows to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    import dataclasses

    from phongtracer.camera.pinhole import PinholeCamera
    from phongtracer.core.renderer import Tracer

    config = TracerConfig(width=width, height=height, threads=threads)
    tracer = Tracer(config)

    if scene_data is None and scene_path is not None:
        scene_data = load_scene_file(scene_path)

    if scene_data is None:
        if not quiet:
            print(f"Creating example scene ({width}x{height})...")
        tracer.load_example_scene()
    else:
        if not quiet:
            print(f"Loading scene from {scene_path or 'scene data'} ({width}x{height})...")
        if "config" in scene_data:
            file_config = TracerConfig.from_dict(scene_data["config"])
            tracer.apply_config(
                dataclasses.replace(file_config, width=width, height=height, threads=threads)
            )
        tracer.scene.from_dict(scene_data)
        tracer.set_camera(PinholeCamera.from_dict(scene_data["camera"]))

    config = tracer.config
    if ambient is not None or not ambient_enabled:
        tracer.apply_config(
            dataclasses.replace(
                config,
                ambient_enabled=ambient_enabled,
                ambient_intensity=config.ambient_intensity if ambient is None else ambient,
            )
        )

    if not quiet:
        print(
            f"Rendering {tracer.scene.get_object_count()} objects, "
            f"{tracer.scene.get_light_count()} lights..."
        )

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    tracer.render(batch_rows=batch_rows, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = tracer.save_image(output_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Rays cast: {tracer.get_ray_count()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        scene_data = load_scene_file(args.scene) if args.scene is not None else None
        threads = resolve_threads(args.threads, scene_data)

        init_runtime(threads=threads)
        if not args.quiet:
            print(f"Using CPU backend ({threads if threads is not None else 'all'} threads)")

        render_scene(
            width=args.width,
            height=args.height,
            output_path=args.output,
            scene_path=args.scene,
            scene_data=scene_data,
            threads=threads,
            ambient=args.ambient,
            ambient_enabled=not args.no_ambient,
            batch_rows=args.batch_rows,
            quiet=args.quiet,
        )
        return 0
    except (OSError, RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
