from __future__ import annotations

import argparse
import logging
import math
import os
import subprocess
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from mandelmovie.config import load_config, normalise_config
from mandelmovie.movie.interpolate import get_easing
from mandelmovie.movie.planner import MoviePlanner, movie_steps
from mandelmovie.palette.factory import PaletteType, UnknownPaletteError, parse_palette_type
from mandelmovie.pipeline import (
    render_image,
    render_movie,
    render_points_of_interest,
    render_zoom_sequence,
)
from mandelmovie.poi.catalog import STANDARD_POINTS_OF_INTEREST, find_point_of_interest
from mandelmovie.poi.model import PointOfInterest, load_point_of_interest
from mandelmovie.util.logging_setup import (
    configure_root_logging,
    create_log_queue,
    get_logger,
    log_arithmetic_backend,
    start_queue_listener,
)
from mandelmovie.util.manifest import build_manifest, write_manifest
from mandelmovie.util.progress import TqdmProgress
from mandelmovie.video.opencv_writer import encode_with_opencv

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2

DEFAULT_IMAGE = "mandelbrot.png"
DEFAULT_BATCH_DIR = "images"

def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mandelmovie", description="Deep Mandelbrot renders and zoom movies.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, uses built-in defaults.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="mandelmovie.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render a single image, or one image per point of interest file.")
    r.add_argument("--x", type=str, default="0", help="Real part of the center.")
    r.add_argument("--y", type=str, default="0", help="Imaginary part of the center.")
    r.add_argument("--zoom", type=str, default="0", help="Zoom level (log10 magnification).")
    r.add_argument("--palette", type=str, default=PaletteType.RANDOM_COLOR.value, help="Palette type.")
    r.add_argument("--seed", type=str, default="1", help="Palette seed.")
    r.add_argument("--steps", type=str, default="10", help="Palette interpolation steps.")
    r.add_argument("--width", type=int, default=None, help="Image width (defaults to config.width).")
    r.add_argument("--height", type=int, default=None, help="Image height (defaults to config.height).")
    r.add_argument("--output", type=str, default=None, help=f"Output PNG (single render, default {DEFAULT_IMAGE}) or directory (batch, default {DEFAULT_BATCH_DIR}).")
    r.add_argument("poi_files", nargs="*", help="Point of interest JSON files; renders each one in batch mode.")

    z = sub.add_parser("zoom", help="Render a sequence of images zooming into one point.")
    z.add_argument("--poi", type=str, default=None, help="Name of a built-in point of interest.")
    z.add_argument("--all", action="store_true", help="Zoom into every built-in point of interest.")
    z.add_argument("--x", type=str, default=None, help="Real part of the center (instead of --poi).")
    z.add_argument("--y", type=str, default=None, help="Imaginary part of the center (instead of --poi).")
    z.add_argument("--zoom-start", type=float, default=0.0, help="Zoom of the first image.")
    z.add_argument("--zoom-step", type=float, default=0.1, help="Zoom increment per image.")
    z.add_argument("--count", type=int, default=100, help="Number of images.")
    z.add_argument("--directory", type=str, default=None, help="Output directory (defaults to config.frames_dir).")

    m = sub.add_parser("movie", help="Render the frames of a movie through all built-in points of interest.")
    m.add_argument("--frames-dir", type=str, default=None, help="Override frames_dir from config.")
    m.add_argument("--open", dest="close_loop", action="store_false", help="Do not return to the first point.")
    m.add_argument("--plan-only", action="store_true", help="Log the planned legs without rendering.")

    e = sub.add_parser("encode", help="Encode frames into an MP4 video using OpenCV.")
    e.add_argument("--input-dir", type=str, default=None, help="Frames directory (defaults to config.frames_dir).")
    e.add_argument("--output", type=str, default=None, help="Output MP4 file (defaults to config.output_video).")
    e.add_argument("--fps", type=int, default=None, help="Frames per second (defaults to config.fps).")

    sub.add_parser("list", help="List built-in points of interest and palette types.")

    return p

def _parse_coordinate(text: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Invalid coordinate: {text!r}") from e
    if not value.is_finite():
        raise ValueError(f"Coordinate must be finite, got {text!r}")
    return value

def _parse_zoom(value) -> float:
    zoom = float(value)
    if not math.isfinite(zoom):
        raise ValueError(f"Zoom must be finite, got {value!r}")
    return zoom

def _image_size(args, cfg):
    width = cfg["width"] if args.width is None else args.width
    height = cfg["height"] if args.height is None else args.height
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    return width, height

def _cmd_render(args, cfg, queue, log_level) -> int:
    logger = get_logger()
    try:
        width, height = _image_size(args, cfg)
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_BAD_INPUT

    if args.poi_files:
        output_dir = args.output or DEFAULT_BATCH_DIR
        pois: List[PointOfInterest] = []
        for path in args.poi_files:
            try:
                pois.append(load_point_of_interest(path))
            except (OSError, ValueError) as e:
                logger.error("Skipping %s: %s", path, e)
        written = render_points_of_interest(
            pois, output_dir, width, height,
            workers=cfg["workers"], log_queue=queue, log_level=log_level,
        )
        logger.info("Batch complete: %s of %s images written", len(written), len(args.poi_files))
        return EXIT_OK

    output = args.output or DEFAULT_IMAGE
    try:
        poi = PointOfInterest(
            "render",
            _parse_coordinate(args.x),
            _parse_coordinate(args.y),
            zoom=_parse_zoom(args.zoom),
            palette_type=parse_palette_type(args.palette),
            palette_seed=int(args.seed),
            palette_step=int(args.steps),
            max_iterations_const=cfg["iterations_const"],
            max_iterations_linear=cfg["iterations_linear"],
        )
    except UnknownPaletteError as e:
        logger.error("%s", e)
        return EXIT_BAD_INPUT
    except ValueError as e:
        logger.error("Invalid number: %s", e)
        return EXIT_BAD_INPUT

    with TqdmProgress(desc=os.path.basename(output)) as progress:
        render_image(
            poi.draw_request(), poi.palette(), width, height, output,
            workers=cfg["workers"], progress=progress, log_queue=queue, log_level=log_level,
        )
    return EXIT_OK

def _zoom_targets(args, cfg) -> List[PointOfInterest]:
    _parse_zoom(args.zoom_start)
    _parse_zoom(args.zoom_step)
    if args.all:
        return list(STANDARD_POINTS_OF_INTEREST)
    if args.poi:
        poi = find_point_of_interest(args.poi)
        if poi is None:
            raise ValueError(f"Unknown point of interest: {args.poi}")
        return [poi]
    if args.x is None or args.y is None:
        raise ValueError("Either --poi, --all or both --x and --y are required.")
    return [PointOfInterest(
        "zoom", _parse_coordinate(args.x), _parse_coordinate(args.y), zoom=args.zoom_start,
        max_iterations_const=cfg["iterations_const"],
        max_iterations_linear=cfg["iterations_linear"],
    )]

def _cmd_zoom(args, cfg, queue, log_level) -> int:
    logger = get_logger()
    try:
        targets = _zoom_targets(args, cfg)
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_BAD_INPUT
    if args.count <= 0:
        logger.error("--count must be positive, got %s", args.count)
        return EXIT_BAD_INPUT

    root = args.directory or cfg["frames_dir"]
    for poi in targets:
        directory = os.path.join(root, poi.name) if len(targets) > 1 else root
        render_zoom_sequence(
            poi, args.zoom_start, args.zoom_step, args.count, directory,
            cfg["width"], cfg["height"],
            workers=cfg["workers"], log_queue=queue, log_level=log_level,
        )
    return EXIT_OK

def _cmd_movie(args, cfg, queue, log_level) -> int:
    logger = get_logger()
    if args.frames_dir:
        cfg["frames_dir"] = args.frames_dir

    steps = movie_steps(STANDARD_POINTS_OF_INTEREST, close_loop=args.close_loop)
    planner = MoviePlanner(
        seconds_per_translate=cfg["seconds_per_translate"],
        seconds_per_zoom_level=cfg["seconds_per_zoom_level"],
        fps=cfg["fps"],
        easing=get_easing(cfg["easing"]),
    )
    legs = planner.plan(steps)
    total = sum(leg.frames for leg in legs)
    for leg in legs:
        logger.info("Leg %s zoom %.2f -> %.2f frames=%s", leg.kind.value, leg.start.zoom, leg.end.zoom, leg.frames)
    logger.info("Movie plan: %s points, %s legs, %s frames", len(steps), len(legs), total)
    if args.plan_only:
        return EXIT_OK

    summary = render_movie(
        planner.frames(steps), cfg["frames_dir"], cfg["width"], cfg["height"],
        iterations_const=cfg["iterations_const"],
        iterations_linear=cfg["iterations_linear"],
        workers=cfg["workers"],
        frame_workers=cfg["frame_workers"],
        log_queue=queue,
        log_level=log_level,
    )
    summary.update({"points": len(steps), "legs": len(legs), "frames": total})

    manifest = build_manifest(config=cfg, movie_info=summary, git_commit=_git_commit())
    write_manifest(os.path.join("artifacts", "run.json"), manifest)
    logger.info("Run manifest written: artifacts/run.json")
    return EXIT_OK

def _cmd_encode(args, cfg) -> int:
    input_dir = args.input_dir or cfg["frames_dir"]
    output = args.output or cfg["output_video"]
    fps = args.fps or cfg["fps"]
    encode_with_opencv(input_dir=input_dir, output_file=output, fps=fps)
    return EXIT_OK

def _cmd_list() -> int:
    print("Points of interest:")
    for poi in STANDARD_POINTS_OF_INTEREST:
        print(f"  {poi.name:<20} zoom={poi.zoom:<6} palette={poi.palette_type.value} seed={poi.palette_seed} step={poi.palette_step}")
    print("Palette types:")
    for palette_type in PaletteType:
        print(f"  {palette_type.value}")
    return EXIT_OK

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.cmd == "list":
        return _cmd_list()

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    listener_logger = configure_root_logging(level=log_level, console=True, log_file=log_file)

    queue = create_log_queue()
    listener = start_queue_listener(queue, listener_logger)

    logger = get_logger()

    try:
        try:
            cfg = normalise_config(load_config(args.config))
        except (OSError, ValueError) as e:
            logger.error("Invalid config %s: %s", args.config, e)
            return EXIT_BAD_INPUT
        log_arithmetic_backend()

        if args.cmd == "render":
            return _cmd_render(args, cfg, queue, log_level)
        if args.cmd == "zoom":
            return _cmd_zoom(args, cfg, queue, log_level)
        if args.cmd == "movie":
            return _cmd_movie(args, cfg, queue, log_level)
        if args.cmd == "encode":
            return _cmd_encode(args, cfg)

        raise RuntimeError("Unknown command.")
    finally:
        listener.stop()

if __name__ == "__main__":
    raise SystemExit(main())
