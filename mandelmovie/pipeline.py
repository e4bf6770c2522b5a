from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Optional

from tqdm import tqdm

from mandelmovie.camera import DrawRequest
from mandelmovie.movie.planner import MovieFrame
from mandelmovie.poi.model import PointOfInterest
from mandelmovie.renderers.blocks import CancellationToken, ProgressSink, render_full
from mandelmovie.renderers.results import ImageResult
from mandelmovie.util.logging_setup import get_logger, logging_initialiser

def _ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)

def frame_path(directory: str, index: int) -> str:
    return os.path.join(directory, f"mandelbrot{index:04d}.png")

def _safe_filename(name: str) -> str:
    return "".join(c if c.isalnum() or c in " -_." else "_" for c in name).strip() or "mandelbrot"

def render_image(
    request: DrawRequest,
    palette,
    width: int,
    height: int,
    path: str,
    *,
    workers: int = 1,
    progress: Optional[ProgressSink] = None,
    cancel: Optional[CancellationToken] = None,
    log_queue=None,
    log_level: int = logging.INFO,
) -> Optional[str]:
    """Renders one PNG; returns None when ``path`` already exists."""
    logger = get_logger()
    if os.path.exists(path):
        logger.info("Already calculated %s with zoom %s", path, request.zoom)
        return None

    directory = os.path.dirname(path)
    if directory:
        _ensure_dir(directory)

    start = time.time()
    result = ImageResult(width, height, palette)
    engine = render_full(
        request, width, height, result,
        progress=progress, cancel=cancel, workers=workers, log_queue=log_queue, log_level=log_level,
    )
    result.save(path)
    logger.info(
        "Calculated %s zoom=%s mode=%s iter=%s in %.2fs",
        path, request.zoom, engine.mode.value, request.max_iterations, time.time() - start,
    )
    return path

def render_points_of_interest(
    pois: Iterable[PointOfInterest],
    directory: str,
    width: int,
    height: int,
    *,
    workers: int = 1,
    log_queue=None,
    log_level: int = logging.INFO,
) -> List[str]:
    """Batch mode: one image per point; a failing entry does not stop the batch."""
    logger = get_logger()
    written = []
    for poi in pois:
        path = os.path.join(directory, _safe_filename(poi.name) + ".png")
        try:
            palette = poi.palette()
            out = render_image(
                poi.draw_request(), palette, width, height, path,
                workers=workers, log_queue=log_queue, log_level=log_level,
            )
        except Exception:
            logger.exception("Failed to render %s", poi.name)
            continue
        if out:
            written.append(out)
    return written

def render_zoom_sequence(
    poi: PointOfInterest,
    zoom_start: float,
    zoom_step: float,
    count: int,
    directory: str,
    width: int,
    height: int,
    *,
    workers: int = 1,
    log_queue=None,
    log_level: int = logging.INFO,
) -> Dict[str, Any]:
    logger = get_logger()
    _ensure_dir(directory)
    palette = poi.palette()
    rendered = 0
    logger.info("Zoom sequence %s: %s images from zoom %s step %s", poi.name, count, zoom_start, zoom_step)
    for i in tqdm(range(count), desc=poi.name, unit="frame"):
        zoom = zoom_start + i * zoom_step
        out = render_image(
            poi.draw_request(zoom), palette, width, height, frame_path(directory, i),
            workers=workers, log_queue=log_queue, log_level=log_level,
        )
        if out:
            rendered += 1
    return {"directory": directory, "count": count, "rendered": rendered}

def _render_movie_frame(job) -> Optional[str]:
    frame, path, width, height, iterations_const, iterations_linear = job
    request = frame.draw_request(iterations_const, iterations_linear)
    return render_image(request, frame.palette, width, height, path)

def render_movie(
    frames: Iterable[MovieFrame],
    frames_dir: str,
    width: int,
    height: int,
    *,
    iterations_const: int = 1000,
    iterations_linear: int = 100,
    workers: int = 1,
    frame_workers: int = 1,
    log_queue=None,
    log_level: int = logging.INFO,
) -> Dict[str, Any]:
    """Renders planned frames; existing files count as done so jobs can resume."""
    logger = get_logger()
    _ensure_dir(frames_dir)

    jobs = []
    skipped = 0
    for frame in frames:
        path = frame_path(frames_dir, frame.index)
        if os.path.exists(path):
            skipped += 1
            continue
        jobs.append((frame, path, width, height, iterations_const, iterations_linear))

    logger.info("Movie start frames_dir=%s pending=%s skipped=%s size=%sx%s frame_workers=%s",
                frames_dir, len(jobs), skipped, width, height, frame_workers)

    rendered = 0
    if frame_workers <= 1:
        for frame, path, *_ in tqdm(jobs, desc="movie", unit="frame"):
            request = frame.draw_request(iterations_const, iterations_linear)
            if render_image(request, frame.palette, width, height, path,
                            workers=workers, log_queue=log_queue, log_level=log_level):
                rendered += 1
    else:
        with ProcessPoolExecutor(
            max_workers=frame_workers,
            initializer=logging_initialiser,
            initargs=(log_queue, log_level),
        ) as pool:
            futures = [pool.submit(_render_movie_frame, job) for job in jobs]
            for future in tqdm(as_completed(futures), total=len(futures), desc="movie", unit="frame"):
                if future.result():
                    rendered += 1

    logger.info("Movie complete frames_dir=%s rendered=%s skipped=%s", frames_dir, rendered, skipped)
    return {"frames_dir": frames_dir, "rendered": rendered, "skipped": skipped, "width": width, "height": height}
