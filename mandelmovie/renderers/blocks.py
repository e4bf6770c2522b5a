"""Drives an iteration engine over a pixel grid.

Two ways to fill a grid:

* :func:`render_full` iterates every pixel once, optionally spreading row
  bands over a process pool.
* :func:`iter_progressive` renders coarse-to-fine passes. The first pass
  computes one pixel per block and fills the whole block with it, every
  further pass halves the pixel size. Across all passes each pixel is
  computed exactly once, so the final grid equals the full-grid result.

Results go to a sink with ``set_iteration_result(pixel_x, pixel_y, result)``.
"""

from __future__ import annotations

import threading
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, List, Optional, Protocol, Tuple

from mandelmovie.camera import DrawRequest
from mandelmovie.renderers.engines import Engine, IterationResult, Viewport, create_engine
from mandelmovie.util.logging_setup import get_logger, logging_initialiser


class ResultSink(Protocol):
    def set_iteration_result(self, pixel_x: int, pixel_y: int, result: IterationResult) -> None:
        ...


class ProgressSink(Protocol):
    def set_total_work(self, total: float) -> None:
        ...

    def increment_progress(self, amount: float) -> None:
        ...


class NullProgress:
    def set_total_work(self, total: float) -> None:
        pass

    def increment_progress(self, amount: float) -> None:
        pass


class RenderCancelled(Exception):
    pass


class CancellationToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RenderCancelled()


@dataclass(frozen=True)
class BlockRenderInfo:
    block_size: int
    offset_x: int
    offset_y: int
    pixel_size: int


@lru_cache(maxsize=None)
def block_render_infos(block_size: int) -> Tuple[BlockRenderInfo, ...]:
    """Coarse-to-fine passes covering every offset inside a block exactly once."""
    if block_size <= 0 or block_size & (block_size - 1):
        raise ValueError(f"block_size must be a power of two, got {block_size}")
    result = [BlockRenderInfo(block_size, 0, 0, block_size)]
    pixel_size = block_size // 2
    while pixel_size > 0:
        children = []
        for info in result:
            children.append(BlockRenderInfo(block_size, info.offset_x, info.offset_y + pixel_size, pixel_size))
            children.append(BlockRenderInfo(block_size, info.offset_x + pixel_size, info.offset_y, pixel_size))
            children.append(BlockRenderInfo(block_size, info.offset_x + pixel_size, info.offset_y + pixel_size, pixel_size))
        result.extend(children)
        pixel_size //= 2
    return tuple(result)


def _bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    bands = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands


_G = {}


def _init_worker(viewport: Viewport, log_queue, log_level: int) -> None:
    _G["engine"] = create_engine(viewport)
    logging_initialiser(log_queue, log_level)


def _iterate_rows(engine: Engine, y0: int, y1: int) -> List[List[IterationResult]]:
    width = engine.viewport.width
    return [[engine.iterate_pixel(x, y) for x in range(width)] for y in range(y0, y1)]


def _render_band(y0_y1: Tuple[int, int]):
    y0, y1 = y0_y1
    return y0, _iterate_rows(_G["engine"], y0, y1)


def render_full(
    request: DrawRequest,
    width: int,
    height: int,
    sink: ResultSink,
    *,
    progress: Optional[ProgressSink] = None,
    cancel: Optional[CancellationToken] = None,
    workers: int = 1,
    band_height: int = 16,
    log_queue=None,
    log_level: int = 20,
) -> Engine:
    logger = get_logger()
    progress = progress or NullProgress()
    viewport = Viewport.from_request(request, width, height)
    engine = create_engine(viewport)
    logger.debug(
        "Full render %sx%s mode=%s precision=%s iter=%s workers=%s",
        width, height, engine.mode.value, viewport.precision, viewport.max_iterations, workers,
    )
    progress.set_total_work(width * height)

    def deliver(y0: int, rows: List[List[IterationResult]]) -> None:
        for dy, row in enumerate(rows):
            for x, result in enumerate(row):
                sink.set_iteration_result(x, y0 + dy, result)
            progress.increment_progress(width)

    if workers <= 1:
        for y in range(height):
            if cancel is not None:
                cancel.raise_if_cancelled()
            deliver(y, _iterate_rows(engine, y, y + 1))
        return engine

    pool = ProcessPoolExecutor(
        max_workers=workers,
        initializer=_init_worker,
        initargs=(viewport, log_queue, log_level),
    )
    try:
        for y0, rows in pool.map(_render_band, _bands(height, band_height)):
            if cancel is not None and cancel.is_cancelled:
                pool.shutdown(wait=False, cancel_futures=True)
                raise RenderCancelled()
            deliver(y0, rows)
    finally:
        pool.shutdown(wait=True)
    return engine


def render_block(
    engine: Engine,
    info: BlockRenderInfo,
    sink: ResultSink,
    cancel: Optional[CancellationToken] = None,
) -> int:
    """Renders one pass; returns the number of pixels actually iterated."""
    width = engine.viewport.width
    height = engine.viewport.height
    computed = 0
    for pixel_x in range(info.offset_x, width, info.block_size):
        if cancel is not None:
            cancel.raise_if_cancelled()
        for pixel_y in range(info.offset_y, height, info.block_size):
            result = engine.iterate_pixel(pixel_x, pixel_y)
            computed += 1
            for px in range(pixel_x, min(width, pixel_x + info.pixel_size)):
                for py in range(pixel_y, min(height, pixel_y + info.pixel_size)):
                    sink.set_iteration_result(px, py, result)
    return computed


def iter_progressive(
    request: DrawRequest,
    width: int,
    height: int,
    sink: ResultSink,
    *,
    progress: Optional[ProgressSink] = None,
    cancel: Optional[CancellationToken] = None,
    block_size: Optional[int] = None,
) -> Iterator[BlockRenderInfo]:
    """Yields after each finished pass so the caller can abandon the rest."""
    progress = progress or NullProgress()
    engine = create_engine(Viewport.from_request(request, width, height))
    infos = block_render_infos(block_size or request.progressive_block_size)
    progress.set_total_work(width * height)
    for info in infos:
        progress.increment_progress(render_block(engine, info, sink, cancel))
        yield info


def render_progressive(request: DrawRequest, width: int, height: int, sink: ResultSink, **kwargs) -> None:
    for _ in iter_progressive(request, width, height, sink, **kwargs):
        pass
