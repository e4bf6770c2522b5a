"""Long-lived render threads for interactive front ends.

Both workers take requests through a :class:`queue.Queue` and stop
cooperatively: ``stop_running`` sets a flag that is checked between units of
work and posts a wake-up item so an idle worker notices it.
"""

from __future__ import annotations

import enum
import logging
import queue
import threading
import time
from typing import Callable, List, Optional

from mandelmovie.camera import DrawRequest
from mandelmovie.pipeline import render_image
from mandelmovie.renderers.blocks import (
    BlockRenderInfo,
    CancellationToken,
    RenderCancelled,
    ResultSink,
    iter_progressive,
)
from mandelmovie.util.logging_setup import get_logger
from mandelmovie.util.progress import FractionProgress

_WAKE = object()

MILLISECONDS_PER_HOUR = 60 * 60 * 1000
MILLISECONDS_PER_MINUTE = 60 * 1000
MILLISECONDS_PER_SECOND = 1000


class BackgroundProgressiveRenderer(threading.Thread):
    """Renders the latest request coarse-to-fine into ``sink``.

    A request arriving mid-refinement abandons the remaining passes of the
    old one and restarts at the coarsest pass of the new one.
    """

    def __init__(
        self,
        sink: ResultSink,
        width: int,
        height: int,
        on_pass: Optional[Callable[[DrawRequest, BlockRenderInfo], None]] = None,
    ):
        super().__init__(name="progressive-renderer", daemon=True)
        self.sink = sink
        self.width = width
        self.height = height
        self.on_pass = on_pass
        self._requests: "queue.Queue" = queue.Queue()
        self._stop_event = threading.Event()

    def trigger_draw(self, request: DrawRequest) -> None:
        self._requests.put(request)

    def stop_running(self) -> None:
        self._stop_event.set()
        self._requests.put(_WAKE)

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def _take_latest(self, block: bool) -> Optional[DrawRequest]:
        latest = None
        try:
            item = self._requests.get(block=block)
            while True:
                if item is not _WAKE:
                    latest = item
                item = self._requests.get_nowait()
        except queue.Empty:
            pass
        return latest

    def run(self) -> None:
        logger = get_logger()
        while self.running:
            request = self._take_latest(block=True)
            while request is not None and self.running:
                newer = None
                for info in iter_progressive(request, self.width, self.height, self.sink):
                    if self.on_pass is not None:
                        self.on_pass(request, info)
                    if not self.running:
                        break
                    newer = self._take_latest(block=False)
                    if newer is not None:
                        logger.debug("Progressive render of %s preempted by %s", request, newer)
                        break
                request = newer


class SnapshotStatus(enum.Enum):
    WAITING = "waiting"
    CALCULATING = "calculating"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


def format_duration(millis: int) -> str:
    remaining = int(millis)
    hours, remaining = divmod(remaining, MILLISECONDS_PER_HOUR)
    minutes, remaining = divmod(remaining, MILLISECONDS_PER_MINUTE)
    seconds, remaining = divmod(remaining, MILLISECONDS_PER_SECOND)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0:
        parts.append(f"{seconds}s")
    if remaining > 0:
        parts.append(f"{remaining}ms")
    return " ".join(parts) if parts else "< 1 ms"


class SnapshotRequest:
    def __init__(self, draw_request: DrawRequest, palette, width: int, height: int, path: str):
        self.draw_request = draw_request
        self.palette = palette
        self.width = width
        self.height = height
        self.path = path
        self.status = SnapshotStatus.WAITING
        self.progress = FractionProgress(width * height)
        self.calculation_millis: Optional[int] = None

    @property
    def calculation_time(self) -> Optional[str]:
        if self.calculation_millis is None:
            return None
        return format_duration(self.calculation_millis)

    def __repr__(self) -> str:
        return f"SnapshotRequest({self.path!r}, {self.status.value})"


class BackgroundSnapshotRenderer(threading.Thread):
    """Renders full-size snapshots one after the other.

    ``cancel_all`` drops every pending request and interrupts the one being
    rendered; the interruption ends quietly since it was asked for.
    """

    def __init__(self, workers: int = 1, log_level: int = logging.INFO):
        super().__init__(name="snapshot-renderer", daemon=True)
        self.workers = workers
        self.log_level = log_level
        self._pending: "queue.Queue" = queue.Queue()
        self._lock = threading.Lock()
        self._requests: List[SnapshotRequest] = []
        self._token: Optional[CancellationToken] = None
        self._stop_event = threading.Event()

    @property
    def snapshot_requests(self) -> List[SnapshotRequest]:
        with self._lock:
            return list(self._requests)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return sum(
                1 for r in self._requests
                if r.status in (SnapshotStatus.WAITING, SnapshotStatus.CALCULATING)
            )

    def add_snapshot_request(self, request: SnapshotRequest) -> None:
        with self._lock:
            self._requests.append(request)
        self._pending.put(request)

    def remove_snapshot_request(self, request: SnapshotRequest) -> None:
        with self._lock:
            if request.status is SnapshotStatus.WAITING:
                request.status = SnapshotStatus.CANCELLED
            if request in self._requests:
                self._requests.remove(request)

    def cancel_all(self) -> None:
        with self._lock:
            for request in self._requests:
                if request.status is SnapshotStatus.WAITING:
                    request.status = SnapshotStatus.CANCELLED
            self._requests.clear()
            token = self._token
        try:
            while True:
                self._pending.get_nowait()
        except queue.Empty:
            pass
        if token is not None:
            token.cancel()
        self._pending.put(_WAKE)

    def stop_running(self) -> None:
        self._stop_event.set()
        self._pending.put(_WAKE)

    def run(self) -> None:
        logger = get_logger()
        while not self._stop_event.is_set():
            item = self._pending.get()
            if item is _WAKE:
                continue
            with self._lock:
                if item.status is not SnapshotStatus.WAITING:
                    continue
                item.status = SnapshotStatus.CALCULATING
                token = self._token = CancellationToken()
            try:
                self._draw(item, token)
            except RenderCancelled:
                item.status = SnapshotStatus.CANCELLED
                logger.debug("Snapshot %s cancelled", item.path)
            except Exception:
                item.status = SnapshotStatus.FAILED
                logger.exception("Snapshot %s failed", item.path)
            finally:
                with self._lock:
                    self._token = None

    def _draw(self, request: SnapshotRequest, token: CancellationToken) -> None:
        start = time.time()
        render_image(
            request.draw_request,
            request.palette,
            request.width,
            request.height,
            request.path,
            workers=self.workers,
            progress=request.progress,
            cancel=token,
            log_level=self.log_level,
        )
        request.calculation_millis = int((time.time() - start) * 1000)
        request.status = SnapshotStatus.DONE
