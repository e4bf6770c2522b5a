import threading
import time

import numpy as np

from mandelmovie.camera import DrawRequest
from mandelmovie.renderers.blocks import render_full
from mandelmovie.renderers.results import IterationGrid
from mandelmovie.workers import (
    BackgroundProgressiveRenderer,
    BackgroundSnapshotRenderer,
    SnapshotRequest,
    SnapshotStatus,
    format_duration,
)


def _wait_for(predicate, timeout=60.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_format_duration():
    assert format_duration(3723004) == "1h 2m 3s 4ms"
    assert format_duration(1500) == "1s 500ms"
    assert format_duration(60000) == "1m"
    assert format_duration(0) == "< 1 ms"


def test_progressive_renderer_completes_latest_request(shallow_request):
    grid = IterationGrid(12, 12)
    passes = []
    finished = threading.Event()

    def on_pass(request, info):
        passes.append(request)
        if info.pixel_size == 1 and len(passes) >= 16:
            finished.set()

    worker = BackgroundProgressiveRenderer(grid, 12, 12, on_pass=on_pass)
    stale = DrawRequest("0.3", "0.1", 1.0, 20)
    worker.trigger_draw(stale)
    worker.trigger_draw(DrawRequest("0.2", "0.1", 2.0, 20))
    worker.trigger_draw(shallow_request)
    worker.start()
    try:
        assert finished.wait(60)
    finally:
        worker.stop_running()
        worker.join(10)
    assert not worker.is_alive()
    assert set(passes) == {shallow_request}

    expected = IterationGrid(12, 12)
    render_full(shallow_request, 12, 12, expected)
    assert np.array_equal(grid.results, expected.results)


def test_idle_progressive_renderer_stops():
    worker = BackgroundProgressiveRenderer(IterationGrid(4, 4), 4, 4)
    worker.start()
    worker.stop_running()
    worker.join(10)
    assert not worker.is_alive()


def test_snapshot_is_rendered(tmp_path, shallow_request, palette):
    worker = BackgroundSnapshotRenderer()
    request = SnapshotRequest(shallow_request, palette, 10, 10, str(tmp_path / "snap.png"))
    worker.add_snapshot_request(request)
    worker.start()
    try:
        assert _wait_for(lambda: request.status is SnapshotStatus.DONE)
    finally:
        worker.stop_running()
        worker.join(10)
    assert (tmp_path / "snap.png").exists()
    assert request.progress.fraction == 1.0
    assert request.calculation_time is not None
    assert worker.pending_count == 0


def test_cancel_all_drops_pending(tmp_path, shallow_request, palette):
    worker = BackgroundSnapshotRenderer()
    requests = [
        SnapshotRequest(shallow_request, palette, 10, 10, str(tmp_path / f"snap{i}.png"))
        for i in range(3)
    ]
    for request in requests:
        worker.add_snapshot_request(request)
    assert worker.pending_count == 3
    worker.remove_snapshot_request(requests[0])
    assert worker.pending_count == 2
    worker.cancel_all()
    assert worker.pending_count == 0
    assert worker.snapshot_requests == []

    worker.start()
    worker.stop_running()
    worker.join(10)
    assert all(r.status is SnapshotStatus.CANCELLED for r in requests)
    assert not any(tmp_path.iterdir())


def test_cancel_all_interrupts_running_render(tmp_path, palette):
    slow = DrawRequest(
        "-0.743643887037158704752191506114774",
        "0.131825904205311970493132056385139",
        13.0,
        5000,
    )
    worker = BackgroundSnapshotRenderer()
    request = SnapshotRequest(slow, palette, 64, 64, str(tmp_path / "slow.png"))
    worker.add_snapshot_request(request)
    worker.start()
    try:
        assert _wait_for(lambda: request.status is SnapshotStatus.CALCULATING)
        worker.cancel_all()
        assert _wait_for(lambda: request.status is SnapshotStatus.CANCELLED)
    finally:
        worker.stop_running()
        worker.join(60)
    assert not (tmp_path / "slow.png").exists()
