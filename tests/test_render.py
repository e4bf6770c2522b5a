import numpy as np
import pytest

from mandelmovie.renderers.blocks import (
    CancellationToken,
    RenderCancelled,
    block_render_infos,
    iter_progressive,
    render_full,
    render_progressive,
)
from mandelmovie.renderers.engines import PrecisionMode
from mandelmovie.renderers.results import IterationGrid, ImageResult
from mandelmovie.util.progress import FractionProgress


@pytest.mark.parametrize("block_size", [1, 2, 4, 16])
def test_block_infos_cover_each_offset_once(block_size):
    infos = block_render_infos(block_size)
    assert len(infos) == block_size * block_size
    assert infos[0].offset_x == 0 and infos[0].offset_y == 0
    assert infos[0].pixel_size == block_size
    offsets = {(info.offset_x, info.offset_y) for info in infos}
    assert offsets == {(x, y) for x in range(block_size) for y in range(block_size)}
    sizes = [info.pixel_size for info in infos]
    assert sizes == sorted(sizes, reverse=True)


def test_block_size_must_be_power_of_two():
    with pytest.raises(ValueError):
        block_render_infos(6)
    with pytest.raises(ValueError):
        block_render_infos(0)


def test_full_render_sets_every_pixel(shallow_request):
    grid = IterationGrid(13, 9)
    engine = render_full(shallow_request, 13, 9, grid)
    assert engine.mode is PrecisionMode.DOUBLE
    assert not any(result is None for result in grid.results.flat)


@pytest.mark.parametrize("width,height,block_size", [(16, 16, 4), (13, 11, 4), (10, 7, 8)])
def test_progressive_equals_full(shallow_request, width, height, block_size):
    full = IterationGrid(width, height)
    render_full(shallow_request, width, height, full)
    progressive = IterationGrid(width, height)
    render_progressive(shallow_request, width, height, progressive, block_size=block_size)
    assert np.array_equal(full.results, progressive.results)


def test_progressive_equals_full_in_arbitrary_mode(deep_request):
    full = IterationGrid(8, 8)
    engine = render_full(deep_request, 8, 8, full)
    assert engine.mode is PrecisionMode.ARBITRARY
    progressive = IterationGrid(8, 8)
    render_progressive(deep_request, 8, 8, progressive, block_size=4)
    assert np.array_equal(full.results, progressive.results)


def test_first_pass_covers_the_image(shallow_request):
    grid = IterationGrid(12, 12)
    passes = iter_progressive(shallow_request, 12, 12, grid, block_size=4)
    first = next(passes)
    assert first.pixel_size == 4
    assert not any(result is None for result in grid.results.flat)
    assert len(list(passes)) == 15


def test_progress_reaches_one(shallow_request):
    progress = FractionProgress()
    render_full(shallow_request, 10, 10, IterationGrid(10, 10), progress=progress)
    assert progress.fraction == 1.0

    progress = FractionProgress()
    render_progressive(shallow_request, 10, 10, IterationGrid(10, 10), progress=progress, block_size=4)
    assert progress.fraction == 1.0


def test_cancelled_render_raises(shallow_request):
    token = CancellationToken()
    token.cancel()
    with pytest.raises(RenderCancelled):
        render_full(shallow_request, 8, 8, IterationGrid(8, 8), cancel=token)
    with pytest.raises(RenderCancelled):
        render_progressive(shallow_request, 8, 8, IterationGrid(8, 8), cancel=token)


def test_process_pool_matches_inline(shallow_request):
    inline = IterationGrid(20, 20)
    render_full(shallow_request, 20, 20, inline)
    pooled = IterationGrid(20, 20)
    render_full(shallow_request, 20, 20, pooled, workers=2, band_height=3)
    assert np.array_equal(inline.results, pooled.results)


def test_image_result_colors_interior_black(shallow_request, palette, tmp_path):
    image = ImageResult(16, 16, palette)
    render_full(shallow_request, 16, 16, image)
    # The center of the main cardioid never escapes.
    assert tuple(image.buffer[8, 6]) == (0, 0, 0)
    path = image.save(str(tmp_path / "sub" / "out.png"))
    assert image.to_image().size == (16, 16)
    assert (tmp_path / "sub" / "out.png").exists()
    assert path.endswith("out.png")


def test_grid_recolors_without_iterating(shallow_request, palette):
    grid = IterationGrid(8, 8)
    render_full(shallow_request, 8, 8, grid)
    direct = ImageResult(8, 8, palette)
    render_full(shallow_request, 8, 8, direct)
    assert np.array_equal(grid.colorize(palette).buffer, direct.buffer)
