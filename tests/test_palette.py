from concurrent.futures import ThreadPoolExecutor

import pytest

from mandelmovie.palette.color import BLACK, WHITE, Color
from mandelmovie.palette.factory import (
    PaletteType,
    UnknownPaletteError,
    create_palette,
    palette_stages,
    parse_palette_type,
)
from mandelmovie.palette.stages import (
    CacheStage,
    CyclingSource,
    FixStage,
    InteriorStage,
    InterpolateStage,
    LogStage,
    MixPalette,
    Palette,
    RandomSource,
)
from mandelmovie.renderers.engines import INTERIOR


def _close(a: Color, b: Color) -> bool:
    return (a.red, a.green, a.blue) == pytest.approx((b.red, b.green, b.blue))


def test_random_palette_is_reproducible():
    first = create_palette(PaletteType.RANDOM_COLOR, 7, 10)
    second = create_palette(PaletteType.RANDOM_COLOR, 7, 10)
    assert [first.color_for(i) for i in range(200)] == [second.color_for(i) for i in range(200)]


def test_seed_changes_colors():
    first = create_palette(PaletteType.RANDOM_COLOR, 1, 10)
    second = create_palette(PaletteType.RANDOM_COLOR, 2, 10)
    assert [first.color_for(i) for i in range(10, 60)] != [second.color_for(i) for i in range(10, 60)]


def test_interior_and_zero_are_black(palette):
    assert palette.color_for(INTERIOR) == BLACK
    assert palette.color_for(0) == BLACK


def test_interpolation_between_source_entries(palette):
    source = palette.stages[-1]
    first = source.color(palette, len(palette.stages) - 1, 1)
    assert _close(palette.color_for(10), first)
    assert _close(palette.color_for(5), BLACK.interpolate(first, 0.5))


def test_stage_order():
    assert [type(s) for s in palette_stages("RandomColor", 1, 10)] == [
        InteriorStage, CacheStage, InterpolateStage, FixStage, RandomSource,
    ]
    assert [type(s) for s in palette_stages("LogRandomGray", 1, 10)] == [
        InteriorStage, CacheStage, InterpolateStage, LogStage, FixStage, RandomSource,
    ]


def test_cycling_styles_use_seed_as_offset():
    stages = palette_stages(PaletteType.FIRE, 3, 20)
    assert stages[2] == InterpolateStage(20, 3)


def test_non_positive_steps_fall_back_to_default():
    assert palette_stages(PaletteType.RANDOM_COLOR, 1, 0)[2].steps == 10
    with pytest.raises(ValueError):
        InterpolateStage(0)


@pytest.mark.parametrize("name", ["LogRandomGray", "log random gray", "LOG_RANDOM_GRAY", "lograndomgray"])
def test_palette_names_are_forgiving(name):
    assert parse_palette_type(name) is PaletteType.LOG_RANDOM_GRAY


def test_unknown_palette():
    with pytest.raises(UnknownPaletteError):
        create_palette("Sunset", 1, 10)
    with pytest.raises(ValueError):
        parse_palette_type("")


@pytest.mark.parametrize("palette_type", list(PaletteType))
def test_every_style_colors(palette_type):
    palette = create_palette(palette_type, 5, 10)
    assert palette.color_for(INTERIOR) == BLACK
    for iterations in range(0, 300, 7):
        for channel in palette.color_for(iterations).to_rgb8():
            assert 0 <= channel <= 255


def test_log_stage_maps_zero_to_zero():
    colors = tuple(Color.gray(i / 10) for i in range(7))
    palette = Palette((LogStage(30), CyclingSource(colors)))
    assert palette.color_at(0, 0) == colors[0]
    assert palette.color_at(0, 1) == colors[0]
    assert palette.color_at(0, 10) == colors[30 % 7]


def test_fix_stage():
    palette = Palette((FixStage((WHITE, BLACK)), CyclingSource((Color(1, 0, 0),))))
    assert palette.color_at(0, 0) == WHITE
    assert palette.color_at(0, 1) == BLACK
    assert palette.color_at(0, 2) == Color(1, 0, 0)


def test_drawing_repeats_white_first():
    palette = create_palette(PaletteType.DRAWING, 1, 5)
    assert [palette.color_for(i) for i in range(5)] == [WHITE] * 5
    assert palette.color_for(5) != WHITE


def test_palette_validation():
    with pytest.raises(ValueError):
        Palette((CacheStage(),))
    with pytest.raises(ValueError):
        Palette((RandomSource(1), CacheStage(), RandomSource(2)))
    with pytest.raises(ValueError):
        Palette((CacheStage(), InteriorStage(), RandomSource(1)))
    with pytest.raises(ValueError):
        Palette((CacheStage(), RandomSource(1))).color_for(INTERIOR)


def test_cache_is_safe_under_concurrency():
    expected = create_palette(PaletteType.RANDOM_COLOR, 3, 10)
    shared = create_palette(PaletteType.RANDOM_COLOR, 3, 10)
    iterations = list(range(400)) * 4
    with ThreadPoolExecutor(max_workers=8) as pool:
        colors = list(pool.map(shared.color_for, iterations))
    assert colors == [expected.color_for(i) for i in iterations]


def test_mix_palette_endpoints():
    start = create_palette(PaletteType.FIRE, 1, 10)
    end = create_palette(PaletteType.WATER, 1, 10)
    for i in (1, 17, 99):
        assert _close(MixPalette(start, end, 0.0).color_for(i), start.color_for(i))
        assert _close(MixPalette(start, end, 1.0).color_for(i), end.color_for(i))
        assert _close(MixPalette(start, end, 0.5).color_for(i), start.color_for(i).interpolate(end.color_for(i), 0.5))


def test_color_helpers():
    assert Color.named("white") == WHITE
    assert Color.hsb(0, 1, 1).to_rgb8() == (255, 0, 0)
    assert Color.gray(0.5).to_rgb8() == (128, 128, 128)
    assert Color(2.0, -1.0, 0.5).to_rgb8() == (255, 0, 128)
