"""Named palette styles.

Each style is one function returning its stage tuple. The canonical nesting
for the interpolated styles is::

    interior -> cache -> interpolate -> [log] -> fix(black at 0) -> source

so iteration 0 is always black and the interpolation fades out of it.
"""

from __future__ import annotations

import enum
import re
from typing import Callable, Dict, Tuple

from mandelmovie.palette.color import BLACK, WHITE, Color
from mandelmovie.palette.stages import (
    CacheStage,
    CyclingSource,
    FixStage,
    HueSource,
    InteriorStage,
    InterpolateStage,
    LogStage,
    Palette,
    RandomSource,
    Stage,
)
from mandelmovie.util.logging_setup import get_logger

LOG_INTERPOLATION_STEPS = 30
DEFAULT_STEPS = 10


class UnknownPaletteError(ValueError):
    pass


class PaletteType(enum.Enum):
    RANDOM_COLOR = "RandomColor"
    RANDOM_GRAY = "RandomGray"
    RANDOM_PASTELL = "RandomPastell"
    FIRE = "Fire"
    WATER = "Water"
    AIR = "Air"
    EARTH = "Earth"
    FOREST = "Forest"
    STARRY_NIGHT = "StarryNight"
    DRAWING = "Drawing"
    RAINBOW = "Rainbow"
    LOG_RANDOM_COLOR = "LogRandomColor"
    LOG_RANDOM_GRAY = "LogRandomGray"


def _squash(name: str) -> str:
    return re.sub(r"[\s_\-]", "", name).lower()


def parse_palette_type(name) -> PaletteType:
    """Accepts "LogRandomGray", "log random gray", "LOG_RANDOM_GRAY", ..."""
    if isinstance(name, PaletteType):
        return name
    key = _squash(str(name))
    for palette_type in PaletteType:
        if key in (_squash(palette_type.value), _squash(palette_type.name)):
            return palette_type
    raise UnknownPaletteError(f"Unknown palette type: {name!r}")


def _interpolated(source: Stage, steps: int, offset: int = 0) -> Tuple[Stage, ...]:
    return (InteriorStage(), CacheStage(), InterpolateStage(steps, offset), FixStage((BLACK,)), source)


def _log_interpolated(source: Stage, steps: int) -> Tuple[Stage, ...]:
    return (
        InteriorStage(),
        CacheStage(),
        InterpolateStage(LOG_INTERPOLATION_STEPS),
        LogStage(steps),
        FixStage((BLACK,)),
        source,
    )


def _cycling(*names: str) -> CyclingSource:
    return CyclingSource(tuple(Color.named(n) if isinstance(n, str) else n for n in names))


def _gray_source(seed: int) -> RandomSource:
    return RandomSource(seed, 0.0, 360.0, 0.0, 0.0, 0.2, 1.0)


def random_color(seed: int, steps: int):
    return _interpolated(RandomSource(seed), steps)


def random_gray(seed: int, steps: int):
    return _interpolated(_gray_source(seed), steps)


def random_pastell(seed: int, steps: int):
    return _interpolated(RandomSource(seed, 0.0, 360.0, 0.0, 0.3, 0.2, 1.0), steps)


def log_random_color(seed: int, steps: int):
    return _log_interpolated(RandomSource(seed), steps)


def log_random_gray(seed: int, steps: int):
    return _log_interpolated(_gray_source(seed), steps)


def drawing(seed: int, steps: int):
    grays = [Color.gray(v) for v in (0.8, 0.6, 0.4, 0.2, 0.0, 0.2, 0.4, 0.6, 0.8)]
    return (InteriorStage(), CyclingSource.with_repeat(WHITE, steps, grays))


def fire(seed: int, steps: int):
    return _interpolated(_cycling("red", "yellow", "darkred", "orange", Color.gray(0.1)), steps, seed)


def water(seed: int, steps: int):
    return _interpolated(_cycling("blue", "lightblue", "darkblue", "cyan", Color.gray(0.1)), steps, seed)


def air(seed: int, steps: int):
    return _interpolated(_cycling("lightblue", "white", "blue", "white", "cyan"), steps, seed)


def earth(seed: int, steps: int):
    return _interpolated(_cycling("saddlebrown", "green", "darkgreen", "brown", "sandybrown"), steps, seed)


def forest(seed: int, steps: int):
    return _interpolated(_cycling("greenyellow", "green", "darkgreen", "lightgreen", Color.gray(0.1)), steps, seed)


def starry_night(seed: int, steps: int):
    source = _cycling("darkblue", "white", Color.gray(0.1), "midnightblue", Color.gray(0.1))
    return _interpolated(source, steps, seed)


def rainbow(seed: int, steps: int):
    return (InteriorStage(), CacheStage(), HueSource(steps, 0.8, 0.8))


PALETTE_STYLES: Dict[PaletteType, Callable[[int, int], Tuple[Stage, ...]]] = {
    PaletteType.RANDOM_COLOR: random_color,
    PaletteType.RANDOM_GRAY: random_gray,
    PaletteType.RANDOM_PASTELL: random_pastell,
    PaletteType.FIRE: fire,
    PaletteType.WATER: water,
    PaletteType.AIR: air,
    PaletteType.EARTH: earth,
    PaletteType.FOREST: forest,
    PaletteType.STARRY_NIGHT: starry_night,
    PaletteType.DRAWING: drawing,
    PaletteType.RAINBOW: rainbow,
    PaletteType.LOG_RANDOM_COLOR: log_random_color,
    PaletteType.LOG_RANDOM_GRAY: log_random_gray,
}


def palette_stages(palette_type, seed: int, steps: int) -> Tuple[Stage, ...]:
    palette_type = parse_palette_type(palette_type)
    if steps <= 0:
        get_logger().debug("palette steps %s replaced by %s", steps, DEFAULT_STEPS)
        steps = DEFAULT_STEPS
    return PALETTE_STYLES[palette_type](int(seed), int(steps))


def create_palette(palette_type, seed: int, steps: int) -> Palette:
    return Palette(palette_stages(palette_type, seed, steps))
