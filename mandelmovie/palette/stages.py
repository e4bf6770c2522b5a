"""Palette stages.

A :class:`Palette` is an ordered tuple of stages, outermost first, ending in
a source stage that produces colors from a non-negative integer index. Every
other stage transforms the iteration count (or the colors) on the way down.
The nesting order is plain data so it can be inspected, compared and
persisted.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from mandelmovie.palette.color import BLACK, Color
from mandelmovie.renderers.engines import INTERIOR, IterationResult


class Stage:
    is_source = False

    def color(self, palette: "Palette", level: int, iterations: int) -> Color:
        raise NotImplementedError


@dataclass(frozen=True)
class InteriorStage(Stage):
    """Maps points that never escaped to a fixed color."""

    override: Color = BLACK

    def color(self, palette, level, iterations):
        return palette.color_at(level + 1, iterations)


@dataclass(frozen=True)
class CacheStage(Stage):
    def color(self, palette, level, iterations):
        cache = palette.cache(level)
        color = cache.get(iterations)
        if color is None:
            # Racing threads may both compute; the results are identical.
            color = palette.color_at(level + 1, iterations)
            cache[iterations] = color
        return color


@dataclass(frozen=True)
class InterpolateStage(Stage):
    steps: int
    offset: int = 0

    def __post_init__(self):
        if self.steps <= 0:
            raise ValueError(f"steps must be > 0, got {self.steps}")

    def color(self, palette, level, iterations):
        n = iterations + self.offset
        index, remainder = divmod(n, self.steps)
        start = palette.color_at(level + 1, index)
        end = palette.color_at(level + 1, index + 1)
        return start.interpolate(end, remainder / self.steps)


@dataclass(frozen=True)
class LogStage(Stage):
    log_steps: int

    def color(self, palette, level, iterations):
        log_iterations = 0 if iterations <= 0 else int(math.log10(iterations) * self.log_steps)
        return palette.color_at(level + 1, log_iterations)


@dataclass(frozen=True)
class FixStage(Stage):
    """The first ``len(colors)`` iteration counts get fixed colors."""

    colors: Tuple[Color, ...] = (BLACK,)

    def color(self, palette, level, iterations):
        if 0 <= iterations < len(self.colors):
            return self.colors[iterations]
        return palette.color_at(level + 1, iterations)


@dataclass(frozen=True)
class CyclingSource(Stage):
    colors: Tuple[Color, ...]
    is_source = True

    def __post_init__(self):
        if not self.colors:
            raise ValueError("CyclingSource needs at least one color")

    @classmethod
    def with_repeat(cls, repeat_color: Color, steps: int, colors: Sequence[Color]) -> "CyclingSource":
        return cls(tuple([repeat_color] * steps) + tuple(colors))

    def color(self, palette, level, iterations):
        return self.colors[iterations % len(self.colors)]


@dataclass(frozen=True)
class RandomSource(Stage):
    """A reproducible random HSB color per index."""

    seed: int
    hue_start: float = 0.0
    hue_end: float = 360.0
    saturation_start: float = 0.8
    saturation_end: float = 1.0
    brightness_start: float = 0.2
    brightness_end: float = 1.0
    is_source = True

    def color(self, palette, level, iterations):
        rng = random.Random(self.seed + iterations)
        rng.random()
        hue = rng.random() * (self.hue_end - self.hue_start) + self.hue_start
        saturation = rng.random() * (self.saturation_end - self.saturation_start) + self.saturation_start
        brightness = rng.random() * (self.brightness_end - self.brightness_start) + self.brightness_start
        return Color.hsb(hue, saturation, brightness)


@dataclass(frozen=True)
class HueSource(Stage):
    steps: int
    saturation: float
    brightness: float
    is_source = True

    def color(self, palette, level, iterations):
        index = iterations % self.steps
        return Color.hsb(360.0 * index / self.steps, self.saturation, self.brightness)


class Palette:
    """Iteration result to color, through an explicit stage pipeline."""

    def __init__(self, stages: Sequence[Stage]):
        stages = tuple(stages)
        if not stages or not stages[-1].is_source:
            raise ValueError("a palette must end with a source stage")
        for index, stage in enumerate(stages[:-1]):
            if stage.is_source:
                raise ValueError(f"source stage {stage!r} can only be last")
            if isinstance(stage, InteriorStage) and index != 0:
                raise ValueError("the interior stage must be outermost")
        self.stages = stages
        self._caches: Dict[int, Dict[int, Color]] = {
            i: {} for i, stage in enumerate(stages) if isinstance(stage, CacheStage)
        }

    def __repr__(self) -> str:
        return f"Palette({list(self.stages)!r})"

    def cache(self, level: int) -> Dict[int, Color]:
        return self._caches[level]

    def color_at(self, level: int, iterations: int) -> Color:
        return self.stages[level].color(self, level, iterations)

    def color_for(self, result: IterationResult) -> Color:
        if result is INTERIOR:
            first = self.stages[0]
            if isinstance(first, InteriorStage):
                return first.override
            raise ValueError("palette has no interior stage for non-escaping points")
        return self.color_at(0, result)


@dataclass(frozen=True)
class MixPalette:
    """Crossfades two palettes; ``mix`` 0 is all ``start``, 1 is all ``end``."""

    start: object
    end: object
    mix: float = 0.0

    def color_for(self, result: IterationResult) -> Color:
        return self.start.color_for(result).interpolate(self.end.color_for(result), self.mix)
