"""Camera paths between points of interest.

Two points that are far apart relative to their zoom cannot be joined by a
plain pan-and-zoom: at zoom 50 a pan across 1e-10 would sweep through
10^40 screen widths. The planner first estimates the *intermediate zoom*
``-log10(distance)`` at which both points fit on one screen and, when an
endpoint is zoomed in deeper than that, inserts a zoom-out (or zoom-in) leg
at that endpoint's position.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Iterable, Iterator, List, Optional, Sequence

from mandelmovie import precision as prec
from mandelmovie.camera import DrawRequest
from mandelmovie.movie.interpolate import Easing, FunctionInterpolator, smooth
from mandelmovie.palette.stages import MixPalette
from mandelmovie.util.logging_setup import get_logger


def _exact_precision(*values: Decimal) -> int:
    """Digits needed to square differences of ``values`` without rounding."""
    finite = [v for v in values if v != 0]
    if not finite:
        return 10
    top = max(v.adjusted() for v in finite)
    bottom = min(v.as_tuple().exponent for v in finite)
    return 2 * (top - bottom + 2) + 5


def distance_square(x1: Decimal, y1: Decimal, x2: Decimal, y2: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _exact_precision(x1, y1, x2, y2)
        dx = x1 - x2
        dy = y1 - y2
        return dx * dx + dy * dy


@dataclass(frozen=True)
class MovieStep:
    x: Decimal
    y: Decimal
    zoom: float
    palette: object

    @classmethod
    def from_point_of_interest(cls, poi) -> "MovieStep":
        return cls(poi.x, poi.y, poi.zoom, poi.palette())

    def distance_square(self, other: "MovieStep") -> Decimal:
        return distance_square(self.x, self.y, other.x, other.y)

    def distance(self, other: "MovieStep", precision: int) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = precision
            return self.distance_square(other).sqrt()


def transition_precision(a: MovieStep, b: MovieStep) -> int:
    return int(max(a.zoom, b.zoom)) + 10


def intermediate_zoom(a: MovieStep, b: MovieStep) -> float:
    """Zoom level at which ``a`` and ``b`` are about one view radius apart."""
    distance = a.distance(b, transition_precision(a, b))
    if distance == 0:
        return math.inf
    with localcontext() as ctx:
        ctx.prec = 16
        return float(-distance.log10())


def nearest_neighbour_tour(points: Sequence, close_loop: bool = True) -> List:
    """Greedy tour starting at ``points[0]``; O(n^2) squared-distance scans."""
    remaining = list(points)
    if not remaining:
        return []
    current = remaining.pop(0)
    tour = [current]
    while remaining:
        nearest = min(remaining, key=lambda p: distance_square(current.x, current.y, p.x, p.y))
        remaining.remove(nearest)
        tour.append(nearest)
        current = nearest
    if close_loop and len(tour) > 1:
        tour.append(tour[0])
    return tour


def movie_steps(points: Sequence, close_loop: bool = True) -> List[MovieStep]:
    return [MovieStep.from_point_of_interest(p) for p in nearest_neighbour_tour(points, close_loop)]


class LegKind(enum.Enum):
    ZOOM = "zoom"
    TRANSLATE = "translate"
    COMBINED = "combined"


@dataclass(frozen=True)
class MovieLeg:
    start: MovieStep
    end: MovieStep
    frames: int
    kind: LegKind


@dataclass(frozen=True)
class MovieFrame:
    index: int
    x: Decimal
    y: Decimal
    zoom: float
    palette: object

    def draw_request(
        self,
        iterations_const: int = prec.DEFAULT_ITERATIONS_CONST,
        iterations_linear: int = prec.DEFAULT_ITERATIONS_LINEAR,
    ) -> DrawRequest:
        return DrawRequest.for_zoom(self.x, self.y, self.zoom, iterations_const, iterations_linear)

    @property
    def filename(self) -> str:
        return f"mandelbrot{self.index:04d}.png"


class MoviePlanner:
    MIN_ZOOM_DELTA = 0.1

    def __init__(
        self,
        seconds_per_translate: float = 1.0,
        seconds_per_zoom_level: float = 1.0,
        fps: float = 24.0,
        easing: Easing = smooth,
    ):
        self.frames_per_translate = seconds_per_translate * fps
        self.frames_per_zoom_level = seconds_per_zoom_level * fps
        self.easing = easing

    def translate_frames(self, a: MovieStep, b: MovieStep) -> int:
        # Panning speed is measured in screens, so distance does not matter.
        return max(1, int(self.frames_per_translate + 0.5))

    def zoom_frames(self, a: MovieStep, b: MovieStep) -> int:
        delta = max(abs(a.zoom - b.zoom), self.MIN_ZOOM_DELTA)
        return max(1, int(delta * self.frames_per_zoom_level + 0.5))

    def combined_frames(self, a: MovieStep, b: MovieStep) -> int:
        return max(self.translate_frames(a, b), self.zoom_frames(a, b))

    def plan_transition(self, a: MovieStep, b: MovieStep) -> List[MovieLeg]:
        zoom = intermediate_zoom(a, b)
        need_first = a.zoom >= zoom
        need_second = b.zoom >= zoom
        get_logger().debug(
            "Transition zoom %s -> %s intermediate=%s first=%s second=%s",
            a.zoom, b.zoom, zoom, need_first, need_second,
        )

        if need_first and need_second:
            out = MovieStep(a.x, a.y, zoom, a.palette)
            over = MovieStep(b.x, b.y, zoom, a.palette)
            return [
                MovieLeg(a, out, self.zoom_frames(a, out), LegKind.ZOOM),
                MovieLeg(out, over, self.translate_frames(out, over), LegKind.TRANSLATE),
                MovieLeg(over, b, self.zoom_frames(over, b), LegKind.ZOOM),
            ]
        if need_first:
            out = MovieStep(a.x, a.y, zoom, a.palette)
            return [
                MovieLeg(a, out, self.zoom_frames(a, out), LegKind.ZOOM),
                MovieLeg(out, b, self.combined_frames(out, b), LegKind.COMBINED),
            ]
        if need_second:
            over = MovieStep(b.x, b.y, zoom, a.palette)
            return [
                MovieLeg(a, over, self.combined_frames(a, over), LegKind.COMBINED),
                MovieLeg(over, b, self.zoom_frames(over, b), LegKind.ZOOM),
            ]
        return [MovieLeg(a, b, self.combined_frames(a, b), LegKind.COMBINED)]

    def plan(self, steps: Iterable[MovieStep]) -> List[MovieLeg]:
        legs: List[MovieLeg] = []
        last: Optional[MovieStep] = None
        for step in steps:
            if last is not None:
                legs.extend(self.plan_transition(last, step))
            last = step
        return legs

    def leg_frames(self, leg: MovieLeg, first_index: int) -> Iterator[MovieFrame]:
        digits = int(max(leg.start.zoom, leg.end.zoom)) + 20
        x = FunctionInterpolator(leg.start.x, leg.end.x, self.easing, digits)
        y = FunctionInterpolator(leg.start.y, leg.end.y, self.easing, digits)
        zoom = FunctionInterpolator(leg.start.zoom, leg.end.zoom, self.easing)
        same_palette = leg.start.palette is leg.end.palette
        for frame in range(leg.frames):
            t = frame / leg.frames
            palette = leg.start.palette if same_palette else MixPalette(leg.start.palette, leg.end.palette, t)
            yield MovieFrame(first_index + frame, x(t), y(t), zoom(t), palette)

    def frames(self, steps: Iterable[MovieStep]) -> Iterator[MovieFrame]:
        index = 0
        for leg in self.plan(steps):
            for frame in self.leg_frames(leg, index):
                yield frame
            index += leg.frames

    def total_frames(self, steps: Iterable[MovieStep]) -> int:
        return sum(leg.frames for leg in self.plan(steps))
