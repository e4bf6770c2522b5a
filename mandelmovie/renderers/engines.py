"""Escape-time iteration in two numeric modes.

``DoubleEngine`` iterates in native floats, ``MpmathEngine`` in mpmath at the
request's render precision. Which one runs is decided once per request from
the view radius (see :func:`create_engine`), never per pixel, so every pixel
of one image shares the same coordinate arithmetic.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Optional, Tuple, Union

from mandelmovie import precision as prec
from mandelmovie.camera import DrawRequest


class Interior(enum.Enum):
    """Marks a point that did not escape within the iteration budget."""

    INTERIOR = "interior"

    def __repr__(self) -> str:
        return "INTERIOR"


INTERIOR = Interior.INTERIOR

IterationResult = Union[int, Interior]


class PrecisionMode(enum.Enum):
    DOUBLE = "double"
    ARBITRARY = "arbitrary"


@dataclass(frozen=True)
class Viewport:
    """Pixel grid geometry of one request. Pixel (0, 0) is the lowest x and y."""

    x: Decimal
    y: Decimal
    x_radius: Decimal
    y_radius: Decimal
    width: int
    height: int
    precision: int
    max_iterations: int

    @classmethod
    def from_request(cls, request: DrawRequest, width: int, height: int) -> "Viewport":
        if width <= 0 or height <= 0:
            raise ValueError(f"image size must be positive, got {width}x{height}")
        with localcontext() as ctx:
            ctx.prec = request.precision
            shortest = Decimal(min(width, height))
            x_radius = request.radius * Decimal(width) / shortest
            y_radius = request.radius * Decimal(height) / shortest
        return cls(
            x=request.x,
            y=request.y,
            x_radius=x_radius,
            y_radius=y_radius,
            width=width,
            height=height,
            precision=request.precision,
            max_iterations=request.max_iterations,
        )

    @property
    def mode(self) -> PrecisionMode:
        if prec.is_inside_double_precision(self.x_radius) and prec.is_inside_double_precision(self.y_radius):
            return PrecisionMode.DOUBLE
        return PrecisionMode.ARBITRARY


class DoubleEngine:
    mode = PrecisionMode.DOUBLE

    def __init__(self, viewport: Viewport):
        self.viewport = viewport
        self.max_iterations = viewport.max_iterations
        ctx = prec.mp_context(viewport.precision + 5)
        x_radius = prec.to_mpf(ctx, viewport.x_radius)
        y_radius = prec.to_mpf(ctx, viewport.y_radius)
        self._x_min = float(prec.to_mpf(ctx, viewport.x) - x_radius)
        self._y_min = float(prec.to_mpf(ctx, viewport.y) - y_radius)
        self._step_x = float(2 * x_radius / viewport.width)
        self._step_y = float(2 * y_radius / viewport.height)

    def pixel_coordinates(self, pixel_x: int, pixel_y: int) -> Tuple[float, float]:
        return self._x_min + self._step_x * pixel_x, self._y_min + self._step_y * pixel_y

    def escape_iterate(self, x0: float, y0: float, budget: int) -> IterationResult:
        x = 0.0
        y = 0.0
        xx = 0.0
        yy = 0.0
        iterations = 0
        while xx + yy < 4.0 and iterations < budget:
            y = 2.0 * x * y + y0
            x = xx - yy + x0
            iterations += 1
            xx = x * x
            yy = y * y
        if xx + yy < 4.0:
            return INTERIOR
        return iterations

    def iterate_pixel(self, pixel_x: int, pixel_y: int) -> IterationResult:
        x0, y0 = self.pixel_coordinates(pixel_x, pixel_y)
        return self.escape_iterate(x0, y0, self.max_iterations)


class MpmathEngine:
    mode = PrecisionMode.ARBITRARY

    def __init__(self, viewport: Viewport):
        self.viewport = viewport
        self.max_iterations = viewport.max_iterations
        self.ctx = prec.mp_context(viewport.precision)
        ctx = self.ctx
        x_radius = prec.to_mpf(ctx, viewport.x_radius)
        y_radius = prec.to_mpf(ctx, viewport.y_radius)
        self._x_min = prec.to_mpf(ctx, viewport.x) - x_radius
        self._y_min = prec.to_mpf(ctx, viewport.y) - y_radius
        self._step_x = 2 * x_radius / viewport.width
        self._step_y = 2 * y_radius / viewport.height
        self._zero = ctx.mpf(0)
        self._four = ctx.mpf(4)

    def pixel_coordinates(self, pixel_x: int, pixel_y: int):
        return self._x_min + self._step_x * pixel_x, self._y_min + self._step_y * pixel_y

    def escape_iterate(self, x0, y0, budget: int) -> IterationResult:
        four = self._four
        x = y = xx = yy = self._zero
        iterations = 0
        while xx + yy < four and iterations < budget:
            y = 2 * x * y + y0
            x = xx - yy + x0
            iterations += 1
            xx = x * x
            yy = y * y
        if xx + yy < four:
            return INTERIOR
        return iterations

    def iterate_pixel(self, pixel_x: int, pixel_y: int) -> IterationResult:
        x0, y0 = self.pixel_coordinates(pixel_x, pixel_y)
        return self.escape_iterate(x0, y0, self.max_iterations)


Engine = Union[DoubleEngine, MpmathEngine]


def create_engine(viewport: Viewport, mode: Optional[PrecisionMode] = None) -> Engine:
    mode = mode or viewport.mode
    if mode is PrecisionMode.DOUBLE:
        return DoubleEngine(viewport)
    return MpmathEngine(viewport)
