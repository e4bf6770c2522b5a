"""Immutable camera state.

A :class:`DrawRequest` is a value: every change of center, zoom or budget goes
through one of the update functions below and yields a new request. Derived
quantities are computed once when the request is built.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from typing import Union

from mandelmovie import precision as prec

Number = Union[Decimal, int, float, str]


def as_coordinate(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


@dataclass(frozen=True)
class DrawRequest:
    x: Decimal
    y: Decimal
    zoom: float
    max_iterations: int
    coordinates_precision: int = field(init=False, repr=False, compare=False)
    precision: int = field(init=False, repr=False, compare=False)
    radius: Decimal = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if int(self.max_iterations) <= 0:
            raise ValueError(f"max_iterations must be > 0, got {self.max_iterations}")
        object.__setattr__(self, "x", as_coordinate(self.x))
        object.__setattr__(self, "y", as_coordinate(self.y))
        object.__setattr__(self, "zoom", float(self.zoom))
        object.__setattr__(self, "max_iterations", int(self.max_iterations))
        object.__setattr__(self, "coordinates_precision", prec.coordinates_precision(self.zoom))
        object.__setattr__(self, "precision", prec.render_precision(self.zoom))
        object.__setattr__(self, "radius", prec.radius(self.zoom))

    @classmethod
    def for_zoom(
        cls,
        x: Number,
        y: Number,
        zoom: float,
        iterations_const: int = prec.DEFAULT_ITERATIONS_CONST,
        iterations_linear: int = prec.DEFAULT_ITERATIONS_LINEAR,
    ) -> "DrawRequest":
        return cls(x, y, zoom, prec.max_iteration(zoom, iterations_const, iterations_linear))

    @property
    def is_inside_double_precision(self) -> bool:
        return prec.is_inside_double_precision(self.radius)

    @property
    def progressive_block_size(self) -> int:
        """Edge of the coarsest progressive block; deeper zooms start coarser."""
        if self.is_inside_double_precision:
            return 4
        if self.zoom < 30:
            return 16
        if self.zoom < 60:
            return 32
        if self.zoom < 80:
            return 64
        return 128


def with_center(request: DrawRequest, x: Number, y: Number) -> DrawRequest:
    return dataclasses.replace(request, x=as_coordinate(x), y=as_coordinate(y))


def with_max_iterations(request: DrawRequest, max_iterations: int) -> DrawRequest:
    return dataclasses.replace(request, max_iterations=max_iterations)


def zoom_by(request: DrawRequest, delta: float) -> DrawRequest:
    return dataclasses.replace(request, zoom=request.zoom + delta)


def translate(request: DrawRequest, dx_pixels: float, dy_pixels: float, width: int, height: int) -> DrawRequest:
    """Moves the center by a pixel delta measured on a ``width`` x ``height`` view."""
    with localcontext() as ctx:
        ctx.prec = max(
            request.precision,
            len(request.x.as_tuple().digits),
            len(request.y.as_tuple().digits),
        ) + 10
        dx = Decimal(repr(float(dx_pixels))) / Decimal(width) * request.radius
        dy = Decimal(repr(float(dy_pixels))) / Decimal(height) * request.radius
        x = request.x + dx
        y = request.y + dy
    return with_center(request, x, y)
