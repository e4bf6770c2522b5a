"""Zoom level to precision, radius and iteration budget.

The zoom level is ``log10`` of the inverse view radius. Everything a render
needs to know about numeric precision is derived from it here.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Union

from mpmath.ctx_mp import MPContext

DEFAULT_ITERATIONS_CONST = 1000
DEFAULT_ITERATIONS_LINEAR = 100

# Below this view radius adjacent pixels are no longer resolvable in doubles.
DOUBLE_THRESHOLD = Decimal("0.00000000002")


def mp_context(dps: int) -> MPContext:
    """Returns a private mpmath context working at ``dps`` decimal digits.

    A fresh context per request keeps concurrent renders at different
    precisions from fighting over the global ``mp.dps``.
    """
    ctx = MPContext()
    ctx.dps = max(15, int(dps))
    return ctx


def to_mpf(ctx: MPContext, value: Union[Decimal, float, int, str]):
    if isinstance(value, Decimal):
        return ctx.mpf(str(value))
    return ctx.mpf(value)


def to_decimal(ctx: MPContext, value, digits: int) -> Decimal:
    return Decimal(ctx.nstr(value, max(1, int(digits)), strip_zeros=False))


def coordinates_precision(zoom: float) -> int:
    return max(3, math.floor(zoom) + 4)


def render_precision(zoom: float) -> int:
    return coordinates_precision(zoom) + 6


def radius(zoom: float) -> Decimal:
    """``2 * 10^-zoom`` evaluated at :func:`render_precision` significant digits."""
    digits = render_precision(zoom)
    ctx = mp_context(digits + 5)
    value = ctx.mpf(2) * ctx.power(10, -ctx.mpf(zoom))
    return to_decimal(ctx, value, digits)


def max_iteration(
    zoom: float,
    iterations_const: int = DEFAULT_ITERATIONS_CONST,
    iterations_linear: int = DEFAULT_ITERATIONS_LINEAR,
) -> int:
    # A linear term of 0 means a fixed budget.
    return max(1, math.floor(zoom * iterations_linear + iterations_const))


def is_inside_double_precision(view_radius: Decimal) -> bool:
    return view_radius > DOUBLE_THRESHOLD
