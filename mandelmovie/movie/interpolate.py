"""Easing curves and start/end interpolation for movie legs."""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Callable, Dict, Union

Easing = Callable[[float], float]

EASE_POWER = 7  # odd, so EASE_OUT stays monotonic


def linear(t: float) -> float:
    return t


def smooth(t: float) -> float:
    return t * t * (3 - 2 * t)


def smoother(t: float) -> float:
    return t * t * t * (t * (t * 6 - 15) + 10)


def ease_in(t: float) -> float:
    return t ** EASE_POWER


def ease_out(t: float) -> float:
    return (t - 1) ** EASE_POWER + 1


EASINGS: Dict[str, Easing] = {
    "linear": linear,
    "smooth": smooth,
    "smoother": smoother,
    "ease_in": ease_in,
    "ease_out": ease_out,
}


def get_easing(name: str) -> Easing:
    try:
        return EASINGS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown easing {name!r}, expected one of {sorted(EASINGS)}") from None


class FunctionInterpolator:
    """Maps t in [0, 1] through ``easing`` onto ``start..end``.

    The endpoints are returned as-is for t <= 0 and t >= 1, whatever the
    easing function rounds to. Decimal endpoints are interpolated at
    ``precision`` significant digits.
    """

    def __init__(self, start: Union[Decimal, float], end: Union[Decimal, float], easing: Easing = smooth, precision: int = 50):
        self.start = start
        self.end = end
        self.easing = easing
        self.precision = precision

    def __call__(self, t: float):
        return self.interpolate(t)

    def interpolate(self, t: float):
        if t <= 0.0:
            return self.start
        if t >= 1.0:
            return self.end
        eased = self.easing(t)
        if isinstance(self.start, Decimal):
            with localcontext() as ctx:
                ctx.prec = self.precision
                return self.start + (self.end - self.start) * Decimal(repr(eased))
        return self.start + (self.end - self.start) * eased
