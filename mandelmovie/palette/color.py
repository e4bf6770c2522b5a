from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import Tuple

from PIL import ImageColor


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class Color:
    """RGB color with channels in [0, 1]."""

    red: float
    green: float
    blue: float

    def interpolate(self, other: "Color", fraction: float) -> "Color":
        return Color(
            self.red + (other.red - self.red) * fraction,
            self.green + (other.green - self.green) * fraction,
            self.blue + (other.blue - self.blue) * fraction,
        )

    def to_rgb8(self) -> Tuple[int, int, int]:
        return (
            int(round(_clamp(self.red) * 255)),
            int(round(_clamp(self.green) * 255)),
            int(round(_clamp(self.blue) * 255)),
        )

    @classmethod
    def gray(cls, value: float) -> "Color":
        return cls(value, value, value)

    @classmethod
    def hsb(cls, hue: float, saturation: float, brightness: float) -> "Color":
        """Hue in degrees, saturation and brightness in [0, 1]."""
        r, g, b = colorsys.hsv_to_rgb((hue % 360.0) / 360.0, _clamp(saturation), _clamp(brightness))
        return cls(r, g, b)

    @classmethod
    def named(cls, name: str) -> "Color":
        r, g, b = ImageColor.getrgb(name)[:3]
        return cls(r / 255.0, g / 255.0, b / 255.0)


BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
