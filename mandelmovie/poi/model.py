"""Points of interest and their JSON persistence.

Coordinates are written as plain decimal strings, never as JSON numbers, so
a save/load round trip keeps every digit.
"""

from __future__ import annotations

import dataclasses
import json
import math
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from mandelmovie.camera import DrawRequest, Number, as_coordinate
from mandelmovie.palette.factory import PaletteType, UnknownPaletteError, create_palette, parse_palette_type

FORMAT_VERSION = "1.1.0"


class PointOfInterestFormatError(ValueError):
    pass


@dataclass(frozen=True)
class PointOfInterest:
    name: str
    x: Decimal
    y: Decimal
    zoom: float
    palette_type: PaletteType = PaletteType.RANDOM_COLOR
    palette_seed: int = 1
    palette_step: int = 10
    max_iterations_const: int = 1000
    max_iterations_linear: int = 100

    def __post_init__(self):
        object.__setattr__(self, "x", as_coordinate(self.x))
        object.__setattr__(self, "y", as_coordinate(self.y))
        object.__setattr__(self, "zoom", float(self.zoom))
        object.__setattr__(self, "palette_type", parse_palette_type(self.palette_type))

    def __str__(self) -> str:
        return self.name

    def max_iterations(self, zoom: Optional[float] = None) -> int:
        zoom = self.zoom if zoom is None else zoom
        if self.max_iterations_linear == 0:
            return max(1, self.max_iterations_const)
        return max(1, math.floor(zoom * self.max_iterations_linear + self.max_iterations_const))

    def draw_request(self, zoom: Optional[float] = None) -> DrawRequest:
        zoom = self.zoom if zoom is None else zoom
        return DrawRequest(self.x, self.y, zoom, self.max_iterations(zoom))

    def palette(self):
        return create_palette(self.palette_type, self.palette_seed, self.palette_step)

    def replace(self, **changes: Any) -> "PointOfInterest":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "name": self.name,
            "x": format(self.x, "f"),
            "y": format(self.y, "f"),
            "zoom": self.zoom,
            "paletteType": self.palette_type.value,
            "paletteSeed": self.palette_seed,
            "paletteStep": self.palette_step,
            "maxIterationsConst": self.max_iterations_const,
            "maxIterationsLinear": self.max_iterations_linear,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PointOfInterest":
        if not isinstance(data, dict):
            raise PointOfInterestFormatError("Point of interest must be a JSON object.")
        version = str(data.get("version", ""))
        if not version.startswith("1."):
            raise PointOfInterestFormatError(f"Incompatible mandelbrot version: {version or None}")

        const = data.get("maxIterationsConst")
        linear = data.get("maxIterationsLinear")
        if const is None:
            const = 1000
            if linear is None:
                linear = 1000
        if linear is None:
            linear = 0

        try:
            return cls(
                name=str(data["name"]),
                x=_parse_coordinate(data["x"]),
                y=_parse_coordinate(data["y"]),
                zoom=float(data["zoom"]),
                palette_type=parse_palette_type(data["paletteType"]),
                palette_seed=int(data["paletteSeed"]),
                palette_step=int(data["paletteStep"]),
                max_iterations_const=int(const),
                max_iterations_linear=int(linear),
            )
        except KeyError as e:
            raise PointOfInterestFormatError(f"Missing field: {e.args[0]}") from e
        except (PointOfInterestFormatError, UnknownPaletteError):
            raise
        except (TypeError, ValueError) as e:
            raise PointOfInterestFormatError(str(e)) from e


def _parse_coordinate(value: Number) -> Decimal:
    if not isinstance(value, str):
        raise PointOfInterestFormatError(f"Coordinates must be decimal strings, got {value!r}")
    try:
        return Decimal(value.strip())
    except InvalidOperation as e:
        raise PointOfInterestFormatError(f"Invalid coordinate: {value!r}") from e


def save_point_of_interest(poi: PointOfInterest, path: str) -> str:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(poi.to_dict(), f, indent=2)
        f.write("\n")
    return path


def load_point_of_interest(path: str) -> PointOfInterest:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise PointOfInterestFormatError(f"{path}: {e}") from e
    return PointOfInterest.from_dict(data)
