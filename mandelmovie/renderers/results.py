from __future__ import annotations

import os

import numpy as np
from PIL import Image

from mandelmovie.renderers.engines import IterationResult


class IterationGrid:
    """Keeps raw iteration results, e.g. to recolor without re-iterating."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.results = np.full((height, width), None, dtype=object)

    def set_iteration_result(self, pixel_x: int, pixel_y: int, result: IterationResult) -> None:
        self.results[pixel_y, pixel_x] = result

    def __getitem__(self, pixel):
        pixel_x, pixel_y = pixel
        return self.results[pixel_y, pixel_x]

    def colorize(self, palette) -> "ImageResult":
        image = ImageResult(self.width, self.height, palette)
        for (pixel_y, pixel_x), result in np.ndenumerate(self.results):
            if result is not None:
                image.set_iteration_result(pixel_x, pixel_y, result)
        return image


class ImageResult:
    """Colors results through a palette straight into an RGB buffer."""

    def __init__(self, width: int, height: int, palette):
        self.width = width
        self.height = height
        self.palette = palette
        self.buffer = np.zeros((height, width, 3), dtype=np.uint8)

    def set_iteration_result(self, pixel_x: int, pixel_y: int, result: IterationResult) -> None:
        self.buffer[pixel_y, pixel_x] = self.palette.color_for(result).to_rgb8()

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.buffer)

    def save(self, path: str) -> str:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self.to_image().save(path, format="PNG", optimize=True)
        return path
