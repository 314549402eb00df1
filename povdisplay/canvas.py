"""A 2-D pixel canvas that patterns draw on before mapping to slices."""

from __future__ import annotations

import numpy as np

from .framebuffer import BRIGHTNESS_MASK, BRIGHTNESS_PREFIX, PIXEL_BYTES, Pixel

_EMPTY = Pixel(0, 0, 0, 0)


class Canvas:
    """Width x height pixels; untouched pixels have brightness zero."""

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError("canvas dimensions must not be negative")
        self._pixels = np.zeros((height, width, PIXEL_BYTES), dtype=np.uint8)

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    def clear(self) -> None:
        self._pixels[...] = 0

    def _inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set_pixel(self, x: int, y: int, r: int, g: int, b: int,
                  brightness: int) -> None:
        """Set a pixel; coordinates outside the canvas are ignored."""
        if not self._inside(x, y):
            return
        self._pixels[y, x] = (
            BRIGHTNESS_PREFIX | (brightness & BRIGHTNESS_MASK),
            b & 0xFF,
            g & 0xFF,
            r & 0xFF,
        )

    def pixel_at(self, x: int, y: int) -> Pixel:
        """The pixel at (x, y), or an all-zero pixel outside the canvas."""
        if not self._inside(x, y):
            return _EMPTY
        return Pixel(*(int(v) for v in self._pixels[y, x]))