"""Mappings from a 2-D canvas onto the slice x LED framebuffer."""

from __future__ import annotations

import numpy as np

from .canvas import Canvas
from .config import Config
from .framebuffer import BRIGHTNESS_MASK, Framebuffer

TAU = 6.283185307179586


def _copy_pixel(canvas: Canvas, fb: Framebuffer, x: int, y: int,
                slice_index: int, led: int) -> None:
    p = canvas.pixel_at(x, y)
    if p.brightness == 0:
        return
    fb.set_pixel(slice_index, led, p.red, p.green, p.blue,
                 p.brightness & BRIGHTNESS_MASK)


class PolarTransform:
    """Samples a square canvas along the radial lines of each slice.

    Slice 0 points along +x (to the right of the canvas centre); angles
    increase counter-clockwise. LED 0 is nearest the centre.
    """

    def __init__(self) -> None:
        self._lut: list[list[tuple[int, int]]] | None = None
        self._dims: tuple[int, int, int, int] | None = None

    def build_lut(self, num_slices: int, num_leds: int,
                  canvas_w: int, canvas_h: int) -> None:
        """Precompute the canvas coordinate sampled by every slice and LED."""
        dims = (num_slices, num_leds, canvas_w, canvas_h)
        if self._lut is not None and self._dims == dims:
            return
        if min(dims) < 0:
            raise ValueError("dimensions must not be negative")

        if num_slices == 0 or num_leds == 0:
            self._lut = [[] for _ in range(num_slices)]
            self._dims = dims
            return

        f32 = np.float32
        angle = np.arange(num_slices, dtype=f32) * f32(TAU) / f32(num_slices)
        cos_a = np.cos(angle)
        sin_a = np.sin(angle)
        radius = (np.arange(num_leds, dtype=f32) + f32(0.5)) / f32(num_leds)

        nx = cos_a[:, None] * radius[None, :]
        ny = sin_a[:, None] * radius[None, :]

        width = f32(canvas_w)
        height = f32(canvas_h)
        cx = (nx + f32(1.0)) * f32(0.5) * width
        cy = (f32(1.0) - ny) * f32(0.5) * height

        cx = np.maximum(cx, f32(0.0))
        cy = np.maximum(cy, f32(0.0))
        cx = np.where(cx >= width, width - f32(0.001), cx).astype(f32)
        cy = np.where(cy >= height, height - f32(0.001), cy).astype(f32)

        # 8.8 fixed point, then back to whole canvas pixels.
        xs = np.maximum((cx * f32(256.0)).astype(np.int64), 0) >> 8
        ys = np.maximum((cy * f32(256.0)).astype(np.int64), 0) >> 8

        self._lut = np.stack((xs, ys), axis=-1).tolist()
        self._lut = [[(x, y) for x, y in row] for row in self._lut]
        self._dims = dims

    def apply(self, canvas: Canvas, fb: Framebuffer, cfg: Config) -> None:
        """Copy lit canvas pixels into the back buffer; no-op without a LUT."""
        if self._lut is None or self._dims is None:
            return
        if (fb.num_slices, fb.num_leds) != self._dims[:2]:
            raise ValueError(
                f"lookup table is {self._dims[0]}x{self._dims[1]}, "
                f"framebuffer is {fb.num_slices}x{fb.num_leds}")
        for slice_index, row in enumerate(self._lut):
            for led, (x, y) in enumerate(row):
                _copy_pixel(canvas, fb, x, y, slice_index, led)


class IdentityTransform:
    """Canvas x is the slice, canvas y is the LED."""

    def apply(self, canvas: Canvas, fb: Framebuffer, cfg: Config) -> None:
        width = min(canvas.width, fb.num_slices)
        height = min(canvas.height, fb.num_leds)
        for x in range(width):
            for y in range(height):
                _copy_pixel(canvas, fb, x, y, x, y)