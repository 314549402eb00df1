"""A pattern that shows an uploaded RGB image mapped onto the disc."""

from __future__ import annotations

from ..canvas import Canvas
from ..config import Config
from ..framebuffer import Framebuffer
from ..transforms import PolarTransform
from .base import Pattern

_IMAGE_BRIGHTNESS = 31


class ImagePattern(Pattern):
    """Displays the last loaded image, or nothing before one is loaded."""

    name = "image"

    def __init__(self) -> None:
        super().__init__()
        self._canvas = Canvas(0, 0)
        self._transform = PolarTransform()
        self._lut_dims: tuple[int, int] | None = None
        self._loaded = False

    @property
    def has_image(self) -> bool:
        return self._loaded

    def load_image(self, rgb_data: bytes, width: int, height: int) -> None:
        """Load width x height pixels of packed 8-bit RGB, row-major."""
        if width < 0 or height < 0:
            raise ValueError("image dimensions must not be negative")
        data = bytes(rgb_data)
        needed = width * height * 3
        if len(data) < needed:
            raise ValueError(f"need {needed} bytes of RGB data, got {len(data)}")

        canvas = Canvas(width, height)
        for y in range(height):
            for x in range(width):
                i = (y * width + x) * 3
                canvas.set_pixel(x, y, data[i], data[i + 1], data[i + 2],
                                 _IMAGE_BRIGHTNESS)

        self._canvas = canvas
        self._lut_dims = None
        self._loaded = True

    def generate(self, fb: Framebuffer, cfg: Config, time_ms: int) -> None:
        fb.clear_back()
        if not self._loaded:
            return
        dims = (fb.num_slices, fb.num_leds)
        if dims != self._lut_dims:
            self._transform.build_lut(fb.num_slices, fb.num_leds,
                                      self._canvas.width, self._canvas.height)
            self._lut_dims = dims
        self._transform.apply(self._canvas, fb, cfg)