"""HD107S SPI frame encoding and the LED strip driver."""

from __future__ import annotations

from typing import Callable, Sequence

from .config import MAX_LEDS
from .framebuffer import BRIGHTNESS_PREFIX, Pixel

_START_FRAME = bytes(4)


def _end_frame(count: int) -> bytes:
    return b"\xff" * ((count + 15) // 16)


def build_frame(pixels: Sequence[Pixel], reversed_order: bool = False,
                scale: Sequence[int] | None = None) -> bytes:
    """Encode one strip update: start frame, LED words, end frame.

    With ``scale`` each LED's colour channels are multiplied by
    ``scale[i] / 256``; ``reversed_order`` sends the last pixel first.
    """
    count = len(pixels)
    if scale is not None and len(scale) < count:
        raise ValueError(f"scale covers {len(scale)} LEDs, frame has {count}")

    out = bytearray(_START_FRAME)
    if not reversed_order and scale is None:
        for p in pixels:
            out += p.to_bytes()
    else:
        order = reversed(range(count)) if reversed_order else range(count)
        for src in order:
            p = pixels[src]
            s = scale[src] if scale is not None else 256
            out += bytes((p.brightness, (p.blue * s) >> 8 & 0xFF,
                          (p.green * s) >> 8 & 0xFF, (p.red * s) >> 8 & 0xFF))
    out += _end_frame(count)
    return bytes(out)


def all_off_frame(count: int) -> bytes:
    """A frame that switches ``count`` LEDs off."""
    if count < 0:
        raise ValueError("LED count must not be negative")
    return _START_FRAME + bytes((BRIGHTNESS_PREFIX, 0, 0, 0)) * count + _end_frame(count)


class LedDriver:
    """Encodes slices and hands the bytes to a transmit callable."""

    def __init__(self, transmit: Callable[[bytes], object], max_leds: int = MAX_LEDS) -> None:
        if max_leds < 0:
            raise ValueError("max_leds must not be negative")
        self._transmit = transmit
        self.max_leds = max_leds
        self.reversed = False
        self._scale: tuple[int, ...] | None = None

    @property
    def output_scale(self) -> tuple[int, ...] | None:
        return self._scale

    def set_output_scale(self, scale: Sequence[int] | None) -> None:
        """Set per-LED colour scale factors (0..255), or None for none."""
        if scale is None:
            self._scale = None
            return
        values = tuple(int(v) for v in scale)
        if len(values) > self.max_leds:
            raise ValueError(f"scale has {len(values)} entries, limit is {self.max_leds}")
        if any(not 0 <= v <= 255 for v in values):
            raise ValueError("scale factors must be in 0..255")
        self._scale = values

    def _check_count(self, count: int) -> None:
        if count > self.max_leds:
            raise ValueError(f"{count} LEDs exceed the limit of {self.max_leds}")

    def send_slice(self, pixels: Sequence[Pixel]) -> None:
        pixels = list(pixels)
        self._check_count(len(pixels))
        self._transmit(build_frame(pixels, self.reversed, self._scale))

    def all_off(self, count: int) -> None:
        self._check_count(count)
        self._transmit(all_off_frame(count))