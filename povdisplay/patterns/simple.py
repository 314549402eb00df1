"""Solid colour, rotating rainbow and radial scanner patterns."""

from __future__ import annotations

from ..config import Config
from ..framebuffer import BRIGHTNESS_MASK, BRIGHTNESS_PREFIX, Framebuffer
from .base import Pattern

_SCANNER_STEP_MS = 32
_RAINBOW_STEP_MS = 20


def hsv_to_rgb(h: int, s: int, v: int) -> tuple[int, int, int]:
    """Integer HSV to RGB; h in 0..359, s and v in 0..255."""
    if s == 0:
        return (v, v, v)

    region = h // 60
    rem = (h % 60) * 255 // 60

    p = (v * (255 - s)) >> 8
    q = (v * (255 - ((s * rem) >> 8))) >> 8
    t = (v * (255 - ((s * (255 - rem)) >> 8))) >> 8

    if region == 0:
        return (v, t, p)
    if region == 1:
        return (q, v, p)
    if region == 2:
        return (p, v, t)
    if region == 3:
        return (p, q, v)
    if region == 4:
        return (t, p, v)
    return (v, p, q)


def _pixel_bytes(r: int, g: int, b: int, brightness: int) -> tuple[int, int, int, int]:
    return (BRIGHTNESS_PREFIX | (brightness & BRIGHTNESS_MASK), b & 0xFF, g & 0xFF, r & 0xFF)


class SolidPattern(Pattern):
    """Every LED in the configured colour."""

    name = "solid"

    def generate(self, fb: Framebuffer, cfg: Config, time_ms: int) -> None:
        fb.back_buffer[...] = _pixel_bytes(*cfg.color, cfg.brightness)


class RainbowPattern(Pattern):
    """A hue wheel around the disc that slowly rotates."""

    name = "rainbow"

    def generate(self, fb: Framebuffer, cfg: Config, time_ms: int) -> None:
        num_slices = fb.num_slices
        hue_shift = (time_ms // _RAINBOW_STEP_MS) % 360
        for s in range(num_slices):
            hue = (s * 360 // num_slices + hue_shift) % 360
            fb.back_slice(s)[...] = _pixel_bytes(*hsv_to_rgb(hue, 255, 255),
                                                 cfg.brightness)


class ScannerPattern(Pattern):
    """A ring that steps outwards one LED at a time."""

    name = "scanner"

    def generate(self, fb: Framebuffer, cfg: Config, time_ms: int) -> None:
        fb.clear_back()
        if fb.num_leds == 0 or fb.num_slices == 0:
            return
        pos = (time_ms // _SCANNER_STEP_MS) % fb.num_leds
        fb.back_buffer[:, pos] = _pixel_bytes(*cfg.color, cfg.brightness)