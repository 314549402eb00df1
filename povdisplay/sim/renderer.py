"""Software renderer that shows the framebuffer as a spinning disc."""

from __future__ import annotations

import math

import numpy as np

from ..config import Config
from ..framebuffer import BRIGHTNESS_MASK, PIXEL_BYTES, Framebuffer

TAU = 6.283185307179586
BACKGROUND = 10.0 / 255.0

_HALL_MARKER_COLOR = (0.0, 1.0, 0.0)
_HALL_MARKER_ALPHA = 0.6
_GRID_COLOR = (1.0, 1.0, 1.0)
_GRID_ALPHA = 0.15
_MAX_GRID_LINES = 36
_MAX_RADIAL_SCALE = 3.0


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class Renderer:
    """Draws the disc into an RGB image of floats in 0..1, shape (h, w, 3).

    Image row 0 is the top of the picture; the disc is centred and fills
    the shorter side.
    """

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.width = 0
        self.height = 0
        self.resize(width, height)
        self.hub_fraction = 0.0
        self.gap_fraction = 0.54
        self.show_overruns = True
        self.show_hall_marker = True
        self.show_slice_grid = False
        self.num_arms = 1

    def resize(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError("viewport dimensions must not be negative")
        self.width = width
        self.height = height

    # --- drawing ---

    def _clip_coords(self) -> tuple[np.ndarray, np.ndarray]:
        w, h = self.width, self.height
        uv_x = (np.arange(w) + 0.5) / w
        # Image rows run top-down; viewport rows run bottom-up.
        uv_y = (h - np.arange(h) - 0.5) / h
        cx = (uv_x * 2.0 - 1.0)[None, :]
        cy = (1.0 - uv_y * 2.0)[:, None]
        return np.broadcast_to(cx, (h, w)), np.broadcast_to(cy, (h, w))

    def _disc(self, fb: Framebuffer, cfg: Config, arm_angle: float,
              arm_sweep: float, num_slices: int) -> np.ndarray:
        h, w = self.height, self.width
        image = np.full((h, w, 3), BACKGROUND)
        num_leds = fb.num_leds
        fb_slices = fb.num_slices
        if num_leds == 0 or fb_slices == 0:
            return image

        cx, cy = self._clip_coords()
        dist = np.hypot(cx, cy)
        inner = float(self.hub_fraction)
        visible = (dist >= inner) & (dist <= 1.0)

        with np.errstate(divide="ignore", invalid="ignore"):
            led_h = (1.0 - inner) / num_leds
            pos = (dist - inner) / led_h
            led = np.minimum(np.floor(np.nan_to_num(pos)).astype(np.int64), num_leds - 1)
            frac = pos - led
            half_gap = self.gap_fraction * 0.5
            visible &= ~((frac < half_gap) | (frac > 1.0 - half_gap))

        angle = np.arctan2(cy, cx)
        angle = np.where(angle < 0.0, angle + TAU, angle)

        if 0.0 < arm_sweep < TAU:
            if self.num_arms < 1:
                raise ValueError("num_arms must be at least 1")
            spacing = TAU / self.num_arms
            behind = arm_angle - angle
            behind = np.where(behind < 0.0, behind + TAU, behind)
            visible &= np.mod(behind, spacing) <= arm_sweep

        phase_slices = _round_half_away(cfg.phase_offset / 360.0 * num_slices)
        nominal = np.floor(angle / TAU * num_slices).astype(np.int64) % num_slices
        fb_slice = (nominal + phase_slices) % num_slices
        if cfg.mirror_pattern:
            fb_slice = num_slices - 1 - fb_slice

        v = (fb_slice + 0.5) / num_slices
        tex_row = np.clip(np.floor(v * fb_slices).astype(np.int64), 0, fb_slices - 1)
        tex_col = np.clip(led, 0, num_leds - 1)

        texture = np.frombuffer(fb.front_bytes(), dtype=np.uint8).reshape(
            fb_slices, num_leds, PIXEL_BYTES)
        texel = texture[tex_row, tex_col].astype(np.float64)

        scale = (texel[..., 0].astype(np.int64) & BRIGHTNESS_MASK) / 31.0
        with np.errstate(divide="ignore"):
            led_center = inner + (tex_col + 0.5) * led_h
            scale = scale * np.minimum(1.0 / led_center, _MAX_RADIAL_SCALE)
        if cfg.radial_balance:
            r_norm = (tex_col + 0.5) / (num_leds - 0.5)
            scale = scale * np.maximum(r_norm, 1.0 / 3.0)

        rgb = np.stack((texel[..., 3], texel[..., 2], texel[..., 1]), axis=-1) / 255.0
        rgb = np.clip(rgb * scale[..., None], 0.0, 1.0)
        return np.where(visible[..., None], rgb, image)

    def _draw_line(self, image: np.ndarray, x0: float, y0: float, x1: float,
                   y1: float, color: tuple[float, float, float], alpha: float) -> None:
        h, w = self.height, self.width
        px0, px1 = (x0 + 1.0) * 0.5 * w, (x1 + 1.0) * 0.5 * w
        py0, py1 = (1.0 - (y0 + 1.0) * 0.5) * h, (1.0 - (y1 + 1.0) * 0.5) * h
        steps = int(math.ceil(max(abs(px1 - px0), abs(py1 - py0)))) + 1
        t = np.linspace(0.0, 1.0, steps)
        xs = np.floor(px0 + t * (px1 - px0)).astype(np.int64)
        ys = np.floor(py0 + t * (py1 - py0)).astype(np.int64)
        inside = (xs >= 0) & (xs < w) & (ys >= 0) & (ys < h)
        flat = np.unique(ys[inside] * w + xs[inside])
        rows, cols = np.divmod(flat, w)
        src = np.asarray(color)
        image[rows, cols] = src * alpha + image[rows, cols] * (1.0 - alpha)

    def _overlays(self, image: np.ndarray, hall_offset_angle: float,
                  num_slices: int) -> None:
        if self.show_hall_marker:
            self._draw_line(image, 0.0, 0.0, math.cos(hall_offset_angle),
                            math.sin(hall_offset_angle),
                            _HALL_MARKER_COLOR, _HALL_MARKER_ALPHA)
        if self.show_slice_grid:
            step = num_slices // _MAX_GRID_LINES if num_slices > _MAX_GRID_LINES else 1
            inner = self.hub_fraction
            for i in range(0, num_slices, step):
                angle = i / num_slices * TAU
                c, s = math.cos(angle), math.sin(angle)
                self._draw_line(image, c * inner, s * inner, c, s,
                                _GRID_COLOR, _GRID_ALPHA)

    def render(self, fb: Framebuffer, cfg: Config, arm_angle: float,
               arm_sweep: float, hall_offset_angle: float, has_overruns: bool,
               num_slices: int) -> np.ndarray:
        """Render one frame of the disc and its overlays."""
        if num_slices <= 0:
            raise ValueError("num_slices must be positive")
        if self.width == 0 or self.height == 0:
            return np.zeros((self.height, self.width, 3))
        image = self._disc(fb, cfg, arm_angle, arm_sweep, num_slices)
        self._overlays(image, hall_offset_angle, num_slices)
        return image