"""Falling green glyph columns in the style of a digital rain."""

from __future__ import annotations

from ..canvas import Canvas
from ..config import Config
from ..framebuffer import Framebuffer
from ..params import Param, ParamType
from ..transforms import PolarTransform
from .base import Pattern

_GLYPH_W = 5
_GLYPH_H = 7
_COLUMN_STRIDE = 7
_CELL_PITCH = 8
_MAX_TRAIL_CELLS = 7
_STREAMS_PER_COLUMN = 2
_DEFAULT_SPEED_PX_PER_SEC = 12
_MAX_SPEED_PX_PER_SEC = 48
_U32 = 0xFFFFFFFF

_GLYPH_CYR_EF = 44
_GLYPH_CYR_U = 45
_GLYPH_CYR_ZE = 46
_GLYPH_CYR_I = 47
_GLYPH_CYR_O = 48
_GLYPH_CYR_EN = 49

# 5x7 row-major glyphs: ASCII, then Greek, Cyrillic and a few compact CJK
# ideographs. Selection is hash-based; table order is not an animation order.
_GLYPHS: tuple[tuple[int, ...], ...] = (
    (0b01110, 0b10001, 0b10011, 0b10101, 0b11001, 0b10001, 0b01110),  # 0
    (0b00100, 0b01100, 0b00100, 0b00100, 0b00100, 0b00100, 0b01110),  # 1
    (0b01110, 0b10001, 0b00001, 0b00010, 0b00100, 0b01000, 0b11111),  # 2
    (0b11110, 0b00001, 0b00001, 0b01110, 0b00001, 0b00001, 0b11110),  # 3
    (0b00010, 0b00110, 0b01010, 0b10010, 0b11111, 0b00010, 0b00010),  # 4
    (0b11111, 0b10000, 0b10000, 0b11110, 0b00001, 0b00001, 0b11110),  # 5
    (0b01110, 0b10000, 0b10000, 0b11110, 0b10001, 0b10001, 0b01110),  # 6
    (0b11111, 0b00001, 0b00010, 0b00100, 0b01000, 0b01000, 0b01000),  # 7
    (0b01110, 0b10001, 0b10001, 0b01110, 0b10001, 0b10001, 0b01110),  # 8
    (0b01110, 0b10001, 0b10001, 0b01111, 0b00001, 0b00001, 0b01110),  # 9
    (0b01110, 0b10001, 0b10001, 0b11111, 0b10001, 0b10001, 0b10001),  # A
    (0b11110, 0b10001, 0b10001, 0b11110, 0b10001, 0b10001, 0b11110),  # B
    (0b01111, 0b10000, 0b10000, 0b10000, 0b10000, 0b10000, 0b01111),  # C
    (0b11110, 0b10001, 0b10001, 0b10001, 0b10001, 0b10001, 0b11110),  # D
    (0b11111, 0b10000, 0b10000, 0b11110, 0b10000, 0b10000, 0b11111),  # E
    (0b11111, 0b10000, 0b10000, 0b11110, 0b10000, 0b10000, 0b10000),  # F
    (0b01111, 0b10000, 0b10000, 0b10011, 0b10001, 0b10001, 0b01111),  # G
    (0b10001, 0b10001, 0b10001, 0b11111, 0b10001, 0b10001, 0b10001),  # H
    (0b01110, 0b00100, 0b00100, 0b00100, 0b00100, 0b00100, 0b01110),  # I
    (0b00111, 0b00010, 0b00010, 0b00010, 0b10010, 0b10010, 0b01100),  # J
    (0b10001, 0b10010, 0b10100, 0b11000, 0b10100, 0b10010, 0b10001),  # K
    (0b10000, 0b10000, 0b10000, 0b10000, 0b10000, 0b10000, 0b11111),  # L
    (0b10001, 0b11011, 0b10101, 0b10101, 0b10001, 0b10001, 0b10001),  # M
    (0b10001, 0b11001, 0b10101, 0b10011, 0b10001, 0b10001, 0b10001),  # N
    (0b01110, 0b10001, 0b10001, 0b10001, 0b10001, 0b10001, 0b01110),  # O
    (0b11110, 0b10001, 0b10001, 0b11110, 0b10000, 0b10000, 0b10000),  # P
    (0b01110, 0b10001, 0b10001, 0b10001, 0b10101, 0b10010, 0b01101),  # Q
    (0b11110, 0b10001, 0b10001, 0b11110, 0b10100, 0b10010, 0b10001),  # R
    (0b01111, 0b10000, 0b10000, 0b01110, 0b00001, 0b00001, 0b11110),  # S
    (0b11111, 0b00100, 0b00100, 0b00100, 0b00100, 0b00100, 0b00100),  # T
    (0b10001, 0b10001, 0b10001, 0b10001, 0b10001, 0b10001, 0b01110),  # U
    (0b10001, 0b10001, 0b10001, 0b10001, 0b10001, 0b01010, 0b00100),  # V
    (0b10001, 0b10001, 0b10001, 0b10101, 0b10101, 0b10101, 0b01010),  # W
    (0b10001, 0b10001, 0b01010, 0b00100, 0b01010, 0b10001, 0b10001),  # X
    (0b10001, 0b10001, 0b01010, 0b00100, 0b00100, 0b00100, 0b00100),  # Y
    (0b11111, 0b00001, 0b00010, 0b00100, 0b01000, 0b10000, 0b11111),  # Z
    (0b01110, 0b10001, 0b10001, 0b11111, 0b10001, 0b10001, 0b10001),  # Greek alpha
    (0b11110, 0b10001, 0b10001, 0b11110, 0b10001, 0b10001, 0b11110),  # Greek beta
    (0b00100, 0b01010, 0b01010, 0b10001, 0b10001, 0b11111, 0b10001),  # Greek lambda
    (0b10001, 0b10001, 0b10001, 0b10101, 0b10101, 0b11011, 0b10001),  # Greek omega
    (0b11111, 0b01010, 0b01010, 0b01010, 0b01010, 0b01010, 0b01010),  # Greek pi
    (0b11111, 0b10000, 0b10000, 0b11110, 0b10000, 0b10000, 0b11111),  # Greek sigma
    (0b00100, 0b01110, 0b10101, 0b10101, 0b01110, 0b00100, 0b00100),  # Greek phi
    (0b10001, 0b01010, 0b00100, 0b01010, 0b10001, 0b10001, 0b10001),  # Greek chi
    (0b01110, 0b10101, 0b10101, 0b10101, 0b01110, 0b00100, 0b00100),  # Cyrillic Ef
    (0b10001, 0b10001, 0b10001, 0b01111, 0b00001, 0b00001, 0b01110),  # Cyrillic u
    (0b11110, 0b00001, 0b00001, 0b01110, 0b00001, 0b00001, 0b11110),  # Cyrillic Ze
    (0b10001, 0b10011, 0b10101, 0b10101, 0b11001, 0b10001, 0b10001),  # Cyrillic I
    (0b00000, 0b00000, 0b01110, 0b10001, 0b10001, 0b10001, 0b01110),  # Cyrillic o
    (0b00000, 0b00000, 0b10001, 0b10001, 0b11111, 0b10001, 0b10001),  # Cyrillic en
    (0b11111, 0b10000, 0b10000, 0b11110, 0b10000, 0b10000, 0b10000),  # Cyrillic Ge
    (0b10001, 0b10101, 0b01110, 0b00100, 0b01110, 0b10101, 0b10001),  # Cyrillic Zhe
    (0b11111, 0b00100, 0b11111, 0b00100, 0b00100, 0b00100, 0b00100),  # CJK-ish center
    (0b11111, 0b10001, 0b11111, 0b10001, 0b10001, 0b11111, 0b00000),  # CJK-ish sun
    (0b11111, 0b00100, 0b11111, 0b10101, 0b00100, 0b10101, 0b00000),  # CJK-ish rain
)
GLYPH_COUNT = len(_GLYPHS)

_TRAIL_STRENGTHS = (255, 190, 135, 90, 55, 32, 20)

# Rare vertical easter egg, stored bright-head-first so it reads top-down.
_FUSION_GLYPHS = (
    _GLYPH_CYR_EF, _GLYPH_CYR_U, _GLYPH_CYR_ZE,
    _GLYPH_CYR_I, _GLYPH_CYR_O, _GLYPH_CYR_EN,
)


def hash16(x: int) -> int:
    """A 16-bit integer mixing hash."""
    x &= 0xFFFF
    x ^= x >> 7
    x = (x * 0x2C1B) & 0xFFFF
    x ^= x >> 9
    x = (x * 0x11B5) & 0xFFFF
    x ^= x >> 8
    return x


def glyph_at(stream_seed: int, row: int) -> int:
    """Index of the glyph shown by a stream at a canvas row."""
    return hash16((stream_seed ^ (row * 0x63)) & 0xFFFF) % GLYPH_COUNT


def _set_if_brighter(canvas: Canvas, x: int, y: int, r: int, g: int, b: int,
                     brightness: int) -> None:
    if x < 0 or y < 0 or x >= canvas.width or y >= canvas.height:
        return
    if brightness == 0 or (r == 0 and g == 0 and b == 0):
        return
    p = canvas.pixel_at(x, y)
    old_score = 0 if p.brightness == 0 else (p.brightness & 0x1F) * p.green
    if old_score > brightness * g:
        return
    canvas.set_pixel(x, y, r, g, b, brightness)


def _scaled_brightness(cfg: Config, strength: int) -> int:
    return ((cfg.brightness * strength + 127) // 255) & 0xFF


def _draw_green_pixel(canvas: Canvas, x: int, y: int, cfg: Config,
                      strength: int, head: bool) -> None:
    brightness = _scaled_brightness(cfg, strength)
    if brightness == 0:
        return
    red = strength * 170 // 255 if head else 0
    blue = strength * 120 // 255 if head else 0
    _set_if_brighter(canvas, x, y, red, strength, blue, brightness)


def _draw_glyph(canvas: Canvas, start_x: int, top_y: int, glyph_index: int,
                cfg: Config, strength: int, head: bool) -> None:
    glyph = _GLYPHS[glyph_index % GLYPH_COUNT]
    glow = strength // 5
    for y, row in enumerate(glyph):
        for x in range(_GLYPH_W):
            if not row & (1 << (_GLYPH_W - 1 - x)):
                continue
            px = start_x + x
            py = top_y + y
            _draw_green_pixel(canvas, px - 1, py, cfg, glow, False)
            _draw_green_pixel(canvas, px + 1, py, cfg, glow, False)
            _draw_green_pixel(canvas, px, py - 1, cfg, glow, False)
            _draw_green_pixel(canvas, px, py + 1, cfg, glow, False)
            _draw_green_pixel(canvas, px, py, cfg, strength, head)


class MatrixPattern(Pattern):
    """Columns of glyphs falling with fading green trails."""

    name = "matrix"

    def __init__(self) -> None:
        super().__init__([
            Param("speed", "Speed px/s", ParamType.INT,
                  default=_DEFAULT_SPEED_PX_PER_SEC, min=1,
                  max=_MAX_SPEED_PX_PER_SEC),
        ])
        self._canvas = Canvas(0, 0)
        self._transform = PolarTransform()
        self._dims: tuple[int, int, int, int] | None = None

    def _ensure_canvas(self, num_slices: int, num_leds: int) -> None:
        side = (num_leds * 2) & 0xFFFF
        dims = (side, side, num_slices, num_leds)
        if dims == self._dims:
            return
        self._canvas = Canvas(side, side)
        self._transform.build_lut(num_slices, num_leds, side, side)
        self._dims = dims

    def generate(self, fb: Framebuffer, cfg: Config, time_ms: int) -> None:
        fb.clear_back()
        num_slices = fb.num_slices
        num_leds = fb.num_leds
        if num_slices == 0 or num_leds == 0:
            return

        self._ensure_canvas(num_slices, num_leds)
        canvas = self._canvas
        canvas.clear()

        speed = max(1, min(_MAX_SPEED_PX_PER_SEC, self.params[0].value))
        t = int(time_ms) & _U32
        phase_px = ((t // 1000) * speed + ((t % 1000) * speed) // 1000) & _U32

        num_cols = (canvas.width + _COLUMN_STRIDE - 1) // _COLUMN_STRIDE
        num_rows = canvas.height // _CELL_PITCH
        if num_rows == 0:
            return

        for col in range(num_cols):
            col_seed = hash16(col + 1)
            col_x = col * _COLUMN_STRIDE + (col_seed & 1)

            for stream in range(_STREAMS_PER_COLUMN):
                seed = hash16(col_seed ^ (stream * 0x6D) ^ 0x9E37)
                fusion_stream = stream == 1 and col % 13 == 3
                trail = 5 + seed % 3
                if fusion_stream and trail < len(_FUSION_GLYPHS):
                    trail = len(_FUSION_GLYPHS)
                gap = 3 + ((seed >> 5) % 8)
                cycle_len = num_rows + trail + gap
                cycle_px = cycle_len * _CELL_PITCH
                offset_px = (seed % cycle_len) * _CELL_PITCH
                head_px = ((phase_px + offset_px) & _U32) % cycle_px
                trail_px = trail * _CELL_PITCH

                for row in range(num_rows):
                    row_px = row * _CELL_PITCH
                    if head_px >= row_px:
                        past_px = head_px - row_px
                    else:
                        past_px = head_px + cycle_px - row_px
                    if past_px >= trail_px:
                        continue

                    cell_idx, frac = divmod(past_px, _CELL_PITCH)
                    s0 = _TRAIL_STRENGTHS[cell_idx]
                    s1 = (_TRAIL_STRENGTHS[cell_idx + 1]
                          if cell_idx + 1 < _MAX_TRAIL_CELLS else 0)
                    strength = (s0 - ((s0 - s1) * frac) // _CELL_PITCH) & 0xFF

                    if (fusion_stream and cell_idx < len(_FUSION_GLYPHS)
                            and ((phase_px // _CELL_PITCH + (seed & 0x0F)) % 53) < 21):
                        glyph = _FUSION_GLYPHS[len(_FUSION_GLYPHS) - 1 - cell_idx]
                    else:
                        glyph = glyph_at(seed, row)

                    _draw_glyph(canvas, col_x, row * _CELL_PITCH, glyph, cfg,
                                strength, cell_idx == 0)

        self._transform.apply(canvas, fb, cfg)