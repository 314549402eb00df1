"""Double-buffered slice x LED pixel store in HD107S byte order."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

BRIGHTNESS_PREFIX = 0xE0
BRIGHTNESS_MASK = 0x1F
PIXEL_BYTES = 4


@dataclass(frozen=True)
class Pixel:
    """One LED: brightness byte followed by blue, green, red."""

    brightness: int
    blue: int
    green: int
    red: int

    def to_bytes(self) -> bytes:
        return bytes((self.brightness, self.blue, self.green, self.red))


BLACK_PIXEL = Pixel(BRIGHTNESS_PREFIX, 0, 0, 0)


def _blank(num_slices: int, num_leds: int) -> np.ndarray:
    if num_slices < 0 or num_leds < 0:
        raise ValueError("framebuffer dimensions must not be negative")
    buffers = np.zeros((2, num_slices, num_leds, PIXEL_BYTES), dtype=np.uint8)
    buffers[..., 0] = BRIGHTNESS_PREFIX
    return buffers


class Framebuffer:
    """Front buffer is displayed; patterns draw into the back buffer."""

    def __init__(self, num_slices: int, num_leds: int) -> None:
        self._buffers = _blank(num_slices, num_leds)
        self._front = 0

    @property
    def num_slices(self) -> int:
        return self._buffers.shape[1]

    @property
    def num_leds(self) -> int:
        return self._buffers.shape[2]

    @property
    def back_buffer(self) -> np.ndarray:
        """Writable view of the back buffer, shape (slices, leds, 4)."""
        return self._buffers[1 - self._front]

    def resize(self, num_slices: int, num_leds: int) -> None:
        """Replace both buffers with black ones of the new size."""
        self._buffers = _blank(num_slices, num_leds)
        self._front = 0

    def _check(self, slice_index: int, led: int | None = None) -> None:
        if not 0 <= slice_index < self.num_slices:
            raise IndexError(f"slice {slice_index} out of range")
        if led is not None and not 0 <= led < self.num_leds:
            raise IndexError(f"led {led} out of range")

    def set_pixel(self, slice_index: int, led: int, r: int, g: int, b: int,
                  brightness: int) -> None:
        self._check(slice_index, led)
        self.back_buffer[slice_index, led] = (
            BRIGHTNESS_PREFIX | (brightness & BRIGHTNESS_MASK),
            b & 0xFF,
            g & 0xFF,
            r & 0xFF,
        )

    def clear_back(self) -> None:
        back = self.back_buffer
        back[...] = 0
        back[..., 0] = BRIGHTNESS_PREFIX

    def get_slice(self, slice_index: int) -> list[Pixel]:
        """Pixels of one slice of the front buffer."""
        self._check(slice_index)
        return [Pixel(*(int(v) for v in row))
                for row in self._buffers[self._front, slice_index]]

    def back_slice(self, slice_index: int) -> np.ndarray:
        """Writable view of one slice of the back buffer, shape (leds, 4)."""
        self._check(slice_index)
        return self.back_buffer[slice_index]

    def swap(self) -> None:
        self._front = 1 - self._front

    def front_bytes(self) -> bytes:
        """Raw bytes of the front buffer, slice-major."""
        return self._buffers[self._front].tobytes()