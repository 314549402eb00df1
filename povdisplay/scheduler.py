"""Sends framebuffer slices to the LED strip in step with the rotation."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Protocol, Sequence

from .framebuffer import Framebuffer, Pixel

_MIN_SLICE_INTERVAL_US = 10


class TimingSource(Protocol):
    @property
    def rotation_period_us(self) -> int: ...


class SliceOutput(Protocol):
    def send_slice(self, pixels: Sequence[Pixel]) -> None: ...


def _int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


class SliceScheduler:
    """Steps through the slices of one rotation at a fixed interval.

    The host runs a periodic timer at ``timer_interval_us`` and calls
    ``timer_tick`` on each expiry; ``timer_interval_us`` is None while the
    timer is stopped.
    """

    def __init__(self, fb: Framebuffer, leds: SliceOutput, timing: TimingSource) -> None:
        self.fb = fb
        self.leds = leds
        self.timing = timing
        self.num_slices = 360
        self.phase_offset = 0
        self.mirror = True
        self._lock = threading.RLock()
        self._running = False
        self._direct_push = False
        self._direct_slice = 0
        self._current_slice = 0
        self._timer_interval_us: int | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def current_slice(self) -> int:
        return self._current_slice

    @property
    def timer_interval_us(self) -> int | None:
        return self._timer_interval_us

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        """Stop the timer and abandon the rotation in progress."""
        self._running = False
        self._timer_interval_us = None
        self._current_slice = self.num_slices
        self._direct_push = False

    @contextmanager
    def framebuffer_resize(self) -> Iterator[None]:
        """Hold output off while the framebuffer is replaced."""
        self.stop()
        with self._lock:
            yield
        self.start()

    def on_new_rotation(self) -> None:
        """Restart slice output at the phase offset for a new revolution."""
        if not self._running:
            return
        period_us = self.timing.rotation_period_us
        if period_us == 0 or self.num_slices == 0:
            return
        interval_us = period_us // self.num_slices
        if interval_us < _MIN_SLICE_INTERVAL_US:
            return

        current = _int16(self.phase_offset) & 0xFFFF
        if current >= 0x8000:
            current = (current + self.num_slices) & 0xFFFF
        self._current_slice = current % self.num_slices
        self._timer_interval_us = interval_us

    def request_direct_push(self) -> None:
        """Ask for the next slice to be pushed while not spinning."""
        self._direct_push = True
        self.process_notification()

    def timer_tick(self) -> bool:
        """Handle one timer expiry; stops the timer after the last slice."""
        if self._current_slice >= self.num_slices:
            self._timer_interval_us = None
            return False
        return self.process_notification()

    def process_notification(self) -> bool:
        """Send the scheduled slice or a pending direct push, if any."""
        with self._lock:
            if self._current_slice < self.num_slices:
                index = self._current_slice
                self._current_slice += 1
                if index < self.fb.num_slices:
                    fb_slice = self.num_slices - 1 - index if self.mirror else index
                    self.leds.send_slice(self.fb.get_slice(fb_slice))
                return True
            if self._direct_push:
                self._direct_push = False
                index = self._direct_slice
                self._direct_slice = (self._direct_slice + 1) % self.fb.num_slices
                self.leds.send_slice(self.fb.get_slice(index))
                return True
            return False