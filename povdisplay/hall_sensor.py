"""Rotation timing from a once-per-revolution Hall sensor trigger."""

from __future__ import annotations

import threading

DEBOUNCE_US = 10000
_U32 = 0xFFFFFFFF
_U64 = 0xFFFFFFFFFFFFFFFF


class HallSensor:
    """Turns falling-edge trigger times into rotation period and RPM."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_trigger_us = 0
        self._last_trigger_ms = 0
        self._rot_period_us = 0
        self._rpm = 0
        self._new_rotation = False

    @property
    def rotation_period_us(self) -> int:
        return self._rot_period_us

    @property
    def rpm(self) -> int:
        return self._rpm

    @property
    def last_trigger_ms(self) -> int:
        return self._last_trigger_ms

    def trigger(self, now_us: int) -> bool:
        """Record a trigger at ``now_us``; returns False if debounced away."""
        with self._lock:
            delta = (now_us - self._last_trigger_us) & _U64
            if delta < DEBOUNCE_US:
                return False
            period = delta & _U32
            self._rot_period_us = period
            self._rpm = 60_000_000 // period if period else 0
            self._last_trigger_us = now_us
            self._last_trigger_ms = (now_us // 1000) & _U32
            self._new_rotation = True
            return True

    def consume_new_rotation(self) -> bool:
        """True once for each recorded rotation."""
        with self._lock:
            if not self._new_rotation:
                return False
            self._new_rotation = False
            return True