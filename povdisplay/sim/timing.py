"""Simulated rotation timing with jitter, missed triggers and SPI budget."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

TAU = 6.283185307179586


@dataclass(frozen=True)
class FrameResult:
    """Timing figures for one simulated display frame."""

    period_ms: float
    actual_rpm: float
    slice_interval_us: float
    spi_transfer_us: float
    headroom_us: float
    hall_offset_angle: float
    arm_angle: float
    arm_sweep: float
    hall_missed: bool
    has_overruns: bool
    frame_age: int
    should_generate: bool


@dataclass
class TimingState:
    """Simulation parameters plus the state carried between frames."""

    rpm: float = 1800.0
    rpm_jitter: float = 0.0
    hall_jitter_us: float = 0.0
    hall_miss_rate: float = 0.0
    timer_drift_ppm: float = 0.0
    pattern_lag_ms: float = 0.0
    spi_clock_mhz: float = 20.0
    display_hz: float = 60.0
    num_leds: int = 40
    num_slices: int = 360
    pattern_fps: float = 60.0

    arm_angle: float = 0.0
    frame_age: int = 0
    last_pattern_gen_ms: float = -1e9

    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    def _uniform(self) -> float:
        # In (0, 1]: never zero, so the logarithm below is defined.
        return 1.0 - self.rng.random()

    def _gauss(self) -> float:
        return math.sqrt(-2.0 * math.log(self._uniform())) * math.cos(TAU * self._uniform())

    def reset(self) -> None:
        self.arm_angle = 0.0
        self.frame_age = 0
        self.last_pattern_gen_ms = -1e9

    def pattern_gen_ms(self) -> float:
        """Estimated time to generate one pattern frame, in ms."""
        base_ms = (self.num_slices * self.num_leds * 100e-9) * 1000.0
        return base_ms + self.pattern_lag_ms

    def spi_transfer_us(self) -> float:
        """Time to clock one slice out to the strip, in µs."""
        num_bytes = 4 + self.num_leds * 4 + (self.num_leds + 15) // 16
        return num_bytes * 8 / (self.spi_clock_mhz * 1e6) * 1e6

    def frame(self, dt_ms: float, sim_time_ms: float) -> FrameResult:
        """Advance the simulation by one display frame."""
        jitter_factor = 1.0 + self._gauss() * (self.rpm_jitter / 100.0)
        actual_rpm = self.rpm * max(0.1, jitter_factor)
        if actual_rpm <= 0:
            raise ValueError("rpm must be positive")
        period_ms = 60000.0 / actual_rpm

        hall_offset_us = self._gauss() * self.hall_jitter_us
        hall_missed = self._uniform() < self.hall_miss_rate

        pattern_gen_time = self.pattern_gen_ms()
        pattern_interval = 1000.0 / self.pattern_fps
        should_generate = False
        if sim_time_ms - self.last_pattern_gen_ms >= pattern_interval:
            if pattern_gen_time > pattern_interval:
                self.frame_age += 1
            else:
                self.frame_age = 0
                self.last_pattern_gen_ms = sim_time_ms
                should_generate = True

        slice_interval_us = (period_ms * 1000.0) / self.num_slices
        spi_us = self.spi_transfer_us()

        hall_offset_angle = (hall_offset_us / (period_ms * 1000.0)) * TAU

        arm_sweep = 0.0
        if dt_ms > 0.0:
            arm_advance = min((dt_ms / period_ms) * TAU, TAU)
            persistence_ms = 1000.0 / self.display_hz
            arm_sweep = min((persistence_ms / period_ms) * TAU, TAU)
            self.arm_angle = math.fmod(self.arm_angle + arm_advance, TAU)

        return FrameResult(
            period_ms=period_ms,
            actual_rpm=actual_rpm,
            slice_interval_us=slice_interval_us,
            spi_transfer_us=spi_us,
            headroom_us=slice_interval_us - spi_us,
            hall_offset_angle=hall_offset_angle,
            arm_angle=self.arm_angle,
            arm_sweep=arm_sweep,
            hall_missed=hall_missed,
            has_overruns=spi_us > slice_interval_us,
            frame_age=self.frame_age,
            should_generate=should_generate,
        )