"""Settings that exist only in the simulator."""

from __future__ import annotations

from typing import Any

from ..config import (HUB_RADIUS_MM, HW_MAX_BRIGHTNESS, HW_NUM_LEDS,
                      HW_SPI_CLOCK_MHZ, HW_STRIP_REVERSED, LED_GAP_MM,
                      LED_SIZE_MM, MAX_LEDS, NUM_ARMS, Config)
from ..params import ParamOption, ParamType
from ..settings import Scope, Setting

_ARM_OPTIONS = tuple(ParamOption(label, value) for label, value in
                     (("1", 1), ("2", 2), ("4", 4)))
_SPI_OPTIONS = tuple(ParamOption(label, value) for label, value in
                     (("20", 20), ("40", 40)))
_DISPLAY_HZ_OPTIONS = tuple(ParamOption(label, value) for label, value in
                            (("60 Hz", 60), ("120 Hz", 120),
                             ("144 Hz", 144), ("240 Hz", 240)))

_DEFAULT_DISPLAY_HZ = 60


def apply_geometry(renderer: Any, num_leds: int) -> None:
    """Set the renderer's hub and gap fractions for a strip of num_leds."""
    if num_leds <= 0:
        return
    pitch = LED_SIZE_MM + LED_GAP_MM
    renderer.hub_fraction = HUB_RADIUS_MM / (num_leds * pitch)
    renderer.gap_fraction = LED_GAP_MM / pitch


class SimSettings:
    """Simulator-only settings bound to timing state, config and renderer.

    Any of the three may be None; getters then report defaults and
    setters do nothing to the missing object.
    """

    def __init__(self, timing: Any, config: Config | None, renderer: Any) -> None:
        self.timing = timing
        self.config = config
        self.renderer = renderer
        self.sim_speed = 1.0
        self.show_overruns = True
        self.show_slice_grid = False
        self.show_hall_marker = True

    # --- timing distortion ---

    def _timing_get(self, attr: str, factor: float = 1.0, default: int = 0):
        def get() -> int:
            if self.timing is None:
                return default
            return int(getattr(self.timing, attr) * factor)
        return get

    def _timing_set(self, attr: str, factor: float = 1.0):
        def set_(v: int) -> None:
            if self.timing is not None:
                setattr(self.timing, attr, v / factor)
        return set_

    # --- overlays ---

    def _overlay_get(self, attr: str):
        return lambda: 1 if getattr(self, attr) else 0

    def _overlay_set(self, attr: str):
        def set_(v: int) -> None:
            value = v != 0
            setattr(self, attr, value)
            if self.renderer is not None:
                setattr(self.renderer, attr, value)
        return set_

    # --- config-backed hardware ---

    def _cfg_get(self, attr: str, default: int):
        def get() -> int:
            return default if self.config is None else int(getattr(self.config, attr))
        return get

    def _cfg_set(self, attr: str, mask: int | None):
        def set_(v: int) -> None:
            if self.config is not None:
                setattr(self.config, attr, v != 0 if mask is None else v & mask)
        return set_

    def _set_max_brightness(self, v: int) -> None:
        if self.config is None:
            return
        self.config.max_brightness = v & 0xFF
        self.config.clamp_brightness()

    def _set_sim_speed(self, v: int) -> None:
        self.sim_speed = v / 10.0

    def settings(self) -> tuple[Setting, ...]:
        """The simulator's settings, in display order."""
        sim = Scope.SIM_ONLY
        hw = "hardware"
        return (
            Setting("numLeds", "LED count", hw, "hardware", sim, ParamType.INT,
                    HW_NUM_LEDS, 1, MAX_LEDS,
                    get_int=self._cfg_get("num_leds", HW_NUM_LEDS),
                    set_int=self._cfg_set("num_leds", 0xFFFF)),
            Setting("stripReversed", "Strip reversed", hw, "hardware", sim, ParamType.BOOL,
                    int(HW_STRIP_REVERSED), 0, 1,
                    get_int=self._cfg_get("strip_reversed", 0),
                    set_int=self._cfg_set("strip_reversed", None)),
            Setting("spiClockMhz", "SPI clock MHz", hw, "hardware", sim, ParamType.ENUM,
                    HW_SPI_CLOCK_MHZ, 0, 40, options=_SPI_OPTIONS,
                    get_int=self._cfg_get("spi_clock_mhz", HW_SPI_CLOCK_MHZ),
                    set_int=self._cfg_set("spi_clock_mhz", 0xFF)),
            Setting("maxBrightness", "Max brightness", hw, "hardware", sim, ParamType.INT,
                    HW_MAX_BRIGHTNESS, 0, 31,
                    get_int=self._cfg_get("max_brightness", HW_MAX_BRIGHTNESS),
                    set_int=self._set_max_brightness),
            Setting("numArms", "Arms", hw, "hardware", sim, ParamType.ENUM,
                    NUM_ARMS, 1, 4, options=_ARM_OPTIONS,
                    get_int=self._cfg_get("num_arms", NUM_ARMS),
                    set_int=self._cfg_set("num_arms", 0xFF)),
            Setting("rpmJitter", "RPM jitter", hw, "timing", sim, ParamType.INT,
                    0, 0, 200, scale=10,
                    get_int=self._timing_get("rpm_jitter", 10.0),
                    set_int=self._timing_set("rpm_jitter", 10.0)),
            Setting("hallJitterUs", "Hall jitter µs", hw, "timing", sim, ParamType.INT,
                    0, 0, 500,
                    get_int=self._timing_get("hall_jitter_us"),
                    set_int=self._timing_set("hall_jitter_us")),
            Setting("hallMissRate", "Hall miss %", hw, "timing", sim, ParamType.INT,
                    0, 0, 50,
                    get_int=self._timing_get("hall_miss_rate"),
                    set_int=self._timing_set("hall_miss_rate")),
            Setting("timerDrift", "Timer drift ppm", hw, "timing", sim, ParamType.INT,
                    0, 0, 1000,
                    get_int=self._timing_get("timer_drift_ppm"),
                    set_int=self._timing_set("timer_drift_ppm")),
            Setting("patternLag", "Pattern lag ms", hw, "timing", sim, ParamType.INT,
                    0, 0, 100,
                    get_int=self._timing_get("pattern_lag_ms"),
                    set_int=self._timing_set("pattern_lag_ms")),
            Setting("displayHz", "Display Hz", hw, "playback", sim, ParamType.ENUM,
                    _DEFAULT_DISPLAY_HZ, 0, 240, options=_DISPLAY_HZ_OPTIONS,
                    get_int=self._timing_get("display_hz", default=_DEFAULT_DISPLAY_HZ),
                    set_int=self._timing_set("display_hz")),
            Setting("simSpeed", "Sim speed", hw, "playback", sim, ParamType.INT,
                    10, 1, 50, scale=10,
                    get_int=lambda: int(self.sim_speed * 10.0),
                    set_int=self._set_sim_speed),
            Setting("showOverruns", "Show overruns", hw, "overlays", sim, ParamType.BOOL,
                    1, 0, 1,
                    get_int=self._overlay_get("show_overruns"),
                    set_int=self._overlay_set("show_overruns")),
            Setting("showSliceGrid", "Show slice grid", hw, "overlays", sim, ParamType.BOOL,
                    0, 0, 1,
                    get_int=self._overlay_get("show_slice_grid"),
                    set_int=self._overlay_set("show_slice_grid")),
            Setting("showHallMarker", "Show hall marker", hw, "overlays", sim, ParamType.BOOL,
                    1, 0, 1,
                    get_int=self._overlay_get("show_hall_marker"),
                    set_int=self._overlay_set("show_hall_marker")),
        )