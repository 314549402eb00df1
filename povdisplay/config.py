"""Compile-time limits, hardware constants and the runtime configuration."""

from __future__ import annotations

from dataclasses import dataclass

# --- Limits ---
MAX_LEDS = 72
MAX_SLICES = 720
NUM_SLICES = 360
NUM_ARMS = 2

HW_NUM_LEDS = 40
HW_STRIP_REVERSED = False
HW_SPI_CLOCK_MHZ = 20
HW_MAX_BRIGHTNESS = 31
HW_MAX_RPM = 900

# --- Geometry (144 LEDs/m strip: 3.0 mm pixel, 3.5 mm gap, 6.5 mm pitch) ---
LED_SIZE_MM = 3.0
LED_GAP_MM = 3.5
HUB_RADIUS_MM = 1

# --- ESC pulse bounds and closed-loop motor control ---
STOP_PULSE_US = 1000
MOTOR_STARTUP_PULSE_US = 1160
MAX_PULSE_US = 2000
NO_HALL_STARTUP_MAX_PULSE_US = 1200
NO_HALL_RAMP_STEP_US = 5
MOTOR_CONTROL_INTERVAL_MS = 100
MOTOR_CONTROL_TASK_DELAY_MS = 25
MOTOR_CONTROL_DEADBAND_RPM = 15
MOTOR_CONTROL_RPM_PER_US = 15
MOTOR_CONTROL_MAX_STEP_US = 100
HALL_FRESH_TIMEOUT_MS = 1500
EMA_ALPHA_SHIFT = 2


@dataclass
class Config:
    """Runtime display configuration."""

    num_leds: int = HW_NUM_LEDS
    num_slices: int = NUM_SLICES
    brightness: int = 2
    max_brightness: int = HW_MAX_BRIGHTNESS
    phase_offset: int = 0

    active_pattern: int = 3
    color_r: int = 255
    color_g: int = 255
    color_b: int = 255

    num_arms: int = NUM_ARMS
    target_hz: int = 12
    esc_pulse_us: int = STOP_PULSE_US
    motor_stopped: bool = True
    spi_clock_mhz: int = HW_SPI_CLOCK_MHZ
    mirror_pattern: bool = True
    strip_reversed: bool = HW_STRIP_REVERSED
    radial_balance: bool = True
    log_level: int = 3

    @property
    def color(self) -> tuple[int, int, int]:
        """The configured colour as an (r, g, b) tuple."""
        return (self.color_r, self.color_g, self.color_b)

    def clamp_brightness(self) -> None:
        """Cap the brightness at the configured maximum."""
        if self.brightness > self.max_brightness:
            self.brightness = self.max_brightness