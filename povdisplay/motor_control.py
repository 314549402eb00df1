"""Closed-loop ESC pulse control from Hall-sensor RPM readings."""

from __future__ import annotations

from .config import (
    EMA_ALPHA_SHIFT,
    HALL_FRESH_TIMEOUT_MS,
    HW_MAX_RPM,
    MAX_PULSE_US,
    MOTOR_CONTROL_DEADBAND_RPM,
    MOTOR_CONTROL_MAX_STEP_US,
    MOTOR_CONTROL_RPM_PER_US,
    MOTOR_STARTUP_PULSE_US,
    NO_HALL_RAMP_STEP_US,
    NO_HALL_STARTUP_MAX_PULSE_US,
    STOP_PULSE_US,
)

_SECONDS_PER_MINUTE = 60
_FALLBACK_ARM_COUNT = 1
_U32 = 0xFFFFFFFF


def target_refresh_hz_to_rpm(target_hz: int, num_arms: int) -> int:
    """Motor RPM giving the target refresh rate, capped at the hardware limit."""
    arms = num_arms if num_arms > 0 else _FALLBACK_ARM_COUNT
    rpm = target_hz * _SECONDS_PER_MINUTE // arms
    return min(rpm, HW_MAX_RPM)


def fresh_hall_rpm(measured_rpm: int, last_trigger_ms: int, now_ms: int) -> int:
    """The measured RPM, decayed when triggers are late and zero when stale."""
    if last_trigger_ms == 0:
        return 0
    elapsed_ms = (now_ms - last_trigger_ms) & _U32
    if elapsed_ms > HALL_FRESH_TIMEOUT_MS or measured_rpm == 0:
        return 0
    last_period_ms = 60000 // measured_rpm
    if elapsed_ms <= last_period_ms:
        return measured_rpm
    return 60000 // elapsed_ms


def _clamp_pulse(pulse: int) -> int:
    return max(STOP_PULSE_US, min(MAX_PULSE_US, pulse))


def _div_toward_zero(a: int, b: int) -> int:
    q = abs(a) // b
    return q if a >= 0 else -q


class MotorSpeedController:
    """Steps the ESC pulse width towards the target RPM."""

    def __init__(self) -> None:
        self._running = False
        self._target_rpm = 0
        self._pulse_us = STOP_PULSE_US
        self._filtered_rpm = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def target_rpm(self) -> int:
        return self._target_rpm

    @property
    def pulse_us(self) -> int:
        return self._pulse_us

    def start(self, target_hz: int, num_arms: int) -> None:
        self.set_target(target_hz, num_arms)
        if self._target_rpm == 0:
            self.stop()
            return
        self._running = True
        self._pulse_us = MOTOR_STARTUP_PULSE_US
        self._filtered_rpm = 0

    def stop(self) -> None:
        self._running = False
        self._target_rpm = 0
        self._pulse_us = STOP_PULSE_US
        self._filtered_rpm = 0

    def set_target(self, target_hz: int, num_arms: int) -> None:
        self._target_rpm = target_refresh_hz_to_rpm(target_hz, num_arms)
        if self._target_rpm == 0:
            self.stop()

    def update(self, measured_rpm: int) -> int:
        """Feed one RPM reading and return the new pulse width in µs."""
        if not self._running or self._target_rpm == 0:
            self.stop()
            return self._pulse_us

        if measured_rpm == 0:
            self._filtered_rpm = 0
            self._pulse_us = min(self._pulse_us + NO_HALL_RAMP_STEP_US,
                                 NO_HALL_STARTUP_MAX_PULSE_US)
            return self._pulse_us

        if self._filtered_rpm == 0:
            self._filtered_rpm = measured_rpm
        else:
            diff = measured_rpm - self._filtered_rpm
            self._filtered_rpm += diff >> EMA_ALPHA_SHIFT

        error = self._target_rpm - self._filtered_rpm
        if abs(error) <= MOTOR_CONTROL_DEADBAND_RPM:
            return self._pulse_us

        step = _div_toward_zero(error, MOTOR_CONTROL_RPM_PER_US)
        if step == 0:
            step = 1 if error > 0 else -1
        step = max(-MOTOR_CONTROL_MAX_STEP_US, min(MOTOR_CONTROL_MAX_STEP_US, step))

        self._pulse_us = _clamp_pulse(self._pulse_us + step)
        return self._pulse_us