import random

import pytest

from povdisplay.sim.timing import TAU, TimingState


def state(**kwargs):
    return TimingState(rng=random.Random(1234), **kwargs)


def test_spi_time_scales_with_clock():
    slow = state(spi_clock_mhz=20).spi_transfer_us()
    fast = state(spi_clock_mhz=40).spi_transfer_us()
    assert fast == pytest.approx(slow / 2)


def test_spi_time_grows_with_leds():
    assert state(num_leds=72).spi_transfer_us() > state(num_leds=40).spi_transfer_us()


def test_pattern_lag_adds_to_gen_time():
    diff = state(pattern_lag_ms=7).pattern_gen_ms() - state().pattern_gen_ms()
    assert diff == pytest.approx(7)


def test_frame_without_jitter():
    ts = state()
    r = ts.frame(16.0, 0.0)
    assert r.actual_rpm == pytest.approx(ts.rpm)
    assert r.period_ms * r.actual_rpm == pytest.approx(60000.0)
    assert r.headroom_us == pytest.approx(r.slice_interval_us - r.spi_transfer_us)
    assert r.hall_offset_angle == 0.0
    assert not r.has_overruns


def test_generation_cadence():
    ts = state()
    assert ts.frame(16.0, 0.0).should_generate
    assert not ts.frame(16.0, 0.0).should_generate
    assert ts.frame(16.0, 1000.0 / ts.pattern_fps).should_generate


def test_slow_generation_ages_frames():
    ts = state(pattern_lag_ms=100)
    first = ts.frame(16.0, 0.0)
    second = ts.frame(16.0, 1.0)
    assert not first.should_generate and not second.should_generate
    assert (first.frame_age, second.frame_age) == (1, 2)


def test_overruns_with_many_slices():
    assert state(num_slices=100000).frame(16.0, 0.0).has_overruns


def test_arm_angle_stays_in_range():
    ts = state(rpm_jitter=20)
    for i in range(200):
        r = ts.frame(33.0, i * 33.0)
        assert 0.0 <= r.arm_angle < TAU
        assert 0.0 < r.arm_sweep <= TAU
        assert r.actual_rpm >= 0.1 * ts.rpm - 1e-9


def test_zero_dt_leaves_arm():
    ts = state()
    ts.frame(10.0, 0.0)
    angle = ts.arm_angle
    r = ts.frame(0.0, 5.0)
    assert r.arm_sweep == 0.0
    assert r.arm_angle == angle


def test_hall_miss_rates():
    always = state(hall_miss_rate=2.0)
    never = state(hall_miss_rate=0.0)
    assert all(always.frame(1.0, i).hall_missed for i in range(50))
    assert not any(never.frame(1.0, i).hall_missed for i in range(50))


def test_reset():
    ts = state(pattern_lag_ms=100)
    ts.frame(100.0, 0.0)
    ts.reset()
    assert (ts.arm_angle, ts.frame_age, ts.last_pattern_gen_ms) == (0.0, 0, -1e9)


def test_zero_rpm_raises():
    with pytest.raises(ValueError):
        state(rpm=0.0).frame(16.0, 0.0)