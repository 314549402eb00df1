from types import SimpleNamespace

import pytest

from povdisplay.config import HW_NUM_LEDS, Config
from povdisplay.settings import Scope
from povdisplay.sim.renderer import Renderer
from povdisplay.sim.sim_settings import SimSettings, apply_geometry


def _timing():
    return SimpleNamespace(rpm_jitter=0.0, hall_jitter_us=0.0, hall_miss_rate=0.0,
                           timer_drift_ppm=0.0, pattern_lag_ms=0.0, display_hz=60.0)


@pytest.fixture
def bundle():
    renderer = Renderer(8, 8)
    cfg = Config()
    sim = SimSettings(_timing(), cfg, renderer)
    by_key = {s.key: s for s in sim.settings()}
    return sim, cfg, renderer, by_key


def test_keys_in_order(bundle):
    _, _, _, by_key = bundle
    assert list(by_key) == [
        "numLeds", "stripReversed", "spiClockMhz", "maxBrightness", "numArms",
        "rpmJitter", "hallJitterUs", "hallMissRate", "timerDrift", "patternLag",
        "displayHz", "simSpeed", "showOverruns", "showSliceGrid", "showHallMarker",
    ]


def test_all_sim_only_and_hardware_group(bundle):
    _, _, _, by_key = bundle
    assert all(s.scope is Scope.SIM_ONLY for s in by_key.values())
    assert {s.group for s in by_key.values()} == {"hardware"}


def test_apply_geometry_hub_shrinks_with_more_leds():
    r = Renderer()
    apply_geometry(r, 10)
    hub_small, gap = r.hub_fraction, r.gap_fraction
    apply_geometry(r, 40)
    assert r.hub_fraction < hub_small
    assert r.gap_fraction == gap
    assert 0.0 < gap < 1.0


def test_apply_geometry_ignores_zero():
    r = Renderer()
    r.hub_fraction = 0.25
    apply_geometry(r, 0)
    assert r.hub_fraction == 0.25


def test_rpm_jitter_round_trip(bundle):
    sim, _, _, by_key = bundle
    by_key["rpmJitter"].set_int(25)
    assert by_key["rpmJitter"].get_int() == 25
    assert sim.timing.rpm_jitter == pytest.approx(2.5)


def test_sim_speed_scaled_by_ten(bundle):
    sim, _, _, by_key = bundle
    assert by_key["simSpeed"].get_int() == 10
    by_key["simSpeed"].set_int(20)
    assert sim.sim_speed == pytest.approx(2.0)
    assert by_key["simSpeed"].get_int() == 20


def test_max_brightness_clamps_brightness(bundle):
    _, cfg, _, by_key = bundle
    cfg.brightness = 20
    by_key["maxBrightness"].set_int(12)
    assert cfg.max_brightness == 12
    assert cfg.brightness == 12


def test_num_leds_writes_config(bundle):
    _, cfg, _, by_key = bundle
    by_key["numLeds"].set_int(24)
    assert cfg.num_leds == 24
    assert by_key["numLeds"].get_int() == 24


def test_overlay_flags_reach_renderer(bundle):
    sim, _, renderer, by_key = bundle
    by_key["showSliceGrid"].set_int(1)
    by_key["showHallMarker"].set_int(0)
    assert renderer.show_slice_grid is True
    assert renderer.show_hall_marker is False
    assert by_key["showSliceGrid"].get_int() == 1
    assert sim.show_hall_marker is False


def test_defaults_without_bound_state():
    by_key = {s.key: s for s in SimSettings(None, None, None).settings()}
    assert by_key["numLeds"].get_int() == HW_NUM_LEDS
    assert by_key["displayHz"].get_int() == 60
    assert by_key["rpmJitter"].get_int() == 0
    by_key["numLeds"].set_int(5)
    by_key["showOverruns"].set_int(0)
    assert by_key["numLeds"].get_int() == HW_NUM_LEDS
    assert by_key["showOverruns"].get_int() == 0


def test_getters_match_defaults(bundle):
    _, _, _, by_key = bundle
    for key in ("numLeds", "spiClockMhz", "maxBrightness", "numArms",
                "displayHz", "simSpeed", "showOverruns", "showSliceGrid",
                "showHallMarker", "stripReversed"):
        assert by_key[key].get_int() == by_key[key].default, key