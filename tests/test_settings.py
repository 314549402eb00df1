import json
import logging

import pytest

from povdisplay.config import STOP_PULSE_US, Config
from povdisplay.effects import Effect, EffectStack
from povdisplay.params import Param, ParamType
from povdisplay.patterns.registry import default_registry
from povdisplay.settings import Scope, Setting, SettingsRegistry


class SpinEffect(Effect):
    name = "Spin"
    key = "spin"

    def __init__(self):
        super().__init__([Param("speed", "Speed", ParamType.INT, default=5, min=0, max=10)])

    @property
    def active(self):
        return self.params[0].value != 0

    def apply(self, state, fb, time_ms):
        state.slice_offset += self.params[0].value


def make_registry(config=None, extra=()):
    config = config or Config()
    return SettingsRegistry(config, default_registry(), EffectStack([SpinEffect()]), extra)


def test_defaults_applied_on_construction():
    cfg = Config()
    cfg.motor_stopped = False
    make_registry(cfg)
    assert cfg.brightness == 16
    assert cfg.color == (255, 0, 0)
    assert cfg.active_pattern == 3
    assert cfg.target_hz == 12
    assert cfg.log_level == 3
    assert cfg.motor_stopped is True
    assert cfg.esc_pulse_us == STOP_PULSE_US


def test_brightness_clamped_to_setting_max():
    reg = make_registry()
    reg.apply_json({"settings": {"brightness": 100}}, Scope.MCU_ONLY)
    assert reg.config.brightness == 31


def test_brightness_capped_by_max_brightness():
    reg = make_registry()
    reg.config.max_brightness = 10
    reg.apply_json({"settings": {"brightness": 31}}, Scope.MCU_ONLY)
    assert reg.config.brightness == reg.config.max_brightness


def test_bool_setting_accepts_json_bool():
    reg = make_registry()
    reg.apply_json({"settings": {"mirrorPattern": False}}, Scope.BOTH)
    assert reg.config.mirror_pattern is False
    reg.apply_json({"settings": {"mirrorPattern": 1}}, Scope.BOTH)
    assert reg.config.mirror_pattern is True


def test_enum_only_accepts_listed_options():
    reg = make_registry()
    reg.apply_json({"settings": {"targetHz": 13}}, Scope.MCU_ONLY)
    assert reg.config.target_hz == 12
    reg.apply_json({"settings": {"targetHz": 24}}, Scope.MCU_ONLY)
    assert reg.config.target_hz == 24


def test_negative_phase_option():
    reg = make_registry()
    reg.apply_json({"settings": {"phaseOffset": -90}}, Scope.BOTH)
    assert reg.config.phase_offset == -90


def test_color_masked_to_24_bits():
    reg = make_registry()
    reg.apply_json({"settings": {"color": 0x1FFFFFF}}, Scope.BOTH)
    assert reg.config.color == (255, 255, 255)


def test_non_numeric_value_ignored():
    reg = make_registry()
    reg.apply_json({"settings": {"brightness": "bright", "nope": 5}}, Scope.BOTH)
    assert reg.config.brightness == 16


def test_active_pattern_shortcut_and_range():
    reg = make_registry()
    reg.apply_json({"activePattern": 1}, Scope.BOTH)
    assert reg.config.active_pattern == 1
    reg.apply_json({"activePattern": len(reg.patterns)}, Scope.BOTH)
    assert reg.config.active_pattern == 1


def test_mcu_only_setting_hidden_from_sim():
    reg = make_registry()
    reg.apply_json({"settings": {"logLevel": 4}}, Scope.SIM_ONLY)
    assert reg.config.log_level == 3
    reg.apply_json({"settings": {"logLevel": 4}}, Scope.MCU_ONLY)
    assert reg.config.log_level == 4
    assert logging.getLogger("povdisplay").level == logging.DEBUG


def test_entry_visible():
    reg = make_registry()
    log_level = next(s for s in reg.settings if s.key == "logLevel")
    brightness = next(s for s in reg.settings if s.key == "brightness")
    assert reg.entry_visible(log_level, Scope.MCU_ONLY)
    assert not reg.entry_visible(log_level, Scope.SIM_ONLY)
    assert reg.entry_visible(brightness, Scope.SIM_ONLY)


def test_apply_with_non_mapping_raises():
    reg = make_registry()
    with pytest.raises(TypeError):
        reg.apply_json([1, 2], Scope.BOTH)


def test_json_group_and_section_layout():
    doc = make_registry().to_json(Scope.MCU_ONLY)
    assert [g["key"] for g in doc["groups"]] == ["picture", "hardware"]
    picture, hardware = doc["groups"]
    assert [s["key"] for s in picture["sections"]] == ["pattern", "effects", "global"]
    assert [s["key"] for s in hardware["sections"]] == ["hardware"]
    hw_keys = [s["key"] for s in hardware["sections"][0]["settings"]]
    assert hw_keys == ["targetHz", "logLevel"]


def test_json_round_trips_through_text():
    doc = make_registry().to_json(Scope.SIM_ONLY)
    assert json.loads(json.dumps(doc)) == doc
    assert doc["effectStack"] == ["", "", "", ""]
    assert doc["effects"][0]["key"] == "spin"


def test_active_pattern_options_synthesized():
    reg = make_registry()
    doc = reg.to_json(Scope.BOTH)
    pattern_section = doc["groups"][0]["sections"][0]
    active = pattern_section["settings"][0]
    assert active["key"] == "activePattern"
    assert active["options"] == [[p.name, i] for i, p in enumerate(reg.patterns)]
    assert [p["index"] for p in doc["patterns"]] == list(range(len(reg.patterns)))


def test_extra_sim_settings_shown_only_on_sim_side():
    state = {"v": 0}
    extra = Setting("rpmJitter", "RPM jitter", "hardware", "timing", Scope.SIM_ONLY,
                    ParamType.INT, 0, 0, 200, scale=10,
                    get_int=lambda: state["v"],
                    set_int=lambda v: state.__setitem__("v", v))
    reg = make_registry(extra=[extra])
    sim_sections = [s["key"] for s in reg.to_json(Scope.SIM_ONLY)["groups"][1]["sections"]]
    mcu_sections = [s["key"] for s in reg.to_json(Scope.MCU_ONLY)["groups"][1]["sections"]]
    assert "timing" in sim_sections
    assert "timing" not in mcu_sections
    reg.apply_json({"settings": {"rpmJitter": 500}}, Scope.SIM_ONLY)
    assert state["v"] == 200
    timing = reg.to_json(Scope.SIM_ONLY)["groups"][1]["sections"][1]
    assert timing["settings"][0]["scale"] == 10


def test_pattern_params_applied_and_clamped():
    reg = make_registry()
    idx = reg.patterns.index_of("matrix")
    speed = reg.patterns[idx].find_param("speed")
    reg.apply_json({"patterns": {"matrix": {"speed": 1000}, "ghost": {"x": 1}}}, Scope.BOTH)
    assert speed.value == speed.max


def test_effect_stack_and_params_applied():
    reg = make_registry()
    reg.apply_json({"effectStack": ["spin", "bogus", 3, "none"],
                    "effects": {"spin": {"speed": 7}}}, Scope.BOTH)
    assert [reg.effects.slot_key(i) for i in range(4)] == ["spin", "", "", ""]
    assert reg.effects.effects[0].find_param("speed").value == 7


def test_settings_store_round_trip():
    store = {}
    reg = make_registry()
    reg.apply_json({"settings": {"brightness": 20, "targetHz": 24}}, Scope.BOTH)
    reg.save_to_store(store)
    assert store["brightness"] == 20
    assert store["color"] == 0xFF0000

    fresh = make_registry()
    fresh.load_from_store(store)
    assert fresh.config.brightness == 20
    assert fresh.config.target_hz == 24


def test_load_from_empty_store_keeps_values():
    reg = make_registry()
    reg.load_from_store({})
    assert reg.config.brightness == 16
    assert reg.config.target_hz == 12


def test_pattern_store_round_trip():
    store = {}
    reg = make_registry()
    reg.apply_json({"patterns": {"matrix": {"speed": 30}}}, Scope.BOTH)
    reg.save_patterns_to_store(store)
    assert store["p_matrix_speed"] == 30

    fresh = make_registry()
    fresh.load_patterns_from_store(store)
    speed = fresh.patterns[fresh.patterns.index_of("matrix")].find_param("speed")
    assert speed.value == 30


def test_effect_store_round_trip():
    store = {}
    reg = make_registry()
    reg.apply_json({"effectStack": ["", "spin"], "effects": {"spin": {"speed": 3}}},
                   Scope.BOTH)
    reg.save_effects_to_store(store)
    assert store["fx_s1"] == "spin"
    assert store["fx_spin_speed"] == 3

    fresh = make_registry()
    fresh.load_effects_from_store(store)
    assert fresh.effects.slot_key(1) == "spin"
    assert fresh.effects.slot_key(0) == ""
    assert fresh.effects.effects[0].find_param("speed").value == 3


def test_reset_to_defaults_restores_values():
    reg = make_registry()
    reg.apply_json({"settings": {"brightness": 5, "mirrorPattern": False}}, Scope.BOTH)
    reg.config.motor_stopped = False
    reg.reset_to_defaults()
    assert reg.config.brightness == 16
    assert reg.config.mirror_pattern is True
    assert reg.config.motor_stopped is True